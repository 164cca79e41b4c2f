"""Factory Boy factories for generating test data.

Factories provide a clean way to create test objects with sensible defaults.
Override specific fields as needed in tests.

Usage:
    # Create a user
    user = UserFactory.build()  # In-memory only
    user = await create_async(UserFactory, db_session)  # Persisted

    # Override fields
    user = UserFactory.build(email="custom@example.com")

    # Create related objects (owner_id is required)
    project = await create_async(ProjectFactory, db_session, owner_id=user.id)
"""

from datetime import UTC, datetime, timedelta

import factory
from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

from core.security import hash_password
from models import Project, ProjectStatus, Task, TaskStatus, User

fake = Faker()


# =============================================================================
# Async Factory Helpers
# =============================================================================


async def create_async(
    factory_class: type[factory.Factory], db: AsyncSession, **kwargs
):
    """Create an instance using a factory and persist to database.

    Usage:
        user = await create_async(UserFactory, db_session, email="test@example.com")
    """
    instance = factory_class.build(**kwargs)
    db.add(instance)
    await db.flush()
    await db.refresh(instance)
    return instance


async def create_batch_async(
    factory_class: type[factory.Factory], db: AsyncSession, size: int, **kwargs
):
    """Create multiple instances and persist to database."""
    instances = factory_class.build_batch(size, **kwargs)
    for instance in instances:
        db.add(instance)
    await db.flush()
    for instance in instances:
        await db.refresh(instance)
    return instances


# =============================================================================
# User Factory
# =============================================================================


class UserFactory(factory.Factory):
    """Factory for creating User instances. IDs come from the database."""

    class Meta:
        model = User

    # Sequence keeps usernames/emails unique within a test
    username = factory.Sequence(lambda n: f"{fake.user_name()[:40]}_{n}")
    email = factory.Sequence(lambda n: f"user{n}_{fake.free_email()}"[:100])
    # Stored like UserService stores it
    password = factory.LazyFunction(lambda: hash_password(fake.password(length=12)))
    created_at = factory.LazyFunction(lambda: datetime.now(UTC))
    updated_at = factory.LazyFunction(lambda: datetime.now(UTC))


# =============================================================================
# Project Factory
# =============================================================================


class ProjectFactory(factory.Factory):
    """Factory for creating Project instances. Pass owner_id."""

    class Meta:
        model = Project

    name = factory.Sequence(lambda n: f"{fake.catch_phrase()[:80]} {n}")
    description = factory.LazyAttribute(lambda _: fake.sentence())
    status = ProjectStatus.ACTIVE
    created_at = factory.LazyFunction(lambda: datetime.now(UTC))
    updated_at = factory.LazyFunction(lambda: datetime.now(UTC))


# =============================================================================
# Task Factory
# =============================================================================


class TaskFactory(factory.Factory):
    """Factory for creating Task instances. Pass owner_id (and project_id)."""

    class Meta:
        model = Task

    title = factory.LazyAttribute(lambda _: fake.sentence(nb_words=4)[:200])
    description = factory.LazyAttribute(lambda _: fake.paragraph())
    status = TaskStatus.TODO
    due_date = factory.LazyFunction(lambda: datetime.now(UTC) + timedelta(days=7))
    project_id = None
    created_at = factory.LazyFunction(lambda: datetime.now(UTC))
    updated_at = factory.LazyFunction(lambda: datetime.now(UTC))


class OverdueTaskFactory(TaskFactory):
    """Open task whose due date has already passed."""

    due_date = factory.LazyFunction(lambda: datetime.now(UTC) - timedelta(days=3))
