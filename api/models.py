"""SQLAlchemy models for users, projects and tasks."""

from datetime import UTC, datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from core.database import Base


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns.

    Use this for any model that needs audit timestamps.
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
        )


class ProjectStatus(str, PyEnum):
    """Lifecycle of a project."""

    PLANNING = "PLANNING"
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskStatus(str, PyEnum):
    """Lifecycle of a task."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Statuses that can never make a task overdue
CLOSED_TASK_STATUSES: frozenset[TaskStatus] = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.CANCELLED}
)


def _enum_column(enum_cls: type[PyEnum], name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        values_callable=lambda x: [e.value for e in x],
    )


class User(TimestampMixin, Base):
    """Owner of projects and tasks.

    Username is immutable after creation. Deleting a user deletes
    everything it owns (ON DELETE CASCADE backs up the service-level delete).
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    # bcrypt hash, see core/security.py
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    # lazy="raise": relationships are resolved through repositories by id,
    # never by attribute access.
    projects: Mapped[list["Project"]] = relationship(
        back_populates="owner",
        passive_deletes=True,
        lazy="raise",
    )
    tasks: Mapped[list["Task"]] = relationship(
        back_populates="owner",
        passive_deletes=True,
        lazy="raise",
    )


class Project(TimestampMixin, Base):
    """A named group of tasks belonging to one owner.

    Name is unique per owner (case-insensitive), not globally.
    """

    __tablename__ = "projects"
    __table_args__ = (Index("ix_projects_owner_status", "owner_id", "status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ProjectStatus] = mapped_column(
        _enum_column(ProjectStatus, "project_status"),
        nullable=False,
        default=ProjectStatus.PLANNING,
    )
    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    owner: Mapped[User] = relationship(back_populates="projects", lazy="raise")
    tasks: Mapped[list["Task"]] = relationship(
        back_populates="project",
        passive_deletes=True,
        lazy="raise",
    )


# Backstop for the service-level duplicate-name check
Index(
    "uq_projects_owner_lower_name",
    Project.owner_id,
    func.lower(Project.name),
    unique=True,
)


class Task(TimestampMixin, Base):
    """A unit of work owned by one user, optionally inside one project."""

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_owner_status", "owner_id", "status"),
        Index("ix_tasks_owner_due_date", "owner_id", "due_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        _enum_column(TaskStatus, "task_status"),
        nullable=False,
        default=TaskStatus.TODO,
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Deleting a project detaches its tasks
    project_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    owner: Mapped[User] = relationship(back_populates="tasks", lazy="raise")
    project: Mapped[Project | None] = relationship(
        back_populates="tasks", lazy="raise"
    )
