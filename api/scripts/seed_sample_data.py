#!/usr/bin/env python3
"""Seed the database with sample users, projects and tasks.

Does nothing when at least one user already exists, so it is safe to run
on every startup in development.

Usage:
    cd api
    python -m cli seed
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from models import ProjectStatus, TaskStatus, utcnow
from repositories import UserRepository
from schemas import ProjectCreate, TaskCreate, UserCreate
from services import ProjectService, TaskService, UserService

logger = get_logger(__name__)

SAMPLE_PASSWORD = "password123"


@dataclass(frozen=True)
class SampleTask:
    title: str
    description: str | None
    status: TaskStatus
    due_in_days: int | None
    owner: str
    project: str | None


SAMPLE_USERS: list[tuple[str, str]] = [
    ("john", "john@example.com"),
    ("jane", "jane@example.com"),
]

SAMPLE_PROJECTS: list[tuple[str, str, ProjectStatus, str]] = [
    ("Web Application", "Main web app project", ProjectStatus.ACTIVE, "john"),
    ("Mobile App", "iOS and Android app", ProjectStatus.PLANNING, "john"),
    ("API Development", "REST API backend", ProjectStatus.ACTIVE, "jane"),
]

_WEB = "Web Application"
_MOBILE = "Mobile App"
_API = "API Development"

SAMPLE_TASKS: list[SampleTask] = [
    SampleTask(
        "Setup React project",
        "Initialize with Vite and TypeScript",
        TaskStatus.COMPLETED,
        -5,
        "john",
        _WEB,
    ),
    SampleTask(
        "Implement authentication",
        "Add login and registration",
        TaskStatus.IN_PROGRESS,
        2,
        "john",
        _WEB,
    ),
    SampleTask(
        "Create dashboard", "Build main dashboard UI", TaskStatus.TODO, 7, "john", _WEB
    ),
    SampleTask(
        "Add dark mode", "Implement theme switching", TaskStatus.TODO, 14, "john", _WEB
    ),
    SampleTask(
        "Research frameworks",
        "Compare React Native vs Flutter",
        TaskStatus.COMPLETED,
        -3,
        "john",
        _MOBILE,
    ),
    SampleTask(
        "Setup development environment", None, TaskStatus.TODO, 5, "john", _MOBILE
    ),
    SampleTask(
        "Design API endpoints",
        "Create OpenAPI document",
        TaskStatus.COMPLETED,
        -7,
        "jane",
        _API,
    ),
    SampleTask(
        "Implement user service",
        "CRUD operations for users",
        TaskStatus.COMPLETED,
        -2,
        "jane",
        _API,
    ),
    SampleTask(
        "Add JWT authentication",
        "Secure API with tokens",
        TaskStatus.IN_PROGRESS,
        1,
        "jane",
        _API,
    ),
    SampleTask("Write integration tests", None, TaskStatus.TODO, 10, "jane", _API),
    SampleTask(
        "Read SQLAlchemy docs",
        "Study the async session chapter",
        TaskStatus.TODO,
        3,
        "john",
        None,
    ),
    SampleTask("Update resume", None, TaskStatus.TODO, None, "jane", None),
]


async def seed_sample_data(db: AsyncSession) -> bool:
    """Insert the sample data set. Returns False if the database was not empty."""
    if await UserRepository(db).count() > 0:
        logger.info("seed.skipped", reason="database_not_empty")
        return False

    logger.info("seed.started")
    user_service = UserService.from_session(db)
    project_service = ProjectService.from_session(db)
    task_service = TaskService.from_session(db)

    user_ids: dict[str, int] = {}
    for username, email in SAMPLE_USERS:
        user = await user_service.create(
            UserCreate(username=username, email=email, password=SAMPLE_PASSWORD)
        )
        user_ids[username] = user.id

    project_ids: dict[str, int] = {}
    for name, description, status, owner in SAMPLE_PROJECTS:
        project = await project_service.create(
            ProjectCreate(
                name=name,
                description=description,
                status=status,
                owner_id=user_ids[owner],
            )
        )
        project_ids[name] = project.id

    now = utcnow()
    for sample in SAMPLE_TASKS:
        await task_service.create(
            TaskCreate(
                title=sample.title,
                description=sample.description,
                status=sample.status,
                due_date=(
                    now + timedelta(days=sample.due_in_days)
                    if sample.due_in_days is not None
                    else None
                ),
                project_id=project_ids[sample.project] if sample.project else None,
            ),
            owner_id=user_ids[sample.owner],
        )

    logger.info(
        "seed.completed",
        users=len(SAMPLE_USERS),
        projects=len(SAMPLE_PROJECTS),
        tasks=len(SAMPLE_TASKS),
    )
    return True
