"""Pydantic schemas for service input and output.

Create/update schemas are what a presentation layer deserializes requests
into; response schemas are what services return. Responses never expose
relationship objects, only the foreign-key scalars (owner_id, project_id).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.security import MAX_PASSWORD_BYTES
from models import ProjectStatus, TaskStatus


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


def _check_password_length(v: str) -> str:
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return v


# =============================================================================
# Users
# =============================================================================


class UserCreate(BaseModel):
    """Input for registering a user."""

    username: str = Field(min_length=1, max_length=50)
    email: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=1, max_length=MAX_PASSWORD_BYTES)

    @field_validator("username", "email")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password_length(v)


class UserUpdate(BaseModel):
    """Partial update for a user. Username is immutable, so it is rejected here."""

    model_config = ConfigDict(extra="forbid")

    email: str | None = Field(default=None, min_length=3, max_length=100)
    password: str | None = Field(
        default=None, min_length=1, max_length=MAX_PASSWORD_BYTES
    )

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = _strip_required(v)
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        return v if v is None else _check_password_length(v)


class UserResponse(BaseModel):
    """User as returned by the service layer (no credential)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Projects
# =============================================================================


class ProjectCreate(BaseModel):
    """Input for creating a project for an owner."""

    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    status: ProjectStatus = ProjectStatus.PLANNING
    owner_id: int

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _strip_required(v)


class ProjectUpdate(BaseModel):
    """Partial update for a project. Owner is immutable."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    status: ProjectStatus | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return v if v is None else _strip_required(v)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    status: ProjectStatus
    owner_id: int
    # Derived at read time, never persisted
    task_count: int = 0
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Tasks
# =============================================================================


class TaskCreate(BaseModel):
    """Input for creating a task. The owner is supplied separately by the caller."""

    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    status: TaskStatus = TaskStatus.TODO
    due_date: datetime | None = None
    project_id: int | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _strip_required(v)


class TaskUpdate(BaseModel):
    """Partial update for a task.

    Project membership is changed through assign/remove operations,
    and the owner is immutable, so neither appears here.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    status: TaskStatus | None = None
    due_date: datetime | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        return v if v is None else _strip_required(v)


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    status: TaskStatus
    due_date: datetime | None = None
    owner_id: int
    project_id: int | None = None
    created_at: datetime
    updated_at: datetime
