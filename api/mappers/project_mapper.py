"""Project <-> schema conversion."""

from collections.abc import Iterable, Mapping

from mappers.utils import as_utc
from models import Project
from schemas import ProjectCreate, ProjectResponse, ProjectUpdate


def to_entity(data: ProjectCreate) -> Project:
    """Build an unsaved project. owner_id is set by the service after validation."""
    return Project(
        name=data.name,
        description=data.description,
        status=data.status,
    )


def to_response(project: Project, task_count: int = 0) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        status=project.status,
        owner_id=project.owner_id,
        task_count=task_count,
        created_at=as_utc(project.created_at),
        updated_at=as_utc(project.updated_at),
    )


def to_response_list(
    projects: Iterable[Project] | None,
    task_counts: Mapping[int, int] | None = None,
) -> list[ProjectResponse]:
    """Convert many projects; counts default to 0 for IDs missing from task_counts."""
    if not projects:
        return []
    task_counts = task_counts or {}
    return [
        to_response(project, task_counts.get(project.id, 0)) for project in projects
    ]


def apply_update(data: ProjectUpdate, project: Project) -> Project:
    if data.name is not None:
        project.name = data.name
    if data.description is not None:
        project.description = data.description
    if data.status is not None:
        project.status = data.status
    return project
