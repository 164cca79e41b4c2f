"""Project service for project-related business logic.

Every project returned carries a task_count computed at read time.
Lists are enriched with one GROUP BY count query, never one query
per project.
"""

from collections.abc import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from mappers import project_mapper
from models import Project, ProjectStatus
from repositories import ProjectRepository, TaskRepository, UserRepository
from schemas import ProjectCreate, ProjectResponse, ProjectUpdate
from services.errors import (
    NotFoundError,
    ValidationError,
    require,
    require_text,
)

logger = get_logger(__name__)

PROJECT_NOT_OWNED = "Project does not belong to authenticated user"


class ProjectService:
    """Create, query, update and delete projects.

    get_by_id, find_by_id, update and delete take an optional owner_id.
    When given, the project must belong to that owner.
    """

    def __init__(
        self,
        projects: ProjectRepository,
        users: UserRepository,
        tasks: TaskRepository,
    ) -> None:
        self.projects = projects
        self.users = users
        self.tasks = tasks

    @classmethod
    def from_session(cls, db: AsyncSession) -> "ProjectService":
        return cls(ProjectRepository(db), UserRepository(db), TaskRepository(db))

    async def _with_task_count(self, project: Project) -> ProjectResponse:
        count = await self.tasks.count_by_project_id(project.id)
        return project_mapper.to_response(project, count)

    async def _with_task_counts(
        self, projects: Sequence[Project]
    ) -> list[ProjectResponse]:
        if not projects:
            return []
        counts = await self.tasks.count_by_project_ids([p.id for p in projects])
        return project_mapper.to_response_list(projects, counts)

    async def _get_entity(self, project_id: int, owner_id: int | None) -> Project:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        if owner_id is not None and project.owner_id != owner_id:
            logger.warning(
                "project.ownership.rejected", project_id=project_id, owner_id=owner_id
            )
            raise ValidationError(PROJECT_NOT_OWNED)
        return project

    async def create(self, data: ProjectCreate) -> ProjectResponse:
        """Create a project for data.owner_id.

        Raises NotFoundError for an unknown owner and ValidationError when
        the owner already has a project with the same name (ignoring case).
        """
        require(data, "project_create")
        require(data.owner_id, "owner_id")

        if not await self.users.exists_by_id(data.owner_id):
            raise NotFoundError("user", data.owner_id)

        if await self.projects.exists_by_owner_id_and_name(data.owner_id, data.name):
            logger.warning(
                "project.create.rejected",
                owner_id=data.owner_id,
                reason="duplicate_name",
            )
            raise ValidationError("user with project name already exists")

        project = project_mapper.to_entity(data)
        project.owner_id = data.owner_id
        try:
            project = await self.projects.create(project)
        except IntegrityError as e:
            raise ValidationError("user with project name already exists") from e

        logger.info("project.created", project_id=project.id, owner_id=project.owner_id)
        # A brand new project has no tasks yet
        return project_mapper.to_response(project, 0)

    async def find_by_id(
        self, project_id: int, *, owner_id: int | None = None
    ) -> ProjectResponse | None:
        """None when missing, or when owner_id is given and doesn't match."""
        require(project_id, "project_id")
        project = await self.projects.get_by_id(project_id)
        if project is None:
            return None
        if owner_id is not None and project.owner_id != owner_id:
            return None
        return await self._with_task_count(project)

    async def get_by_id(
        self, project_id: int, *, owner_id: int | None = None
    ) -> ProjectResponse:
        require(project_id, "project_id")
        return await self._with_task_count(await self._get_entity(project_id, owner_id))

    async def find_all(self) -> list[ProjectResponse]:
        return await self._with_task_counts(await self.projects.list_all())

    async def find_by_owner_id(self, owner_id: int) -> list[ProjectResponse]:
        require(owner_id, "owner_id")
        return await self._with_task_counts(
            await self.projects.list_by_owner_id(owner_id)
        )

    async def find_by_status(self, status: ProjectStatus) -> list[ProjectResponse]:
        require(status, "status")
        return await self._with_task_counts(await self.projects.list_by_status(status))

    async def find_by_owner_id_and_status(
        self, owner_id: int, status: ProjectStatus
    ) -> list[ProjectResponse]:
        require(owner_id, "owner_id")
        require(status, "status")
        return await self._with_task_counts(
            await self.projects.list_by_owner_id_and_status(owner_id, status)
        )

    async def find_by_name_containing(self, query: str) -> list[ProjectResponse]:
        require_text(query, "name_query")
        return await self._with_task_counts(
            await self.projects.list_by_name_containing(query)
        )

    async def find_by_owner_id_and_name_containing(
        self, owner_id: int, query: str
    ) -> list[ProjectResponse]:
        require(owner_id, "owner_id")
        require_text(query, "name_query")
        return await self._with_task_counts(
            await self.projects.list_by_owner_id_and_name_containing(owner_id, query)
        )

    async def exists_by_name(self, name: str, owner_id: int) -> bool:
        require_text(name, "name")
        require(owner_id, "owner_id")
        return await self.projects.exists_by_owner_id_and_name(owner_id, name)

    async def update(
        self,
        project_id: int,
        data: ProjectUpdate,
        *,
        owner_id: int | None = None,
    ) -> ProjectResponse:
        """Partially update a project. The owner never changes.

        A rename is checked against the owner's other project names,
        but only when the name actually changes (ignoring case).
        """
        require(project_id, "project_id")
        require(data, "project_update")

        project = await self._get_entity(project_id, owner_id)

        if (
            data.name is not None
            and data.name.lower() != project.name.lower()
            and await self.projects.exists_by_owner_id_and_name(
                project.owner_id, data.name
            )
        ):
            logger.warning(
                "project.update.rejected",
                project_id=project_id,
                reason="duplicate_name",
            )
            raise ValidationError("name already exists")

        project_mapper.apply_update(data, project)
        try:
            project = await self.projects.save(project)
        except IntegrityError as e:
            raise ValidationError("name already exists") from e

        logger.info("project.updated", project_id=project_id)
        return await self._with_task_count(project)

    async def delete(self, project_id: int, *, owner_id: int | None = None) -> None:
        """Delete a project. Its tasks are kept and detached (project_id cleared)."""
        require(project_id, "project_id")
        await self._get_entity(project_id, owner_id)

        detached = await self.tasks.detach_from_project(project_id)
        await self.projects.delete(project_id)

        logger.info("project.deleted", project_id=project_id, tasks_detached=detached)
