"""Task service for task-related business logic.

Every operation is scoped to the acting owner. The caller (an authentication
layer outside this package) supplies owner_id and is trusted to have
verified it. A task or project owned by somebody else is rejected with
ValidationError rather than hidden.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from mappers import as_utc, task_mapper
from models import CLOSED_TASK_STATUSES, Project, Task, TaskStatus, utcnow
from repositories import ProjectRepository, TaskRepository, UserRepository
from schemas import TaskCreate, TaskResponse, TaskUpdate
from services.errors import (
    InvalidArgumentError,
    NotFoundError,
    ValidationError,
    require,
)
from services.projects_service import PROJECT_NOT_OWNED

logger = get_logger(__name__)

TASK_NOT_OWNED = "Task does not belong to authenticated user"


class TaskService:
    """Owner-scoped task operations."""

    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        projects: ProjectRepository,
    ) -> None:
        self.tasks = tasks
        self.users = users
        self.projects = projects

    @classmethod
    def from_session(cls, db: AsyncSession) -> "TaskService":
        return cls(TaskRepository(db), UserRepository(db), ProjectRepository(db))

    # ------------------------------------------------------------------
    # Ownership checks
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_task_ownership(task: Task, owner_id: int) -> None:
        if task.owner_id != owner_id:
            logger.warning(
                "task.ownership.rejected", task_id=task.id, owner_id=owner_id
            )
            raise ValidationError(TASK_NOT_OWNED)

    async def _get_owned_task(self, task_id: int, owner_id: int) -> Task:
        task = await self.tasks.get_by_id(task_id)
        if task is None:
            raise NotFoundError("task", task_id)
        self._validate_task_ownership(task, owner_id)
        return task

    async def _get_owned_project(self, project_id: int, owner_id: int) -> Project:
        project = await self.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        if project.owner_id != owner_id:
            logger.warning(
                "task.project_ownership.rejected",
                project_id=project_id,
                owner_id=owner_id,
            )
            raise ValidationError(PROJECT_NOT_OWNED)
        return project

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(self, data: TaskCreate, owner_id: int) -> TaskResponse:
        """Create a task for owner_id, optionally inside one of its projects."""
        require(data, "task_create")
        require(owner_id, "owner_id")

        if not await self.users.exists_by_id(owner_id):
            raise NotFoundError("user", owner_id)

        project_id = None
        if data.project_id is not None:
            project_id = (await self._get_owned_project(data.project_id, owner_id)).id

        task = task_mapper.to_entity(data)
        task.owner_id = owner_id
        task.project_id = project_id
        task = await self.tasks.create(task)

        logger.info(
            "task.created", task_id=task.id, owner_id=owner_id, project_id=project_id
        )
        return task_mapper.to_response(task)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_by_id(self, task_id: int, owner_id: int) -> TaskResponse | None:
        """None when the task doesn't exist; ValidationError when it isn't owner_id's."""
        require(task_id, "task_id")
        require(owner_id, "owner_id")
        task = await self.tasks.get_by_id(task_id)
        if task is None:
            return None
        self._validate_task_ownership(task, owner_id)
        return task_mapper.to_response(task)

    async def get_by_id(self, task_id: int, owner_id: int) -> TaskResponse:
        require(task_id, "task_id")
        require(owner_id, "owner_id")
        return task_mapper.to_response(await self._get_owned_task(task_id, owner_id))

    async def find_all(self, owner_id: int) -> list[TaskResponse]:
        require(owner_id, "owner_id")
        return task_mapper.to_response_list(await self.tasks.list_by_owner_id(owner_id))

    async def find_by_project_id(
        self, project_id: int, owner_id: int
    ) -> list[TaskResponse]:
        require(project_id, "project_id")
        require(owner_id, "owner_id")
        await self._get_owned_project(project_id, owner_id)
        return task_mapper.to_response_list(
            await self.tasks.list_by_project_id(project_id)
        )

    async def find_by_status(
        self, owner_id: int, status: TaskStatus
    ) -> list[TaskResponse]:
        require(owner_id, "owner_id")
        require(status, "status")
        return task_mapper.to_response_list(
            await self.tasks.list_by_owner_id_and_status(owner_id, status)
        )

    async def find_by_project_id_and_status(
        self, project_id: int, status: TaskStatus, owner_id: int
    ) -> list[TaskResponse]:
        require(project_id, "project_id")
        require(status, "status")
        require(owner_id, "owner_id")
        await self._get_owned_project(project_id, owner_id)
        return task_mapper.to_response_list(
            await self.tasks.list_by_project_id_and_status(project_id, status)
        )

    async def find_overdue(
        self, owner_id: int, *, now: datetime | None = None
    ) -> list[TaskResponse]:
        """Tasks due before now that are neither completed nor cancelled."""
        require(owner_id, "owner_id")
        cutoff = as_utc(now) if now is not None else utcnow()
        return task_mapper.to_response_list(
            await self.tasks.list_by_owner_id_and_due_date_before_and_status_not_in(
                owner_id, cutoff, CLOSED_TASK_STATUSES
            )
        )

    async def find_by_due_date_between(
        self, start: datetime, end: datetime, owner_id: int
    ) -> list[TaskResponse]:
        require(start, "start")
        require(end, "end")
        require(owner_id, "owner_id")
        start, end = as_utc(start), as_utc(end)
        if start > end:
            raise InvalidArgumentError("start is after end")
        return task_mapper.to_response_list(
            await self.tasks.list_by_owner_id_and_due_date_between(owner_id, start, end)
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def update(
        self, task_id: int, data: TaskUpdate, owner_id: int
    ) -> TaskResponse:
        require(task_id, "task_id")
        require(data, "task_update")
        require(owner_id, "owner_id")

        task = await self._get_owned_task(task_id, owner_id)
        task_mapper.apply_update(data, task)
        task = await self.tasks.save(task)

        logger.info("task.updated", task_id=task_id)
        return task_mapper.to_response(task)

    async def assign_to_project(
        self, task_id: int, project_id: int, owner_id: int
    ) -> TaskResponse:
        """Move a task into a project. Both must belong to owner_id."""
        require(task_id, "task_id")
        require(project_id, "project_id")
        require(owner_id, "owner_id")

        task = await self._get_owned_task(task_id, owner_id)
        project = await self._get_owned_project(project_id, owner_id)

        task.project_id = project.id
        task = await self.tasks.save(task)

        logger.info("task.assigned", task_id=task_id, project_id=project_id)
        return task_mapper.to_response(task)

    async def remove_from_project(self, task_id: int, owner_id: int) -> TaskResponse:
        require(task_id, "task_id")
        require(owner_id, "owner_id")

        task = await self._get_owned_task(task_id, owner_id)
        previous_project_id = task.project_id
        task.project_id = None
        task = await self.tasks.save(task)

        logger.info(
            "task.unassigned", task_id=task_id, project_id=previous_project_id
        )
        return task_mapper.to_response(task)

    async def delete(self, task_id: int, owner_id: int) -> None:
        require(task_id, "task_id")
        require(owner_id, "owner_id")

        await self._get_owned_task(task_id, owner_id)
        await self.tasks.delete(task_id)

        logger.info("task.deleted", task_id=task_id, owner_id=owner_id)
