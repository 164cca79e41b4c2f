"""Task repository for database operations."""

from collections.abc import Collection, Sequence
from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models import Task, TaskStatus, utcnow
from repositories.utils import log_slow_query


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @log_slow_query("tasks.get_by_id")
    async def get_by_id(self, task_id: int) -> Task | None:
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        return result.scalar_one_or_none()

    @log_slow_query("tasks.list_all")
    async def list_all(self) -> Sequence[Task]:
        result = await self.db.execute(select(Task).order_by(Task.id))
        return result.scalars().all()

    @log_slow_query("tasks.list_by_owner_id")
    async def list_by_owner_id(self, owner_id: int) -> Sequence[Task]:
        result = await self.db.execute(
            select(Task).where(Task.owner_id == owner_id).order_by(Task.id)
        )
        return result.scalars().all()

    @log_slow_query("tasks.list_by_project_id")
    async def list_by_project_id(self, project_id: int) -> Sequence[Task]:
        result = await self.db.execute(
            select(Task).where(Task.project_id == project_id).order_by(Task.id)
        )
        return result.scalars().all()

    @log_slow_query("tasks.list_by_status")
    async def list_by_status(self, status: TaskStatus) -> Sequence[Task]:
        result = await self.db.execute(
            select(Task).where(Task.status == status).order_by(Task.id)
        )
        return result.scalars().all()

    @log_slow_query("tasks.list_by_owner_id_and_status")
    async def list_by_owner_id_and_status(
        self,
        owner_id: int,
        status: TaskStatus,
    ) -> Sequence[Task]:
        result = await self.db.execute(
            select(Task)
            .where(Task.owner_id == owner_id, Task.status == status)
            .order_by(Task.id)
        )
        return result.scalars().all()

    @log_slow_query("tasks.list_by_project_id_and_status")
    async def list_by_project_id_and_status(
        self,
        project_id: int,
        status: TaskStatus,
    ) -> Sequence[Task]:
        result = await self.db.execute(
            select(Task)
            .where(Task.project_id == project_id, Task.status == status)
            .order_by(Task.id)
        )
        return result.scalars().all()

    @log_slow_query("tasks.list_by_due_date_before_and_status_not_in")
    async def list_by_due_date_before_and_status_not_in(
        self,
        cutoff: datetime,
        excluded_statuses: Collection[TaskStatus],
    ) -> Sequence[Task]:
        """Tasks due before cutoff whose status is not excluded.

        Tasks without a due date never match.
        """
        stmt = select(Task).where(Task.due_date < cutoff)
        if excluded_statuses:
            stmt = stmt.where(Task.status.not_in(list(excluded_statuses)))
        result = await self.db.execute(stmt.order_by(Task.id))
        return result.scalars().all()

    @log_slow_query("tasks.list_by_owner_id_and_due_date_before_and_status_not_in")
    async def list_by_owner_id_and_due_date_before_and_status_not_in(
        self,
        owner_id: int,
        cutoff: datetime,
        excluded_statuses: Collection[TaskStatus],
    ) -> Sequence[Task]:
        stmt = select(Task).where(Task.owner_id == owner_id, Task.due_date < cutoff)
        if excluded_statuses:
            stmt = stmt.where(Task.status.not_in(list(excluded_statuses)))
        result = await self.db.execute(stmt.order_by(Task.id))
        return result.scalars().all()

    @log_slow_query("tasks.list_by_owner_id_and_due_date_between")
    async def list_by_owner_id_and_due_date_between(
        self,
        owner_id: int,
        start: datetime,
        end: datetime,
    ) -> Sequence[Task]:
        """Inclusive on both ends."""
        result = await self.db.execute(
            select(Task)
            .where(
                Task.owner_id == owner_id,
                Task.due_date.between(start, end),
            )
            .order_by(Task.due_date, Task.id)
        )
        return result.scalars().all()

    @log_slow_query("tasks.count_by_project_id")
    async def count_by_project_id(self, project_id: int) -> int:
        return (
            await self.db.scalar(
                select(func.count(Task.id)).where(Task.project_id == project_id)
            )
            or 0
        )

    @log_slow_query("tasks.count_by_project_ids")
    async def count_by_project_ids(self, project_ids: Collection[int]) -> dict[int, int]:
        """Task counts for many projects in one GROUP BY query.

        Projects without tasks are absent from the result.
        """
        if not project_ids:
            return {}
        result = await self.db.execute(
            select(Task.project_id, func.count(Task.id))
            .where(Task.project_id.in_(list(project_ids)))
            .group_by(Task.project_id)
        )
        return {row[0]: row[1] for row in result.all()}

    @log_slow_query("tasks.create")
    async def create(self, task: Task) -> Task:
        self.db.add(task)
        await self.db.flush()
        return task

    @log_slow_query("tasks.save")
    async def save(self, task: Task) -> Task:
        await self.db.flush()
        return task

    @log_slow_query("tasks.detach_from_project")
    async def detach_from_project(self, project_id: int) -> int:
        """Clear project_id on every task in the project. Returns rows touched."""
        result = await self.db.execute(
            update(Task)
            .where(Task.project_id == project_id)
            .values(project_id=None, updated_at=utcnow())
        )
        return result.rowcount or 0

    @log_slow_query("tasks.delete")
    async def delete(self, task_id: int) -> None:
        await self.db.execute(delete(Task).where(Task.id == task_id))

    @log_slow_query("tasks.delete_by_owner_id")
    async def delete_by_owner_id(self, owner_id: int) -> int:
        result = await self.db.execute(delete(Task).where(Task.owner_id == owner_id))
        return result.rowcount or 0
