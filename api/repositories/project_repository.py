"""Project repository for database operations."""

from collections.abc import Sequence

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Project, ProjectStatus
from repositories.utils import log_slow_query


def _name_contains(query: str):
    # autoescape: "%" and "_" in user input match literally
    return func.lower(Project.name).contains(query.lower(), autoescape=True)


class ProjectRepository:
    """Repository for Project database operations.

    Owner filters go straight to the owner_id column; the owning
    User row is never loaded to answer a scoped query.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @log_slow_query("projects.get_by_id")
    async def get_by_id(self, project_id: int) -> Project | None:
        result = await self.db.execute(select(Project).where(Project.id == project_id))
        return result.scalar_one_or_none()

    @log_slow_query("projects.list_all")
    async def list_all(self) -> Sequence[Project]:
        result = await self.db.execute(select(Project).order_by(Project.id))
        return result.scalars().all()

    @log_slow_query("projects.list_by_owner_id")
    async def list_by_owner_id(self, owner_id: int) -> Sequence[Project]:
        result = await self.db.execute(
            select(Project).where(Project.owner_id == owner_id).order_by(Project.id)
        )
        return result.scalars().all()

    @log_slow_query("projects.list_by_status")
    async def list_by_status(self, status: ProjectStatus) -> Sequence[Project]:
        result = await self.db.execute(
            select(Project).where(Project.status == status).order_by(Project.id)
        )
        return result.scalars().all()

    @log_slow_query("projects.list_by_owner_id_and_status")
    async def list_by_owner_id_and_status(
        self,
        owner_id: int,
        status: ProjectStatus,
    ) -> Sequence[Project]:
        result = await self.db.execute(
            select(Project)
            .where(
                Project.owner_id == owner_id,
                Project.status == status,
            )
            .order_by(Project.id)
        )
        return result.scalars().all()

    @log_slow_query("projects.list_by_name_containing")
    async def list_by_name_containing(self, query: str) -> Sequence[Project]:
        """Case-insensitive substring match on name."""
        result = await self.db.execute(
            select(Project).where(_name_contains(query)).order_by(Project.id)
        )
        return result.scalars().all()

    @log_slow_query("projects.list_by_owner_id_and_name_containing")
    async def list_by_owner_id_and_name_containing(
        self,
        owner_id: int,
        query: str,
    ) -> Sequence[Project]:
        result = await self.db.execute(
            select(Project)
            .where(
                Project.owner_id == owner_id,
                _name_contains(query),
            )
            .order_by(Project.id)
        )
        return result.scalars().all()

    @log_slow_query("projects.exists_by_owner_id_and_name")
    async def exists_by_owner_id_and_name(self, owner_id: int, name: str) -> bool:
        """Case-insensitive name check within one owner's projects."""
        return bool(
            await self.db.scalar(
                select(
                    exists().where(
                        Project.owner_id == owner_id,
                        func.lower(Project.name) == name.lower(),
                    )
                )
            )
        )

    @log_slow_query("projects.create")
    async def create(self, project: Project) -> Project:
        """Persist a new project and flush so the ID is assigned."""
        self.db.add(project)
        await self.db.flush()
        return project

    @log_slow_query("projects.save")
    async def save(self, project: Project) -> Project:
        await self.db.flush()
        return project

    @log_slow_query("projects.delete")
    async def delete(self, project_id: int) -> None:
        await self.db.execute(delete(Project).where(Project.id == project_id))

    @log_slow_query("projects.delete_by_owner_id")
    async def delete_by_owner_id(self, owner_id: int) -> int:
        result = await self.db.execute(
            delete(Project).where(Project.owner_id == owner_id)
        )
        return result.rowcount or 0
