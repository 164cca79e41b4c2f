"""User repository for database operations."""

from collections.abc import Sequence

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import User
from repositories.utils import log_slow_query


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("users.get_by_id")
    async def get_by_id(self, user_id: int) -> User | None:
        """Get a user by their ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @log_slow_query("users.get_by_username")
    async def get_by_username(self, username: str) -> User | None:
        """Get a user by username (exact, case-sensitive match)."""
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    @log_slow_query("users.get_by_email")
    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @log_slow_query("users.list_all")
    async def list_all(self) -> Sequence[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return result.scalars().all()

    @log_slow_query("users.exists_by_id")
    async def exists_by_id(self, user_id: int) -> bool:
        return bool(await self.db.scalar(select(exists().where(User.id == user_id))))

    @log_slow_query("users.exists_by_username")
    async def exists_by_username(self, username: str) -> bool:
        return bool(
            await self.db.scalar(select(exists().where(User.username == username)))
        )

    @log_slow_query("users.exists_by_email")
    async def exists_by_email(self, email: str) -> bool:
        return bool(await self.db.scalar(select(exists().where(User.email == email))))

    @log_slow_query("users.count")
    async def count(self) -> int:
        return await self.db.scalar(select(func.count(User.id))) or 0

    @log_slow_query("users.create")
    async def create(self, user: User) -> User:
        """Persist a new user and flush so the ID is assigned.

        Raises IntegrityError if username or email collides with an existing row.
        """
        self.db.add(user)
        await self.db.flush()
        return user

    @log_slow_query("users.save")
    async def save(self, user: User) -> User:
        """Flush pending changes on an already-tracked user."""
        await self.db.flush()
        return user

    @log_slow_query("users.delete")
    async def delete(self, user_id: int) -> None:
        """Delete a user by ID. Owned rows cascade via ON DELETE CASCADE."""
        await self.db.execute(delete(User).where(User.id == user_id))
