"""User service for user-related business logic."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.security import hash_password
from mappers import user_mapper
from models import User
from repositories import ProjectRepository, TaskRepository, UserRepository
from schemas import UserCreate, UserResponse, UserUpdate
from services.errors import (
    NotFoundError,
    ValidationError,
    require,
    require_text,
)

logger = get_logger(__name__)


class UserService:
    """Registration, lookup, update and cascading delete of users."""

    def __init__(
        self,
        users: UserRepository,
        projects: ProjectRepository,
        tasks: TaskRepository,
    ) -> None:
        self.users = users
        self.projects = projects
        self.tasks = tasks

    @classmethod
    def from_session(cls, db: AsyncSession) -> "UserService":
        return cls(UserRepository(db), ProjectRepository(db), TaskRepository(db))

    async def _get_entity(self, user_id: int) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    async def create(self, data: UserCreate) -> UserResponse:
        """Register a user. Username and email must both be unused."""
        require(data, "user_create")

        if await self.users.exists_by_username(data.username):
            logger.warning("user.create.rejected", reason="duplicate_username")
            raise ValidationError("username already exists")
        if await self.users.exists_by_email(data.email):
            logger.warning("user.create.rejected", reason="duplicate_email")
            raise ValidationError("email already exists")

        try:
            user = await self.users.create(
                user_mapper.to_entity(data, hash_password(data.password))
            )
        except IntegrityError as e:
            # Lost a race with a concurrent insert; the unique index caught it
            raise ValidationError("username or email already exists") from e

        logger.info("user.created", user_id=user.id)
        return user_mapper.to_response(user)

    async def find_by_id(self, user_id: int) -> UserResponse | None:
        require(user_id, "user_id")
        user = await self.users.get_by_id(user_id)
        return user_mapper.to_response(user) if user else None

    async def get_by_id(self, user_id: int) -> UserResponse:
        """Raises NotFoundError if the user does not exist."""
        require(user_id, "user_id")
        return user_mapper.to_response(await self._get_entity(user_id))

    async def find_by_username(self, username: str) -> UserResponse | None:
        require_text(username, "username")
        user = await self.users.get_by_username(username)
        return user_mapper.to_response(user) if user else None

    async def get_by_username(self, username: str) -> UserResponse:
        require_text(username, "username")
        user = await self.users.get_by_username(username)
        if user is None:
            raise NotFoundError(
                "user",
                username,
                message=f"user with username '{username}' not found",
            )
        return user_mapper.to_response(user)

    async def find_by_email(self, email: str) -> UserResponse | None:
        require_text(email, "email")
        user = await self.users.get_by_email(email)
        return user_mapper.to_response(user) if user else None

    async def find_all(self) -> list[UserResponse]:
        return user_mapper.to_response_list(await self.users.list_all())

    async def exists_by_username(self, username: str) -> bool:
        require_text(username, "username")
        return await self.users.exists_by_username(username)

    async def exists_by_email(self, email: str) -> bool:
        require_text(email, "email")
        return await self.users.exists_by_email(email)

    async def update(self, user_id: int, data: UserUpdate) -> UserResponse:
        """Partially update a user.

        Email uniqueness is only re-checked when the new address differs
        from the current one ignoring case.
        """
        require(user_id, "user_id")
        require(data, "user_update")

        user = await self._get_entity(user_id)

        if (
            data.email is not None
            and data.email.lower() != user.email.lower()
            and await self.users.exists_by_email(data.email)
        ):
            logger.warning(
                "user.update.rejected", user_id=user_id, reason="duplicate_email"
            )
            raise ValidationError("email already exists")

        password_hash = (
            hash_password(data.password) if data.password is not None else None
        )
        user_mapper.apply_update(data, user, password_hash)
        try:
            user = await self.users.save(user)
        except IntegrityError as e:
            raise ValidationError("email already exists") from e

        logger.info(
            "user.updated",
            user_id=user_id,
            password_changed=password_hash is not None,
        )
        return user_mapper.to_response(user)

    async def delete(self, user_id: int) -> None:
        """Delete a user together with every project and task it owns."""
        require(user_id, "user_id")
        if not await self.users.exists_by_id(user_id):
            raise NotFoundError("user", user_id)

        tasks_deleted = await self.tasks.delete_by_owner_id(user_id)
        projects_deleted = await self.projects.delete_by_owner_id(user_id)
        await self.users.delete(user_id)

        logger.info(
            "user.deleted",
            user_id=user_id,
            tasks_deleted=tasks_deleted,
            projects_deleted=projects_deleted,
        )
