"""User <-> schema conversion."""

from collections.abc import Iterable

from mappers.utils import as_utc
from models import User
from schemas import UserCreate, UserResponse, UserUpdate


def to_entity(data: UserCreate, password_hash: str) -> User:
    """Build a User from create input. The plaintext password is not copied."""
    return User(
        username=data.username,
        email=data.email,
        password=password_hash,
    )


def to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        created_at=as_utc(user.created_at),
        updated_at=as_utc(user.updated_at),
    )


def to_response_list(users: Iterable[User] | None) -> list[UserResponse]:
    if not users:
        return []
    return [to_response(user) for user in users]


def apply_update(
    data: UserUpdate, user: User, password_hash: str | None = None
) -> User:
    """Copy only the fields that were provided. None never clears a value.

    data.password is ignored; callers pass its hash as password_hash.
    """
    if data.email is not None:
        user.email = data.email
    if password_hash is not None:
        user.password = password_hash
    return user
