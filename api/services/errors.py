"""Exceptions raised by the service layer.

Services raise these and never translate them into transport concerns.
A presentation layer maps them with STATUS_CODES:
    NotFoundError        -> 404
    ValidationError      -> 400
    InvalidArgumentError -> 400
    anything else        -> 500 (logged, no detail leaked)
"""

from typing import Any


class ServiceError(Exception):
    """Base class for errors raised by services."""

    pass


class NotFoundError(ServiceError):
    """Raised when a referenced user, project or task does not exist."""

    def __init__(
        self,
        resource: str,
        identifier: Any = None,
        message: str | None = None,
    ):
        self.resource = resource
        self.identifier = identifier
        super().__init__(message or f"{resource} not found with id: {identifier}")


class ValidationError(ServiceError):
    """Raised when a business rule is violated.

    Duplicate username/email, duplicate project name for an owner,
    and any cross-owner access or assignment.
    """

    pass


class InvalidArgumentError(ServiceError, ValueError):
    """Raised when a caller breaks a method contract (missing ID or input)."""

    pass


STATUS_CODES: dict[type[ServiceError], int] = {
    NotFoundError: 404,
    ValidationError: 400,
    InvalidArgumentError: 400,
}


def status_code_for(exc: BaseException) -> int:
    """HTTP status a presentation layer should use for exc."""
    for exc_type, status in STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return status
    return 500


def require(value: Any, name: str) -> None:
    """Fail fast when a required argument is missing."""
    if value is None:
        raise InvalidArgumentError(f"{name} is None")


def require_text(value: str | None, name: str) -> None:
    if not value:
        raise InvalidArgumentError(f"{name} is empty")
