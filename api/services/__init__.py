"""Service layer for business logic.

Services encapsulate all business rules, keeping any presentation layer
thin. This separation provides:
- Clear business rules in one place (uniqueness, ownership, references)
- Orchestration of multiple repositories within one unit of work
- Reusable logic for HTTP handlers, CLI commands and scripts

Layer hierarchy:
    Presentation -> Services (Business Logic) -> Repositories (Database)

Services should:
- Validate every invariant before the first write
- Be composed explicitly from the repositories they use
- Return response schemas (never ORM entities)
- Flush, but never commit; the caller's unit of work owns the transaction

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details
"""

from services.errors import (
    InvalidArgumentError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from services.projects_service import ProjectService
from services.tasks_service import TaskService
from services.users_service import UserService

__all__ = [
    "InvalidArgumentError",
    "NotFoundError",
    "ProjectService",
    "ServiceError",
    "TaskService",
    "UserService",
    "ValidationError",
]
