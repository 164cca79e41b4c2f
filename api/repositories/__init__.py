"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping services focused
on business rules. This separation provides:
- Single source of truth for database operations
- Easier testing (repositories can be mocked)
- Reusable queries across multiple services

Lookups by ID return None on a miss and never raise. Existence checks
use EXISTS and never load full rows.
"""

from repositories.project_repository import ProjectRepository
from repositories.task_repository import TaskRepository
from repositories.user_repository import UserRepository
from repositories.utils import log_slow_query

__all__ = [
    "ProjectRepository",
    "TaskRepository",
    "UserRepository",
    "log_slow_query",
]
