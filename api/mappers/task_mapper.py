"""Task <-> schema conversion."""

from collections.abc import Iterable

from mappers.utils import as_utc
from models import Task
from schemas import TaskCreate, TaskResponse, TaskUpdate


def to_entity(data: TaskCreate) -> Task:
    """Build an unsaved task.

    owner_id and project_id are left unset; the service fills them in
    once the owner exists and the project's ownership has been checked.
    """
    return Task(
        title=data.title,
        description=data.description,
        status=data.status,
        due_date=as_utc(data.due_date),
    )


def to_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        due_date=as_utc(task.due_date),
        owner_id=task.owner_id,
        project_id=task.project_id,
        created_at=as_utc(task.created_at),
        updated_at=as_utc(task.updated_at),
    )


def to_response_list(tasks: Iterable[Task] | None) -> list[TaskResponse]:
    if not tasks:
        return []
    return [to_response(task) for task in tasks]


def apply_update(data: TaskUpdate, task: Task) -> Task:
    """Overwrite only the fields present in the update.

    A None field means "not supplied" and leaves the task unchanged;
    clearing a due date or description is not possible through an update.
    """
    if data.title is not None:
        task.title = data.title
    if data.description is not None:
        task.description = data.description
    if data.status is not None:
        task.status = data.status
    if data.due_date is not None:
        task.due_date = as_utc(data.due_date)
    return task
