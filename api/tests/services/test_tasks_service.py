"""Tests for TaskService.

Every call is made as an acting owner; tasks and projects belonging to
somebody else must be rejected, never silently returned or modified.
"""

from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models import TaskStatus
from repositories import TaskRepository
from schemas import ProjectCreate, TaskCreate, TaskUpdate, UserCreate
from services import (
    InvalidArgumentError,
    NotFoundError,
    ProjectService,
    TaskService,
    UserService,
    ValidationError,
)
from services.projects_service import PROJECT_NOT_OWNED
from services.tasks_service import TASK_NOT_OWNED
from tests.factories import (
    OverdueTaskFactory,
    ProjectFactory,
    TaskFactory,
    UserFactory,
    create_async,
)

pytestmark = pytest.mark.integration


@pytest.fixture
async def alice(db_session: AsyncSession):
    return await create_async(UserFactory, db_session, username="alice")


@pytest.fixture
async def bob(db_session: AsyncSession):
    return await create_async(UserFactory, db_session, username="bob")


class TestLaunchScenario:
    async def test_assign_to_foreign_project_leaves_task_untouched(
        self, db_session: AsyncSession
    ):
        users = UserService.from_session(db_session)
        projects = ProjectService.from_session(db_session)
        tasks = TaskService.from_session(db_session)

        u1 = await users.create(
            UserCreate(username="alice", email="a@x.com", password="pw")
        )
        u2 = await users.create(
            UserCreate(username="bob", email="b@x.com", password="pw")
        )
        p1 = await projects.create(ProjectCreate(name="Launch", owner_id=u1.id))
        assert p1.task_count == 0

        t1 = await tasks.create(
            TaskCreate(title="Write spec", project_id=p1.id), owner_id=u1.id
        )
        assert (await projects.get_by_id(p1.id)).task_count == 1

        p2 = await projects.create(ProjectCreate(name="Other", owner_id=u2.id))
        with pytest.raises(ValidationError, match=PROJECT_NOT_OWNED):
            await tasks.assign_to_project(t1.id, p2.id, owner_id=u1.id)

        assert (await tasks.get_by_id(t1.id, owner_id=u1.id)).project_id == p1.id


class TestCreateTask:
    async def test_create_then_get_returns_input_fields(
        self, db_session: AsyncSession, alice
    ):
        service = TaskService.from_session(db_session)
        due = datetime(2030, 1, 15, 9, 30, tzinfo=UTC)

        created = await service.create(
            TaskCreate(
                title="Write spec",
                description="First draft",
                status=TaskStatus.IN_PROGRESS,
                due_date=due,
            ),
            owner_id=alice.id,
        )
        fetched = await service.get_by_id(created.id, owner_id=alice.id)

        assert fetched.title == "Write spec"
        assert fetched.description == "First draft"
        assert fetched.status == TaskStatus.IN_PROGRESS
        assert fetched.due_date == due
        assert fetched.owner_id == alice.id
        assert fetched.project_id is None

    async def test_due_date_normalized_to_utc(self, db_session: AsyncSession, alice):
        service = TaskService.from_session(db_session)
        plus_two = timezone(timedelta(hours=2))

        created = await service.create(
            TaskCreate(title="t", due_date=datetime(2030, 1, 15, 11, 0, tzinfo=plus_two)),
            owner_id=alice.id,
        )

        assert created.due_date == datetime(2030, 1, 15, 9, 0, tzinfo=UTC)
        assert created.due_date.utcoffset() == timedelta(0)

    async def test_foreign_project_rejected_and_nothing_persisted(
        self, db_session: AsyncSession, alice, bob
    ):
        service = TaskService.from_session(db_session)
        project = await create_async(ProjectFactory, db_session, owner_id=bob.id)

        with pytest.raises(ValidationError, match=PROJECT_NOT_OWNED):
            await service.create(
                TaskCreate(title="Sneaky", project_id=project.id), owner_id=alice.id
            )

        assert await TaskRepository(db_session).list_all() == []

    async def test_unknown_project(self, db_session: AsyncSession, alice):
        service = TaskService.from_session(db_session)

        with pytest.raises(NotFoundError, match="project not found"):
            await service.create(TaskCreate(title="t", project_id=4242), alice.id)

    async def test_unknown_owner(self, db_session: AsyncSession):
        service = TaskService.from_session(db_session)

        with pytest.raises(NotFoundError, match="user not found"):
            await service.create(TaskCreate(title="t"), owner_id=4242)

    async def test_missing_owner_is_invalid_argument(self, db_session: AsyncSession):
        service = TaskService.from_session(db_session)

        with pytest.raises(InvalidArgumentError):
            await service.create(TaskCreate(title="t"), owner_id=None)


class TestTaskOwnership:
    async def test_find_by_id(self, db_session: AsyncSession, alice, bob):
        service = TaskService.from_session(db_session)
        task = await create_async(TaskFactory, db_session, owner_id=alice.id)

        assert (await service.find_by_id(task.id, alice.id)).id == task.id
        assert await service.find_by_id(task.id + 1000, alice.id) is None
        with pytest.raises(ValidationError, match=TASK_NOT_OWNED):
            await service.find_by_id(task.id, bob.id)

    async def test_foreign_task_cannot_be_modified(
        self, db_session: AsyncSession, alice, bob
    ):
        service = TaskService.from_session(db_session)
        task = await create_async(TaskFactory, db_session, owner_id=alice.id)

        with pytest.raises(ValidationError, match=TASK_NOT_OWNED):
            await service.update(task.id, TaskUpdate(title="mine now"), bob.id)
        with pytest.raises(ValidationError, match=TASK_NOT_OWNED):
            await service.delete(task.id, bob.id)
        with pytest.raises(ValidationError, match=TASK_NOT_OWNED):
            await service.remove_from_project(task.id, bob.id)

        fetched = await service.get_by_id(task.id, alice.id)
        assert fetched.title == task.title

    async def test_find_by_project_id_requires_owned_project(
        self, db_session: AsyncSession, alice, bob
    ):
        service = TaskService.from_session(db_session)
        project = await create_async(ProjectFactory, db_session, owner_id=bob.id)

        with pytest.raises(ValidationError, match=PROJECT_NOT_OWNED):
            await service.find_by_project_id(project.id, alice.id)
        with pytest.raises(ValidationError, match=PROJECT_NOT_OWNED):
            await service.find_by_project_id_and_status(
                project.id, TaskStatus.TODO, alice.id
            )

    async def test_get_by_id_missing(self, db_session: AsyncSession, alice):
        service = TaskService.from_session(db_session)

        with pytest.raises(NotFoundError, match="task not found with id: 4242"):
            await service.get_by_id(4242, alice.id)


class TestTaskQueries:
    async def test_find_all_only_returns_own_tasks(
        self, db_session: AsyncSession, alice, bob
    ):
        service = TaskService.from_session(db_session)
        mine = await create_async(TaskFactory, db_session, owner_id=alice.id)
        await create_async(TaskFactory, db_session, owner_id=bob.id)

        assert [t.id for t in await service.find_all(alice.id)] == [mine.id]

    async def test_find_by_status_exact_subset(
        self, db_session: AsyncSession, alice, bob
    ):
        service = TaskService.from_session(db_session)
        expected = set()
        for owner in (alice, bob):
            for status in (TaskStatus.TODO, TaskStatus.COMPLETED):
                for _ in range(2):
                    task = await create_async(
                        TaskFactory, db_session, owner_id=owner.id, status=status
                    )
                    if owner is bob and status == TaskStatus.COMPLETED:
                        expected.add(task.id)

        result = await service.find_by_status(bob.id, TaskStatus.COMPLETED)

        assert {t.id for t in result} == expected

    async def test_find_by_project(self, db_session: AsyncSession, alice):
        service = TaskService.from_session(db_session)
        project = await create_async(ProjectFactory, db_session, owner_id=alice.id)
        todo = await create_async(
            TaskFactory, db_session, owner_id=alice.id, project_id=project.id
        )
        done = await create_async(
            TaskFactory,
            db_session,
            owner_id=alice.id,
            project_id=project.id,
            status=TaskStatus.COMPLETED,
        )
        await create_async(TaskFactory, db_session, owner_id=alice.id)

        all_in_project = await service.find_by_project_id(project.id, alice.id)
        completed = await service.find_by_project_id_and_status(
            project.id, TaskStatus.COMPLETED, alice.id
        )

        assert [t.id for t in all_in_project] == [todo.id, done.id]
        assert [t.id for t in completed] == [done.id]

    async def test_find_overdue(self, db_session: AsyncSession, alice, bob):
        service = TaskService.from_session(db_session)
        past = datetime.now(UTC) - timedelta(days=2)
        overdue = await create_async(
            TaskFactory, db_session, owner_id=alice.id, due_date=past
        )
        await create_async(
            TaskFactory,
            db_session,
            owner_id=alice.id,
            due_date=past,
            status=TaskStatus.COMPLETED,
        )
        await create_async(TaskFactory, db_session, owner_id=alice.id, due_date=None)
        await create_async(OverdueTaskFactory, db_session, owner_id=bob.id)

        result = await service.find_overdue(alice.id)

        assert [t.id for t in result] == [overdue.id]

    async def test_find_overdue_with_explicit_now(
        self, db_session: AsyncSession, alice
    ):
        service = TaskService.from_session(db_session)
        due = datetime(2030, 6, 1, tzinfo=UTC)
        task = await create_async(TaskFactory, db_session, owner_id=alice.id, due_date=due)

        before = await service.find_overdue(alice.id, now=due - timedelta(hours=1))
        after = await service.find_overdue(alice.id, now=due + timedelta(hours=1))

        assert before == []
        assert [t.id for t in after] == [task.id]

    async def test_find_by_due_date_between(self, db_session: AsyncSession, alice):
        service = TaskService.from_session(db_session)
        start = datetime(2030, 1, 1, tzinfo=UTC)
        inside = await create_async(
            TaskFactory, db_session, owner_id=alice.id, due_date=start + timedelta(days=1)
        )
        await create_async(
            TaskFactory, db_session, owner_id=alice.id, due_date=start - timedelta(days=1)
        )

        result = await service.find_by_due_date_between(
            start, start + timedelta(days=7), alice.id
        )

        assert [t.id for t in result] == [inside.id]

    async def test_due_date_between_rejects_inverted_range(
        self, db_session: AsyncSession, alice
    ):
        service = TaskService.from_session(db_session)
        start = datetime(2030, 1, 8, tzinfo=UTC)

        with pytest.raises(InvalidArgumentError):
            await service.find_by_due_date_between(
                start, start - timedelta(days=7), alice.id
            )


class TestTaskWrites:
    async def test_status_only_update_keeps_other_fields(
        self, db_session: AsyncSession, alice
    ):
        service = TaskService.from_session(db_session)
        project = await create_async(ProjectFactory, db_session, owner_id=alice.id)
        due = datetime(2030, 2, 1, 12, 0, tzinfo=UTC)
        created = await service.create(
            TaskCreate(
                title="Write spec",
                description="Full text",
                due_date=due,
                project_id=project.id,
            ),
            owner_id=alice.id,
        )

        updated = await service.update(
            created.id, TaskUpdate(status=TaskStatus.COMPLETED), alice.id
        )

        assert updated.status == TaskStatus.COMPLETED
        assert updated.title == "Write spec"
        assert updated.description == "Full text"
        assert updated.due_date == due
        assert updated.project_id == project.id
        assert updated.owner_id == alice.id
        assert updated.created_at == created.created_at

    async def test_assign_and_remove(self, db_session: AsyncSession, alice):
        service = TaskService.from_session(db_session)
        project = await create_async(ProjectFactory, db_session, owner_id=alice.id)
        task = await create_async(TaskFactory, db_session, owner_id=alice.id)

        assigned = await service.assign_to_project(task.id, project.id, alice.id)
        removed = await service.remove_from_project(task.id, alice.id)

        assert assigned.project_id == project.id
        assert removed.project_id is None

    async def test_delete(self, db_session: AsyncSession, alice):
        service = TaskService.from_session(db_session)
        task = await create_async(TaskFactory, db_session, owner_id=alice.id)

        await service.delete(task.id, alice.id)

        assert await service.find_by_id(task.id, alice.id) is None

    async def test_delete_missing(self, db_session: AsyncSession, alice):
        service = TaskService.from_session(db_session)

        with pytest.raises(NotFoundError):
            await service.delete(4242, alice.id)

    def test_project_cannot_be_set_through_update(self):
        with pytest.raises(ValueError):
            TaskUpdate(project_id=3)
