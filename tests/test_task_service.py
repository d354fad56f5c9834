from datetime import datetime

import pytest

from taskboard.constants.constants import Category, Priority, TaskStatus
from taskboard.core.exceptions import Forbidden, InternalError, NotFound, Unauthorized, ValidationError
from taskboard.core.session import RequestContext
from taskboard.repositories.task_repository import TaskRepository
from taskboard.schemas.taskSchema import TaskCreateRequest, TaskUpdateRequest
from taskboard.services.task_service import TaskService, parse_due_date


@pytest.fixture
def service(db_session):
    return TaskService(TaskRepository(db_session))


async def _create(service, ctx, **fields):
    return await service.create_task(ctx, TaskCreateRequest(**fields))


def _update(**body):
    return TaskUpdateRequest.model_validate(body)


@pytest.mark.asyncio
async def test_create_applies_defaults_and_owner(service, alice, ctx_for):
    task = await _create(service, ctx_for(alice), title="  Buy groceries  ", description="   ")

    assert task.title == "Buy groceries"
    assert task.description is None
    assert task.priority == Priority.MEDIUM
    assert task.category == Category.PERSONAL
    assert task.status == TaskStatus.TODO
    assert task.completed is False
    assert task.due_date is None
    assert task.user_id == alice.id


@pytest.mark.asyncio
@pytest.mark.parametrize("status", list(TaskStatus))
async def test_completed_tracks_status_on_create(service, alice, ctx_for, status):
    task = await _create(service, ctx_for(alice), title="T", status=status.value)
    assert task.completed == (task.status == TaskStatus.COMPLETED)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "fields, message",
    [
        ({"title": "   "}, "Title is required"),
        ({}, "Title is required"),
        ({"title": 42}, "Title is required"),
        ({"title": "T", "priority": "URGENT"}, "Invalid priority value"),
        ({"title": "T", "category": "HOBBY"}, "Invalid category value"),
        ({"title": "T", "status": "DONE"}, "Invalid status value"),
        ({"title": "T", "dueDate": "next tuesday"}, "Invalid due date format"),
        ({"title": "T", "description": ["x"]}, "Invalid description value"),
    ],
)
async def test_create_validation(service, alice, ctx_for, fields, message):
    with pytest.raises(ValidationError) as exc:
        await service.create_task(ctx_for(alice), TaskCreateRequest.model_validate(fields))
    assert exc.value.message == message
    assert await service.list_tasks(ctx_for(alice)) == []


@pytest.mark.asyncio
async def test_every_operation_requires_a_user(service, codec):
    anonymous = RequestContext(credential=None, codec=codec)
    with pytest.raises(Unauthorized):
        await service.list_tasks(anonymous)
    with pytest.raises(Unauthorized):
        await _create(service, anonymous, title="T")
    with pytest.raises(Unauthorized):
        await service.update_task(anonymous, _update(id="x"))
    with pytest.raises(Unauthorized):
        await service.delete_task(anonymous, "x")


@pytest.mark.asyncio
async def test_list_order_from_mixed_tasks(service, alice, ctx_for, db_session):
    repo = TaskRepository(db_session)
    common = dict(user_id=alice.id, category=Category.PERSONAL)
    t1 = await repo.create(title="t1", priority=Priority.HIGH, due_date=datetime(2025, 1, 1),
                           status=TaskStatus.TODO, completed=False, created_at=datetime(2025, 1, 1), **common)
    t2 = await repo.create(title="t2", priority=Priority.LOW, status=TaskStatus.TODO, completed=False,
                           created_at=datetime(2025, 1, 2), **common)
    t3 = await repo.create(title="t3", priority=Priority.HIGH, status=TaskStatus.COMPLETED, completed=True,
                           created_at=datetime(2025, 1, 3), **common)

    tasks = await service.list_tasks(ctx_for(alice))

    assert [t.id for t in tasks] == [t1.id, t2.id, t3.id]


@pytest.mark.asyncio
async def test_list_puts_undated_after_dated_then_newest_first(service, alice, ctx_for, db_session):
    repo = TaskRepository(db_session)
    common = dict(user_id=alice.id, priority=Priority.MEDIUM, status=TaskStatus.TODO, completed=False)
    older_undated = await repo.create(title="a", created_at=datetime(2025, 1, 1), **common)
    newer_undated = await repo.create(title="b", created_at=datetime(2025, 1, 5), **common)
    late = await repo.create(title="c", due_date=datetime(2025, 3, 1), created_at=datetime(2025, 1, 2), **common)
    early = await repo.create(title="d", due_date=datetime(2025, 2, 1), created_at=datetime(2025, 1, 3), **common)

    tasks = await service.list_tasks(ctx_for(alice))

    assert [t.id for t in tasks] == [early.id, late.id, newer_undated.id, older_undated.id]


@pytest.mark.asyncio
async def test_list_only_returns_own_tasks(service, alice, bob, ctx_for):
    await _create(service, ctx_for(alice), title="mine")
    await _create(service, ctx_for(bob), title="theirs")

    tasks = await service.list_tasks(ctx_for(alice))

    assert [t.title for t in tasks] == ["mine"]


@pytest.mark.asyncio
async def test_update_due_date_omitted_null_and_invalid(service, alice, ctx_for):
    ctx = ctx_for(alice)
    task = await _create(service, ctx, title="T", dueDate="2025-03-01T10:00:00Z")
    assert task.due_date == datetime(2025, 3, 1, 10, 0)

    task = await service.update_task(ctx, _update(id=task.id, title="Renamed"))
    assert task.due_date == datetime(2025, 3, 1, 10, 0)

    with pytest.raises(ValidationError) as exc:
        await service.update_task(ctx, _update(id=task.id, title="Other", dueDate="31/02/2025"))
    assert exc.value.message == "Invalid due date format"
    [unchanged] = await service.list_tasks(ctx)
    assert unchanged.title == "Renamed"
    assert unchanged.due_date == datetime(2025, 3, 1, 10, 0)

    task = await service.update_task(ctx, _update(id=task.id, dueDate=None))
    assert task.due_date is None


@pytest.mark.asyncio
async def test_update_rejects_blank_title_and_null_enum(service, alice, ctx_for):
    ctx = ctx_for(alice)
    task = await _create(service, ctx, title="T")

    with pytest.raises(ValidationError):
        await service.update_task(ctx, _update(id=task.id, title=" "))
    with pytest.raises(ValidationError) as exc:
        await service.update_task(ctx, _update(id=task.id, priority=None))
    assert exc.value.message == "Invalid priority value"


@pytest.mark.asyncio
async def test_update_status_drives_completed(service, alice, ctx_for):
    ctx = ctx_for(alice)
    task = await _create(service, ctx, title="T")

    task = await service.update_task(ctx, _update(id=task.id, status="COMPLETED"))
    assert (task.status, task.completed) == (TaskStatus.COMPLETED, True)

    task = await service.update_task(ctx, _update(id=task.id, status="IN_PROGRESS"))
    assert (task.status, task.completed) == (TaskStatus.IN_PROGRESS, False)


@pytest.mark.asyncio
async def test_completed_flag_is_translated_into_status(service, alice, ctx_for):
    ctx = ctx_for(alice)
    task = await _create(service, ctx, title="T", status="IN_PROGRESS")

    task = await service.update_task(ctx, _update(id=task.id, completed=False))
    assert (task.status, task.completed) == (TaskStatus.IN_PROGRESS, False)

    task = await service.update_task(ctx, _update(id=task.id, completed=True))
    assert (task.status, task.completed) == (TaskStatus.COMPLETED, True)

    task = await service.update_task(ctx, _update(id=task.id, completed=False))
    assert (task.status, task.completed) == (TaskStatus.TODO, False)


@pytest.mark.asyncio
async def test_status_wins_over_completed(service, alice, ctx_for):
    ctx = ctx_for(alice)
    task = await _create(service, ctx, title="T")

    task = await service.update_task(ctx, _update(id=task.id, status="TODO", completed=True))

    assert (task.status, task.completed) == (TaskStatus.TODO, False)


@pytest.mark.asyncio
async def test_update_requires_id_existing_and_owned(service, alice, bob, ctx_for):
    task = await _create(service, ctx_for(alice), title="T")

    with pytest.raises(ValidationError) as exc:
        await service.update_task(ctx_for(alice), _update(title="x"))
    assert exc.value.message == "Task ID is required"
    with pytest.raises(NotFound):
        await service.update_task(ctx_for(alice), _update(id="missing", title="x"))
    with pytest.raises(Forbidden):
        await service.update_task(ctx_for(bob), _update(id=task.id, title="x"))


@pytest.mark.asyncio
async def test_ownership_is_checked_before_field_validation(service, alice, bob, ctx_for):
    task = await _create(service, ctx_for(alice), title="T")
    with pytest.raises(Forbidden):
        await service.update_task(ctx_for(bob), _update(id=task.id, priority="URGENT"))


@pytest.mark.asyncio
async def test_delete_twice_is_not_found(service, alice, ctx_for):
    ctx = ctx_for(alice)
    task = await _create(service, ctx, title="T")

    await service.delete_task(ctx, task.id)
    with pytest.raises(NotFound):
        await service.delete_task(ctx, task.id)


@pytest.mark.asyncio
async def test_delete_checks_id_and_owner(service, alice, bob, ctx_for):
    task = await _create(service, ctx_for(alice), title="T")

    with pytest.raises(ValidationError):
        await service.delete_task(ctx_for(alice), None)
    with pytest.raises(Forbidden):
        await service.delete_task(ctx_for(bob), task.id)
    assert len(await service.list_tasks(ctx_for(alice))) == 1


class BrokenRepository:
    async def list_for_owner(self, user_id):
        raise RuntimeError("connection reset")

    async def create(self, **fields):
        raise RuntimeError("connection reset")


@pytest.mark.asyncio
async def test_store_failures_become_internal_error(alice, ctx_for):
    service = TaskService(BrokenRepository())

    with pytest.raises(InternalError) as exc:
        await service.list_tasks(ctx_for(alice))
    assert exc.value.message == "Internal server error"
    with pytest.raises(InternalError):
        await _create(service, ctx_for(alice), title="T")


@pytest.mark.asyncio
async def test_overview_counts(service, alice, ctx_for):
    ctx = ctx_for(alice)
    await _create(service, ctx, title="a", priority="HIGH", category="WORK", dueDate="2020-01-01")
    await _create(service, ctx, title="b", status="COMPLETED")

    overview = await service.overview(ctx, now=datetime(2025, 1, 1))

    assert overview.total_count == 2
    assert overview.completed_count == 1
    assert overview.overdue_count == 1
    assert overview.high_priority_count == 1
    assert overview.completion_rate == 50
    assert overview.category_breakdown == {"PERSONAL": 0, "WORK": 1}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-01-01", datetime(2025, 1, 1)),
        ("2025-01-01T08:30:00Z", datetime(2025, 1, 1, 8, 30)),
        ("2025-01-01T10:30:00+02:00", datetime(2025, 1, 1, 8, 30)),
    ],
)
def test_parse_due_date_normalizes_to_utc(value, expected):
    assert parse_due_date(value) == expected
