"""Task CRUD operations with owner checks and field validation."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from taskboard.constants.constants import Category, Priority, TaskStatus
from taskboard.core.exceptions import Forbidden, NotFound, ValidationError, operation_boundary
from taskboard.core.session import RequestContext, require_user
from taskboard.models.task import Task
from taskboard.repositories.task_repository import TaskRepository
from taskboard.schemas.taskSchema import TaskCreateRequest, TaskUpdateRequest
from taskboard.services.task_presentation import TaskOverview, summarize

logger = logging.getLogger(__name__)


def validate_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Title is required")
    return value.strip()


def validate_description(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Invalid description value")
    return value.strip() or None


def validate_choice(value: Any, enum: Type[Enum], field: str):
    try:
        return enum(value)
    except (ValueError, TypeError):
        raise ValidationError(f"Invalid {field} value")


def parse_due_date(value: Any) -> datetime:
    """
    Parses an ISO-8601 timestamp into naive UTC.

    Accepts a trailing 'Z' and date-only strings. Anything else is rejected
    with "Invalid due date format".
    """
    if not isinstance(value, str):
        raise ValidationError("Invalid due date format")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("Invalid due date format")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class TaskService:
    """
    The four task operations plus the overview summary.

    Each operation resolves the caller from the request context first, so an
    unauthenticated call fails with Unauthorized before anything else runs.
    """

    def __init__(self, repository: TaskRepository):
        self.tasks = repository

    @operation_boundary("Get tasks")
    async def list_tasks(self, ctx: RequestContext) -> List[Task]:
        identity = require_user(ctx)
        return await self.tasks.list_for_owner(identity.id)

    @operation_boundary("Create task")
    async def create_task(self, ctx: RequestContext, data: TaskCreateRequest) -> Task:
        identity = require_user(ctx)

        title = validate_title(data.title)
        priority = validate_choice(data.priority, Priority, "priority") if data.priority else Priority.MEDIUM
        category = validate_choice(data.category, Category, "category") if data.category else Category.PERSONAL
        status = validate_choice(data.status, TaskStatus, "status") if data.status else TaskStatus.TODO
        description = validate_description(data.description)
        due_date = parse_due_date(data.due_date) if data.due_date else None

        task = await self.tasks.create(
            title=title,
            description=description,
            priority=priority,
            category=category,
            status=status,
            completed=status == TaskStatus.COMPLETED,
            due_date=due_date,
            user_id=identity.id,
        )
        logger.info(f"Task {task.id} created for user {identity.id}")
        return task

    @operation_boundary("Update task")
    async def update_task(self, ctx: RequestContext, data: TaskUpdateRequest) -> Task:
        identity = require_user(ctx)

        if not data.id:
            raise ValidationError("Task ID is required")

        task = await self._get_owned(str(data.id), identity.id)
        changes = self._validated_changes(task, data.provided())
        return await self.tasks.update(task, changes)

    @operation_boundary("Delete task")
    async def delete_task(self, ctx: RequestContext, task_id: Optional[str]) -> None:
        identity = require_user(ctx)

        if not task_id:
            raise ValidationError("Task ID is required")

        task = await self._get_owned(task_id, identity.id)
        await self.tasks.delete(task)
        logger.info(f"Task {task_id} deleted by user {identity.id}")

    @operation_boundary("Task overview")
    async def overview(self, ctx: RequestContext, now: Optional[datetime] = None) -> TaskOverview:
        identity = require_user(ctx)
        return summarize(await self.tasks.list_for_owner(identity.id), now=now)

    async def _get_owned(self, task_id: str, user_id: str) -> Task:
        task = await self.tasks.get(task_id)
        if task is None:
            raise NotFound("Task not found")
        if task.user_id != user_id:
            raise Forbidden()
        return task

    @staticmethod
    def _validated_changes(task: Task, provided: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validates every field present in the request before anything is applied.

        `status` is the single source of truth for `completed`. A bare
        `completed` flag is translated into a status change: true completes
        the task, false reopens a completed task as TODO. When both are sent
        `status` wins.
        """
        changes: Dict[str, Any] = {}

        if "title" in provided:
            changes["title"] = validate_title(provided["title"])
        if "description" in provided:
            changes["description"] = validate_description(provided["description"])
        if "priority" in provided:
            changes["priority"] = validate_choice(provided["priority"], Priority, "priority")
        if "category" in provided:
            changes["category"] = validate_choice(provided["category"], Category, "category")
        if "due_date" in provided:
            value = provided["due_date"]
            changes["due_date"] = None if value is None else parse_due_date(value)

        status = None
        if "status" in provided:
            status = validate_choice(provided["status"], TaskStatus, "status")
        if "completed" in provided:
            completed = provided["completed"]
            if not isinstance(completed, bool):
                raise ValidationError("Invalid completed value")
            if status is None:
                if completed:
                    status = TaskStatus.COMPLETED
                elif task.status == TaskStatus.COMPLETED:
                    status = TaskStatus.TODO

        if status is not None:
            changes["status"] = status
            changes["completed"] = status == TaskStatus.COMPLETED
        return changes
