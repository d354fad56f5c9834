"""Task management router for the Taskboard system."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.config import settings
from taskboard.core.database import aget_db
from taskboard.core.rate_limit import limiter
from taskboard.core.session import RequestContext, get_request_context
from taskboard.repositories.task_repository import TaskRepository
from taskboard.schemas.taskSchema import (
    MessageResponse,
    TaskCreateRequest,
    TaskEnvelope,
    TaskListResponse,
    TaskOverviewResponse,
    TaskResponse,
    TaskUpdateRequest,
)
from taskboard.services.task_service import TaskService

router = APIRouter(
    prefix="/tasks",
    tags=["tasks"]
)


def get_task_service(db: AsyncSession = Depends(aget_db)) -> TaskService:
    return TaskService(TaskRepository(db))


@router.get("", response_model=TaskListResponse)
@limiter.limit(settings.TASKS_RATE_LIMIT)
async def list_tasks(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    """
    Get all tasks owned by the current user.
    Incomplete first, then priority, due date and newest first.
    """
    tasks = await service.list_tasks(ctx)
    return {"tasks": [TaskResponse.model_validate(task) for task in tasks]}


@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.TASKS_RATE_LIMIT)
async def create_task(
    request: Request,
    task_data: TaskCreateRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    """
    Create a new task owned by the current user.
    """
    task = await service.create_task(ctx, task_data)
    return {"task": TaskResponse.model_validate(task)}


@router.patch("", response_model=TaskEnvelope)
@limiter.limit(settings.TASKS_RATE_LIMIT)
async def update_task(
    request: Request,
    task_data: TaskUpdateRequest,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    """
    Partially update a task identified by `id` in the body.
    Fields missing from the body are left unchanged; `dueDate: null` clears the due date.
    """
    task = await service.update_task(ctx, task_data)
    return {"task": TaskResponse.model_validate(task)}


@router.delete("", response_model=MessageResponse)
@limiter.limit(settings.TASKS_RATE_LIMIT)
async def delete_task(
    request: Request,
    task_id: Optional[str] = Query(None, alias="id"),
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    """
    Delete a task identified by the `id` query parameter.
    """
    await service.delete_task(ctx, task_id)
    return {"message": "Task deleted successfully"}


@router.get("/overview", response_model=TaskOverviewResponse)
@limiter.limit(settings.TASKS_RATE_LIMIT)
async def get_task_overview(
    request: Request,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    """
    Get completion statistics for the current user's tasks.
    """
    overview = await service.overview(ctx)
    return TaskOverviewResponse(
        total_count=overview.total_count,
        completed_count=overview.completed_count,
        remaining_count=overview.remaining_count,
        overdue_count=overview.overdue_count,
        high_priority_count=overview.high_priority_count,
        completion_rate=overview.completion_rate,
        category_breakdown=overview.category_breakdown,
    )
