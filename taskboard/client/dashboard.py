"""Client-side dashboard state with optimistic task mutations."""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from taskboard.client.api import TaskApiClient, TaskApiError
from taskboard.constants.constants import Category, CategoryFilter, Priority, StatusFilter, TaskStatus
from taskboard.core.config import settings
from taskboard.models.base import utcnow
from taskboard.schemas.common import as_naive_utc
from taskboard.schemas.taskSchema import TaskResponse
from taskboard.services.task_presentation import TaskGroup, TaskOverview, present_tasks, summarize
from taskboard.services.task_service import parse_due_date, validate_choice, validate_description, validate_title
from taskboard.utils.debounce import Debouncer

logger = logging.getLogger(__name__)


class MutationInProgress(Exception):
    """A mutation on the same task is still waiting for the server."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task {task_id} already has a pending change")


class TaskDashboard:
    """
    In-memory task list as shown on the dashboard.

    Mutations are applied locally first and reverted when the API call fails.
    Only one mutation per task id may be in flight; a second one raises
    MutationInProgress. Search input is debounced, so methods touching it
    must run inside an asyncio loop.
    """

    def __init__(self, api: TaskApiClient, debounce_seconds: Optional[float] = None):
        self.api = api
        self.tasks: List[TaskResponse] = []
        self.active_category = CategoryFilter.ALL
        self.status_filter = StatusFilter.ALL
        self.search_query = ""
        self.debounced_query = ""
        self.error = ""
        self._pending: Dict[str, object] = {}
        if debounce_seconds is None:
            debounce_seconds = settings.SEARCH_DEBOUNCE_MS / 1000
        self._search = Debouncer(debounce_seconds, self._apply_search)

    async def load(self) -> None:
        try:
            self.tasks = await self.api.list_tasks()
            self.error = ""
        except TaskApiError as e:
            self.error = e.message
            raise

    # ------------------------------
    # View state
    # ------------------------------
    def set_category(self, category: CategoryFilter) -> None:
        self.active_category = CategoryFilter(category)

    def set_status_filter(self, status_filter: StatusFilter) -> None:
        self.status_filter = StatusFilter(status_filter)

    def set_search_query(self, query: str) -> None:
        self.search_query = query
        self._search.trigger(query)

    def _apply_search(self, query: str) -> None:
        self.debounced_query = query

    def groups(self) -> List[TaskGroup]:
        return present_tasks(
            self.tasks,
            category=self.active_category,
            status_filter=self.status_filter,
            query=self.debounced_query,
        )

    def overview(self) -> TaskOverview:
        return summarize(self.tasks)

    def close(self) -> None:
        self._search.cancel()

    # ------------------------------
    # Mutations
    # ------------------------------
    @contextmanager
    def _pending_mutation(self, task_id: str):
        if task_id in self._pending:
            raise MutationInProgress(task_id)
        self._pending[task_id] = object()
        try:
            yield
        finally:
            self._pending.pop(task_id, None)

    def is_pending(self, task_id: str) -> bool:
        return task_id in self._pending

    def _index_of(self, task_id: str) -> int:
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                return index
        raise KeyError(task_id)

    def _replace(self, task_id: str, task: TaskResponse) -> None:
        self.tasks[self._index_of(task_id)] = task

    def _neighbours(self, index: int) -> Tuple[Optional[str], Optional[str]]:
        before = self.tasks[index - 1].id if index > 0 else None
        after = self.tasks[index + 1].id if index + 1 < len(self.tasks) else None
        return before, after

    def _restore(self, task: TaskResponse, before: Optional[str], after: Optional[str]) -> None:
        """Puts a task back next to whichever of its old neighbours is still listed."""
        ids = [t.id for t in self.tasks]
        if before in ids:
            self.tasks.insert(ids.index(before) + 1, task)
        elif after in ids:
            self.tasks.insert(ids.index(after), task)
        elif before is None:
            self.tasks.insert(0, task)
        else:
            self.tasks.append(task)

    def _placeholder(self, fields: Dict[str, Any]) -> TaskResponse:
        """Local stand-in shown until the server returns the created task."""
        status = validate_choice(fields.get("status"), TaskStatus, "status") if fields.get("status") else TaskStatus.TODO
        due_date = fields.get("due_date")
        if isinstance(due_date, str):
            due_date = parse_due_date(due_date) if due_date else None
        elif isinstance(due_date, datetime):
            due_date = as_naive_utc(due_date)
        now = utcnow()
        return TaskResponse(
            id=f"pending-{uuid.uuid4()}",
            title=validate_title(fields.get("title")),
            description=validate_description(fields.get("description")),
            priority=validate_choice(fields.get("priority"), Priority, "priority") if fields.get("priority") else Priority.MEDIUM,
            category=validate_choice(fields.get("category"), Category, "category") if fields.get("category") else Category.PERSONAL,
            status=status,
            completed=status == TaskStatus.COMPLETED,
            due_date=due_date,
            user_id="",
            created_at=now,
            updated_at=now,
        )

    async def create_task(self, **fields: Any) -> TaskResponse:
        """
        Adds a placeholder immediately and swaps in the server's task.

        Invalid input raises ValidationError before anything is shown. On API
        failure the placeholder is removed, the message is kept in `error`
        and the TaskApiError is re-raised so the form can stay open.
        """
        placeholder = self._placeholder(fields)
        with self._pending_mutation(placeholder.id):
            self.tasks.append(placeholder)
            try:
                task = await self.api.create_task(**fields)
            except TaskApiError as e:
                self.tasks = [t for t in self.tasks if t.id != placeholder.id]
                self.error = e.message or "Failed to create task"
                raise
            self._replace(placeholder.id, task)
            self.error = ""
            return task

    async def toggle_task(self, task_id: str, completed: bool) -> bool:
        """Flips completion locally, then confirms with the server. Returns success."""
        with self._pending_mutation(task_id):
            previous = self.tasks[self._index_of(task_id)]
            if completed:
                status = TaskStatus.COMPLETED
            elif previous.status == TaskStatus.COMPLETED:
                status = TaskStatus.TODO
            else:
                status = previous.status
            self._replace(task_id, previous.model_copy(update={"completed": completed, "status": status}))

            try:
                task = await self.api.update_task(task_id, completed=completed)
            except TaskApiError as e:
                self._replace(task_id, previous)
                self.error = e.message or "Failed to update task"
                return False
            self._replace(task_id, task)
            self.error = ""
            return True

    async def delete_task(self, task_id: str) -> bool:
        """Removes the task locally, restoring it in place if the server refuses."""
        with self._pending_mutation(task_id):
            index = self._index_of(task_id)
            before, after = self._neighbours(index)
            removed = self.tasks.pop(index)

            try:
                await self.api.delete_task(task_id)
            except TaskApiError as e:
                self._restore(removed, before, after)
                self.error = e.message or "Failed to delete task"
                return False
            self.error = ""
            return True
