"""
Dashboard view pipeline over an in-memory task list.

Every function accepts task-like objects exposing `title`, `completed`,
`priority`, `category`, `due_date` and `created_at`: ORM rows on the server,
parsed `TaskResponse` objects on the client. Order of application:
category filter -> status filter -> search -> sort -> group.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from taskboard.constants.constants import (
    CATEGORY_GROUP_ORDER,
    PRIORITY_RANK,
    Category,
    CategoryFilter,
    Priority,
    StatusFilter,
)
from taskboard.models.base import utcnow


@dataclass
class TaskGroup:
    category: CategoryFilter
    tasks: List = field(default_factory=list)


@dataclass
class TaskOverview:
    total_count: int
    completed_count: int
    remaining_count: int
    overdue_count: int
    high_priority_count: int
    completion_rate: int
    category_breakdown: Dict[str, int]


def filter_by_category(tasks: Iterable, category: CategoryFilter) -> List:
    if category == CategoryFilter.ALL:
        return list(tasks)
    return [t for t in tasks if t.category == category.value]


def filter_by_status(tasks: Iterable, status_filter: StatusFilter) -> List:
    if status_filter == StatusFilter.COMPLETED:
        return [t for t in tasks if t.completed]
    if status_filter == StatusFilter.REMAINING:
        return [t for t in tasks if not t.completed]
    return list(tasks)


def filter_by_search(tasks: Iterable, query: Optional[str]) -> List:
    """Case-insensitive substring match against the title only."""
    if not query or not query.strip():
        return list(tasks)
    needle = query.lower()
    return [t for t in tasks if needle in t.title.lower()]


def _rank(task):
    due_date = task.due_date
    return (
        task.completed,
        -PRIORITY_RANK[Priority(task.priority)],
        due_date is None,
        due_date or datetime.min,
    )


def sort_tasks(tasks: Iterable) -> List:
    """
    Incomplete before completed, HIGH > MEDIUM > LOW, earliest due date first
    with undated tasks last, newest first as the final tiebreak.
    """
    newest_first = sorted(tasks, key=lambda t: t.created_at, reverse=True)
    # sorted() is stable, so the newest-first order survives among equal ranks
    return sorted(newest_first, key=_rank)


def group_by_category(tasks: Sequence, category: CategoryFilter) -> List[TaskGroup]:
    if category != CategoryFilter.ALL:
        return [TaskGroup(category=category, tasks=list(tasks))]
    return [
        TaskGroup(
            category=CategoryFilter(group.value),
            tasks=[t for t in tasks if t.category == group.value],
        )
        for group in CATEGORY_GROUP_ORDER
    ]


def present_tasks(
    tasks: Iterable,
    category: CategoryFilter = CategoryFilter.ALL,
    status_filter: StatusFilter = StatusFilter.ALL,
    query: Optional[str] = None,
) -> List[TaskGroup]:
    """Runs the whole pipeline and returns the groups to display."""
    visible = filter_by_category(tasks, category)
    visible = filter_by_status(visible, status_filter)
    visible = filter_by_search(visible, query)
    return group_by_category(sort_tasks(visible), category)


def summarize(tasks: Sequence, now: Optional[datetime] = None) -> TaskOverview:
    """Counts shown in the dashboard overview panel."""
    now = now or utcnow()
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    remaining = [t for t in tasks if not t.completed]

    return TaskOverview(
        total_count=total,
        completed_count=completed,
        remaining_count=total - completed,
        overdue_count=sum(1 for t in remaining if t.due_date and t.due_date < now),
        high_priority_count=sum(1 for t in remaining if t.priority == Priority.HIGH.value),
        # Half-up rounding, 12.5 -> 13
        completion_rate=int(completed * 100 / total + 0.5) if total else 0,
        category_breakdown={
            category.value: sum(1 for t in remaining if t.category == category.value)
            for category in Category
        },
    )
