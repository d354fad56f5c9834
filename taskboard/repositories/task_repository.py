"""Persistence access for tasks, wrapped around an injected AsyncSession."""

from typing import Any, Dict, List, Optional

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.constants.constants import Priority
from taskboard.models.task import Task

# Larger rank sorts first when ordered descending
_priority_rank = case(
    (Task.priority == Priority.HIGH, 3),
    (Task.priority == Priority.MEDIUM, 2),
    else_=1,
)


class TaskRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_owner(self, user_id: str) -> List[Task]:
        """
        Tasks of one owner in dashboard order: incomplete first, then
        priority HIGH > MEDIUM > LOW, then earliest due date with undated
        tasks last, then newest first.
        """
        query = (
            select(Task)
            .where(Task.user_id == user_id)
            .order_by(
                Task.completed.asc(),
                _priority_rank.desc(),
                Task.due_date.is_(None).asc(),
                Task.due_date.asc(),
                Task.created_at.desc(),
            )
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get(self, task_id: str) -> Optional[Task]:
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def create(self, **fields: Any) -> Task:
        task = Task(**fields)
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def update(self, task: Task, changes: Dict[str, Any]) -> Task:
        for name, value in changes.items():
            setattr(task, name, value)
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def delete(self, task: Task) -> None:
        await self.db.delete(task)
        await self.db.commit()
