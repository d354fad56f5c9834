from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taskboard.constants.constants import Category, Priority, TaskStatus
from taskboard.schemas.common import UtcDatetime


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskResponse(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    priority: Priority
    category: Category
    status: TaskStatus
    completed: bool
    due_date: Optional[UtcDatetime] = None
    user_id: str
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TaskEnvelope(BaseModel):
    task: TaskResponse


class TaskListResponse(BaseModel):
    tasks: List[TaskResponse]


class MessageResponse(BaseModel):
    message: str


class TaskCreateRequest(_CamelModel):
    """
    Request schema for creating a task.

    Fields are loosely typed on purpose: values are checked by the task
    operations so that every rejection carries its field-specific message.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    title: Any = None
    description: Any = None
    priority: Any = None
    category: Any = None
    status: Any = None
    due_date: Any = None


class TaskUpdateRequest(_CamelModel):
    """
    Request schema for a partial task update.

    A field missing from the body is absent from `model_fields_set` and left
    unchanged; a field sent as null is present with the value None.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: Any = None
    title: Any = None
    description: Any = None
    completed: Any = None
    priority: Any = None
    category: Any = None
    status: Any = None
    due_date: Any = None

    def provided(self) -> Dict[str, Any]:
        """Fields explicitly sent by the client, `id` excluded."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "id"
        }


class CategoryBreakdown(BaseModel):
    PERSONAL: int = 0
    WORK: int = 0


class TaskOverviewResponse(_CamelModel):
    total_count: int
    completed_count: int
    remaining_count: int
    overdue_count: int
    high_priority_count: int
    completion_rate: int
    category_breakdown: CategoryBreakdown
