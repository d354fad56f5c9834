"""Constants for task priorities, categories, statuses and dashboard filters."""

from enum import Enum


class Priority(str, Enum):
    """Enumeration of task priorities."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Category(str, Enum):
    """Enumeration of task categories."""

    PERSONAL = "PERSONAL"
    WORK = "WORK"


class TaskStatus(str, Enum):
    """Enumeration of task statuses."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class CategoryFilter(str, Enum):
    """Category selector used by the dashboard sidebar."""

    ALL = "ALL"
    PERSONAL = "PERSONAL"
    WORK = "WORK"


class StatusFilter(str, Enum):
    """Completion selector used by the dashboard overview panel."""

    ALL = "ALL"
    COMPLETED = "COMPLETED"
    REMAINING = "REMAINING"


PRIORITY_RANK = {
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}

# Fixed display order when every category is shown
CATEGORY_GROUP_ORDER = [Category.PERSONAL, Category.WORK]
