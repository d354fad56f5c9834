"""Error taxonomy shared by the task and profile operations."""

import functools
import logging
from typing import Optional

from fastapi import status

logger = logging.getLogger(__name__)


class TaskboardError(Exception):
    """Base error carrying the HTTP status and the message shown to the client."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskboardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthorized(TaskboardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(TaskboardError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(TaskboardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalError(TaskboardError):
    """Unexpected store failure. The original error is logged, never exposed."""


def operation_boundary(operation: str):
    """
    Decorator for task and profile operations.

    Taskboard errors pass through untouched; anything else is logged with its
    traceback and surfaced as a generic InternalError.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except TaskboardError:
                raise
            except Exception as e:
                logger.exception(f"{operation} error: {e}")
                raise InternalError() from e
        return wrapper
    return decorator
