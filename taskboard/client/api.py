"""Async HTTP client for the Taskboard API."""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx
from pydantic.alias_generators import to_camel

from taskboard.core.config import settings
from taskboard.schemas.taskSchema import TaskResponse
from taskboard.schemas.userSchema import ProfileResponse

logger = logging.getLogger(__name__)


class TaskApiError(Exception):
    """Non-2xx response carrying the server's error message. Transport failures use status 0."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


def _to_wire(fields: Dict[str, Any]) -> Dict[str, Any]:
    payload = {}
    for name, value in fields.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat()
        payload[to_camel(name)] = value
    return payload


class TaskApiClient:
    """
    Thin wrapper over httpx.AsyncClient sending the auth cookie with every call.

    Usage:
        async with TaskApiClient("http://localhost:8000", token) as api:
            tasks = await api.list_tasks()
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        cookies = {settings.AUTH_COOKIE_NAME: token} if token else None
        self.prefix = settings.API_PREFIX
        self._client = httpx.AsyncClient(
            base_url=base_url,
            cookies=cookies,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "TaskApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, f"{self.prefix}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Taskboard API unreachable: {method} {path} -> {e!r}")
            raise TaskApiError(0, "Network error") from e
        if response.is_error:
            try:
                message = response.json().get("error") or response.reason_phrase
            except ValueError:
                message = response.reason_phrase
            logger.warning(f"Taskboard API error: {method} {path} -> {response.status_code} {message}")
            raise TaskApiError(response.status_code, message)
        return response.json()

    async def list_tasks(self) -> List[TaskResponse]:
        data = await self._request("GET", "/tasks")
        return [TaskResponse.model_validate(task) for task in data["tasks"]]

    async def create_task(self, **fields: Any) -> TaskResponse:
        data = await self._request("POST", "/tasks", json=_to_wire(fields))
        return TaskResponse.model_validate(data["task"])

    async def update_task(self, task_id: str, **fields: Any) -> TaskResponse:
        """Only the given fields are sent; pass due_date=None to clear it."""
        payload = {"id": task_id, **_to_wire(fields)}
        data = await self._request("PATCH", "/tasks", json=payload)
        return TaskResponse.model_validate(data["task"])

    async def delete_task(self, task_id: str) -> str:
        data = await self._request("DELETE", "/tasks", params={"id": task_id})
        return data["message"]

    async def get_profile(self) -> ProfileResponse:
        data = await self._request("GET", "/profile")
        return ProfileResponse.model_validate(data["user"])

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")
        self._client.cookies.clear()
