"""Async HTTP client for the task tracker REST API."""

import logging
from typing import Any, Dict, List, Optional

import aiohttp

from .deps import get_settings
from .models.task import Task

logger = logging.getLogger(__name__)


class TaskAPIError(Exception):
    """Raised when the task API answers with an error status."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"HTTP {status}: {message}")


class TaskAPIClient:
    """Client for the ``/api/tasks`` endpoints.

    Usable as an async context manager, which owns the underlying
    ``aiohttp.ClientSession``. A session may also be passed in.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Server root, e.g. ``http://localhost:3001``; defaults to
                the ``api_base_url`` setting
            session: Existing session to reuse; one is created when omitted
        """
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "TaskAPIClient":
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _url(self, path: str = "") -> str:
        return f"{self.base_url}/api/tasks{path}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    @staticmethod
    async def _raise_for_error(response: aiohttp.ClientResponse, action: str) -> None:
        if response.status < 400:
            return
        try:
            error_data = await response.json()
            message = error_data.get("error", "Unknown error")
        except (aiohttp.ContentTypeError, ValueError):
            message = await response.text()
        logger.error(f"Failed to {action}: HTTP {response.status} {message}")
        raise TaskAPIError(response.status, message)

    async def get_tasks(self) -> List[Task]:
        """Fetch all tasks, newest first."""
        async with self._get_session().get(self._url()) as response:
            await self._raise_for_error(response, "fetch tasks")
            data = await response.json()
        return [Task.model_validate(item) for item in data]

    async def create_task(self, title: str, **fields: Any) -> Task:
        """Create a task.

        Args:
            title: Task title
            **fields: Optional ``description``, ``priority`` and ``category``

        Returns:
            The created task
        """
        payload: Dict[str, Any] = {"title": title, **fields}
        async with self._get_session().post(self._url(), json=payload) as response:
            await self._raise_for_error(response, "create task")
            data = await response.json()
        return Task.model_validate(data)

    async def update_task(self, task_id: str, **fields: Any) -> Task:
        """Update the given fields of a task.

        Raises:
            TaskAPIError: With status 404 if the task does not exist
        """
        async with self._get_session().put(self._url(f"/{task_id}"), json=fields) as response:
            await self._raise_for_error(response, "update task")
            data = await response.json()
        return Task.model_validate(data)

    async def delete_task(self, task_id: str) -> None:
        """Delete a task.

        Raises:
            TaskAPIError: With status 404 if the task does not exist
        """
        async with self._get_session().delete(self._url(f"/{task_id}")) as response:
            await self._raise_for_error(response, "delete task")
