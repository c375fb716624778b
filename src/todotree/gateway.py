"""HTTP gateway to the Todoist REST API."""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests

from .config import DEFAULT_TIMEOUT, DEFAULT_URL
from .task import Priority, Task, TaskFormatError

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when a request to the task service fails."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class Gateway:
    """Stateless request/response wrapper around the task service."""

    def __init__(
        self,
        token: str,
        url: str = DEFAULT_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        self.url = url if url.endswith("/") else url + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def tasks(self, filter: Optional[str] = None) -> List[Task]:
        """Get all active tasks, optionally restricted by a filter query."""
        params = {"filter": filter} if filter else None
        data = self._request("GET", "tasks", params=params)
        if not isinstance(data, list):
            raise GatewayError("Unexpected response for task list")
        return [self._parse_task(item) for item in data]

    def task(self, task_id: int) -> Task:
        """Get a single active task."""
        return self._parse_task(self._request("GET", f"tasks/{task_id}"))

    def close(self, task_id: int) -> None:
        """Close a task."""
        self._request("POST", f"tasks/{task_id}/close")

    def update(
        self,
        task_id: int,
        *,
        content: Optional[str] = None,
        description: Optional[str] = None,
        due_string: Optional[str] = None,
        priority: Optional[Priority] = None
    ) -> None:
        """
        Update fields of a task. Only the given fields are sent.

        Raises:
            ValueError: If no field was given
        """
        body: Dict[str, Any] = {}
        if content is not None:
            body["content"] = content
        if description is not None:
            body["description"] = description
        if due_string is not None:
            body["due_string"] = due_string
        if priority is not None:
            body["priority"] = int(priority)

        if not body:
            raise ValueError(f"Nothing to update for task {task_id}")

        self._request("POST", f"tasks/{task_id}", json=body)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = urljoin(self.url, path)
        logger.debug("%s %s %s", method, url, kwargs or "")

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise GatewayError(f"{method} {url} failed: {e}") from e

        logger.debug("%s %s -> %s", method, url, response.status_code)
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise GatewayError(
                f"{method} {url} returned {response.status_code}: {response.text.strip()}",
                status=response.status_code
            ) from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(f"{method} {url} returned invalid JSON") from e

    @staticmethod
    def _parse_task(data: Any) -> Task:
        if not isinstance(data, dict):
            raise GatewayError("Unexpected task payload")
        try:
            return Task.from_dict(data)
        except TaskFormatError as e:
            raise GatewayError(str(e)) from e
