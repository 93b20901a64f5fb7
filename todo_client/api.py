"""
HTTP client for the TODO REST endpoints.

``TodoApi`` is a thin wrapper around a ``requests.Session``: it builds the
request for each endpoint and returns the raw ``requests.Response`` without
judging it. Status validation and parsing live in ``TodoService``.

Endpoints:
    GET    /todos?offset=&limit=  - List todos with optional pagination
    GET    /todos/<id>            - Get a single todo
    POST   /todos                 - Create a todo
    PUT    /todos/<id>            - Update a todo
    DELETE /todos/<id>            - Delete a todo (requires Authorization)
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from config import get_config
from todo_client.models import TodoRequest

logger = logging.getLogger(__name__)


class TodoApi:
    """API client for interacting with the Todo endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        auth_header: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        settings = get_config()
        self.base_url = (base_url or settings.TODO_BASE_URL).rstrip("/")
        self.auth_header = auth_header if auth_header is not None else settings.TODO_AUTH_HEADER
        self.timeout = timeout if timeout is not None else settings.TODO_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s body=%s", method, url, params, json_body)
        response = self.session.request(
            method=method,
            url=url,
            params=params,
            json=json_body,
            headers=headers,
            timeout=self.timeout,
        )
        logger.debug("%s %s -> %s %s", method, url, response.status_code, response.text)
        return response

    def get_todos(self, offset: int | None = None, limit: int | None = None) -> requests.Response:
        """
        Retrieve a list of Todos with optional pagination parameters.

        Args:
            offset: Number of leading records to skip. Omitted when None.
            limit: Maximum number of records to return. Omitted when None.

        Returns:
            The response from GET /todos.
        """
        params: dict[str, Any] = {}
        if offset is not None:
            params["offset"] = offset
        if limit is not None:
            params["limit"] = limit
        return self._request("GET", "/todos", params=params)

    def get_todo_by_id(self, todo_id: int) -> requests.Response:
        """Retrieve a specific Todo by its ID."""
        return self._request("GET", f"/todos/{todo_id}")

    def create_todo(self, todo: TodoRequest) -> requests.Response:
        """Create a new Todo from the given request body."""
        return self._request("POST", "/todos", json_body=todo.to_json())

    def update_todo(self, todo_id: int, todo: TodoRequest) -> requests.Response:
        """Replace the Todo identified by ``todo_id`` with the given request body."""
        return self._request("PUT", f"/todos/{todo_id}", json_body=todo.to_json())

    def delete_todo(self, todo_id: int) -> requests.Response:
        """Delete a Todo, sending the configured Authorization header."""
        return self._request(
            "DELETE",
            f"/todos/{todo_id}",
            headers={"Authorization": self.auth_header},
        )

    def delete_todo_unauthenticated(self, todo_id: int) -> requests.Response:
        """Delete a Todo without the Authorization header (negative testing)."""
        return self._request("DELETE", f"/todos/{todo_id}")

    def close(self) -> None:
        """Release the pooled HTTP connections."""
        self.session.close()
