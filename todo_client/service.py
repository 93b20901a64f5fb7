"""
Service layer for Todo operations.

Each method calls ``TodoApi``, validates the response against the status the
caller expects, and parses the body into ``Todo`` models. Negative calls
(400/404) return ``None`` so tests can assert on the absence of a record.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

import requests

from todo_client.api import TodoApi
from todo_client.exceptions import ApiException
from todo_client.models import Todo, TodoRequest
from todo_client.validation import ResponseValidator

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class TodoService:
    """Validates and parses responses from the Todo endpoints."""

    def __init__(self, todo_api: TodoApi | None = None):
        self.todo_api = todo_api or TodoApi()

    def _validate_response(
        self,
        response: requests.Response,
        expected_status: HTTPStatus,
        expected_content_type: str | None = None,
    ) -> None:
        try:
            ResponseValidator.validate_status_code(response, expected_status)
            if expected_content_type is not None:
                ResponseValidator.validate_content_type(response, expected_content_type)
        except ApiException as exc:
            logger.error("Response validation failed: %s", exc)
            raise
        logger.debug("Response status %s matches expected %s", response.status_code, int(expected_status))

    def get_todos(
        self,
        offset: int | None = None,
        limit: int | None = None,
        expected_status: HTTPStatus = HTTPStatus.OK,
    ) -> list[Todo]:
        """
        Retrieve a page of Todos.

        Raises:
            ApiException: If the status does not match ``expected_status``.
        """
        response = self.todo_api.get_todos(offset, limit)
        if expected_status == HTTPStatus.OK:
            self._validate_response(response, expected_status, JSON_CONTENT_TYPE)
            return [Todo.from_dict(item) for item in response.json()]
        self._validate_response(response, expected_status)
        return []

    def get_todo_by_id(self, todo_id: int, expected_status: HTTPStatus) -> Todo | None:
        """
        Retrieve a single Todo.

        Returns:
            The Todo on 200, None on 404.

        Raises:
            ApiException: If the status does not match, or is neither 200 nor 404.
        """
        response = self.todo_api.get_todo_by_id(todo_id)
        if expected_status == HTTPStatus.OK:
            self._validate_response(response, expected_status, JSON_CONTENT_TYPE)
            return Todo.from_dict(response.json())
        self._validate_response(response, expected_status)
        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        raise ApiException(
            f"Unexpected status code: {response.status_code}",
            status_code=response.status_code,
            body=response.text,
        )

    def create_todo(self, todo: TodoRequest, expected_status: HTTPStatus) -> Todo | None:
        """
        Create a Todo.

        Returns:
            The created Todo on 201, None on 400.

        Raises:
            ApiException: If the status does not match, or is neither 201 nor 400.
        """
        response = self.todo_api.create_todo(todo)
        self._validate_response(response, expected_status)
        if response.status_code == HTTPStatus.CREATED:
            return Todo.from_dict(response.json())
        if response.status_code == HTTPStatus.BAD_REQUEST:
            return None
        raise ApiException(
            f"Unexpected status code: {response.status_code}",
            status_code=response.status_code,
            body=response.text,
        )

    def update_todo(
        self, todo_id: int, todo: TodoRequest, expected_status: HTTPStatus
    ) -> Todo | None:
        """
        Update a Todo.

        Returns:
            The updated Todo on 200, None on 404 or 400.

        Raises:
            ApiException: If the status does not match, or is not 200/404/400.
        """
        response = self.todo_api.update_todo(todo_id, todo)
        self._validate_response(response, expected_status)
        if response.status_code == HTTPStatus.OK:
            return Todo.from_dict(response.json())
        if response.status_code in (HTTPStatus.NOT_FOUND, HTTPStatus.BAD_REQUEST):
            return None
        raise ApiException(
            f"Unexpected status code: {response.status_code}",
            status_code=response.status_code,
            body=response.text,
        )

    def delete_todo(self, todo_id: int, expected_status: HTTPStatus) -> None:
        """Delete a Todo with authentication."""
        response = self.todo_api.delete_todo(todo_id)
        self._validate_response(response, expected_status)

    def delete_todo_unauthenticated(self, todo_id: int, expected_status: HTTPStatus) -> None:
        """Delete a Todo without authentication."""
        response = self.todo_api.delete_todo_unauthenticated(todo_id)
        self._validate_response(response, expected_status)
