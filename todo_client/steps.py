"""
High-level steps used by the test suites.

``TodoSteps`` wraps ``TodoService`` with the status code each operation is
expected to return on the happy path, so a test only spells out the
expectation when it is exercising a negative case.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from todo_client.exceptions import ApiException
from todo_client.models import PageSize, Todo, TodoRequest
from todo_client.service import TodoService

logger = logging.getLogger(__name__)


class TodoSteps:
    """Test-facing operations on the Todo endpoints."""

    def __init__(self, todo_service: TodoService | None = None):
        self.todo_service = todo_service or TodoService()

    def get_todos(
        self,
        offset: int | None = None,
        limit: int | None = None,
        expected_status: HTTPStatus = HTTPStatus.OK,
    ) -> list[Todo]:
        """Retrieve a page of Todos, expecting 200 by default."""
        return self.todo_service.get_todos(offset, limit, expected_status)

    def get_todo_by_id(
        self, todo_id: int, expected_status: HTTPStatus = HTTPStatus.OK
    ) -> Todo | None:
        """Retrieve one Todo, expecting 200 by default."""
        return self.todo_service.get_todo_by_id(todo_id, expected_status)

    def create_todo(
        self, todo: TodoRequest, expected_status: HTTPStatus = HTTPStatus.CREATED
    ) -> Todo | None:
        """Create a Todo, expecting 201 by default."""
        return self.todo_service.create_todo(todo, expected_status)

    def update_todo(
        self,
        todo_id: int,
        todo: TodoRequest,
        expected_status: HTTPStatus = HTTPStatus.OK,
    ) -> Todo | None:
        """Update a Todo, expecting 200 by default."""
        return self.todo_service.update_todo(todo_id, todo, expected_status)

    def delete_todo(
        self, todo_id: int, expected_status: HTTPStatus = HTTPStatus.NO_CONTENT
    ) -> None:
        """Delete a Todo, expecting 204 by default."""
        self.todo_service.delete_todo(todo_id, expected_status)

    def delete_todo_unauthenticated(
        self, todo_id: int, expected_status: HTTPStatus = HTTPStatus.UNAUTHORIZED
    ) -> None:
        """Delete a Todo without credentials, expecting 401 by default."""
        self.todo_service.delete_todo_unauthenticated(todo_id, expected_status)

    def get_non_existing_todo_id(self) -> int:
        """
        Return an ID that no current Todo uses.

        Computed as the highest existing ID plus one, or 1 when the
        service holds no records.

        Raises:
            ApiException: If listing the existing Todos fails.
        """
        return max((todo.id for todo in self.get_all_todos()), default=0) + 1

    def get_all_todos(self, batch_size: int = PageSize.SIZE_50.value) -> list[Todo]:
        """
        Retrieve every Todo by paging through the endpoint.

        Pages are requested with ``limit=batch_size`` and an increasing
        offset until a short or empty page is returned.

        Raises:
            ApiException: If any page request fails.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be positive")

        all_todos: list[Todo] = []
        offset = 0
        while True:
            batch = self.get_todos(offset=offset, limit=batch_size)
            all_todos.extend(batch)
            if len(batch) < batch_size:
                break
            offset += batch_size

        logger.info("Fetched %d todos in pages of %d", len(all_todos), batch_size)
        return all_todos

    def delete_todos_quietly(self, todo_ids: list[int]) -> None:
        """
        Delete the given Todos during teardown.

        IDs that are already gone (404) are skipped; any other failure is
        logged and the remaining IDs are still attempted.
        """
        for todo_id in todo_ids:
            try:
                self.delete_todo(todo_id)
            except ApiException as exc:
                if exc.status_code != HTTPStatus.NOT_FOUND:
                    logger.warning("Cleanup of todo %s failed: %s", todo_id, exc)
