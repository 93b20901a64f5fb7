"""
API tests for PUT /todos/{id}.

Key SDET Concepts Demonstrated:
- Using a factory fixture for preconditions
- Verifying that a rejected update leaves the record unchanged
"""

from __future__ import annotations

from http import HTTPStatus

import pytest

from todo_client.models import TodoRequest
from todo_client.utils import generate_random_string

pytestmark = pytest.mark.integration


class TestUpdateTodo:
    """Tests for PUT /todos/{id}."""

    def test_update_todo_with_valid_data(self, todo_steps, todo_factory):
        """
        Test that a full update replaces text and completed.

        Arrange: Create a Todo
        Act: PUT new text and completed=True
        Assert: 200 with the same id and the new fields
        """
        # Arrange
        todo = todo_factory()

        # Act
        updated = todo_steps.update_todo(todo.id, TodoRequest(text="xyz", completed=True))

        # Assert
        assert updated is not None
        assert updated.id == todo.id
        assert updated.text == "xyz"
        assert updated.completed is True

    def test_update_non_existing_todo(self, todo_steps):
        """Test that updating an unknown id returns 404."""
        # Arrange
        todo_id = todo_steps.get_non_existing_todo_id()

        # Act
        result = todo_steps.update_todo(
            todo_id,
            TodoRequest(text=generate_random_string(), completed=False),
            expected_status=HTTPStatus.NOT_FOUND,
        )

        # Assert
        assert result is None

    @pytest.mark.parametrize(
        "request_body",
        [
            TodoRequest(text="", completed=True),
            TodoRequest(text=generate_random_string(256), completed=True),
            TodoRequest(),
        ],
        ids=["empty-text", "text-too-long", "missing-fields"],
    )
    def test_update_todo_with_invalid_data(self, todo_steps, todo_factory, request_body):
        """Test that invalid updates are rejected with 400 and change nothing."""
        # Arrange
        todo = todo_factory()

        # Act
        result = todo_steps.update_todo(todo.id, request_body, expected_status=HTTPStatus.BAD_REQUEST)

        # Assert
        assert result is None
        assert todo in todo_steps.get_all_todos()
