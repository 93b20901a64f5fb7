"""
Data models for the TODO service.

This module defines the records exchanged with the service over REST
and the enumerations the test suites are parameterized with.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Environment(str, Enum):
    """Enumeration of deployment profiles the suite can target."""

    LOCAL = "local"
    DEV = "dev"
    QA = "qa"
    PROD = "prod"


class MessageType(str, Enum):
    """Enumeration of push message types broadcast by the service."""

    NEW_TODO = "new_todo"
    UPDATE_TODO = "update_todo"
    DELETE_TODO = "delete_todo"


class PageSize(int, Enum):
    """Page sizes exercised by the pagination tests."""

    SIZE_5 = 5
    SIZE_10 = 10
    SIZE_25 = 25
    SIZE_50 = 50


@dataclass(frozen=True)
class Todo:
    """
    A TODO record as returned by the service.

    Attributes:
        id: Server-assigned identifier.
        text: Description of the item (absent on some payloads).
        completed: Completion flag (absent on some payloads).
    """

    id: int
    text: str | None = None
    completed: bool | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Todo":
        """Build a Todo from a decoded JSON object."""
        return cls(
            id=int(data["id"]),
            text=data.get("text"),
            completed=data.get("completed"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the Todo to a dictionary, omitting absent fields."""
        data: dict[str, Any] = {"id": self.id}
        if self.text is not None:
            data["text"] = self.text
        if self.completed is not None:
            data["completed"] = self.completed
        return data


@dataclass(frozen=True)
class TodoRequest:
    """
    Request body for POST /todos and PUT /todos/{id}.

    Fields left as None are omitted from the JSON body, which is how the
    negative tests send a request with a missing field.
    """

    text: str | None = None
    completed: bool | None = None

    def to_json(self) -> dict[str, Any]:
        """Return the JSON body to send."""
        body: dict[str, Any] = {}
        if self.text is not None:
            body["text"] = self.text
        if self.completed is not None:
            body["completed"] = self.completed
        return body
