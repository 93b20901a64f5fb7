"""
Shared pytest fixtures for the TODO service test suite.

This module contains fixtures that are shared across all test modules.
The service under test is resolved once per session: a live deployment
when ``TODO_BASE_URL`` is set, otherwise the in-process fake service.

Key Concepts Demonstrated:
- Session-scoped stack and push-channel fixtures
- Factory fixtures that track created records for teardown
- Registering push subscriptions before the REST action that triggers them
"""

from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from faker import Faker

from shared.live_stack import StackEndpoints, todo_stack
from todo_client.api import TodoApi
from todo_client.models import Todo, TodoRequest
from todo_client.push import EventWaitCoordinator, PushChannel
from todo_client.service import TodoService
from todo_client.steps import TodoSteps

# Initialize Faker for generating test data
fake = Faker()


# -----------------------------------------------------------------------------
# Stack Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def stack() -> Generator[StackEndpoints, None, None]:
    """Yield the endpoints of a healthy TODO service for the whole session."""
    yield from todo_stack()


@pytest.fixture(scope="session")
def todo_api(stack: StackEndpoints) -> Generator[TodoApi, None, None]:
    """Provide a REST client bound to the session's service."""
    api = TodoApi(
        base_url=stack.base_url,
        auth_header=stack.auth_header,
        timeout=stack.timeout,
    )
    yield api
    api.close()


@pytest.fixture(scope="session")
def todo_steps(todo_api: TodoApi) -> TodoSteps:
    """Provide the high-level steps used by the API test modules."""
    return TodoSteps(TodoService(todo_api))


# -----------------------------------------------------------------------------
# Push Channel Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def push_channel(stack: StackEndpoints) -> Generator[PushChannel, None, None]:
    """
    Provide the session's push channel, not yet opened.

    The ``coordinator`` fixture attaches itself and opens the channel so
    that no message can arrive before a listener exists.
    """
    channel = PushChannel(stack.ws_url, open_timeout=stack.timeout)
    yield channel
    channel.close()


@pytest.fixture(scope="session")
def coordinator(
    stack: StackEndpoints, push_channel: PushChannel
) -> Generator[EventWaitCoordinator, None, None]:
    """
    Provide the event-wait coordinator listening on the open push channel.

    Any wait still pending at the end of the session is cancelled so no
    worker thread is left parked.
    """
    event_coordinator = EventWaitCoordinator().attach(push_channel)
    push_channel.open()
    if stack.fake_service is not None:
        stack.fake_service.push_server.wait_for_clients(1)
    yield event_coordinator
    event_coordinator.cancel_all("test session finished")


# -----------------------------------------------------------------------------
# Test Data Factory Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def todo_request() -> TodoRequest:
    """Provide a valid, not-completed create request with unique text."""
    return TodoRequest(text=fake.pystr(min_chars=10, max_chars=20), completed=False)


@pytest.fixture
def todo_factory(todo_steps: TodoSteps) -> Generator[Callable[..., Todo], None, None]:
    """
    Factory fixture for creating Todos through the API.

    Every created Todo is deleted after the test; Todos the test already
    deleted are skipped.

    Example:
        def test_something(todo_factory):
            todo = todo_factory(text="Buy milk")
            assert todo.id > 0
    """
    created_ids: list[int] = []

    def _create_todo(text: str | None = None, completed: bool = False) -> Todo:
        request = TodoRequest(
            text=text or fake.pystr(min_chars=10, max_chars=20),
            completed=completed,
        )
        todo = todo_steps.create_todo(request)
        assert todo is not None
        created_ids.append(todo.id)
        return todo

    yield _create_todo

    todo_steps.delete_todos_quietly(created_ids)


@pytest.fixture
def cleanup_ids(todo_steps: TodoSteps) -> Generator[list[int], None, None]:
    """Collect ids of Todos a test creates directly; delete them afterwards."""
    ids: list[int] = []
    yield ids
    todo_steps.delete_todos_quietly(ids)
