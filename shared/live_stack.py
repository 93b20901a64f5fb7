"""Shared stack helpers: resolve the TODO service the suites run against."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Generator
from dataclasses import dataclass

import requests

from config import get_config
from shared.fake_todo_service import FakeTodoService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackEndpoints:
    """Where and how to reach the service under test."""

    base_url: str
    ws_url: str
    auth_header: str
    timeout: int
    fake_service: FakeTodoService | None = None

    @property
    def is_fake(self) -> bool:
        return self.fake_service is not None


def is_service_ready(base_url: str, timeout: int = 2) -> bool:
    """Return True when GET /todos responds with 200."""
    try:
        response = requests.get(f"{base_url}/todos", params={"limit": 1}, timeout=timeout)
    except requests.RequestException:
        return False
    return response.status_code == 200


def wait_for_service_healthy(base_url: str, timeout: int = 60, interval: int = 1) -> None:
    """Poll the list endpoint until it answers 200 or the timeout elapses."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if is_service_ready(base_url):
            return
        time.sleep(interval)
    raise RuntimeError(f"TODO service at {base_url} not healthy after {timeout}s")


def todo_stack(base_url_env: str = "TODO_BASE_URL") -> Generator[StackEndpoints, None, None]:
    """
    Yield endpoints of a healthy TODO service.

    Priority:
    1. When ``base_url_env`` is set, use the configured profile (``TODO_ENV``)
       and wait for the service to become healthy.
    2. Otherwise start the in-process fake service and stop it on exit.
    """
    if os.getenv(base_url_env):
        settings = get_config()
        wait_for_service_healthy(settings.TODO_BASE_URL)
        logger.info("Using live TODO service at %s", settings.TODO_BASE_URL)
        yield StackEndpoints(
            base_url=settings.TODO_BASE_URL,
            ws_url=settings.TODO_WS_URL,
            auth_header=settings.TODO_AUTH_HEADER,
            timeout=settings.TODO_TIMEOUT_SECONDS,
        )
        return

    service = FakeTodoService().start()
    try:
        wait_for_service_healthy(service.base_url, timeout=10)
        yield StackEndpoints(
            base_url=service.base_url,
            ws_url=service.ws_url,
            auth_header=service.auth_header,
            timeout=get_config().TODO_TIMEOUT_SECONDS,
            fake_service=service,
        )
    finally:
        service.stop()
