"""
Test-suite configuration module.

This module defines configuration classes for the environments the suite
can target (local, dev, qa, prod). Every value can be overridden by an
environment variable; the active profile is chosen with ``TODO_ENV``.
"""

import os

from todo_client.exceptions import ConfigurationError
from todo_client.models import Environment


def _timeout_from_env(name: str, default: str) -> int:
    """Read an integer number of seconds from the environment."""
    raw_value = os.environ.get(name, default)
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw_value!r}") from exc


class Config:
    """Base configuration with default settings."""

    TODO_BASE_URL: str = os.environ.get("TODO_BASE_URL", "http://localhost:8080")
    TODO_WS_URL: str = os.environ.get("TODO_WS_URL", "ws://localhost:8080/ws")

    # Only DELETE /todos/{id} requires this header.
    TODO_AUTH_HEADER: str = os.environ.get("TODO_AUTH_HEADER", "Basic YWRtaW46YWRtaW4=")

    TODO_TIMEOUT_SECONDS: int = _timeout_from_env("TODO_TIMEOUT_SECONDS", "10")


class LocalConfig(Config):
    """Local environment configuration."""

    ENVIRONMENT: str = Environment.LOCAL.value


class DevConfig(Config):
    """Dev environment configuration."""

    ENVIRONMENT: str = Environment.DEV.value
    TODO_BASE_URL: str = os.environ.get("TODO_BASE_URL", "http://todo.dev.internal:8080")
    TODO_WS_URL: str = os.environ.get("TODO_WS_URL", "ws://todo.dev.internal:8080/ws")


class QaConfig(Config):
    """QA environment configuration."""

    ENVIRONMENT: str = Environment.QA.value
    TODO_BASE_URL: str = os.environ.get("TODO_BASE_URL", "http://todo.qa.internal:8080")
    TODO_WS_URL: str = os.environ.get("TODO_WS_URL", "ws://todo.qa.internal:8080/ws")


class ProdConfig(Config):
    """Production environment configuration."""

    ENVIRONMENT: str = Environment.PROD.value
    TODO_BASE_URL: str = os.environ.get("TODO_BASE_URL", "https://todo.example.com")
    TODO_WS_URL: str = os.environ.get("TODO_WS_URL", "wss://todo.example.com/ws")
    # Slower network path to production.
    TODO_TIMEOUT_SECONDS: int = _timeout_from_env("TODO_TIMEOUT_SECONDS", "30")


# Configuration mapping for easy access
config = {
    Environment.LOCAL.value: LocalConfig,
    Environment.DEV.value: DevConfig,
    Environment.QA.value: QaConfig,
    Environment.PROD.value: ProdConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (local, dev, qa, prod).
             If None, uses the TODO_ENV environment variable.

    Returns:
        Configuration class for the specified environment.

    Raises:
        ConfigurationError: If the environment name is not a known profile.
    """
    if env is None:
        env = os.environ.get("TODO_ENV", Environment.LOCAL.value)
    try:
        return config[env.lower()]
    except KeyError as exc:
        raise ConfigurationError(
            f"Unknown environment {env!r}. Expected one of: {sorted(config)}"
        ) from exc
