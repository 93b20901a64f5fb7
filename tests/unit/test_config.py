"""
Unit tests for environment-profile configuration.

Key SDET Concepts Demonstrated:
- Using monkeypatch to control environment variables
- Reloading a module whose values are read at import time
"""

from __future__ import annotations

import importlib

import pytest

import config
from todo_client.exceptions import ConfigurationError

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("env_name", "expected_class"),
    [
        ("local", config.LocalConfig),
        ("dev", config.DevConfig),
        ("qa", config.QaConfig),
        ("prod", config.ProdConfig),
        ("QA", config.QaConfig),
    ],
)
def test_get_config_returns_profile_class(env_name, expected_class):
    """Test that each profile name selects its configuration class."""
    assert config.get_config(env_name) is expected_class


def test_get_config_defaults_to_todo_env(monkeypatch):
    """Test that TODO_ENV is consulted when no name is passed."""
    monkeypatch.setenv("TODO_ENV", "dev")

    assert config.get_config() is config.DevConfig


def test_get_config_defaults_to_local_when_unset(monkeypatch):
    """Test that an unset TODO_ENV falls back to the local profile."""
    monkeypatch.delenv("TODO_ENV", raising=False)

    assert config.get_config() is config.LocalConfig


def test_get_config_rejects_unknown_profile():
    """Test that an unknown profile name is a configuration error."""
    with pytest.raises(ConfigurationError, match="staging"):
        config.get_config("staging")


def test_profiles_expose_required_settings():
    """Test that every profile carries the four settings the suite consumes."""
    for profile in config.config.values():
        assert profile.TODO_BASE_URL.startswith("http")
        assert profile.TODO_WS_URL.startswith("ws")
        assert profile.TODO_AUTH_HEADER
        assert profile.TODO_TIMEOUT_SECONDS > 0


class TestEnvironmentOverrides:
    """Values read from the environment at import time."""

    @pytest.fixture(autouse=True)
    def restore_config(self):
        """Reload the module again after each test so overrides do not leak."""
        yield
        importlib.reload(config)

    def test_environment_variables_override_defaults(self, monkeypatch):
        """Test that TODO_* variables replace the profile defaults."""
        monkeypatch.setenv("TODO_BASE_URL", "http://todo.test:9000")
        monkeypatch.setenv("TODO_WS_URL", "ws://todo.test:9000/ws")
        monkeypatch.setenv("TODO_AUTH_HEADER", "Basic dGVzdDp0ZXN0")
        monkeypatch.setenv("TODO_TIMEOUT_SECONDS", "3")

        reloaded = importlib.reload(config)
        settings = reloaded.get_config("local")

        assert settings.TODO_BASE_URL == "http://todo.test:9000"
        assert settings.TODO_WS_URL == "ws://todo.test:9000/ws"
        assert settings.TODO_AUTH_HEADER == "Basic dGVzdDp0ZXN0"
        assert settings.TODO_TIMEOUT_SECONDS == 3

    def test_non_integer_timeout_is_rejected(self, monkeypatch):
        """Test that a malformed timeout fails loudly when configuration loads."""
        monkeypatch.setenv("TODO_TIMEOUT_SECONDS", "soon")

        with pytest.raises(ConfigurationError, match="TODO_TIMEOUT_SECONDS"):
            importlib.reload(config)
