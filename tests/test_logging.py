"""Tests for logging configuration."""

import io
import json
import logging
import os
from collections.abc import Iterator
from unittest.mock import patch

import pytest
import structlog

from smartnsf_auth.logging import LOGGER_NAME, configure_logging, redact_secrets


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Restore logging state after each test."""
    root_logger = logging.getLogger()
    root_handlers = list(root_logger.handlers)
    yield
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True
    assert root_logger.handlers == root_handlers
    structlog.reset_defaults()


def test_redact_secrets() -> None:
    """Test passwords and cookie values are masked."""
    event = {
        "event": "login",
        "username": "hans",
        "password": "secret",
        "cookies": [{"name": "LtpaToken", "value": "ltpa-value", "path": "/"}],
    }

    redacted = redact_secrets(None, "info", event)

    assert redacted["username"] == "hans"
    assert redacted["password"] == "***"
    assert redacted["cookies"] == [{"name": "LtpaToken", "value": "***", "path": "/"}]


def test_redact_secrets_leaves_other_events_alone() -> None:
    """Test events without secrets pass unchanged."""
    event = {"event": "SmartNSF authentication successful", "cookies_count": 2}

    assert redact_secrets(None, "info", dict(event)) == event


def test_configure_logging_writes_redacted_json() -> None:
    """Test strategy log lines are JSON and carry no secrets."""
    stream = io.StringIO()
    configure_logging("info", stream=stream)

    structlog.get_logger("smartnsf_auth.strategy").info(
        "SmartNSF login", username="hans", password="secret"
    )

    entry = json.loads(stream.getvalue().strip())
    assert entry["event"] == "SmartNSF login"
    assert entry["level"] == "info"
    assert entry["logger"] == "smartnsf_auth.strategy"
    assert entry["username"] == "hans"
    assert entry["password"] == "***"
    assert "secret" not in stream.getvalue()


def test_configure_logging_filters_by_level() -> None:
    """Test events below the configured level are dropped."""
    stream = io.StringIO()
    configure_logging("warning", stream=stream)

    structlog.get_logger("smartnsf_auth.strategy").info("hidden")

    assert stream.getvalue() == ""


def test_configure_logging_level_from_environment() -> None:
    """Test LOG_LEVEL controls the package logger level."""
    with patch.dict(os.environ, {"LOG_LEVEL": "debug"}):
        configure_logging()

    package_logger = logging.getLogger(LOGGER_NAME)
    assert package_logger.level == logging.DEBUG
    assert package_logger.propagate is False


def test_configure_logging_invalid_level_defaults_to_info() -> None:
    """Test unknown level names fall back to INFO."""
    configure_logging("verbose")

    assert logging.getLogger(LOGGER_NAME).level == logging.INFO
