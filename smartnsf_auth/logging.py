"""Structured logging for the smartnsf_auth package.

Host applications call ``configure_logging()`` to get JSON log lines from
the strategy. Only the ``smartnsf_auth`` logger namespace gets a handler;
the root logger is left to the application.
"""

import logging
import os
from collections.abc import MutableMapping
from typing import Any, TextIO

import structlog

LOGGER_NAME = "smartnsf_auth"
REDACTED = "***"

# Keys whose values must never reach a log line
SECRET_KEYS = frozenset({"password", "ltpa_token", "authorization"})


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask passwords and session cookie values in an event."""
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED

    cookies = event_dict.get("cookies")
    if isinstance(cookies, list):
        event_dict["cookies"] = [
            {**cookie, "value": REDACTED} if isinstance(cookie, dict) else REDACTED
            for cookie in cookies
        ]

    return event_dict


def configure_logging(level: str | None = None, stream: TextIO | None = None) -> None:
    """Configure JSON logging for the smartnsf_auth loggers.

    Args:
        level: Log level name, defaults to the LOG_LEVEL environment variable
        stream: Output stream, defaults to stderr
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
        ],
    )
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
    package_logger.propagate = False

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
