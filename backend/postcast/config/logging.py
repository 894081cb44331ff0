"""
Structured Logging Configuration

Uses structlog for structured, JSON-formatted logging.
Following official structlog documentation:
https://www.structlog.org/en/stable/
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from postcast.config.settings import settings


def setup_logging() -> None:
    """
    Configure structured logging for the application.

    Sets up:
    - Structured log formatting (JSON in production, colored console in dev)
    - Standard library logging integration
    """
    is_dev = settings.app_env == "development"

    shared_processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            [
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
                structlog.processors.CallsiteParameter.FUNC_NAME,
            ]
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if is_dev:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True)
        ]
    else:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if settings.debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if settings.debug else logging.INFO,
    )

    # boto3 is chatty at INFO
    for logger_name in ["httpx", "httpcore", "botocore", "boto3", "urllib3", "asyncio"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> Any:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("Feed created", feed_id=feed_id, user_id=user_id)
    """
    return structlog.get_logger(name)


def mask_token(token: str | None) -> str:
    """Mask an RSS token for log output (first 8 and last 4 characters)."""
    if not token:
        return ""
    if len(token) <= 12:
        return "***"
    return f"{token[:8]}***{token[-4:]}"


def mask_webhook_url(webhook_url: str | None) -> str:
    """Hide the secret last path segment of a webhook URL."""
    if not webhook_url:
        return ""
    parts = webhook_url.split("/")
    if len(parts) >= 3:
        parts[-1] = "***"
    return "/".join(parts)
