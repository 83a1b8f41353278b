"""Logging configuration for the storefront.

Standard library handlers carry the output; structlog renders it as JSON in
production and staging, and as a readable console stream everywhere else.

Checkout code runs inside ``checkout_context`` so that every record written
while a payment session is being opened or reconciled carries the session id
and the shopper identity. Contact emails are masked before rendering.
"""

import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import structlog

EMAIL_FIELDS = ("email", "contact_email", "customer_email")
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """Get log level based on environment."""
    level_map = {
        "production": "INFO",
        "staging": "INFO",
        "development": "DEBUG",
        "test": "WARNING",
    }

    return os.getenv("LOG_LEVEL", level_map.get(_environment(), "INFO"))


def _rotating_handler(path: Path, level: str | int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging() -> None:
    log_level = get_log_level()

    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [
        console_handler,
        _rotating_handler(log_dir / "storefront.log", log_level),
        _rotating_handler(log_dir / "storefront_error.log", logging.ERROR),
    ]

    for noisy in ("protean", "stripe", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def mask_email(address: str) -> str:
    """``jane.doe@example.com`` becomes ``j***@example.com``."""
    local, sep, domain = address.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


def mask_contact_emails(_logger, _method_name, event_dict: dict) -> dict:
    """structlog processor: shopper emails never reach the log output in full."""
    for field in EMAIL_FIELDS:
        value = event_dict.get(field)
        if isinstance(value, str) and value:
            event_dict[field] = mask_email(value)
    return event_dict


def setup_structlog() -> None:
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.contextvars.merge_contextvars,
        mask_contact_emails,
    ]

    if _environment() in ["production", "staging"]:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging() -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging()
    setup_structlog()


def add_context(**kwargs: Any) -> None:
    """Bind context variables included in every later log record of this request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def checkout_context(**kwargs: Any) -> Iterator[None]:
    """Bind checkout details (session id, identity, event id) for the duration of the block.

    Values that are ``None`` are skipped. The previous bindings are restored on exit.
    """
    with structlog.contextvars.bound_contextvars(**{key: value for key, value in kwargs.items() if value is not None}):
        yield
