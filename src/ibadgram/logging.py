"""Logging configuration for ibadgram."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import structlog


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure stdlib logging and route structlog through it as JSON."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@contextmanager
def request_context(**values: object) -> Iterator[None]:
    """Attach values (operation, user id) to every log line inside the block."""

    with structlog.contextvars.bound_contextvars(**values):
        yield
