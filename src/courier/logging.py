"""Structured logging for Courier.

Two renderings of the same event dicts: JSON lines for production and
a console view for development. Delivery code binds ``delivery_id``,
``endpoint_id`` and ``event_name`` so all lines of one delivery can be
correlated.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog

from courier.exceptions import ConfigurationError

if TYPE_CHECKING:
    from structlog.typing import Processor

# httpx logs every request at INFO; delivery logs its own summary
_QUIET_LOGGERS = ("httpx", "httpcore")

_configured = False


def _build_processors(format: str) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    renderer = format.lower()
    if renderer == "json":
        chain += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    elif renderer == "text":
        chain.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        raise ConfigurationError(f"Unknown log format: {format}")
    return chain


def configure_logging(
    level: str | None = None,
    format: str | None = None,
) -> None:
    """Route structlog through the stdlib root logger.

    Args:
        level: Level name; ``settings.log_level`` when omitted.
        format: ``"json"`` or ``"text"``; ``settings.log_format`` when omitted.

    Raises:
        ConfigurationError: If the format is not recognized.
    """
    global _configured

    from courier.config import settings

    processors = _build_processors(format or settings.log_format)
    numeric_level = logging.getLevelName((level or settings.log_level).upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a bound logger, applying the default configuration once."""
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def bind_context(**kwargs: object) -> None:
    """Attach key/values to every later log line in this task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def bound_context(**kwargs: object) -> Iterator[None]:
    """Bind context for the duration of a ``with`` block.

    Example:
        ```python
        with bound_context(delivery_id=delivery_id, endpoint_id=endpoint.id):
            logger.info("Attempting delivery")
        ```
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield

