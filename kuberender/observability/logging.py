"""Structured logging configuration using structlog.

Render components log through component-bound loggers; the render action
binds the owner being reconciled into structlog contextvars so engine and
cache lines emitted during a render carry it too.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_FORMATS = ("json", "console")


def _drop_unset(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Remove keys bound to None, e.g. ``stale_generation`` on a first render."""
    return {k: v for k, v in event_dict.items() if v is not None}


def setup_logging(level: str = "info", fmt: str = "json", stream: TextIO | None = None) -> None:
    """Configure structlog output, to stderr unless *stream* is given.

    ``json`` emits one JSON object per line with exceptions flattened into an
    ``exception`` string; ``console`` renders human-readable lines for
    interactive CLI use.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _drop_unset,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
    ]
    if fmt == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
