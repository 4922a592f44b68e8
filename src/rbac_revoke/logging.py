"""structlog configuration with OpenTelemetry trace correlation.

Logs emitted inside an active span carry its trace_id and span_id. Logs are
written to stderr so that report lines and structured output on stdout stay
machine-readable.

Example:
    >>> from rbac_revoke.logging import configure_logging
    >>> configure_logging(log_level="DEBUG", json_output=False)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import INVALID_SPAN_ID, INVALID_TRACE_ID

EventDict = MutableMapping[str, Any]

_VALID_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def add_trace_context(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Add trace context to a structlog event dictionary.

    Args:
        logger: The logger instance (unused, required by the processor API).
        method_name: The log method name (unused).
        event_dict: The event dictionary to enrich.

    Returns:
        The event dictionary, with trace_id and span_id when a span is active.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.trace_id != INVALID_TRACE_ID and ctx.span_id != INVALID_SPAN_ID:
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def configure_logging(log_level: str = "WARNING", json_output: bool = False) -> None:
    """Configure structlog for the CLI.

    Args:
        log_level: Minimum level to emit (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Render JSON lines instead of console output.

    Raises:
        ValueError: If log_level is not a known level name.
    """
    level_name = log_level.upper()
    if level_name not in _VALID_LEVELS:
        msg = f"Invalid log level '{log_level}'. Expected one of: {sorted(_VALID_LEVELS)}"
        raise ValueError(msg)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_trace_context,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level_name)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


__all__ = [
    "add_trace_context",
    "configure_logging",
]
