"""OpenTelemetry tracing helpers for role binding reconciliation.

Reconciliation runs and individual RoleBinding mutations emit spans. Spans
carry operation metadata only (namespace, binding name, counts); error
messages are sanitized before they are recorded.

Example:
    >>> from rbac_revoke.tracing import get_tracer, security_span
    >>> tracer = get_tracer()
    >>> with security_span(tracer, "reconcile_namespace", namespace="team-a") as span:
    ...     span.set_attribute("security.resource_count", 3)
"""

from __future__ import annotations

import re
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Iterator

TRACER_NAME = "rbac_revoke"

ATTR_OPERATION = "security.operation"
ATTR_NAMESPACE = "security.namespace"
ATTR_RESOURCE_NAME = "security.resource_name"
ATTR_RESOURCE_COUNT = "security.resource_count"

_SENSITIVE_KEY_PATTERN = re.compile(
    r"(password|token|api_key|authorization|credential|client-key-data)"
    r"\s*[=:]\s*\S+",
    re.IGNORECASE,
)
_URL_CREDENTIAL_PATTERN = re.compile(r"://[^@/\s]+:[^@/\s]+@")

_tracers: dict[str, trace.Tracer] = {}
_tracer_init_failed = False
_lock = threading.Lock()


def sanitize_error_message(msg: str, max_length: int = 500) -> str:
    """Redact credentials from an error message and truncate it.

    Args:
        msg: Raw error message.
        max_length: Maximum length of the returned message.

    Returns:
        Sanitized message.

    Example:
        >>> sanitize_error_message("Failed: token=abc123 at host")
        'Failed: token=<REDACTED> at host'
    """
    sanitized = _URL_CREDENTIAL_PATTERN.sub("://<REDACTED>@", msg)
    sanitized = _SENSITIVE_KEY_PATTERN.sub(
        lambda m: m.group(0).split("=", 1)[0] + "=<REDACTED>"
        if "=" in m.group(0)
        else m.group(0).split(":", 1)[0] + ": <REDACTED>",
        sanitized,
    )
    return sanitized[:max_length]


def get_tracer(name: str = TRACER_NAME) -> trace.Tracer:
    """Get or create a cached tracer.

    Falls back to a NoOpTracer if OpenTelemetry cannot provide one, so
    tracing never breaks a reconciliation.

    Args:
        name: Instrumenting module name.

    Returns:
        OpenTelemetry Tracer instance.
    """
    global _tracer_init_failed

    if name in _tracers:
        return _tracers[name]
    if _tracer_init_failed:
        return trace.NoOpTracer()

    with _lock:
        if name in _tracers:
            return _tracers[name]
        try:
            tracer = trace.get_tracer(name)
        except Exception:
            _tracer_init_failed = True
            return trace.NoOpTracer()
        _tracers[name] = tracer
        return tracer


def reset_tracer() -> None:
    """Clear cached tracers (test isolation)."""
    global _tracer_init_failed

    with _lock:
        _tracers.clear()
        _tracer_init_failed = False


@contextmanager
def security_span(
    tracer: trace.Tracer,
    operation: str,
    *,
    namespace: str | None = None,
    resource_name: str | None = None,
    resource_count: int | None = None,
    extra_attributes: dict[str, Any] | None = None,
) -> Iterator[trace.Span]:
    """Create a span for an RBAC operation.

    Args:
        tracer: OpenTelemetry tracer instance.
        operation: Operation name (e.g. "reconcile_namespace").
        namespace: Namespace being operated on.
        resource_name: RoleBinding name, for per-binding operations.
        resource_count: Number of resources involved.
        extra_attributes: Additional span attributes.

    Yields:
        The active span.
    """
    attributes: dict[str, Any] = {ATTR_OPERATION: operation}
    if namespace is not None:
        attributes[ATTR_NAMESPACE] = namespace
    if resource_name is not None:
        attributes[ATTR_RESOURCE_NAME] = resource_name
    if resource_count is not None:
        attributes[ATTR_RESOURCE_COUNT] = resource_count
    if extra_attributes:
        attributes.update(extra_attributes)

    # Exceptions are recorded below in sanitized form only.
    with tracer.start_as_current_span(
        f"security.{operation}",
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
            span.set_status(Status(StatusCode.OK))
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, type(e).__name__))
            span.set_attribute("exception.type", type(e).__name__)
            span.set_attribute("exception.message", sanitize_error_message(str(e)))
            raise


__all__ = [
    "get_tracer",
    "reset_tracer",
    "sanitize_error_message",
    "security_span",
]
