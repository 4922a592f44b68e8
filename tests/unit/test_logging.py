"""Unit tests for structlog configuration."""

from __future__ import annotations

import json

import pytest
import structlog


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_invalid_level(self) -> None:
        """Test that unknown level names are rejected."""
        from rbac_revoke.logging import configure_logging

        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(log_level="LOUD")

    def test_json_output_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that JSON logs go to stderr with level and timestamp."""
        from rbac_revoke.logging import configure_logging

        configure_logging(log_level="info", json_output=True)
        structlog.get_logger("test").info("reconcile.started", namespace="team-a")

        captured = capsys.readouterr()
        assert captured.out == ""
        event = json.loads(captured.err.strip())
        assert event["event"] == "reconcile.started"
        assert event["namespace"] == "team-a"
        assert event["level"] == "info"
        assert "timestamp" in event
        assert "trace_id" not in event

    def test_level_filtering(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that events below the configured level are dropped."""
        from rbac_revoke.logging import configure_logging

        configure_logging(log_level="WARNING", json_output=True)
        logger = structlog.get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        lines = capsys.readouterr().err.strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["kept"]


class TestAddTraceContext:
    """Tests for the trace context processor."""

    def test_no_active_span(self) -> None:
        """Test that nothing is added outside a span."""
        from rbac_revoke.logging import add_trace_context

        assert add_trace_context(None, "info", {"event": "x"}) == {"event": "x"}

    def test_active_span_ids(self) -> None:
        """Test that trace and span ids are added inside a recording span."""
        from opentelemetry.sdk.trace import TracerProvider

        from rbac_revoke.logging import add_trace_context

        tracer = TracerProvider().get_tracer("test")
        with tracer.start_as_current_span("op") as span:
            event = add_trace_context(None, "info", {"event": "x"})
            ctx = span.get_span_context()

        assert event["trace_id"] == format(ctx.trace_id, "032x")
        assert event["span_id"] == format(ctx.span_id, "016x")
