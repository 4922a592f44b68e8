"""Root-level test configuration for rbac-revoke.

Resets process-wide structlog and tracer state after every test so that a
logger bound to a CliRunner stream never leaks into the next test.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
import structlog

from rbac_revoke.tracing import reset_tracer

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _reset_observability() -> Generator[None, None, None]:
    """Restore structlog defaults and drop cached tracers after each test."""
    yield
    structlog.reset_defaults()
    reset_tracer()
