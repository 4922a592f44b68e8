"""Shared testing infrastructure for rbac-revoke.

Components:
    fixtures: In-memory RoleBinding backend and subject/binding builders

Usage:
    from testing.fixtures.rbac import FakeCluster, make_binding, user

    cluster = FakeCluster([make_binding("edit", user("alice"))])
"""

from __future__ import annotations

__version__ = "0.1.0"
