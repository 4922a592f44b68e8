"""Test doubles and builders for role binding reconciliation.

Example:
    from testing.fixtures import FakeCluster, make_binding, user

    cluster = FakeCluster([make_binding("admin", user("alice"))])
"""

from __future__ import annotations

from testing.fixtures.rbac import (
    DEFAULT_TEST_NAMESPACE,
    FakeCluster,
    MutationCall,
    group,
    make_binding,
    service_account,
    user,
)

__all__ = [
    "DEFAULT_TEST_NAMESPACE",
    "FakeCluster",
    "MutationCall",
    "group",
    "make_binding",
    "service_account",
    "user",
]
