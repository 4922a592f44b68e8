"""Unit test fixtures.

Unit tests run without a cluster: the Kubernetes API is replaced either by
FakeCluster or by a MagicMock standing in for RbacAuthorizationV1Api.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from testing.fixtures.rbac import group, make_binding, service_account, user

if TYPE_CHECKING:
    from rbac_revoke.schemas import RoleBinding


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner.

    Returns:
        CliRunner instance for testing Click commands.
    """
    return CliRunner()


@pytest.fixture
def sample_bindings() -> list[RoleBinding]:
    """Bindings covering update, delete and untouched outcomes for alice.

    - admin: alice only, deleted when alice is removed
    - edit: alice, bob and a service account, updated
    - view: bob and the devs group, untouched by a user-only request
    """
    return [
        make_binding("admin", user("alice"), role="admin"),
        make_binding(
            "edit",
            user("alice"),
            user("bob"),
            service_account("team-a", "deployer"),
            role="edit",
        ),
        make_binding("view", user("bob"), group("devs"), role="view"),
    ]


