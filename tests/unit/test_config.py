"""Unit tests for configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError


class TestKubernetesClientConfig:
    """Tests for KubernetesClientConfig."""

    def test_defaults(self) -> None:
        """Test that every field is optional."""
        from rbac_revoke.config import KubernetesClientConfig

        config = KubernetesClientConfig()

        assert config.kubeconfig_path is None
        assert config.context is None
        assert config.request_timeout is None

    def test_timeout_must_be_positive(self) -> None:
        """Test that a zero timeout is rejected."""
        from rbac_revoke.config import KubernetesClientConfig

        with pytest.raises(ValidationError):
            KubernetesClientConfig(request_timeout=0)

    def test_unknown_field_rejected(self) -> None:
        """Test that extra fields are forbidden."""
        from rbac_revoke.config import KubernetesClientConfig

        with pytest.raises(ValidationError):
            KubernetesClientConfig(cluster="prod")  # type: ignore[call-arg]


class TestRevokeOptions:
    """Tests for RevokeOptions validation and mode selection."""

    def test_requires_a_target(self) -> None:
        """Test that options with no users and no groups are rejected."""
        from rbac_revoke.config import RevokeOptions

        with pytest.raises(ValidationError, match="At least one user or group"):
            RevokeOptions(namespace="team-a")

    @pytest.mark.parametrize("namespace", ["Team-A", "-team", "team_a", ""])
    def test_invalid_namespace(self, namespace: str) -> None:
        """Test that namespaces must be DNS labels."""
        from rbac_revoke.config import RevokeOptions

        with pytest.raises(ValidationError):
            RevokeOptions(namespace=namespace, users=["alice"])

    def test_invalid_dry_run(self) -> None:
        """Test that unknown dry-run strategies are rejected."""
        from rbac_revoke.config import RevokeOptions

        with pytest.raises(ValidationError):
            RevokeOptions(users=["alice"], dry_run="maybe")  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        ("dry_run", "output", "expected"),
        [
            ("none", None, "live"),
            ("client", None, "dry_run"),
            ("server", None, "server_dry_run"),
            ("none", "yaml", "accumulate"),
            ("client", "json", "accumulate"),
        ],
    )
    def test_mode(self, dry_run: str, output: str | None, expected: str) -> None:
        """Test mode selection, with structured output taking precedence."""
        from rbac_revoke.config import RevokeOptions

        options = RevokeOptions(users=["alice"], dry_run=dry_run, output=output)  # type: ignore[arg-type]

        assert options.mode.value == expected

    def test_to_request(self) -> None:
        """Test conversion to a RemovalRequest."""
        from rbac_revoke.config import RevokeOptions

        request = RevokeOptions(users=["alice", "alice"], groups=["devs"]).to_request()

        assert request.users == frozenset({"alice"})
        assert request.groups == frozenset({"devs"})

    def test_default_namespace(self) -> None:
        """Test that the namespace defaults to 'default'."""
        from rbac_revoke.config import RevokeOptions

        assert RevokeOptions(groups=["devs"]).namespace == "default"
