"""Configuration models for rbac-revoke.

KubernetesClientConfig controls how the Kubernetes client is loaded.
RevokeOptions is the validated form of a single CLI invocation.

Example:
    >>> from rbac_revoke.config import RevokeOptions
    >>> options = RevokeOptions(namespace="team-a", users=["alice"], dry_run="client")
    >>> options.mode
    <DispatchMode.DRY_RUN: 'dry_run'>
"""

from __future__ import annotations

from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rbac_revoke.dispatcher import DispatchMode
from rbac_revoke.report import OutputFormat
from rbac_revoke.schemas import RemovalRequest

DEFAULT_NAMESPACE = "default"


class KubernetesClientConfig(BaseModel):
    """Configuration for connecting to the Kubernetes API.

    Attributes:
        kubeconfig_path: Path to a kubeconfig file. None tries in-cluster
            configuration first, then the default kubeconfig.
        context: Kubeconfig context to use. None uses the current context.
        request_timeout: Per-request timeout in seconds. None means no timeout.

    Example:
        >>> config = KubernetesClientConfig(context="prod-cluster", request_timeout=30)
        >>> config.kubeconfig_path is None
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kubeconfig_path: str | None = Field(
        default=None,
        description="Path to kubeconfig file",
    )
    context: str | None = Field(
        default=None,
        description="Kubeconfig context name",
    )
    request_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout in seconds",
    )


class RevokeOptions(BaseModel):
    """Validated options for one remove-user / remove-group invocation.

    Attributes:
        namespace: Namespace whose RoleBindings are reconciled.
        users: User names to remove.
        groups: Group names to remove.
        dry_run: Dry-run strategy: none, client or server.
        output: Structured output format. When set, bindings are collected
            and printed instead of being mutated.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    namespace: str = Field(
        default=DEFAULT_NAMESPACE,
        min_length=1,
        max_length=63,
        pattern=r"^[a-z0-9][a-z0-9-]*[a-z0-9]$|^[a-z0-9]$",
        description="Namespace to reconcile",
    )
    users: list[str] = Field(default_factory=list, description="Users to remove")
    groups: list[str] = Field(default_factory=list, description="Groups to remove")
    dry_run: Literal["none", "client", "server"] = Field(
        default="none",
        description="Dry-run strategy",
    )
    output: OutputFormat | None = Field(
        default=None,
        description="Structured output format",
    )

    @model_validator(mode="after")
    def require_targets(self) -> Self:
        """Require at least one user or group.

        Raises:
            ValueError: If both users and groups are empty.
        """
        if not self.users and not self.groups:
            msg = "At least one user or group must be given"
            raise ValueError(msg)
        return self

    @property
    def mode(self) -> DispatchMode:
        """Dispatch mode for the run.

        Structured output takes precedence: bindings are printed, never sent.
        """
        if self.output is not None:
            return DispatchMode.ACCUMULATE
        if self.dry_run == "client":
            return DispatchMode.DRY_RUN
        if self.dry_run == "server":
            return DispatchMode.SERVER_DRY_RUN
        return DispatchMode.LIVE

    def to_request(self) -> RemovalRequest:
        """Build the RemovalRequest for these options."""
        return RemovalRequest(users=frozenset(self.users), groups=frozenset(self.groups))


__all__ = [
    "DEFAULT_NAMESPACE",
    "KubernetesClientConfig",
    "RevokeOptions",
]
