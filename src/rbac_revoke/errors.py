"""Exception hierarchy for rbac-revoke.

Exception Hierarchy:
    RevokeError (base)
    ├── BackendError        # Listing role bindings failed
    ├── MutationError       # Updating or deleting a role binding failed
    └── ConfigurationError  # Kubernetes client configuration could not be loaded

Both BackendError and MutationError are fatal to a reconciliation run.
A BackendError is raised before any mutation is attempted; a MutationError
aborts the loop but leaves mutations from earlier bindings committed.

Example:
    >>> from rbac_revoke.errors import MutationError
    >>> raise MutationError("update", "admin", namespace="team-a", reason="Forbidden (HTTP 403)")
    Traceback (most recent call last):
        ...
    MutationError: Failed to update RoleBinding 'admin' in namespace 'team-a': Forbidden (HTTP 403)
"""

from __future__ import annotations


class RevokeError(Exception):
    """Base exception for all rbac-revoke errors.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class BackendError(RevokeError):
    """Raised when role bindings cannot be listed.

    Covers network, authentication and deserialization failures of the
    listing call. No mutation has been attempted when this is raised.

    Attributes:
        namespace: Namespace that was being listed.
        reason: Sanitized description of the underlying failure.

    Example:
        >>> raise BackendError("team-a", reason="Unauthorized (HTTP 401)")
        Traceback (most recent call last):
            ...
        BackendError: Failed to list RoleBindings in namespace 'team-a': Unauthorized (HTTP 401)
    """

    def __init__(self, namespace: str, *, reason: str = "") -> None:
        """Initialize the exception.

        Args:
            namespace: Namespace that was being listed.
            reason: Sanitized description of the underlying failure.
        """
        self.namespace = namespace
        self.reason = reason
        message = f"Failed to list RoleBindings in namespace '{namespace}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MutationError(RevokeError):
    """Raised when a role binding update or delete fails.

    Attributes:
        operation: The failed operation ("update" or "delete").
        binding_name: Name of the RoleBinding being mutated.
        namespace: Namespace of the RoleBinding.
        reason: Sanitized description of the underlying failure.
    """

    def __init__(
        self,
        operation: str,
        binding_name: str,
        *,
        namespace: str,
        reason: str = "",
    ) -> None:
        """Initialize the exception.

        Args:
            operation: The failed operation ("update" or "delete").
            binding_name: Name of the RoleBinding being mutated.
            namespace: Namespace of the RoleBinding.
            reason: Sanitized description of the underlying failure.
        """
        self.operation = operation
        self.binding_name = binding_name
        self.namespace = namespace
        self.reason = reason
        message = (
            f"Failed to {operation} RoleBinding '{binding_name}' in namespace '{namespace}'"
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConfigurationError(RevokeError):
    """Raised when the Kubernetes client configuration cannot be loaded."""

    pass


__all__ = [
    "BackendError",
    "ConfigurationError",
    "MutationError",
    "RevokeError",
]
