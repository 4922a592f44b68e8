"""Role binding backends.

RoleBindingLister and MutationSink define what the reconciliation engine
needs from a cluster; K8sRoleBindingBackend implements both against the
Kubernetes API.
"""

from __future__ import annotations

from typing import Any

from rbac_revoke.backends.base import MutationSink, RoleBindingLister

__all__ = [
    "K8sRoleBindingBackend",
    "MutationSink",
    "RoleBindingLister",
]


# Lazy import keeps the kubernetes client off the import path of the engine
def __getattr__(name: str) -> Any:
    """Lazy import of the Kubernetes backend."""
    if name == "K8sRoleBindingBackend":
        from rbac_revoke.backends.kubernetes import K8sRoleBindingBackend

        return K8sRoleBindingBackend
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
