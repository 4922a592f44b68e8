"""rbac-revoke: remove users and groups from Kubernetes RoleBindings.

The reconciliation engine lists every RoleBinding in a namespace, removes the
requested users and groups, updates bindings that keep subjects, deletes
bindings left empty, and reports what changed.

Example:
    >>> from rbac_revoke import MutationDispatcher, RemovalRequest, reconcile
    >>> report = reconcile(
    ...     "team-a",
    ...     RemovalRequest(users=["alice"]),
    ...     lister=backend,
    ...     dispatcher=MutationDispatcher(backend),
    ... )
"""

from __future__ import annotations

from typing import Any

__version__ = "0.1.0"
__all__ = [
    "BindingAction",
    "DispatchMode",
    "MutationDispatcher",
    "ReconciliationReport",
    "ReconciliationResult",
    "RemovalRequest",
    "RoleBinding",
    "RoleRef",
    "Subject",
    "SubjectCategory",
    "plan_binding",
    "reconcile",
]

_LAZY_IMPORTS: dict[str, str] = {
    "BindingAction": "rbac_revoke.dispatcher",
    "DispatchMode": "rbac_revoke.dispatcher",
    "MutationDispatcher": "rbac_revoke.dispatcher",
    "ReconciliationReport": "rbac_revoke.planner",
    "ReconciliationResult": "rbac_revoke.planner",
    "plan_binding": "rbac_revoke.planner",
    "reconcile": "rbac_revoke.planner",
    "RemovalRequest": "rbac_revoke.schemas",
    "RoleBinding": "rbac_revoke.schemas",
    "RoleRef": "rbac_revoke.schemas",
    "Subject": "rbac_revoke.schemas",
    "SubjectCategory": "rbac_revoke.schemas",
}


# Lazy imports to avoid circular dependencies and improve startup time
def __getattr__(name: str) -> Any:
    """Lazy import of package components."""
    if name in _LAZY_IMPORTS:
        import importlib

        module = importlib.import_module(_LAZY_IMPORTS[name])
        return getattr(module, name)
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
