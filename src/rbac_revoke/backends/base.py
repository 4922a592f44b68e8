"""Collaborator interfaces consumed by the reconciliation engine.

The engine only needs two capabilities from the cluster: listing the
RoleBindings of a namespace, and updating or deleting a single RoleBinding.
They are separate ABCs so tests can substitute in-memory fakes for either.

Example:
    >>> from rbac_revoke.backends.base import RoleBindingLister
    >>> class StaticLister(RoleBindingLister):
    ...     def __init__(self, bindings):
    ...         self._bindings = bindings
    ...     def list_role_bindings(self, namespace):
    ...         return [b for b in self._bindings if b.namespace == namespace]
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rbac_revoke.schemas import RoleBinding


class RoleBindingLister(ABC):
    """Source of the RoleBindings in a namespace."""

    @abstractmethod
    def list_role_bindings(self, namespace: str) -> list[RoleBinding]:
        """List every RoleBinding in a namespace.

        Args:
            namespace: Namespace to list.

        Returns:
            The namespace's RoleBindings, in backend order.

        Raises:
            BackendError: If the bindings cannot be listed.
        """
        ...


class MutationSink(ABC):
    """Target that commits RoleBinding updates and deletions.

    Each call is independent; there is no transaction spanning bindings.
    """

    @abstractmethod
    def update_role_binding(self, binding: RoleBinding, *, dry_run: bool = False) -> None:
        """Replace a RoleBinding with the given state.

        Args:
            binding: Binding carrying its filtered subject list.
            dry_run: Ask the backend to validate without persisting.

        Raises:
            MutationError: If the update fails.
        """
        ...

    @abstractmethod
    def delete_role_binding(self, namespace: str, name: str, *, dry_run: bool = False) -> None:
        """Delete a RoleBinding by name.

        Args:
            namespace: Namespace of the binding.
            name: Name of the binding.
            dry_run: Ask the backend to validate without persisting.

        Raises:
            MutationError: If the deletion fails.
        """
        ...


__all__ = ["MutationSink", "RoleBindingLister"]
