"""Mutation dispatch for reconciled role bindings.

The dispatcher turns a planned action into calls on the MutationSink,
according to a single DispatchMode chosen for the whole run.

Example:
    >>> from rbac_revoke.dispatcher import DispatchMode, MutationDispatcher
    >>> dispatcher = MutationDispatcher(sink, mode=DispatchMode.DRY_RUN)
    >>> dispatcher.dispatch(binding, BindingAction.DELETE)  # no sink call
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

import structlog

from rbac_revoke.tracing import get_tracer, security_span

if TYPE_CHECKING:
    from rbac_revoke.backends.base import MutationSink
    from rbac_revoke.schemas import RoleBinding

logger = structlog.get_logger(__name__)


class BindingAction(str, Enum):
    """What reconciliation does to a single RoleBinding."""

    NOOP = "noop"
    """No subject was removed; the binding is left untouched."""

    UPDATE = "update"
    """Some subjects remain; the binding is replaced with the filtered list."""

    DELETE = "delete"
    """No subjects remain; the binding is deleted."""


class DispatchMode(str, Enum):
    """How planned mutations are carried out.

    Exactly one mode applies to a run, which keeps dry-run and structured
    output mutually exclusive.
    """

    LIVE = "live"
    """Mutations are committed."""

    DRY_RUN = "dry_run"
    """Mutations are computed and reported but never sent."""

    SERVER_DRY_RUN = "server_dry_run"
    """Mutations are sent with the backend's dry-run flag set."""

    ACCUMULATE = "accumulate"
    """Mutations are not sent; filtered bindings are collected for output."""

    @property
    def report_suffix(self) -> str:
        """Text appended to report lines in this mode."""
        if self == DispatchMode.DRY_RUN:
            return " (dry client run)"
        if self == DispatchMode.SERVER_DRY_RUN:
            return " (server dry run)"
        return ""

    @property
    def sends_mutations(self) -> bool:
        """True when the sink is called in this mode."""
        return self in (DispatchMode.LIVE, DispatchMode.SERVER_DRY_RUN)


class MutationDispatcher:
    """Sends planned RoleBinding mutations to a MutationSink.

    Attributes:
        mode: Dispatch mode for every call on this dispatcher.
        dispatched: Number of sink calls made so far.
    """

    def __init__(self, sink: MutationSink, mode: DispatchMode = DispatchMode.LIVE) -> None:
        """Initialize the dispatcher.

        Args:
            sink: Target for updates and deletions.
            mode: Dispatch mode for the run.
        """
        self._sink = sink
        self.mode = mode
        self.dispatched = 0

    def dispatch(self, binding: RoleBinding, action: BindingAction) -> None:
        """Carry out one planned action.

        Args:
            binding: The binding carrying its filtered subject list.
            action: Planned action for the binding.

        Raises:
            MutationError: If the sink rejects the mutation.
        """
        if action == BindingAction.NOOP or not self.mode.sends_mutations:
            logger.debug(
                "dispatch.skipped",
                binding=binding.name,
                action=action.value,
                mode=self.mode.value,
            )
            return

        dry_run = self.mode == DispatchMode.SERVER_DRY_RUN
        with security_span(
            get_tracer(),
            f"{action.value}_role_binding",
            namespace=binding.namespace,
            resource_name=binding.name,
            resource_count=len(binding.subjects),
            extra_attributes={"security.dry_run": dry_run},
        ):
            if action == BindingAction.UPDATE:
                self._sink.update_role_binding(binding, dry_run=dry_run)
                logger.info(
                    "rolebinding.updated",
                    binding=binding.name,
                    namespace=binding.namespace,
                    remaining_subjects=len(binding.subjects),
                    dry_run=dry_run,
                )
            else:
                self._sink.delete_role_binding(binding.namespace, binding.name, dry_run=dry_run)
                logger.info(
                    "rolebinding.deleted",
                    binding=binding.name,
                    namespace=binding.namespace,
                    dry_run=dry_run,
                )
        self.dispatched += 1


__all__ = [
    "BindingAction",
    "DispatchMode",
    "MutationDispatcher",
]
