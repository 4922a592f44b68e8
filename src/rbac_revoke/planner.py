"""Role binding reconciliation planner.

This module removes the requested users and groups from every RoleBinding in
a namespace. For each binding it computes the remaining subjects, decides
between leaving, updating or deleting it, dispatches the mutation, and
accumulates a report of what was removed and which requested identities were
never found.

Example:
    >>> from rbac_revoke.planner import reconcile
    >>> report = reconcile(
    ...     "team-a",
    ...     RemovalRequest(users=["alice"]),
    ...     lister=backend,
    ...     dispatcher=MutationDispatcher(backend),
    ...     report_sink=EchoReportSink(),
    ... )
    >>> report.not_found_users
    set()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from rbac_revoke.dispatcher import BindingAction, DispatchMode
from rbac_revoke.ordering import order_bindings
from rbac_revoke.report import format_not_found_line, format_removal_line
from rbac_revoke.schemas import SubjectCategory
from rbac_revoke.subjects import classify_subjects, remove_subjects
from rbac_revoke.tracing import get_tracer, security_span

if TYPE_CHECKING:
    from rbac_revoke.backends.base import RoleBindingLister
    from rbac_revoke.dispatcher import MutationDispatcher
    from rbac_revoke.report import ReportSink
    from rbac_revoke.schemas import RemovalRequest, RoleBinding, Subject

logger = structlog.get_logger(__name__)


def _empty_buckets() -> dict[SubjectCategory, set[str]]:
    return {category: set() for category in SubjectCategory}


def decide_action(original_count: int, remaining_count: int) -> BindingAction:
    """Decide what to do with a binding from its subject counts.

    Args:
        original_count: Number of subjects before removal.
        remaining_count: Number of subjects after removal.

    Returns:
        NOOP when nothing was removed, DELETE when nothing remains,
        UPDATE otherwise.
    """
    if remaining_count == original_count:
        return BindingAction.NOOP
    if remaining_count == 0:
        return BindingAction.DELETE
    return BindingAction.UPDATE


@dataclass
class ReconciliationResult:
    """Planned change for a single RoleBinding.

    Attributes:
        binding: The binding as listed, never modified.
        remaining_subjects: Subjects left after removal, in original order.
        removed: Display names removed, per category. Only categories with
            removals have entries.
        action: What reconciliation does to the binding.
    """

    binding: RoleBinding
    remaining_subjects: list[Subject]
    removed: dict[SubjectCategory, set[str]]
    action: BindingAction

    @property
    def updated_binding(self) -> RoleBinding:
        """The binding carrying its filtered subject list."""
        return self.binding.with_subjects(self.remaining_subjects)


def plan_binding(binding: RoleBinding, request: RemovalRequest) -> ReconciliationResult:
    """Compute the removal diff and action for one binding.

    Args:
        binding: Binding as listed.
        request: Users and groups to remove.

    Returns:
        The planned result. ``removed`` is empty when the action is NOOP.
    """
    original = list(binding.subjects)
    before = classify_subjects(original)

    remaining = remove_subjects(original, request)
    action = decide_action(len(original), len(remaining))
    if action == BindingAction.NOOP:
        return ReconciliationResult(binding, remaining, {}, action)

    after = classify_subjects(remaining)
    removed: dict[SubjectCategory, set[str]] = {}
    for category in SubjectCategory:
        diff = before[category] - after[category]
        if diff:
            removed[category] = diff

    return ReconciliationResult(binding, remaining, removed, action)


@dataclass
class ReconciliationReport:
    """Aggregate outcome of a reconciliation run.

    Attributes:
        namespace: Namespace that was reconciled.
        mode: Dispatch mode of the run.
        removed: Display names removed across all bindings, per category.
        not_found_users: Requested users not removed from any binding.
        not_found_groups: Requested groups not removed from any binding.
        results: Planned results for every changed binding, in processing order.
        bindings: Filtered bindings collected in ACCUMULATE mode.
    """

    namespace: str
    mode: DispatchMode = DispatchMode.LIVE
    removed: dict[SubjectCategory, set[str]] = field(default_factory=_empty_buckets)
    not_found_users: set[str] = field(default_factory=set)
    not_found_groups: set[str] = field(default_factory=set)
    results: list[ReconciliationResult] = field(default_factory=list)
    bindings: list[RoleBinding] = field(default_factory=list)

    @property
    def users_removed(self) -> set[str]:
        """Users removed from at least one binding."""
        return self.removed[SubjectCategory.USER]

    @property
    def groups_removed(self) -> set[str]:
        """Groups removed from at least one binding."""
        return self.removed[SubjectCategory.GROUP]

    @property
    def service_accounts_removed(self) -> set[str]:
        """Service accounts removed, always empty for user and group requests."""
        return self.removed[SubjectCategory.SERVICE_ACCOUNT]

    @property
    def others_removed(self) -> set[str]:
        """Subjects of other kinds removed, always empty for user and group requests."""
        return self.removed[SubjectCategory.OTHER]

    def has_changes(self) -> bool:
        """True when at least one binding was (or would be) changed."""
        return bool(self.results)

    def actions(self) -> dict[str, BindingAction]:
        """Map of changed binding name to its action, in processing order."""
        return {r.binding.name: r.action for r in self.results}


def reconcile(
    namespace: str,
    request: RemovalRequest,
    lister: RoleBindingLister,
    dispatcher: MutationDispatcher,
    report_sink: ReportSink | None = None,
) -> ReconciliationReport:
    """Remove the requested users and groups from every binding in a namespace.

    Bindings are processed one at a time in descending name order. In
    ACCUMULATE mode the filtered bindings are collected on the report and no
    text is emitted; in every other mode one line per affected category is
    emitted after the binding's mutation has been dispatched, followed by the
    not-found lines once all bindings are processed.

    Args:
        namespace: Namespace to reconcile.
        request: Users and groups to remove.
        lister: Source of the namespace's RoleBindings.
        dispatcher: Sends the planned mutations; its mode applies to the run.
        report_sink: Receiver of report lines. Lines are dropped if None.

    Returns:
        The aggregate report.

    Raises:
        BackendError: If listing fails. No mutation has been attempted.
        MutationError: If a mutation fails. Earlier mutations stay committed.
    """
    mode = dispatcher.mode
    suffix = mode.report_suffix
    report = ReconciliationReport(namespace=namespace, mode=mode)

    def emit(line: str) -> None:
        if report_sink is not None:
            report_sink.emit(line)

    with security_span(get_tracer(), "reconcile_namespace", namespace=namespace) as span:
        bindings = lister.list_role_bindings(namespace)
        logger.info(
            "reconcile.started",
            namespace=namespace,
            bindings=len(bindings),
            users=sorted(request.users),
            groups=sorted(request.groups),
            mode=mode.value,
        )

        for binding in order_bindings(bindings):
            result = plan_binding(binding, request)
            if result.action == BindingAction.NOOP:
                continue

            report.results.append(result)
            updated = result.updated_binding

            if mode == DispatchMode.ACCUMULATE:
                report.bindings.append(updated)
                continue

            dispatcher.dispatch(updated, result.action)

            for category, names in result.removed.items():
                emit(
                    format_removal_line(
                        binding.role_display_name, category, names, namespace, suffix
                    )
                )
                report.removed[category].update(names)

        span.set_attribute("security.resource_count", len(report.results))

        if mode != DispatchMode.ACCUMULATE:
            report.not_found_users = set(request.users) - report.users_removed
            report.not_found_groups = set(request.groups) - report.groups_removed
            if report.not_found_users:
                emit(
                    format_not_found_line(
                        SubjectCategory.USER, report.not_found_users, namespace, suffix
                    )
                )
            if report.not_found_groups:
                emit(
                    format_not_found_line(
                        SubjectCategory.GROUP, report.not_found_groups, namespace, suffix
                    )
                )

    logger.info(
        "reconcile.completed",
        namespace=namespace,
        changed=len(report.results),
        dispatched=dispatcher.dispatched,
        not_found_users=sorted(report.not_found_users),
        not_found_groups=sorted(report.not_found_groups),
    )
    return report


__all__ = [
    "ReconciliationReport",
    "ReconciliationResult",
    "decide_action",
    "plan_binding",
    "reconcile",
]
