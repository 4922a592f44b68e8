"""Report lines and structured output for reconciliation runs.

Text mode emits one line per affected subject category per binding, then one
line per category of requested identities that were not bound anywhere.
Structured mode renders the filtered bindings as a K8s ``List`` object.

Example:
    >>> format_removal_line("team-a/editor", SubjectCategory.USER, {"bob", "alice"}, "team-a")
    'Removing team-a/editor from users [alice bob] in project team-a.'
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any

import click
import yaml

from rbac_revoke.schemas import RBAC_API_GROUP, SubjectCategory

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rbac_revoke.schemas import RoleBinding

_REMOVAL_LABELS: dict[SubjectCategory, str] = {
    SubjectCategory.USER: "users",
    SubjectCategory.GROUP: "groups",
    SubjectCategory.SERVICE_ACCOUNT: "serviceaccounts",
    SubjectCategory.OTHER: "subjects",
}

_NOT_FOUND_LABELS: dict[SubjectCategory, str] = {
    SubjectCategory.USER: "Users",
    SubjectCategory.GROUP: "Groups",
}


class OutputFormat(str, Enum):
    """Structured output formats for the filtered bindings."""

    JSON = "json"
    YAML = "yaml"
    NAME = "name"


def format_names(names: Iterable[str]) -> str:
    """Render names as a sorted, bracketed, space-separated list.

    Example:
        >>> format_names({"bob", "alice"})
        '[alice bob]'
    """
    return "[" + " ".join(sorted(names)) + "]"


def format_removal_line(
    role_display_name: str,
    category: SubjectCategory,
    names: Iterable[str],
    namespace: str,
    suffix: str = "",
) -> str:
    """Format the line reporting subjects removed from one binding.

    Args:
        role_display_name: Role name as shown in reports.
        category: Category of the removed subjects.
        names: Display names of the removed subjects.
        namespace: Namespace being reconciled.
        suffix: Mode suffix such as " (dry client run)".

    Returns:
        The report line, without trailing newline.
    """
    return (
        f"Removing {role_display_name} from {_REMOVAL_LABELS[category]} "
        f"{format_names(names)} in project {namespace}{suffix}."
    )


def format_not_found_line(
    category: SubjectCategory,
    names: Iterable[str],
    namespace: str,
    suffix: str = "",
) -> str:
    """Format the line reporting requested identities that were not bound.

    Args:
        category: USER or GROUP.
        names: Requested names that were never removed.
        namespace: Namespace being reconciled.
        suffix: Mode suffix such as " (dry client run)".

    Returns:
        The report line, without trailing newline.

    Raises:
        ValueError: If category is not USER or GROUP.
    """
    if category not in _NOT_FOUND_LABELS:
        msg = f"Only users and groups can be requested for removal, got {category.value}"
        raise ValueError(msg)
    return (
        f"{_NOT_FOUND_LABELS[category]} {format_names(names)} "
        f"were not bound to roles in project {namespace}{suffix}."
    )


class ReportSink(ABC):
    """Receiver of textual report lines."""

    @abstractmethod
    def emit(self, line: str) -> None:
        """Receive one report line.

        Args:
            line: Report line without trailing newline.
        """
        ...


class EchoReportSink(ReportSink):
    """Writes report lines to stdout through click."""

    def emit(self, line: str) -> None:
        click.echo(line)


class ListReportSink(ReportSink):
    """Collects report lines in memory.

    Attributes:
        lines: Lines received so far, in order.
    """

    def __init__(self) -> None:
        self.lines: list[str] = []

    def emit(self, line: str) -> None:
        self.lines.append(line)


def build_binding_list(bindings: Iterable[RoleBinding]) -> dict[str, Any]:
    """Wrap RoleBinding manifests in a K8s ``List`` object.

    Args:
        bindings: Filtered bindings collected during the run.

    Returns:
        Dictionary with apiVersion v1, kind List and the binding manifests.
    """
    return {
        "apiVersion": "v1",
        "kind": "List",
        "metadata": {},
        "items": [binding.to_k8s_manifest() for binding in bindings],
    }


def render_bindings(bindings: Iterable[RoleBinding], output_format: OutputFormat) -> str:
    """Render filtered bindings for structured output.

    Args:
        bindings: Filtered bindings collected during the run.
        output_format: Rendering format.

    Returns:
        Rendered text, without trailing newline.
    """
    if output_format == OutputFormat.NAME:
        return "\n".join(f"rolebinding.{RBAC_API_GROUP}/{b.name}" for b in bindings)

    document = build_binding_list(bindings)
    if output_format == OutputFormat.YAML:
        return yaml.safe_dump(document, default_flow_style=False, sort_keys=False).rstrip("\n")
    return json.dumps(document, indent=4)


__all__ = [
    "EchoReportSink",
    "ListReportSink",
    "OutputFormat",
    "ReportSink",
    "build_binding_list",
    "format_names",
    "format_not_found_line",
    "format_removal_line",
    "render_bindings",
]
