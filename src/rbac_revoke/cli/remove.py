"""remove-user and remove-group command implementations.

Both commands remove the given identities from every RoleBinding in a
namespace. Bindings left with subjects are updated; bindings left empty are
deleted.

Example:
    $ rbac-revoke remove-user alice bob -n team-a
    $ rbac-revoke remove-group contractors --dry-run=client
    $ rbac-revoke remove-user alice -o yaml
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from pydantic import ValidationError

from rbac_revoke.cli.utils import ExitCode, error_exit, info
from rbac_revoke.config import KubernetesClientConfig, RevokeOptions
from rbac_revoke.dispatcher import DispatchMode, MutationDispatcher
from rbac_revoke.errors import BackendError, ConfigurationError, MutationError
from rbac_revoke.planner import reconcile
from rbac_revoke.report import EchoReportSink, OutputFormat, render_bindings

if TYPE_CHECKING:
    from collections.abc import Callable

    from rbac_revoke.backends.kubernetes import K8sRoleBindingBackend


def _create_backend(config: KubernetesClientConfig) -> K8sRoleBindingBackend:
    """Create and start the Kubernetes backend.

    Args:
        config: Client configuration.

    Returns:
        A started backend.

    Raises:
        ConfigurationError: If no Kubernetes configuration can be loaded.
    """
    from rbac_revoke.backends.kubernetes import K8sRoleBindingBackend

    backend = K8sRoleBindingBackend(config)
    backend.startup()
    return backend


def _resolve_namespace(namespace: str | None, config: KubernetesClientConfig) -> str:
    if namespace:
        return namespace
    from rbac_revoke.backends.kubernetes import resolve_namespace

    return resolve_namespace(config)


def _removal_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options shared by remove-user and remove-group."""
    decorators = [
        click.option(
            "--namespace",
            "-n",
            type=str,
            default=None,
            help="Project namespace (default: namespace of the current context).",
            metavar="TEXT",
        ),
        click.option(
            "--dry-run",
            "dry_run",
            type=click.Choice(["none", "client", "server"], case_sensitive=False),
            default="none",
            show_default=True,
            help="Only print what would change. 'server' asks the API server to validate.",
        ),
        click.option(
            "--output",
            "-o",
            type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
            default=None,
            help="Print the filtered RoleBindings instead of changing them.",
        ),
        click.option(
            "--kubeconfig",
            type=click.Path(exists=True, dir_okay=False, resolve_path=True, path_type=Path),
            default=None,
            help="Path to kubeconfig file.",
            metavar="PATH",
        ),
        click.option(
            "--context",
            type=str,
            default=None,
            help="Kubeconfig context to use.",
            metavar="TEXT",
        ),
        click.option(
            "--request-timeout",
            type=click.FloatRange(min=0, min_open=True),
            default=None,
            help="Timeout in seconds for each API request.",
            metavar="SECONDS",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def run_removal(
    *,
    users: list[str],
    groups: list[str],
    namespace: str | None,
    dry_run: str,
    output: str | None,
    kubeconfig: Path | None,
    context: str | None,
    request_timeout: float | None,
) -> None:
    """Validate options, reconcile the namespace and print the outcome.

    Raises:
        SystemExit: On invalid options or a failed reconciliation.
    """
    client_config = KubernetesClientConfig(
        kubeconfig_path=str(kubeconfig) if kubeconfig else None,
        context=context,
        request_timeout=request_timeout,
    )
    if kubeconfig:
        info(f"Using kubeconfig: {kubeconfig}")

    try:
        options = RevokeOptions(
            namespace=_resolve_namespace(namespace, client_config),
            users=users,
            groups=groups,
            dry_run=dry_run.lower(),
            output=output.lower() if output else None,
        )
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        error_exit(f"Invalid options: {messages}", exit_code=ExitCode.USAGE_ERROR)

    try:
        backend = _create_backend(client_config)
        report = reconcile(
            options.namespace,
            options.to_request(),
            lister=backend,
            dispatcher=MutationDispatcher(backend, options.mode),
            report_sink=EchoReportSink(),
        )
    except ConfigurationError as e:
        error_exit(str(e), exit_code=ExitCode.GENERAL_ERROR)
    except (BackendError, MutationError) as e:
        error_exit(str(e), exit_code=ExitCode.NETWORK_ERROR)

    if options.mode == DispatchMode.ACCUMULATE and options.output is not None:
        rendered = render_bindings(report.bindings, options.output)
        if rendered:
            click.echo(rendered)


@click.command(
    name="remove-user",
    help="Remove users from every RoleBinding in the project.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.argument("users", nargs=-1, metavar="USER [USER ...]")
@_removal_options
def remove_user_command(users: tuple[str, ...], **options: Any) -> None:
    """Remove users from the project.

    Args:
        users: User names to remove.
        **options: Shared removal options.
    """
    if not users:
        error_exit(
            "you must specify at least one argument: <user> [user]...",
            exit_code=ExitCode.USAGE_ERROR,
        )
    run_removal(users=list(users), groups=[], **options)


@click.command(
    name="remove-group",
    help="Remove groups from every RoleBinding in the project.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.argument("groups", nargs=-1, metavar="GROUP [GROUP ...]")
@_removal_options
def remove_group_command(groups: tuple[str, ...], **options: Any) -> None:
    """Remove groups from the project.

    Args:
        groups: Group names to remove.
        **options: Shared removal options.
    """
    if not groups:
        error_exit(
            "you must specify at least one argument: <group> [group]...",
            exit_code=ExitCode.USAGE_ERROR,
        )
    run_removal(users=[], groups=list(groups), **options)


__all__: list[str] = ["remove_group_command", "remove_user_command", "run_removal"]
