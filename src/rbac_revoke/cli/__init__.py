"""Main entry point for the rbac-revoke CLI.

Commands:
    rbac-revoke remove-user: Remove users from every RoleBinding in a project
    rbac-revoke remove-group: Remove groups from every RoleBinding in a project

Example:
    $ rbac-revoke --help
    $ rbac-revoke remove-user alice -n team-a --dry-run=client
"""

from __future__ import annotations

import sys
from importlib.metadata import version as get_version

import click

from rbac_revoke.cli.remove import remove_group_command, remove_user_command
from rbac_revoke.logging import configure_logging

LOG_LEVEL_ENVVAR = "RBAC_REVOKE_LOG_LEVEL"


def _get_version() -> str:
    """Get the installed package version, or 'unknown' if not installed."""
    try:
        return get_version("rbac-revoke")
    except Exception:
        return "unknown"


@click.group(
    name="rbac-revoke",
    help="Remove users and groups from the RoleBindings of a project.",
    epilog="Use 'rbac-revoke <command> --help' for command-specific help.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(
    version=_get_version(),
    prog_name="rbac-revoke",
    message="%(prog)s %(version)s",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    envvar=LOG_LEVEL_ENVVAR,
    show_default=True,
    help="Minimum level of diagnostic logs written to stderr.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Write diagnostic logs as JSON lines.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str, log_json: bool) -> None:
    """Root command group for the rbac-revoke CLI."""
    ctx.ensure_object(dict)
    configure_logging(log_level=log_level, json_output=log_json)


cli.add_command(remove_user_command)
cli.add_command(remove_group_command)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the rbac-revoke CLI.

    Args:
        argv: Command-line arguments (uses sys.argv if None).
    """
    try:
        cli(args=argv, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)


__all__: list[str] = ["cli", "main"]
