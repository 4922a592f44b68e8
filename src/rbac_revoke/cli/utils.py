"""CLI utility functions and error handling.

Errors go to stderr as plain text with a non-zero exit code; informational
messages also go to stderr so stdout carries only report lines or structured
output.

Example:
    from rbac_revoke.cli.utils import error_exit, ExitCode

    error_exit("Namespace is required", exit_code=ExitCode.USAGE_ERROR)
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from typing import NoReturn


class ExitCode(IntEnum):
    """Exit codes for CLI commands."""

    GENERAL_ERROR = 1
    """General error (catch-all for failures)."""

    USAGE_ERROR = 2
    """Invalid usage (bad arguments, missing required options)."""

    NETWORK_ERROR = 8
    """The Kubernetes API could not be reached or rejected a request."""


def error(message: str) -> None:
    """Print an error message to stderr.

    Args:
        message: Error message to display.

    Example:
        error("List failed")
        # Output: Error: List failed
    """
    click.echo(f"Error: {message}", err=True)


def error_exit(
    message: str,
    exit_code: ExitCode = ExitCode.GENERAL_ERROR,
) -> NoReturn:
    """Print an error message to stderr and exit with a code.

    Args:
        message: Error message to display.
        exit_code: Exit code to use (default: GENERAL_ERROR).

    Raises:
        SystemExit: Always exits with the specified code.
    """
    error(message)
    sys.exit(exit_code)


def info(message: str) -> None:
    """Print an informational message to stderr.

    Args:
        message: Informational message to display.
    """
    click.echo(message, err=True)


__all__: list[str] = ["ExitCode", "error", "error_exit", "info"]
