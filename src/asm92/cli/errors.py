"""
CLI Error Handling
==================

Maps exceptions raised while assembling to messages on stderr and
process exit codes.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from asm92.errors import Asm92Error


class ExitCode(IntEnum):
    """Exit codes for the asm92 tool."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Assembly or mapping table error
    INVALID_ARGS = 2     # Invalid arguments or missing files
    INTERNAL_ERROR = 3   # Unexpected internal error


def exit_code_for(error: Exception) -> ExitCode:
    """Return the exit code an exception maps to."""
    if isinstance(error, Asm92Error):
        return ExitCode.BUILD_ERROR
    if isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        return ExitCode.INVALID_ARGS
    return ExitCode.INTERNAL_ERROR


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception and exit with the matching exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Assembly")

    Raises:
        SystemExit: Always
    """
    code = exit_code_for(error)

    if code == ExitCode.BUILD_ERROR:
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
    elif code == ExitCode.INVALID_ARGS:
        click.echo(f"Error: {error}", err=True)
    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()

    sys.exit(code)
