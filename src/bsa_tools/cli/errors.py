"""
CLI Exit Codes and Exception Reporting
======================================

Maps the exceptions that can escape an analysis run to a message on
stderr and a process exit status.

| Exception                            | Exit status     |
|--------------------------------------|-----------------|
| DocumentError                        | INVALID_ARGS    |
| click.BadParameter                   | INVALID_ARGS    |
| FileNotFoundError, PermissionError   | INVALID_ARGS    |
| AnalysisCancelled                    | INTERNAL_ERROR  |
| anything else                        | INTERNAL_ERROR  |

Source problems never reach this module: they are diagnostics, and
bsacheck turns them into PROBLEMS_FOUND itself.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from bsa_tools.errors import AnalysisCancelled, DocumentError


class ExitCode(IntEnum):
    """Process exit status of the bsa_tools commands."""
    SUCCESS = 0
    PROBLEMS_FOUND = 1   # A checked file has Error-severity diagnostics
    INVALID_ARGS = 2     # Bad option values or unreadable source files
    INTERNAL_ERROR = 3   # Cancelled analysis or a bug


# Caller mistakes, reported without a traceback
_USAGE_ERRORS = (DocumentError, click.BadParameter, FileNotFoundError, PermissionError)


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception that ended a command and exit.

    Args:
        error: The exception that stopped the command
        verbose: Print a traceback for unexpected exceptions
        error_type: Prefix for cancellation messages (e.g., "Analysis")

    Raises:
        SystemExit: Always
    """
    if isinstance(error, _USAGE_ERRORS):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    if isinstance(error, AnalysisCancelled):
        label = error_type or "Analysis"
        click.echo(f"{label} stopped: {error}", err=True)
        sys.exit(ExitCode.INTERNAL_ERROR)

    click.echo(f"Internal error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)
