"""
CLI Error Handling
==================

Provides consistent error handling and exit codes for the command line.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from kernelscan.errors import KernelScanError


class ExitCode(IntEnum):
    """Exit codes for the kernelscan command."""
    SUCCESS = 0
    SCAN_ERROR = 1       # Fatal scanner error, e.g. no hash table width
    INVALID_ARGS = 2     # Invalid arguments (click's own usage exit code)
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """
    Report an exception that escaped the scan and exit.

    Per-path access problems never get here: the scanner reports and
    skips them. Anything arriving here ends the run.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    if isinstance(error, KernelScanError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.SCAN_ERROR)

    elif isinstance(error, click.BadParameter):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
