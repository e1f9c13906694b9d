"""
kernelscan - Kernel Log Statement Scanner CLI
=============================================

Scans C source files for kernel logging calls (printk, pr_*, dev_*,
ACPI diagnostics) and prints each call on one line with adjacent string
literals joined.

Usage Examples
--------------
Scan a single file:
    $ kernelscan drivers/acpi/osl.c

Scan a tree, stripping escape sequences from messages:
    $ kernelscan -r -e drivers/

Scan standard input:
    $ cat drivers/pnp/pnpacpi/rsparser.c | kernelscan

Exit Codes
----------
0 - Success (unreadable paths are reported but do not fail the run)
1 - Fatal scanner error
2 - Invalid arguments
3 - Internal error
"""

import codecs
import logging
from pathlib import Path

import click

from kernelscan import __version__
from kernelscan.cli.errors import handle_cli_exception
from kernelscan.scanner import Scanner, ScanOptions


logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def validate_encoding(ctx: click.Context, param: click.Parameter, value: str) -> str:
    """Reject encoding names Python does not know."""
    try:
        codecs.lookup(value)
    except LookupError:
        raise click.BadParameter(f"unknown encoding '{value}'")
    return value


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "paths",
    nargs=-1,
    type=click.Path(path_type=Path),
)
@click.option(
    "-e", "--escape-strip",
    is_flag=True,
    help="Strip out C escape sequences from string literals",
)
@click.option(
    "-r", "--recursive",
    is_flag=True,
    help="Recursively scan subdirectories",
)
@click.option(
    "--encoding",
    default="utf-8",
    show_default=True,
    callback=validate_encoding,
    help="Source encoding; bytes invalid in it are passed through unchanged",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose (debug) logging on stderr",
)
@click.version_option(version=__version__, prog_name="kernelscan")
def main(
    paths: tuple[Path, ...],
    escape_strip: bool,
    recursive: bool,
    encoding: str,
    verbose: bool,
) -> None:
    """
    Scan C sources for kernel logging statements.

    PATHS are files or directories. Files ending in .c, .h or .cpp are
    scanned; directories are listed, and with -r their subdirectories
    too. With no PATHS, standard input is scanned.

    \b
    Examples:
        kernelscan drivers/acpi/osl.c     # One file
        kernelscan -r drivers/            # A whole tree
        kernelscan -e foo.c               # Turn \\n etc. into spaces
    """
    setup_logging(verbose)

    options = ScanOptions(
        escape_strip=escape_strip,
        recursive=recursive,
        encoding=encoding,
    )

    try:
        scanner = Scanner(options)

        if paths:
            scanner.scan_paths(paths)
        else:
            logger.debug("No paths given, reading standard input")
            scanner.scan_stdin()

        click.echo(scanner.summary())

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
