"""
bsacheck - BSA Source Checker Command-Line Interface
====================================================

This module implements the command-line interface for the BSA source
analyzer. It reports syntax problems in BSA assembly files and can list
the symbols and macros each file defines.

Usage Examples
--------------
Check a file:
    $ bsacheck game.src

Check several files and show their outlines:
    $ bsacheck --symbols main.src sprites.src

Limit the report and skip duplicate-definition warnings:
    $ bsacheck --max-problems 20 --no-duplicates main.src

Verbose mode:
    $ bsacheck -v main.src

Exit Status
-----------
0 if no file contains an error, 1 if any does, 2 for bad arguments or
unreadable files.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from bsa_tools import __version__
from bsa_tools.analyzer import (
    document_symbols,
    find_duplicate_definitions,
    parse_file,
)
from bsa_tools.cli.errors import ExitCode, handle_cli_exception
from bsa_tools.config import AnalyzerConfig


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-n", "--max-problems",
    type=click.IntRange(min=0),
    default=None,
    help="Report at most N problems per file (0 = no limit). "
         "Default: $BSA_MAX_PROBLEMS or 1000.",
)
@click.option(
    "-s", "--symbols",
    is_flag=True,
    help="List the symbols and macros defined in each file",
)
@click.option(
    "--duplicates/--no-duplicates",
    default=None,
    help="Warn about symbols and macros defined more than once. Default: enabled.",
)
@click.option(
    "-e", "--encoding",
    default=None,
    help="Source file encoding. Default: $BSA_SOURCE_ENCODING or utf-8.",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="bsacheck")
def main(
    files: tuple[Path, ...],
    max_problems: Optional[int],
    symbols: bool,
    duplicates: Optional[bool],
    encoding: Optional[str],
    verbose: bool,
) -> None:
    """
    Check BSA assembly source files for syntax problems.

    FILES are the BSA source files (.src, .asm) to check.

    Each problem is printed as FILE:LINE:COLUMN: SEVERITY: MESSAGE.

    \b
    Examples:
        bsacheck main.src               # Report problems
        bsacheck -s main.src            # Also list definitions
        bsacheck -n 10 *.src            # At most 10 problems per file
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")

    # Command-line options override the environment
    config = AnalyzerConfig.from_env()
    if max_problems is not None:
        config.max_problems = max_problems
    if duplicates is not None:
        config.report_duplicates = duplicates
    if encoding is not None:
        config.source_encoding = encoding

    found_errors = False
    try:
        for path in files:
            if verbose:
                click.echo(f"Checking {path}...")

            result = parse_file(path, config.source_encoding)

            diagnostics = list(result.diagnostics)
            if config.report_duplicates:
                diagnostics.extend(find_duplicate_definitions(result))
            diagnostics.sort(key=lambda d: d.range.start)

            shown = config.limit(diagnostics)
            for diagnostic in shown:
                click.echo(diagnostic.format(str(path)))
            if len(shown) < len(diagnostics):
                click.echo(f"{path}: {len(diagnostics) - len(shown)} more problems not shown")

            if symbols:
                click.echo(f"Symbols in {path}:")
                for symbol in document_symbols(result):
                    token = symbol.token
                    click.echo(
                        f"  {token.line + 1}:{token.start + 1} "
                        f"{symbol.kind.name.lower()} {symbol.name}"
                    )

            if result.has_errors():
                found_errors = True

            if verbose:
                error_count = len(result.errors)
                click.echo(
                    f"{path}: {error_count} errors, "
                    f"{len(diagnostics) - error_count} warnings, "
                    f"{len(result.symbol_definitions)} symbols, "
                    f"{len(result.macro_definitions)} macros"
                )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Analysis")

    if found_errors:
        sys.exit(ExitCode.PROBLEMS_FOUND)


if __name__ == "__main__":
    main()
