"""
j1asm - J1 Assembler Command-Line Interface
===========================================

This module implements the command-line interface for the J1 assembler.
All source files named on the command line are assembled, in order, into
a single program.

Usage Examples
--------------
Basic assembly (writes out.hex):
    $ j1asm blink.fs

With listing file name:
    $ j1asm -o blink.hex blink.fs

Several sources, raw image and symbols:
    $ j1asm -o blink.hex -b blink.bin -s blink.sym words.fs blink.fs

Verbose mode:
    $ j1asm -v blink.fs
"""

import sys
from pathlib import Path
from typing import Optional

import click

from j1asm import __version__
from j1asm.assembler import Assembler
from j1asm.cli import setup_logging
from j1asm.cli.errors import ExitCode, handle_cli_exception
from j1asm.config import BYTE_ORDERS, AssemblerConfig


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "sources",
    nargs=-1,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Listing file (default: out.hex, or $J1ASM_OUTPUT)",
)
@click.option(
    "-b", "--binary",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the raw image, two bytes per word",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--byte-order",
    type=click.Choice(BYTE_ORDERS, case_sensitive=False),
    default=None,
    help="Byte order of words in the raw image (default: big)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output, including label and fixup tracing",
)
@click.version_option(version=__version__, prog_name="j1asm")
def main(
    sources: tuple[Path, ...],
    output: Optional[Path],
    binary: Optional[Path],
    symbols: Optional[Path],
    byte_order: Optional[str],
    verbose: bool,
) -> None:
    """
    Assemble J1 source code.

    SOURCES are assembled in the order given, as one program: a label
    may be used in one file and defined in a later one.

    \b
    Examples:
        j1asm blink.fs                   # Writes out.hex
        j1asm -o blink.hex blink.fs      # Name the listing
        j1asm -b blink.bin words.fs blink.fs
    """
    try:
        config = AssemblerConfig.from_env()
        if output is not None:
            config.output = output
        if byte_order is not None:
            config = AssemblerConfig(config.output, byte_order, config.verbose)
        if verbose:
            config.verbose = True
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    setup_logging(config.verbose)

    try:
        asm = Assembler(byte_order=config.byte_order)
        for source in sources:
            if config.verbose:
                click.echo(f"Assembling {source}...")
            asm.add_file(source)

        # Nothing emitted means there is nothing worth writing
        asm.assemble()
        words = asm.get_words()
        if not words:
            click.echo("usage: j1asm [ -o <output> ] <source>*", err=True)
            sys.exit(ExitCode.INVALID_ARGS)

        asm.write_listing(config.output)
        if config.verbose:
            click.echo(f"Wrote listing to {config.output}")

        if binary:
            asm.write_binary(binary)
            if config.verbose:
                click.echo(f"Wrote {len(words) * 2} bytes to {binary}")

        if symbols:
            asm.write_symbols(symbols)
            if config.verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if config.verbose:
            click.echo(f"Assembly complete: {len(words)} words, "
                       f"{len(asm.get_symbols())} labels")
            stats = asm.get_optimization_stats()
            if stats.total_optimizations > 0:
                click.echo(str(stats))

    except Exception as e:
        handle_cli_exception(e, verbose=config.verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
