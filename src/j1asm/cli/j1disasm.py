"""
j1disasm - J1 Disassembler Command-Line Interface
=================================================

This module implements the command-line interface for the J1
disassembler. It decodes a raw image written by `j1asm -b`, or the word
column of a listing written by j1asm.

ALU words only have names when a microprogram encodes them. Pass the
source files that define the microprograms with -u to get readable
output; without them ALU words show as ???.

Usage Examples
--------------
Disassemble a raw image:
    $ j1disasm blink.bin

Name ALU words using the program's own definitions:
    $ j1disasm -u words.fs blink.bin

Re-decode a listing:
    $ j1disasm --listing blink.hex -u words.fs
"""

import sys
from pathlib import Path
from typing import Optional

import click

from j1asm import __version__
from j1asm.assembler.lexer import Lexer
from j1asm.assembler.microprograms import MicroprogramTable
from j1asm.cli import setup_logging
from j1asm.cli.errors import ExitCode, handle_cli_exception
from j1asm.config import BYTE_ORDERS
from j1asm.disassembler import J1Disassembler


# =============================================================================
# Input Helpers
# =============================================================================

def load_microprograms(paths: tuple[Path, ...]) -> MicroprogramTable:
    """
    Collect the << ... >> definitions from source files.

    Everything else in the files (code, labels) is ignored; comments are
    skipped so that a << inside one is not taken as a definition.
    """
    table = MicroprogramTable()
    lexer = Lexer()
    for path in paths:
        lexer.add_file(path)

    while (token := lexer.next_token()) is not None:
        if token.text == "(":
            while (token := lexer.next_token()) is not None and token.text != ")":
                pass
        elif token.text == "<<":
            table.define_microprogram(lexer)
    return table


def parse_listing(text: str) -> list[int]:
    """
    Extract the instruction words from a j1asm listing.

    Each non-blank line starts with the word in hex.

    Raises:
        ValueError: If a line does not start with a hex word
    """
    words = []
    for number, line in enumerate(text.splitlines(), start=1):
        fields = line.split()
        if not fields:
            continue
        try:
            words.append(int(fields[0], 16) & 0xFFFF)
        except ValueError:
            raise ValueError(f"line {number}: '{fields[0]}' is not a hex word") from None
    return words


def parse_address(value: str) -> int:
    """Parse a start address given as hex (0x prefix) or decimal."""
    try:
        return int(value, 0)
    except ValueError:
        raise click.BadParameter(f"invalid address '{value}'", param_hint="--address")


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "-u", "--microprograms",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Source file with << ... >> definitions (can be repeated)",
)
@click.option(
    "-a", "--address",
    type=str,
    default="0",
    help="Byte address of the first word (hex with 0x prefix or decimal). Default: 0",
)
@click.option(
    "-c", "--count",
    type=int,
    default=None,
    help="Maximum number of words to disassemble (default: all)",
)
@click.option(
    "--listing",
    is_flag=True,
    help="INPUT_FILE is a j1asm listing rather than a raw image",
)
@click.option(
    "--byte-order",
    type=click.Choice(BYTE_ORDERS, case_sensitive=False),
    default="big",
    help="Byte order of words in a raw image (default: big)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="j1disasm")
def main(
    input_file: Path,
    output: Optional[Path],
    microprograms: tuple[Path, ...],
    address: str,
    count: Optional[int],
    listing: bool,
    byte_order: str,
    verbose: bool,
) -> None:
    """
    Disassemble a J1 program image.

    INPUT_FILE is a raw image (two bytes per word) or, with --listing,
    a listing produced by j1asm.
    """
    setup_logging(verbose)

    try:
        start = parse_address(address)
        table = load_microprograms(microprograms)

        if listing:
            words = parse_listing(input_file.read_text())
        else:
            words = J1Disassembler.words_from_bytes(input_file.read_bytes(), byte_order.lower())

        if verbose:
            click.echo(f"Loaded {len(words)} words, {len(table)} microprograms", err=True)

        disasm = J1Disassembler(table)
        lines = [str(instr) for instr in disasm.disassemble(words, start, count)]
        result = "\n".join(lines) + ("\n" if lines else "")

        if output:
            output.write_text(result)
            if verbose:
                click.echo(f"Wrote {len(lines)} lines to {output}", err=True)
        else:
            click.echo(result, nl=False)

    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)
    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Disassembly")


if __name__ == "__main__":
    main()
