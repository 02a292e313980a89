"""
J1 Assembler - Main Interface
=============================

This module provides the Assembler class, the primary interface for
assembling J1 source code. It drives the code generator over one or more
sources, checks that every label was resolved, and writes the results.

Example Usage
-------------
>>> from j1asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.assemble_string('''
... << dup  ALU T T->N D+ >>
... : start
...     PUSH 5 dup
...     B start
... ''')
[32773, 24705, 0]
>>> print(asm.get_listing())
8005  // 0000: PUSH 5                    <- start
6081  // 0002: dup
0000  // 0004: JUMP 0x0000

Several files form one program and one address space. Labels may be
referenced in one file and defined in a later one:

>>> asm = Assembler()
>>> asm.assemble_files(["words.fs", "main.fs"])

Command-Line Usage
------------------
    $ j1asm -o blink.hex -b blink.bin words.fs blink.fs
"""

from pathlib import Path
from typing import Iterable
import logging

from j1asm.assembler.codegen import CodeGenerator
from j1asm.assembler.microprograms import MicroprogramTable
from j1asm.assembler.optimizer import OptimizationStats
from j1asm.config import BYTE_ORDERS
from j1asm.cpu import IMAGE_CAPACITY
from j1asm.disassembler import DisassembledInstruction, J1Disassembler
from j1asm.errors import AssemblerError, SourceFileError

logger = logging.getLogger(__name__)

LISTING_TEXT_WIDTH = 25


class Assembler:
    """
    Main J1 assembler class.

    An Assembler instance is one assembly run: sources added to it share
    labels, microprograms and the program counter. Output can only be
    written once assemble() has completed without error.

    Attributes:
        byte_order: Byte order used by write_binary() ("big" or "little")
    """

    def __init__(self, byte_order: str = "big", capacity: int = IMAGE_CAPACITY):
        """
        Initialize the assembler.

        Args:
            byte_order: Word byte order for raw binary output
            capacity: Program image size in words
        """
        if byte_order not in BYTE_ORDERS:
            raise ValueError(f"unknown byte order '{byte_order}'")
        self.byte_order = byte_order
        self._codegen = CodeGenerator(capacity)
        self._complete = False

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def add_source(self, source: str, filename: str = "<input>") -> None:
        """Queue source text; it is assembled by the next assemble() call."""
        self._codegen.add_source(source, filename)
        self._complete = False

    def add_file(self, filepath: str | Path) -> None:
        """
        Queue a source file.

        Raises:
            SourceFileError: If the file cannot be read
        """
        self._codegen.add_file(filepath)
        self._complete = False

    def assemble(self) -> list[int]:
        """
        Assemble everything queued so far and check that all labels resolved.

        Returns:
            The instruction words of the whole program

        Raises:
            AssemblerError: On the first error
        """
        self._codegen.generate()
        self._codegen.check_labels()
        self._complete = True

        stats = self._codegen.get_optimization_stats()
        logger.info(
            "assembled %d words, %d labels, %d microprograms",
            len(self._codegen.image),
            len(self._codegen.symbols),
            len(self._codegen.microprograms),
        )
        if stats.total_optimizations:
            logger.info("peephole optimizer saved %d words", stats.words_saved)

        return self.get_words()

    def assemble_string(self, source: str, filename: str = "<input>") -> list[int]:
        """
        Assemble source code from a string.

        Args:
            source: J1 assembly source
            filename: Virtual filename for error messages

        Returns:
            The instruction words of the whole program
        """
        self.add_source(source, filename)
        return self.assemble()

    def assemble_file(self, filepath: str | Path) -> list[int]:
        """Assemble a single source file."""
        return self.assemble_files([filepath])

    def assemble_files(self, filepaths: Iterable[str | Path]) -> list[int]:
        """
        Assemble several files as one program, in the order given.

        Raises:
            SourceFileError: If a file cannot be read
            AssemblerError: On the first error in the source
        """
        for filepath in filepaths:
            logger.info("assembling %s", filepath)
            self.add_file(filepath)
        return self.assemble()

    # =========================================================================
    # Results
    # =========================================================================

    def get_words(self) -> list[int]:
        """Return the emitted instruction words."""
        return self._codegen.get_words()

    def get_symbols(self) -> dict[str, int]:
        """Return a dictionary of label names to word indices."""
        return self._codegen.get_symbols()

    def get_microprograms(self) -> MicroprogramTable:
        """Return the microprogram table built from the sources."""
        return self._codegen.microprograms

    def get_optimization_stats(self) -> OptimizationStats:
        """Counts of the RETURN rewrites applied so far."""
        return self._codegen.get_optimization_stats()

    def is_complete(self) -> bool:
        """True once assemble() has finished without error."""
        return self._complete

    def disassemble(self) -> list[DisassembledInstruction]:
        """Disassemble the emitted image using the program's own microprograms."""
        disasm = J1Disassembler(self._codegen.microprograms)
        return disasm.disassemble(self.get_words())

    def get_listing(self) -> str:
        """
        Get the listing as a string.

        One line per word: the word in hex, its byte address, the
        disassembly and, when a label points at the word, the label name.
        """
        symbols = self._codegen.symbols
        lines = []
        for index, instr in enumerate(self.disassemble()):
            name = symbols.label_at(index)
            if name is not None:
                lines.append(f"{instr.word:04x}  // {instr.address:04x}: "
                             f"{instr.text:<{LISTING_TEXT_WIDTH}} <- {name}")
            else:
                lines.append(str(instr))
        return "\n".join(lines)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def _require_complete(self) -> None:
        if not self._complete:
            raise AssemblerError("assembly has not completed; no output written")

    def _write(self, filepath: str | Path, data: str | bytes) -> None:
        filepath = Path(filepath)
        try:
            if isinstance(data, bytes):
                filepath.write_bytes(data)
            else:
                filepath.write_text(data)
        except OSError as e:
            raise SourceFileError(str(filepath), e.strerror or str(e), writing=True) from e
        logger.info("wrote %s", filepath)

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write the listing file.

        Raises:
            AssemblerError: If assembly has not completed
            SourceFileError: If the file cannot be written
        """
        self._require_complete()
        listing = self.get_listing()
        self._write(filepath, listing + "\n" if listing else "")

    def write_binary(self, filepath: str | Path) -> None:
        """
        Write the raw image: two bytes per word in the configured byte order.
        """
        self._require_complete()
        self._write(filepath, self._codegen.image.to_bytes(self.byte_order))

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name $word_index (one per line, sorted by name)
        """
        self._require_complete()
        lines = ["# Symbol table", "# Generated by j1asm"]
        for name, address in sorted(self.get_symbols().items(), key=lambda item: item[0].casefold()):
            lines.append(f"{name} ${address:04X}")
        self._write(filepath, "\n".join(lines) + "\n")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> list[int]:
    """
    Convenience function to assemble source code.

    Returns:
        The instruction words

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_string(source, filename)


def assemble_file(filepath: str | Path) -> list[int]:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_file(filepath)
