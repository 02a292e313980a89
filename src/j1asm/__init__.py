"""
j1asm - Assembler Toolchain for the J1 Forth CPU
================================================

This package provides an assembler and disassembler for the J1, a small
stack-machine CPU with 16-bit instructions, a 13-bit word-addressed
program space and separate data and return stacks.

Main Components
---------------
- **assembler**: J1 assembler (j1asm)
    Converts J1 assembly source into an instruction image and listing

- **disassembler**: J1 disassembler (j1disasm)
    Converts instruction words back into mnemonics

- **cpu**: Instruction encoding shared by both

Quick Start
-----------
Assemble a program:
    >>> from j1asm import Assembler
    >>> asm = Assembler()
    >>> words = asm.assemble_file("blink.fs")
    >>> asm.write_listing("blink.hex")

Or use the command-line tools:
    $ j1asm -o blink.hex blink.fs
    $ j1disasm blink.bin
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from j1asm.assembler import Assembler
from j1asm.config import AssemblerConfig
from j1asm.disassembler import J1Disassembler, DisassembledInstruction, disassemble
from j1asm.errors import (
    J1Error,
    AssemblerError,
    AssemblySyntaxError,
    UndefinedSymbolError,
    DuplicateSymbolError,
    BranchRangeError,
    MacroError,
    ImageCapacityError,
    SourceFileError,
    SourceLocation,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "AssemblerConfig",
    # Disassembler
    "J1Disassembler",
    "DisassembledInstruction",
    "disassemble",
    # Exception hierarchy
    "J1Error",
    "AssemblerError",
    "AssemblySyntaxError",
    "UndefinedSymbolError",
    "DuplicateSymbolError",
    "BranchRangeError",
    "MacroError",
    "ImageCapacityError",
    "SourceFileError",
    "SourceLocation",
]
