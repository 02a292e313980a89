"""
J1 Assembler
============

This module provides the assembler for the J1 stack-machine CPU, a small
Forth processor with 16-bit instructions and an 8192-word program space.

Main Components
---------------
- **Assembler**: Main class that drives an assembly run and writes output
- **Lexer**: Splits source text into whitespace-delimited tokens
- **CodeGenerator**: The token dispatch loop that emits instruction words
- **SymbolTable**: Labels and the fixups that settle forward references
- **MicroprogramTable**: User-defined ALU mnemonics (<< name ... >>)
- **PeepholeOptimizer**: Folds RETURN into the preceding instruction
- **ProgramImage**: The fixed-capacity output buffer

Assembly Process
----------------
Assembly is a single pass. Each token is handled as soon as it is read;
a branch to a label that is not yet defined is emitted with an empty
target and patched when the label appears. After the last token every
label must have been defined.

Example Usage
-------------
>>> from j1asm.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string(": start PUSH 5 PUSH 3 B start")
[32773, 32771, 0]
"""

from j1asm.assembler.assembler import Assembler, assemble, assemble_file
from j1asm.assembler.lexer import Lexer, Token, parse_number
from j1asm.assembler.image import ProgramImage
from j1asm.assembler.symbols import SymbolTable, Label, Fixup
from j1asm.assembler.microprograms import MicroprogramTable, Microprogram
from j1asm.assembler.optimizer import PeepholeOptimizer, OptimizationStats
from j1asm.assembler.codegen import CodeGenerator

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "Lexer",
    "Token",
    "parse_number",
    # Image
    "ProgramImage",
    # Symbols
    "SymbolTable",
    "Label",
    "Fixup",
    # Microprograms
    "MicroprogramTable",
    "Microprogram",
    # Optimizer
    "PeepholeOptimizer",
    "OptimizationStats",
    # Code generator
    "CodeGenerator",
]
