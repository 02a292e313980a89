"""
J1 Disassembler Module
======================

Disassembly of J1 instruction words, used for assembler listings and by
the j1disasm tool.

Usage:
    from j1asm.disassembler import J1Disassembler

    disasm = J1Disassembler(microprograms)
    instructions = disasm.disassemble(words, start_address=0)
"""

from .j1 import (
    J1Disassembler,
    DisassembledInstruction,
    decode,
    disassemble,
)

__all__ = [
    "J1Disassembler",
    "DisassembledInstruction",
    "decode",
    "disassemble",
]
