"""
J1 Disassembler
===============

Turns J1 instruction words back into text. This is the inverse of the
assembler's code generation and is what the listing file is made of.

The J1 has no fixed ALU mnemonics: an ALU word only has a name if the
program defined a microprogram with exactly that encoding. The
disassembler therefore takes the assembler's microprogram table and
reverse-looks-up ALU words in it. A return folded into an ALU word is
stripped off before the lookup and shown as a ", RETURN" suffix.

Branch targets are displayed as byte addresses (word index * 2), which is
how the J1's program memory is addressed from the outside.

Usage:
    disasm = J1Disassembler(microprograms)

    # Disassemble a whole image
    for instr in disasm.disassemble(words):
        print(instr)

    # Disassemble one word to text
    text = disassemble(0x0010, 0x4020, microprograms)    # 'CALL 0x0040'
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from j1asm.cpu import (
    InstructionClass,
    LITERAL_MASK,
    PLAIN_RETURN,
    RETURN_BITS,
    RETURN_DETECT_MASK,
    branch_target,
    instruction_class,
)

UNKNOWN_MNEMONIC = "???"

BRANCH_MNEMONICS = {
    InstructionClass.JUMP: "JUMP",
    InstructionClass.JUMPZ: "JUMPZ",
    InstructionClass.CALL: "CALL",
}


class MicroprogramLookup(Protocol):
    """Anything that can name an encoded ALU word."""

    def reverse_lookup(self, word: int) -> Optional[str]: ...


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    Represents a single disassembled J1 instruction.

    Attributes:
        address: Byte address of the instruction
        word: The encoded 16-bit word
        kind: Instruction class
        text: Rendered mnemonic, as it appears in listings
        operand: Literal value (PUSH) or target byte address (branches)
        has_return: True if an ALU word carries a folded return
    """
    address: int
    word: int
    kind: InstructionClass
    text: str
    operand: Optional[int] = None
    has_return: bool = False

    def __str__(self) -> str:
        return f"{self.word:04x}  // {self.address:04x}: {self.text}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"0x{self.address:04x}",
            "word": f"0x{self.word:04x}",
            "kind": str(self.kind),
            "text": self.text,
            "operand": self.operand,
            "has_return": self.has_return,
        }


# =============================================================================
# Decoding
# =============================================================================

def decode_alu(word: int, microprograms: Optional[MicroprogramLookup]) -> tuple[str, bool]:
    """
    Name an ALU word.

    Returns:
        (text, has_return)
    """
    has_return = False
    if (word & RETURN_DETECT_MASK) == RETURN_BITS and word != PLAIN_RETURN:
        has_return = True
        word &= ~RETURN_DETECT_MASK

    name = microprograms.reverse_lookup(word) if microprograms is not None else None
    if name is not None:
        return (f"{name}, RETURN" if has_return else name), has_return
    if has_return:
        return "RETURN", True
    return UNKNOWN_MNEMONIC, False


def decode(
    address: int,
    word: int,
    microprograms: Optional[MicroprogramLookup] = None,
) -> DisassembledInstruction:
    """Decode one instruction word."""
    kind = instruction_class(word)

    if kind is InstructionClass.LITERAL:
        value = word & LITERAL_MASK
        return DisassembledInstruction(address, word, kind, f"PUSH {value}", operand=value)

    if kind in BRANCH_MNEMONICS:
        target = branch_target(word) * 2
        text = f"{BRANCH_MNEMONICS[kind]} 0x{target:04x}"
        return DisassembledInstruction(address, word, kind, text, operand=target)

    text, has_return = decode_alu(word, microprograms)
    return DisassembledInstruction(address, word, kind, text, has_return=has_return)


def disassemble(
    address: int,
    word: int,
    microprograms: Optional[MicroprogramLookup] = None,
) -> str:
    """
    Render one instruction word as text.

    Args:
        address: Byte address of the word
        word: Encoded instruction
        microprograms: Table used to name ALU words

    Returns:
        Mnemonic text such as "PUSH 5", "JUMP 0x0000" or "dup, RETURN"
    """
    return decode(address, word, microprograms).text


# =============================================================================
# J1 Disassembler
# =============================================================================

class J1Disassembler:
    """
    Disassembler for J1 program images.

    Attributes:
        microprograms: Table used to name ALU words (optional)
    """

    def __init__(self, microprograms: Optional[MicroprogramLookup] = None):
        self.microprograms = microprograms

    def disassemble_one(self, word: int, address: int = 0) -> DisassembledInstruction:
        """
        Disassemble a single word.

        Args:
            word: Encoded instruction
            address: Byte address of the word
        """
        return decode(address, word, self.microprograms)

    def disassemble(
        self,
        words: list[int],
        start_address: int = 0,
        count: Optional[int] = None,
    ) -> list[DisassembledInstruction]:
        """
        Disassemble a sequence of words.

        Args:
            words: Instruction words, in program order
            start_address: Byte address of the first word
            count: Maximum number of words to decode (default: all)
        """
        if count is not None:
            words = words[:count]
        return [
            decode(start_address + index * 2, word, self.microprograms)
            for index, word in enumerate(words)
        ]

    @staticmethod
    def words_from_bytes(data: bytes, byte_order: str = "big") -> list[int]:
        """
        Split a raw image into 16-bit words.

        Raises:
            ValueError: If the data has an odd number of bytes
        """
        if len(data) % 2:
            raise ValueError(f"image length {len(data)} is not a whole number of words")
        return [
            int.from_bytes(data[offset:offset + 2], byte_order)
            for offset in range(0, len(data), 2)
        ]
