"""
J1 Instruction Set Definition
=============================

This module defines the J1 instruction encoding: instruction classes,
branch target fields, the named micro-op bit constants that microprogram
definitions are built from, and the fixed words the assembler emits for
its built-in mnemonics.

Every J1 instruction is one 16-bit word. Program memory is addressed in
words; a 13-bit field is enough to reach all 8192 of them.

Word Format
-----------
| Bits 15-13 | Class           | Remaining bits                    |
|------------|-----------------|-----------------------------------|
| 1xx        | literal push    | 14-0: unsigned 15-bit immediate   |
| 000        | jump            | 12-0: target word index           |
| 001        | jump if zero    | 12-0: target word index           |
| 010        | call            | 12-0: target word index           |
| 011        | ALU             | see below                         |

ALU words::

    bit  12    R->PC (return)
    bits 11-8  ALU select (T, N, T+N, T&N, T|N, T^N, ~T, N==T, N<T,
               N>>T, T-1, R, [T], N<<T, depth, Nu<T)
    bit  7     T->N
    bit  6     T->R
    bit  5     N->[T]
    bits 3-2   return stack delta  (00 none, 01 +1, 11 -1, 10 -2)
    bits 1-0   data stack delta    (same encoding)

Reference
---------
- James Bowman, "J1: a small Forth CPU core for FPGAs" (EuroForth 2010)
"""

from enum import Enum


# =============================================================================
# Program Space
# =============================================================================

WORD_MASK = 0xFFFF
IMAGE_CAPACITY = 8192          # Words of program memory
TARGET_MASK = 0x1FFF           # Branch target field (13 bits)
CLASS_MASK = 0xE000            # Top three bits select the class
LITERAL_FLAG = 0x8000
LITERAL_MASK = 0x7FFF


# =============================================================================
# Instruction Classes
# =============================================================================

class InstructionClass(Enum):
    """
    J1 instruction classes, keyed by the bits that identify them.

    LITERAL is identified by bit 15 alone; the rest by bits 15-13.
    """
    JUMP = 0x0000
    JUMPZ = 0x2000
    CALL = 0x4000
    ALU = 0x6000
    LITERAL = 0x8000

    def __str__(self) -> str:
        return self.name.lower()


# Branch class words as emitted by CALL / B / BZ before their target is known
BRANCH_OPCODES: dict[str, int] = {
    "CALL": InstructionClass.CALL.value,
    "B": InstructionClass.JUMP.value,
    "BZ": InstructionClass.JUMPZ.value,
}


# =============================================================================
# Micro-op Constants
# =============================================================================
# Names accepted inside << name ... >> microprogram definitions. Each one
# contributes its bits to the word being built; names are matched
# case-insensitively. The ALU selects occupy bits 11-8.
# =============================================================================

MICRO_OPS: dict[str, int] = {
    "ALU": 0x6000,

    # Stack and memory movement
    "R->PC": 0x1000,
    "T->N": 0x0080,
    "T->R": 0x0040,
    "N->[T]": 0x0020,
    "R+": 0x0004,
    "R-": 0x000C,
    "R-2": 0x0008,
    "D+": 0x0001,
    "D-": 0x0003,
    "D-2": 0x0002,

    # ALU selects
    "T": 0x0000,
    "N": 0x0100,
    "T+N": 0x0200,
    "T&N": 0x0300,
    "T|N": 0x0400,
    "T^N": 0x0500,
    "~T": 0x0600,
    "N==T": 0x0700,
    "N<T": 0x0800,
    "N>>T": 0x0900,
    "T-1": 0x0A00,
    "R": 0x0B00,
    "[T]": 0x0C00,
    "N<<T": 0x0D00,
    "dsp": 0x0E00,
    "Nu<T": 0x0F00,
}

# Case-folded view used for lookups
_MICRO_OPS_FOLDED: dict[str, int] = {name.casefold(): bits for name, bits in MICRO_OPS.items()}


# =============================================================================
# Fixed Encodings
# =============================================================================

ALU_INVERT = 0x6600            # ALU ~T, completes a negative PUSH

STORE_SEQUENCE = (
    0x6123,                    # ALU N D- N->[T]
    0x6103,                    # ALU N D-
)

LOAD_SEQUENCE = (
    0x6000,                    # ALU T
    0x6C00,                    # ALU [T]
)

# Return handling. RETURN_BITS is R->PC together with R-. RETURN_FOLD_MASK
# selects the class bits, R->PC, T->R and the return stack delta; an ALU
# word may absorb a return only when all of those except the class are
# clear. RETURN_DETECT_MASK drops the class bits so the disassembler can
# spot a folded return in any ALU word.
RETURN_BITS = 0x100C
RETURN_FOLD_MASK = 0xF04C
RETURN_DETECT_MASK = 0x104C
PLAIN_RETURN = 0x700C          # ALU T R->PC R-


# =============================================================================
# Lookup and Decoding Helpers
# =============================================================================

def get_micro_op(name: str) -> int | None:
    """
    Look up a micro-op constant by name (case-insensitive).

    Args:
        name: Micro-op name such as "T+N" or "d-"

    Returns:
        The bit pattern, or None if the name is not a micro-op
    """
    return _MICRO_OPS_FOLDED.get(name.casefold())


def instruction_class(word: int) -> InstructionClass:
    """Return the class of an encoded instruction word."""
    if word & LITERAL_FLAG:
        return InstructionClass.LITERAL
    return InstructionClass(word & CLASS_MASK)


def branch_target(word: int) -> int:
    """Return the 13-bit target word index of a branch-class word."""
    return word & TARGET_MASK


def with_branch_target(word: int, target: int) -> int:
    """Replace the target field of a branch-class word, keeping its class bits."""
    return (word & CLASS_MASK) | (target & TARGET_MASK)


def encode_literal(value: int) -> tuple[int, ...]:
    """
    Encode a 16-bit value as the words that push it.

    The literal field only holds 15 bits. A value with bit 15 set is
    pushed as its complement followed by an ALU ~T, which restores it.

    Args:
        value: Unsigned 16-bit value

    Returns:
        One or two instruction words
    """
    value &= WORD_MASK
    if value & LITERAL_FLAG:
        return (LITERAL_FLAG | (~value & LITERAL_MASK), ALU_INVERT)
    return (LITERAL_FLAG | value,)


def can_fold_return(word: int) -> bool:
    """
    Check whether a return can be merged into an existing word.

    True for ALU words that do not already set R->PC, T->R or move the
    return stack.
    """
    return (word & RETURN_FOLD_MASK) == InstructionClass.ALU.value
