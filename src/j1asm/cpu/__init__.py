"""
J1 CPU Package
==============

CPU architecture definitions shared by the assembler (which encodes
instructions) and the disassembler (which decodes them).

Usage:
    from j1asm.cpu import (
        InstructionClass,
        MICRO_OPS,
        instruction_class,
        encode_literal,
    )
"""

from j1asm.cpu.j1 import (
    # Program space
    WORD_MASK,
    IMAGE_CAPACITY,
    TARGET_MASK,
    CLASS_MASK,
    LITERAL_FLAG,
    LITERAL_MASK,
    # Instruction classes
    InstructionClass,
    BRANCH_OPCODES,
    # Micro-op constants
    MICRO_OPS,
    # Fixed encodings
    ALU_INVERT,
    STORE_SEQUENCE,
    LOAD_SEQUENCE,
    RETURN_BITS,
    RETURN_FOLD_MASK,
    RETURN_DETECT_MASK,
    PLAIN_RETURN,
    # Helpers
    get_micro_op,
    instruction_class,
    branch_target,
    with_branch_target,
    encode_literal,
    can_fold_return,
)

__all__ = [
    "WORD_MASK",
    "IMAGE_CAPACITY",
    "TARGET_MASK",
    "CLASS_MASK",
    "LITERAL_FLAG",
    "LITERAL_MASK",
    "InstructionClass",
    "BRANCH_OPCODES",
    "MICRO_OPS",
    "ALU_INVERT",
    "STORE_SEQUENCE",
    "LOAD_SEQUENCE",
    "RETURN_BITS",
    "RETURN_FOLD_MASK",
    "RETURN_DETECT_MASK",
    "PLAIN_RETURN",
    "get_micro_op",
    "instruction_class",
    "branch_target",
    "with_branch_target",
    "encode_literal",
    "can_fold_return",
]
