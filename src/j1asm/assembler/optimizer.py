"""
J1 RETURN Peephole Optimizer
============================

The J1 can return from a subroutine in the same cycle as it performs an
ALU operation, and a call that is immediately followed by a return can be
replaced by a plain jump. The RETURN mnemonic therefore never blindly
emits a word; it first looks at the word emitted just before it.

Supported Rewrites
------------------
1. **Fold into ALU**: the previous word is an ALU operation that leaves
   R->PC, T->R and the return stack alone. The return bits (R->PC, R-)
   are OR-ed into it and no word is added.

       dup RETURN      ->  one word: "dup, RETURN"

2. **Tail call**: the previous word is a CALL. Its class is changed to
   JUMP and no word is added; the callee's own return then goes straight
   back to our caller.

       CALL worker RETURN  ->  JUMP worker

3. **Otherwise**: a dedicated return word (ALU T R->PC R-) is emitted.

Labels are not considered. A RETURN right after a label definition still
rewrites the preceding word.

Usage
-----
>>> from j1asm.assembler.image import ProgramImage
>>> from j1asm.assembler.optimizer import PeepholeOptimizer
>>> image = ProgramImage()
>>> image.emit(0x4010)       # CALL 0x0020
0
>>> PeepholeOptimizer().emit_return(image)
>>> hex(image[0])
'0x10'
"""

from dataclasses import dataclass
from typing import Optional
import logging

from j1asm.assembler.image import ProgramImage
from j1asm.cpu import (
    InstructionClass,
    PLAIN_RETURN,
    RETURN_BITS,
    can_fold_return,
    instruction_class,
)
from j1asm.errors import AssemblySyntaxError, SourceLocation

logger = logging.getLogger(__name__)


# =============================================================================
# Optimization Statistics
# =============================================================================

@dataclass
class OptimizationStats:
    """
    Counts of each RETURN rewrite.

    Attributes:
        folded_returns: Returns merged into the preceding ALU word
        tail_calls: CALLs turned into JUMPs
        explicit_returns: Returns that needed their own word
    """
    folded_returns: int = 0
    tail_calls: int = 0
    explicit_returns: int = 0

    @property
    def total_optimizations(self) -> int:
        """Returns handled without emitting a word."""
        return self.folded_returns + self.tail_calls

    @property
    def words_saved(self) -> int:
        return self.total_optimizations

    def __str__(self) -> str:
        lines = ["Optimization Statistics:"]
        if self.folded_returns:
            lines.append(f"  Returns folded into ALU ops: {self.folded_returns}")
        if self.tail_calls:
            lines.append(f"  Tail calls (CALL -> JUMP): {self.tail_calls}")
        if self.explicit_returns:
            lines.append(f"  Explicit return words: {self.explicit_returns}")
        lines.append(f"  Words saved: {self.words_saved}")
        return "\n".join(lines)


# =============================================================================
# Peephole Optimizer
# =============================================================================

class PeepholeOptimizer:
    """
    Applies the RETURN rewrites to a program image.

    Attributes:
        stats: Counts of the rewrites applied so far
    """

    def __init__(self) -> None:
        self.stats = OptimizationStats()

    def emit_return(
        self,
        image: ProgramImage,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        """
        Emit a subroutine return, reusing the previous word when possible.

        Raises:
            AssemblySyntaxError: If nothing has been emitted yet
            ImageCapacityError: If a return word is needed and the image is full
        """
        previous = image.last
        if previous is None:
            raise AssemblySyntaxError(
                "RETURN with no preceding instruction", location, source_line
            )

        if can_fold_return(previous):
            image.replace_last(previous | RETURN_BITS)
            self.stats.folded_returns += 1
            logger.debug("folded return into 0x%04x at 0x%x", previous, image.pc - 1)
        elif instruction_class(previous) is InstructionClass.CALL:
            image.replace_last(previous & ~InstructionClass.CALL.value)
            self.stats.tail_calls += 1
            logger.debug("tail call at 0x%x", image.pc - 1)
        else:
            image.emit(PLAIN_RETURN, location, source_line)
            self.stats.explicit_returns += 1
