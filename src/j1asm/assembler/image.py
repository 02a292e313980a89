"""
J1 Program Image
================

The program image is the assembler's output buffer: a sequence of 16-bit
words indexed by the program counter. Words are appended by emit() and a
branch word's target field may later be rewritten by patch() once the
label it refers to is resolved.
"""

from typing import Optional

from j1asm.cpu import IMAGE_CAPACITY, TARGET_MASK, WORD_MASK, with_branch_target
from j1asm.errors import BranchRangeError, ImageCapacityError, SourceLocation


class ProgramImage:
    """
    Fixed-capacity buffer of instruction words.

    Attributes:
        capacity: Maximum number of words (8192 for the J1)
    """

    def __init__(self, capacity: int = IMAGE_CAPACITY):
        self.capacity = capacity
        self._words: list[int] = []

    def __len__(self) -> int:
        return len(self._words)

    def __getitem__(self, index: int) -> int:
        return self._words[index]

    @property
    def pc(self) -> int:
        """Word index of the next free slot."""
        return len(self._words)

    @property
    def last(self) -> Optional[int]:
        """The most recently emitted word, or None if nothing was emitted."""
        return self._words[-1] if self._words else None

    def words(self) -> list[int]:
        """Return a copy of the emitted words."""
        return list(self._words)

    def emit(
        self,
        word: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> int:
        """
        Append a word.

        Returns:
            The word index it was stored at

        Raises:
            ImageCapacityError: If the image is already full
        """
        if len(self._words) >= self.capacity:
            raise ImageCapacityError(
                f"program exceeds {self.capacity} words", location, source_line
            )
        self._words.append(word & WORD_MASK)
        return len(self._words) - 1

    def replace_last(self, word: int) -> None:
        """Overwrite the most recently emitted word."""
        self._words[-1] = word & WORD_MASK

    def patch(
        self,
        pc: int,
        target: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        """
        Point the branch word at pc to target.

        Only the low 13 bits change; the class bits are kept.

        Raises:
            BranchRangeError: If target does not fit in 13 bits
        """
        if target > TARGET_MASK:
            raise BranchRangeError(target, location, source_line)
        self._words[pc] = with_branch_target(self._words[pc], target)

    def to_bytes(self, byte_order: str = "big") -> bytes:
        """Serialize the image as 2 bytes per word."""
        return b"".join(word.to_bytes(2, byte_order) for word in self._words)
