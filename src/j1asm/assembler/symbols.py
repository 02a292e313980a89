"""
J1 Symbol Table and Fixup Engine
================================

Labels in J1 source may be used before they are defined. Instead of
making two passes over the source, the assembler keeps a list of pending
patch sites (fixups) on every label that has been referenced but not yet
defined:

    B done          ( emits a jump with target 0, records a fixup )
    ...
    : done          ( resolves 'done' and patches every recorded jump )

References to a label that is already resolved are patched on the spot.
When the last token has been consumed, check_all_resolved() reports any
label that never got a definition.

Label names are case-insensitive. The spelling of the first occurrence is
the one shown in listings and messages.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional
import logging

from j1asm.assembler.image import ProgramImage
from j1asm.errors import DuplicateSymbolError, SourceLocation, UndefinedSymbolError

logger = logging.getLogger(__name__)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class Fixup:
    """
    A branch word waiting for its label.

    Attributes:
        pc: Word index of the branch instruction to patch
        location: Where the reference appeared
        source_line: Raw text of that line
    """
    pc: int
    location: Optional[SourceLocation] = None
    source_line: Optional[str] = None


@dataclass
class Label:
    """
    Symbol table entry.

    Attributes:
        name: Label name as first written
        address: Word index once defined, None while unresolved
        fixups: Pending patch sites, emptied when the label resolves
        defined_at: Where the label was defined
        first_use: Where the label was first mentioned (definition or reference)
    """
    name: str
    address: Optional[int] = None
    fixups: list[Fixup] = field(default_factory=list)
    defined_at: Optional[SourceLocation] = None
    first_use: Optional[SourceLocation] = None
    first_use_line: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return self.address is not None


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Label table with incremental forward-reference resolution.

    The table patches branch words directly in the program image it was
    created with.
    """

    def __init__(self, image: ProgramImage):
        self._image = image
        self._labels: dict[str, Label] = {}

    def __contains__(self, name: str) -> bool:
        return name.casefold() in self._labels

    def __iter__(self) -> Iterator[Label]:
        return iter(self._labels.values())

    def __len__(self) -> int:
        return len(self._labels)

    def get(self, name: str) -> Optional[Label]:
        """Look up a label by name (case-insensitive)."""
        return self._labels.get(name.casefold())

    def _create(
        self,
        name: str,
        location: Optional[SourceLocation],
        source_line: Optional[str],
    ) -> Label:
        label = Label(name=name, first_use=location, first_use_line=source_line)
        self._labels[name.casefold()] = label
        return label

    # =========================================================================
    # Definition and Reference
    # =========================================================================

    def define(
        self,
        name: str,
        pc: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        """
        Bind a label to a word index and patch any earlier references.

        Raises:
            DuplicateSymbolError: If the label is already resolved
            BranchRangeError: If pc cannot be encoded as a branch target
        """
        label = self.get(name)
        if label is None:
            logger.debug("define('%s', 0x%x)", name, pc)
            label = self._create(name, location, source_line)
        elif label.is_resolved:
            raise DuplicateSymbolError(
                name,
                location=location,
                original_location=label.defined_at,
                source_line=source_line,
            )
        else:
            logger.debug("amend-def('%s', 0x%x)", name, pc)

        label.address = pc
        label.defined_at = location
        for fixup in label.fixups:
            self._image.patch(fixup.pc, pc, location, source_line)
        label.fixups.clear()

    def reference(
        self,
        name: str,
        pc: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> None:
        """
        Record that the branch word at pc targets a label.

        The word is patched immediately if the label is known, otherwise
        a fixup is queued on the label.
        """
        label = self.get(name)
        if label is None:
            logger.debug("reference('%s', 0x%x)", name, pc)
            label = self._create(name, location, source_line)
        elif label.is_resolved:
            logger.debug("amend-ref('%s', 0x%x)", name, pc)
            self._image.patch(pc, label.address, location, source_line)
            return

        logger.debug("addfixup('%s', 0x%x)", name, pc)
        label.fixups.append(Fixup(pc, location, source_line))

    # =========================================================================
    # Queries
    # =========================================================================

    def check_all_resolved(self) -> None:
        """
        Verify that every label has been defined.

        Raises:
            UndefinedSymbolError: Naming the first unresolved label
        """
        for label in self._labels.values():
            if not label.is_resolved:
                raise UndefinedSymbolError(
                    label.name,
                    location=label.first_use,
                    source_line=label.first_use_line,
                )

    def unresolved(self) -> list[str]:
        """Names of all labels that are still waiting for a definition."""
        return [label.name for label in self._labels.values() if not label.is_resolved]

    def label_at(self, address: int) -> Optional[str]:
        """Name of the first label defined at a word index, if any."""
        for label in self._labels.values():
            if label.address == address:
                return label.name
        return None

    def get_symbols(self) -> dict[str, int]:
        """Return a dictionary of resolved label names to word indices."""
        return {
            label.name: label.address
            for label in self._labels.values()
            if label.is_resolved
        }
