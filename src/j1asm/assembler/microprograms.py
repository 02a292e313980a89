"""
J1 Microprogram Table
=====================

J1 source has almost no built-in ALU mnemonics. Instead a program
defines its own, by naming combinations of micro-op bits:

    << +     ALU T+N D-        >>
    << dup   ALU T T->N D+     >>
    << drop  ALU N D-          >>

Each definition packs its micro-ops into one 16-bit word. Afterwards the
name can be used like any other mnemonic and the disassembler uses the
same table to turn ALU words back into names.

Both lookups are first-match: when a name (or an encoded word) is
defined twice, the earlier definition wins and the later one is shadowed.
"""

from dataclasses import dataclass
from typing import Iterator, Optional
import logging

from j1asm.assembler.lexer import Lexer, parse_number
from j1asm.cpu import get_micro_op
from j1asm.errors import MacroError

logger = logging.getLogger(__name__)

# Closes a << ... >> definition
END_OF_DEFINITION = ">>"


@dataclass(frozen=True)
class Microprogram:
    """
    A named instruction word.

    Attributes:
        name: Name as written in the definition
        word: Encoded 16-bit instruction
    """
    name: str
    word: int

    def __str__(self) -> str:
        return f"{self.name} = ${self.word:04X}"


class MicroprogramTable:
    """
    Insertion-ordered collection of microprograms.
    """

    def __init__(self) -> None:
        self._entries: list[Microprogram] = []
        # First definition per folded name and per word, for O(1) lookups
        self._by_name: dict[str, Microprogram] = {}
        self._by_word: dict[int, Microprogram] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Microprogram]:
        return iter(self._entries)

    def __contains__(self, name: str) -> bool:
        return name.casefold() in self._by_name

    def add(self, name: str, word: int) -> Microprogram:
        """
        Append a microprogram.

        Duplicates are kept but stay invisible to lookups.
        """
        entry = Microprogram(name, word & 0xFFFF)
        self._entries.append(entry)
        self._by_name.setdefault(name.casefold(), entry)
        self._by_word.setdefault(entry.word, entry)
        logger.debug("microprogram %s", entry)
        return entry

    def lookup(self, name: str) -> Optional[int]:
        """Encoded word of the first microprogram with this name (case-insensitive)."""
        entry = self._by_name.get(name.casefold())
        return entry.word if entry else None

    def reverse_lookup(self, word: int) -> Optional[str]:
        """Name of the first microprogram that encodes exactly this word."""
        entry = self._by_word.get(word)
        return entry.name if entry else None

    def define_microprogram(self, lexer: Lexer) -> Microprogram:
        """
        Read a definition body from the lexer and store it.

        Called after the opening << has been consumed. The next token is
        the name; every following token up to >> is either a micro-op
        name or a number, and all of them are OR-ed together.

        Raises:
            MacroError: If the input ends inside the definition
            AssemblySyntaxError: If a token is neither a micro-op nor a number
        """
        name_token = lexer.next_token()
        if name_token is None:
            raise MacroError(
                "EOF while defining microprogram", lexer.location, lexer.current_line
            )

        word = 0
        while True:
            token = lexer.next_token()
            if token is None:
                raise MacroError(
                    f"EOF while defining microprogram '{name_token.text}'",
                    lexer.location,
                    lexer.current_line,
                )
            if token.text == END_OF_DEFINITION:
                break

            bits = get_micro_op(token.text)
            if bits is None:
                bits = parse_number(token.text, token.location, lexer.current_line)
            word |= bits

        return self.add(name_token.text, word)
