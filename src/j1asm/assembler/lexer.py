"""
J1 Assembly Language Lexer
==========================

This module implements the tokenizer for J1 assembly source. The source
language is deliberately primitive: a token is any maximal run of
characters other than blank, tab, carriage return or newline. There are
no operators, no strings and no statement terminators; meaning comes
entirely from the order of tokens.

Several sources may be queued on one lexer. When one runs out the next
takes over transparently, so a program split across files forms a single
token stream and a single address space.

Number Formats
--------------
Numeric literals are only meaningful after PUSH and inside microprogram
definitions, so they are parsed on demand by parse_number() rather than
classified by the lexer.

| Format      | Prefix   | Example  | Value |
|-------------|----------|----------|-------|
| Decimal     | (none)   | 123, -1  | 123   |
| Hexadecimal | 0x       | 0x7F     | 127   |
| Octal       | 0o or 0  | 0o177    | 127   |
| Binary      | 0b       | 0b1010   | 10    |

Example
-------
>>> from j1asm.assembler.lexer import Lexer
>>> lexer = Lexer()
>>> lexer.add_source(": start PUSH 5\\n  B start\\n", "demo.fs")
>>> [token.text for token in lexer.tokenize()]
[':', 'start', 'PUSH', '5', 'B', 'start']
"""

from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional
import io
import re

from j1asm.errors import AssemblySyntaxError, SourceFileError, SourceLocation


# Token boundaries are exactly these four characters
TOKEN_PATTERN = re.compile(r"[^ \t\r\n]+")

NUMBER_PATTERN = re.compile(
    r"""
    [+-]?
    (?:
        0[xX][0-9a-fA-F]+     # hexadecimal
      | 0[oO][0-7]+           # octal, Python style
      | 0[bB][01]+            # binary
      | 0[0-7]*               # octal, C style (and plain zero)
      | [1-9][0-9]*           # decimal
    )
    """,
    re.VERBOSE,
)

# Accept anything representable in 16 bits, signed or unsigned
MIN_NUMBER = -0x8000
MAX_NUMBER = 0xFFFF


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single whitespace-delimited token.

    Attributes:
        text: The token characters
        line: Line number in source (1-indexed)
        filename: Name of the source the token came from
    """
    text: str
    line: int
    filename: str

    def __repr__(self) -> str:
        return f"Token({self.text!r}, {self.filename}:{self.line})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line)

    def matches(self, word: str) -> bool:
        """Case-insensitive comparison against a keyword."""
        return self.text.casefold() == word.casefold()


# =============================================================================
# Numeric Literals
# =============================================================================

def parse_number(
    text: str,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
) -> int:
    """
    Parse an integer literal into its unsigned 16-bit representation.

    Negative values are returned in two's complement, so "-1" gives 0xFFFF.

    Args:
        text: Token text
        location: Where the token appeared (for error messages)
        source_line: Raw line containing the token (for error messages)

    Returns:
        Value in the range 0x0000-0xFFFF

    Raises:
        AssemblySyntaxError: If the text is not a number or does not
            fit in 16 bits
    """
    if not NUMBER_PATTERN.fullmatch(text):
        raise AssemblySyntaxError(f"'{text}' is not a number", location, source_line)

    sign = 1
    digits = text
    if digits[0] in "+-":
        sign = -1 if digits[0] == "-" else 1
        digits = digits[1:]

    if len(digits) > 1 and digits[0] == "0" and digits[1].isdigit():
        value = int(digits, 8)
    else:
        value = int(digits, 0)
    value *= sign

    if not MIN_NUMBER <= value <= MAX_NUMBER:
        raise AssemblySyntaxError(f"{value} is not a 16bit number", location, source_line)

    return value & 0xFFFF


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Streams tokens from one or more queued sources.

    The lexer reads a line at a time. Every line read bumps the line
    counter and becomes the current line for diagnostics, even when it
    holds no tokens; blank lines are simply skipped by reading again.
    Line numbers restart at 1 for each source.

    Once every source is exhausted next_token() returns None, and keeps
    doing so. No real token can be None, so it doubles as a loop sentinel.

    Usage:
        lexer = Lexer()
        lexer.add_source(text, "main.fs")
        while (token := lexer.next_token()) is not None:
            ...

    Attributes:
        filename: Name of the source currently being read
        line_number: Line number of the current line (0 before any line)
        current_line: Raw text of the current line, without its newline
    """

    def __init__(self) -> None:
        self._sources: deque[tuple[str, str]] = deque()
        self._lines: Optional[Iterator[str]] = None
        self._pending: deque[str] = deque()
        self.filename = "<input>"
        self.line_number = 0
        self.current_line = ""

    # =========================================================================
    # Source Management
    # =========================================================================

    def add_source(self, text: str, filename: str = "<input>") -> None:
        """Queue source text behind any sources already queued."""
        self._sources.append((text, filename))

    def add_file(self, path: str | Path) -> None:
        """
        Read a source file and queue its contents.

        Raises:
            SourceFileError: If the file cannot be read
        """
        path = Path(path)
        try:
            text = path.read_text()
        except (OSError, UnicodeDecodeError) as e:
            raise SourceFileError(str(path), getattr(e, "strerror", None) or str(e)) from e
        self.add_source(text, str(path))

    # =========================================================================
    # Position
    # =========================================================================

    @property
    def location(self) -> SourceLocation:
        """Location of the most recently read line."""
        return SourceLocation(self.filename, self.line_number)

    def error(self, message: str) -> AssemblySyntaxError:
        """Build a syntax error positioned at the current line."""
        return AssemblySyntaxError(message, self.location, self.current_line)

    # =========================================================================
    # Tokenizing
    # =========================================================================

    def _read_line(self) -> bool:
        """
        Advance to the next physical line, moving to the next source
        when the current one runs out.

        Returns:
            False once all sources are exhausted
        """
        while True:
            if self._lines is not None:
                line = next(self._lines, None)
                if line is not None:
                    self.line_number += 1
                    self.current_line = line.rstrip("\r\n")
                    self._pending.extend(TOKEN_PATTERN.findall(line))
                    return True
                self._lines = None

            if not self._sources:
                return False

            text, self.filename = self._sources.popleft()
            self._lines = iter(io.StringIO(text))
            self.line_number = 0

    def next_token(self) -> Optional[Token]:
        """
        Return the next token, or None at the end of all input.
        """
        while not self._pending:
            if not self._read_line():
                return None
        return Token(self._pending.popleft(), self.line_number, self.filename)

    def tokenize(self) -> Iterator[Token]:
        """Yield every remaining token."""
        while (token := self.next_token()) is not None:
            yield token
