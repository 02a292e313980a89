"""
J1 Assembler Error Hierarchy
============================

This module defines the exception hierarchy for the J1 toolchain.
All exceptions inherit from J1Error, allowing callers to catch every
toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
J1Error (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - bad numbers, unterminated comments, unknown words
    ├── UndefinedSymbolError - label still unresolved after the last token
    ├── DuplicateSymbolError - label defined twice
    ├── BranchRangeError - branch target outside the 13-bit word space
    ├── MacroError - malformed << ... >> microprogram definition
    ├── ImageCapacityError - program image would exceed 8192 words
    └── SourceFileError - source cannot be read or output cannot be written

Design Philosophy
-----------------
Every assembler error is fatal. There is no recovery mode: the first
problem aborts assembly and the exception travels up to whoever started
the run (normally the command-line driver, which turns it into a nonzero
exit status).

Error messages are formatted as:
    filename:line: error: description
    filename:line: >> raw source line <<
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class J1Error(Exception):
    """
    Base exception for all J1 toolchain errors.

        try:
            assembler.assemble_file("program.fs")
        except J1Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a position in source code for error reporting.

    The J1 source language is whitespace-tokenized and the diagnostics
    only ever name a line, so no column is tracked.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed, 0 before the first line is read)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        """Format as 'filename:line' for error messages."""
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(J1Error):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        source_line: The raw text of the offending line (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and source context.

        Example output:
            blink.fs:12: error: cannot process 'dorp'
            blink.fs:12: >> : loop dorp B loop <<
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line and self.location:
            parts.append(f"{self.location}: >> {self.source_line} <<")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Lexical or structural error in assembly source.

    Examples:
        - Token expected to be a number is not one
        - Number does not fit in 16 bits
        - Unterminated ( comment
        - Missing operand after CALL, B, BZ, PUSH or :
        - Word that is neither a mnemonic nor a defined microprogram
    """
    pass


class UndefinedSymbolError(AssemblerError):
    """
    Reference to a label that was never defined.

    Raised once all input has been consumed and a label still has
    pending fixups. The location is that of the first reference.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        super().__init__(
            f"undefined label '{symbol}'",
            location=location,
            source_line=source_line,
        )


class DuplicateSymbolError(AssemblerError):
    """
    Label defined more than once.

    Labels are resolved exactly once; a second definition of a
    resolved label is always an error, even at the same address.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location
        super().__init__(
            f"cannot redefine '{symbol}'",
            location=location,
            source_line=source_line,
        )

    def _format_message(self) -> str:
        message = super()._format_message()
        if self.original_location:
            message += f"\nnote: '{self.symbol}' was first defined at {self.original_location}"
        return message


class BranchRangeError(AssemblerError):
    """
    Branch target is outside the addressable program space.

    Jump, conditional jump and call instructions carry a 13-bit word
    index, so the reachable range is 0x0000-0x1FFF words.
    """

    def __init__(
        self,
        target: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.target = target
        super().__init__(
            f"branch target 0x{target:x} invalid",
            location=location,
            source_line=source_line,
        )


class MacroError(AssemblerError):
    """
    Error in a microprogram (<< name ... >>) definition.

    Raised when the input ends before the name or before the closing >>.
    """
    pass


class ImageCapacityError(AssemblerError):
    """
    Program image is full.

    The J1 program space holds 8192 words; emitting one more word is fatal.
    """
    pass


class SourceFileError(AssemblerError):
    """
    A source file cannot be read or an output file cannot be written.

    Attributes:
        path: The file involved
        reason: Operating system error text
    """

    def __init__(self, path: str, reason: str, writing: bool = False):
        self.path = path
        self.reason = reason
        verb = "write to" if writing else "open"
        super().__init__(f"cannot {verb} '{path}': {reason}")
