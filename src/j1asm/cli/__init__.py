"""
j1asm Command-Line Interface
============================

This package provides command-line tools for the J1 toolchain:

- **j1asm**: J1 assembler
- **j1disasm**: J1 image disassembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

import logging


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


__all__ = ["j1asm", "j1disasm", "setup_logging"]
