"""
J1 Assembler Configuration
==========================

Settings shared by the assembler and its command-line tools. Values can
come from:
- Default values (defined here)
- Environment variables (AssemblerConfig.from_env)
- Command-line options, which override both
"""

from dataclasses import dataclass, field
from pathlib import Path
import os

# Listing file used when no -o is given
DEFAULT_OUTPUT = "out.hex"

BYTE_ORDERS = ("big", "little")

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class AssemblerConfig:
    """
    Configuration for an assembly run.

    Attributes:
        output: Listing file written after a successful run (default: out.hex)
        byte_order: Word byte order for raw binary images ("big" or "little")
        verbose: Report progress and peephole statistics
    """
    output: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT))
    byte_order: str = "big"
    verbose: bool = False

    def __post_init__(self) -> None:
        self.output = Path(self.output)
        self.byte_order = self.byte_order.lower()
        if self.byte_order not in BYTE_ORDERS:
            raise ValueError(
                f"byte order must be one of {', '.join(BYTE_ORDERS)}, not '{self.byte_order}'"
            )

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create an AssemblerConfig from environment variables.

        Environment variables (all optional):
            J1ASM_OUTPUT: Listing file name
            J1ASM_BYTE_ORDER: "big" or "little"
            J1ASM_VERBOSE: 1/true/yes/on to enable verbose output
        """
        config = cls()

        if output := os.environ.get("J1ASM_OUTPUT"):
            config.output = Path(output)

        if byte_order := os.environ.get("J1ASM_BYTE_ORDER"):
            config = cls(output=config.output, byte_order=byte_order)

        if verbose := os.environ.get("J1ASM_VERBOSE"):
            config.verbose = verbose.strip().lower() in _TRUE_VALUES

        return config
