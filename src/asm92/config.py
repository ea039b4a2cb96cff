"""
asm92 Configuration
===================

Assembler configuration: where to find the mapping table, where to write
the RAM image, and how the target circuit's ALU handles carries.
Configuration can come from:
- Default values (defined here)
- Environment variables (AssemblerConfig.from_env)
- Command-line options (which override both)
"""

from dataclasses import dataclass, field
from pathlib import Path
import logging
import os

from asm92.assembler.branches import ALU_CARRY_ADJUST
from asm92.assembler.mapping import DEFAULT_MAPPING_FILE

logger = logging.getLogger(__name__)


DEFAULT_OUTPUT_FILE = "ram.b"

VALID_CARRY_ADJUST = (1, 2)


@dataclass
class AssemblerConfig:
    """
    Configuration for an assembly run.

    Attributes:
        carry_adjust: Backward branch correction. 2 when the PSW carry-out
            is fed into the ALU carry-in, 1 otherwise (default: 2)
        mapping_file: Instruction mapping table (default: mapping.conf)
        output_file: Binary output file (default: ram.b)
        trace: Print the per-byte trace while assembling (default: True)
    """

    carry_adjust: int = ALU_CARRY_ADJUST
    mapping_file: Path = field(default_factory=lambda: Path(DEFAULT_MAPPING_FILE))
    output_file: Path = field(default_factory=lambda: Path(DEFAULT_OUTPUT_FILE))
    trace: bool = True

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create AssemblerConfig from environment variables.

        Environment variables (all optional):
            ASM92_CARRY_ADJUST: 1 or 2
            ASM92_MAPPING: Mapping table path
            ASM92_OUTPUT: Output file path
            ASM92_TRACE: 0/false/no to disable the trace

        Returns:
            AssemblerConfig with values from environment variables
        """
        config = cls()

        if carry := os.environ.get("ASM92_CARRY_ADJUST"):
            try:
                value = int(carry)
            except ValueError:
                value = None
            if value in VALID_CARRY_ADJUST:
                config.carry_adjust = value
            else:
                logger.warning("Ignoring invalid ASM92_CARRY_ADJUST=%r", carry)

        if mapping := os.environ.get("ASM92_MAPPING"):
            config.mapping_file = Path(mapping)

        if output := os.environ.get("ASM92_OUTPUT"):
            config.output_file = Path(output)

        if trace := os.environ.get("ASM92_TRACE"):
            config.trace = trace.strip().lower() not in ("0", "false", "no", "off")

        return config
