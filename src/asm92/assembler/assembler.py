"""
asm92 Assembler - Main Interface
================================

This module provides the main Assembler class, the primary interface for
assembling source code. It owns the encoding table (built-in defaults plus
any mapping table) and drives the two-pass code generator.

Example Usage
-------------
>>> from asm92.assembler import Assembler
>>>
>>> asm = Assembler()
>>> count = asm.load_mapping_string('''
... CMP X      : 20
... BRZ X      : 82
... ''')
>>> code = asm.assemble_string('''
... start:
...     mov $50, 12
...     add $50, 05
...     jmp start
... ''')
>>> print(f"Generated {len(code)} bytes")
Generated 8 bytes
>>>
>>> # Assemble straight to a RAM image file
>>> asm.assemble_file("prog.asm", "ram.b")

Command-Line Usage
------------------
    $ asm92 prog.asm -o ram.b -m mapping.conf -l prog.lst
"""

from pathlib import Path
from typing import Optional
import logging

from asm92.config import AssemblerConfig
from asm92.assembler.branches import ALU_CARRY_ADJUST
from asm92.assembler.codegen import (
    CodeGenerator,
    TraceEntry,
    TraceSink,
    output_artifact,
)
from asm92.assembler.encoding import EncodingTable
from asm92.assembler.mapping import load_mapping_file, load_mapping_string

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main asm92 assembler class.

    Attributes:
        table: The encoding table used for MPC lookups
        carry_adjust: Backward branch correction (ALU_CARRY_ADJUST)
    """

    def __init__(self, carry_adjust: int = ALU_CARRY_ADJUST,
                 table: Optional[EncodingTable] = None,
                 trace: Optional[TraceSink] = None):
        """
        Initialize the assembler.

        Args:
            carry_adjust: 2 when the PSW carry-out feeds the ALU carry-in,
                          1 otherwise
            table: Encoding table to start from (default: built-in mappings)
            trace: Optional callback receiving each emitted byte
        """
        self.table = table if table is not None else EncodingTable()
        self.carry_adjust = carry_adjust
        self._codegen = CodeGenerator(self.table, carry_adjust, trace)

    @classmethod
    def from_config(cls, config: AssemblerConfig,
                    trace: Optional[TraceSink] = None) -> "Assembler":
        """
        Create an assembler from a configuration.

        The configured mapping table is loaded if it exists.
        """
        asm = cls(carry_adjust=config.carry_adjust, trace=trace)
        asm.load_mapping(config.mapping_file, missing_ok=True)
        return asm

    # =========================================================================
    # Configuration
    # =========================================================================

    def load_mapping(self, filepath: str | Path, missing_ok: bool = True) -> int:
        """
        Load an instruction mapping table file.

        Args:
            filepath: Mapping table path
            missing_ok: If True (default), a missing file is not an error

        Returns:
            Number of entries loaded
        """
        return load_mapping_file(filepath, self.table, missing_ok=missing_ok)

    def load_mapping_string(self, text: str, filename: str = "<mapping>") -> int:
        """
        Load instruction mapping entries from text.

        Returns:
            Number of entries loaded
        """
        return load_mapping_string(text, self.table, filename)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Assembled bytes

        Raises:
            AssemblerError: If assembly fails
        """
        return self._codegen.generate(source, filename)

    def assemble_file(self, filepath: str | Path,
                      output: str | Path | None = None) -> bytes:
        """
        Assemble source code from a file.

        When an output path is given, bytes are written to it as pass 2
        emits them. If either pass fails the output file is deleted, so a
        half-written RAM image is never left behind.

        Args:
            filepath: Path to assembly source file
            output: Optional binary output path

        Returns:
            Assembled bytes

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        source = filepath.read_text()
        logger.debug("Assembling %s", filepath)

        if output is None:
            return self._codegen.generate(source, str(filepath))

        with output_artifact(output) as stream:
            code = self._codegen.generate(source, str(filepath), sink=stream)
        logger.debug("%s successfully assembled to %s in %d bytes.",
                     filepath, output, self._codegen.bytes_written)
        return code

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_code(self) -> bytes:
        """Get the assembled bytes of the last run."""
        return self._codegen.get_code()

    def get_size(self) -> int:
        """Get the number of bytes emitted by the last run."""
        return self._codegen.bytes_written

    def get_base_address(self) -> int:
        """Get the address the first byte is loaded at (base_addr)."""
        return self._codegen.get_base_address()

    def get_symbols(self) -> dict[str, int]:
        """
        Get the label table.

        Returns:
            Dictionary mapping label names to addresses
        """
        return self._codegen.get_symbols()

    def get_trace(self) -> list[TraceEntry]:
        """Get the per-byte trace of the last run."""
        return self._codegen.get_trace()

    def get_listing(self) -> str:
        """Get the assembly listing as a string."""
        return self._codegen.get_listing()

    def write_binary(self, filepath: str | Path) -> None:
        """
        Write the assembled bytes of the last run as a raw binary file.

        Args:
            filepath: Output file path
        """
        code = self.get_code()
        Path(filepath).write_bytes(code)
        logger.info("Wrote %d bytes to %s", len(code), filepath)

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing shows each emitted byte with its address and source
        line, followed by the label table.
        """
        self._codegen.write_listing(filepath)
        logger.info("Wrote listing to %s", filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        """Write label table file."""
        self._codegen.write_symbols(filepath)
        logger.info("Wrote labels to %s", filepath)


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>",
             carry_adjust: int = ALU_CARRY_ADJUST) -> bytes:
    """
    Convenience function to assemble source code with built-in mappings.

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(carry_adjust=carry_adjust)
    return asm.assemble_string(source, filename)


def assemble_file(filepath: str | Path, output: str | Path | None = None,
                  mapping_file: str | Path | None = None,
                  carry_adjust: int = ALU_CARRY_ADJUST) -> bytes:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file
        output: Optional binary output path
        mapping_file: Optional mapping table (skipped if missing)
        carry_adjust: Backward branch correction

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(carry_adjust=carry_adjust)
    if mapping_file is not None:
        asm.load_mapping(mapping_file)
    return asm.assemble_file(filepath, output)
