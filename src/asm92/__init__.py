"""
asm92 - Assembler for the 3P92 Microcoded CPU
=============================================

This package assembles ISA-level source code for the COSC 3P92 CPU into a
RAM image for the logic circuit simulator. The CPU has no opcode decoder:
every instruction byte is an MPC (Micro Program Counter) address, the
start of that instruction's microcode in the Micro Store ROM.

Main Components
---------------
- **assembler**: two-pass assembler (asm92)
    Converts source files (.asm) to raw RAM images (ram.b)

- **config**: assembler configuration (defaults and environment)

- **cli**: the asm92 command-line tool

Quick Start
-----------
Assemble a program:
    >>> from asm92 import Assembler
    >>> asm = Assembler()
    >>> asm.load_mapping("mapping.conf")
    >>> asm.assemble_file("prog.asm", "ram.b")

Or use the command-line tool:
    $ asm92 prog.asm -o ram.b

Source Syntax
-------------
    # this is a comment
    @base_addr=1F       # program is loaded at $1F
    start:
        MOV $04, 3      # (0x04) = 3
        ADD $04, 5      # (0x04) = (0x04) + 5
        BRZ start

Values are hexadecimal; '$' marks a memory address, no prefix an immediate.

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"
__author__ = "Tennyson Demchuk & Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from asm92.assembler import (
    Assembler,
    EncodingTable,
    OperandType,
    assemble,
    assemble_file,
    instruction_signature,
)
from asm92.config import AssemblerConfig
from asm92.errors import (
    Asm92Error,
    AssemblerError,
    AssemblySyntaxError,
    MalformedOperandListError,
    InvalidOperandCharacterError,
    InvalidMnemonicError,
    InvalidLabelError,
    InvalidHexDigitError,
    ValueRangeError,
    UnmappedInstructionError,
    UnresolvableOperandError,
    DuplicateLabelError,
    AddressSpaceExhaustedError,
    DirectiveError,
    InvalidDirectiveSyntaxError,
    UnknownDirectiveError,
    DirectiveOrderError,
    MappingTableError,
    InvalidTableSyntaxError,
    InvalidOperandLetterError,
    SourceLocation,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Assembler
    "Assembler",
    "EncodingTable",
    "OperandType",
    "assemble",
    "assemble_file",
    "instruction_signature",
    "AssemblerConfig",
    # Exception hierarchy
    "Asm92Error",
    "AssemblerError",
    "AssemblySyntaxError",
    "MalformedOperandListError",
    "InvalidOperandCharacterError",
    "InvalidMnemonicError",
    "InvalidLabelError",
    "InvalidHexDigitError",
    "ValueRangeError",
    "UnmappedInstructionError",
    "UnresolvableOperandError",
    "DuplicateLabelError",
    "AddressSpaceExhaustedError",
    "DirectiveError",
    "InvalidDirectiveSyntaxError",
    "UnknownDirectiveError",
    "DirectiveOrderError",
    "MappingTableError",
    "InvalidTableSyntaxError",
    "InvalidOperandLetterError",
    "SourceLocation",
]
