"""
Instruction Encoding
====================

This module defines how an instruction is turned into the byte that the
logic circuit actually executes. The circuit does not decode opcodes: each
opcode byte is an MPC (Micro Program Counter) address, the entry point of
the instruction's microcode in the Micro Store ROM.

Instruction Signature
---------------------
An instruction is identified by its mnemonic and the *types* of its two
operand slots, packed into a 32-bit signature (the "icode"):

    31        24 23        16 15         8 7      4 3      0
    .---------------------------------------------------------.
    |  char 0    |  char 1    |  char 2    |  op1   |  op2   |
    *---------------------------------------------------------*

Characters are ASCII codes of the upper-cased mnemonic; unused characters
are $00. Operand type codes:

| Operand Type   | Code |
|----------------|------|
| No operand     | 0x0  |
| Immediate      | 0x1  |
| Direct address | 0x2  |

Example: ADD A, X (A = direct address, X = immediate)

    'A' = $41, 'D' = $44, 'D' = $44, op1 = 2, op2 = 1  ->  $41444421

The encoding table maps signatures to MPC addresses. A handful of defaults
are built in; the rest come from the mapping table (see mapping.py).
"""

from enum import IntEnum
from typing import Iterator, Optional

from asm92.errors import (
    InvalidMnemonicError,
    SourceLocation,
    UnmappedInstructionError,
)


# =============================================================================
# Operand Types
# =============================================================================

class OperandType(IntEnum):
    """Operand slot type, stored as a 4-bit field of the signature."""
    NONE = 0        # Slot unused
    IMMEDIATE = 1   # Literal value (no '$' prefix)
    DIRECT = 2      # Memory address ('$' prefix)

    def __str__(self) -> str:
        return {
            OperandType.NONE: "",
            OperandType.IMMEDIATE: "X",
            OperandType.DIRECT: "A",
        }[self]


# =============================================================================
# Instruction Set Constants
# =============================================================================

MAX_MNEMONIC_LENGTH = 3

# Jump/branch mnemonics take a single immediate operand that may be a label.
# Those starting with 'B' are PC-relative; JMP/JSR are absolute.
JUMP_MNEMONICS = frozenset({"JMP", "JSR", "BR", "BRZ", "BRN"})

# Built-in signature -> MPC entries, used when no mapping table overrides them
DEFAULT_ENCODINGS: dict[int, int] = {
    0x484C5400: 0x03,   # HLT
    0x4D4F5621: 0x04,   # MOV A, X
    0x41444421: 0x0B,   # ADD A, X
    0x4A4D5010: 0x50,   # JMP X
    0x42520010: 0x80,   # BR X
}


def is_jump(mnemonic: str) -> bool:
    """Check if a mnemonic is a jump or branch."""
    return mnemonic.upper() in JUMP_MNEMONICS


def is_relative_branch(mnemonic: str) -> bool:
    """Check if a jump mnemonic is PC-relative (BR, BRZ, BRN)."""
    mnemonic = mnemonic.upper()
    return mnemonic in JUMP_MNEMONICS and mnemonic.startswith("B")


def normalize_mnemonic(
    text: str,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
) -> str:
    """
    Upper-case and validate a mnemonic.

    Raises:
        InvalidMnemonicError: If the mnemonic is empty, longer than three
            characters, or not made of ASCII letters
    """
    mnemonic = text.upper()
    # Each character must fit one byte of the 32-bit signature
    if (not mnemonic or len(mnemonic) > MAX_MNEMONIC_LENGTH
            or not (mnemonic.isascii() and mnemonic.isalpha())):
        raise InvalidMnemonicError(mnemonic, location, source_line)
    return mnemonic


def instruction_signature(
    mnemonic: str,
    op1: OperandType = OperandType.NONE,
    op2: OperandType = OperandType.NONE,
) -> int:
    """
    Compute the 32-bit signature of an instruction shape.

    Args:
        mnemonic: 1-3 letter mnemonic (any case)
        op1: Type of the first operand slot
        op2: Type of the second operand slot

    Returns:
        The signature used as the encoding table key
    """
    mnemonic = normalize_mnemonic(mnemonic)
    icode = 0
    for i, char in enumerate(mnemonic):
        icode |= ord(char) << (8 * (3 - i))
    icode |= (int(op1) & 0x0F) << 4
    icode |= int(op2) & 0x0F
    return icode


def describe_signature(icode: int) -> str:
    """
    Render a signature in mapping table notation.

    >>> describe_signature(0x41444421)
    'ADD A, X'
    """
    chars = [(icode >> shift) & 0xFF for shift in (24, 16, 8)]
    mnemonic = "".join(chr(c) for c in chars if c)
    operands = [
        str(OperandType(code))
        for code in ((icode >> 4) & 0x0F, icode & 0x0F)
        if code in (OperandType.IMMEDIATE, OperandType.DIRECT)
    ]
    if operands:
        return f"{mnemonic} {', '.join(operands)}"
    return mnemonic


# =============================================================================
# Encoding Table
# =============================================================================

class EncodingTable:
    """
    Signature -> MPC address table.

    Usage:
        table = EncodingTable()
        table.set(instruction_signature("CMP", OperandType.IMMEDIATE), 0x20)
        mpc = table.encode("CMP", [OperandType.IMMEDIATE])
    """

    def __init__(self, entries: Optional[dict[int, int]] = None,
                 include_defaults: bool = True):
        """
        Args:
            entries: Extra entries applied on top of the defaults
            include_defaults: Start from DEFAULT_ENCODINGS (default: True)
        """
        self._entries: dict[int, int] = {}
        if include_defaults:
            self._entries.update(DEFAULT_ENCODINGS)
        if entries:
            for icode, mpc in entries.items():
                self.set(icode, mpc)

    def __contains__(self, icode: int) -> bool:
        return icode in self._entries

    def __getitem__(self, icode: int) -> int:
        return self._entries[icode]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def items(self):
        return self._entries.items()

    def set(self, icode: int, mpc: int) -> None:
        """Insert or overwrite an entry."""
        if not 0 <= mpc <= 0xFF:
            raise ValueError(f"MPC address must be a byte, got {mpc}")
        self._entries[icode & 0xFFFFFFFF] = mpc

    def lookup(self, icode: int) -> Optional[int]:
        """Return the MPC address for a signature, or None."""
        return self._entries.get(icode)

    def copy(self) -> "EncodingTable":
        table = EncodingTable(include_defaults=False)
        table._entries = dict(self._entries)
        return table

    def encode(
        self,
        mnemonic: str,
        operand_types: list[OperandType],
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> int:
        """
        Look up the MPC address for an instruction.

        Args:
            mnemonic: Instruction mnemonic
            operand_types: Types of the operands actually present (0-2)

        Raises:
            UnmappedInstructionError: If no entry exists for the shape
        """
        slots = list(operand_types) + [OperandType.NONE] * (2 - len(operand_types))
        icode = instruction_signature(mnemonic, slots[0], slots[1])
        mpc = self._entries.get(icode)
        if mpc is None:
            raise UnmappedInstructionError(
                describe_signature(icode), icode, location, source_line
            )
        return mpc
