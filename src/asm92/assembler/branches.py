"""
Jump and Branch Operand Resolution
==================================

Jump/branch instructions (JMP, JSR, BR, BRZ, BRN) take exactly one
immediate operand, written either as a hex value or as a label name.
The two readings are ambiguous until the label table is consulted, so
both are computed and the label wins when it exists:

    JMP 1A       ->  $1A + base_addr
    JMP loop1    ->  address of loop1 (already base-relocated)

Absolute vs Relative
--------------------
JMP and JSR use the resolved value as an absolute address. BR, BRZ and
BRN are PC-relative: when a label is named, its address is converted to
a signed offset from the branch instruction:

    forward  (target >= PC):  offset = target - (PC + 1)
    backward (target <  PC):  offset = target - (PC + ALU_CARRY_ADJUST)

The +1 accounts for the program counter pointing at the operand byte,
not the opcode byte, while the branch executes. A backward branch adds a
negative two's-complement value, which makes the ALU produce a carry; when
the PSW carry-out is fed back into the ALU carry-in that carry is added
too, hence ALU_CARRY_ADJUST = 2. Set it to 1 for circuits that do not
wire carry-out to carry-in.

Examples (ALU_CARRY_ADJUST = 2):
    BR at $06 to label at $02:  2 - (6 + 2) = -6  ->  $FA
    BR at $02 to label at $06:  6 - (2 + 1) = 3   ->  $03

A hex value written directly after BR is used as the offset as-is; like
every literal jump operand it is relocated by base_addr.
"""

from difflib import get_close_matches
from typing import Mapping, Optional

from asm92.errors import SourceLocation, UnresolvableOperandError
from asm92.assembler.encoding import is_relative_branch
from asm92.assembler.parser import hex_value


ALU_CARRY_ADJUST = 2

# Longest literal accepted in place of a label (one byte)
MAX_LITERAL_DIGITS = 2


def to_signed_byte(value: int) -> int:
    """Interpret a byte as a two's complement signed value."""
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


def relative_offset(target: int, pc: int, carry_adjust: int = ALU_CARRY_ADJUST) -> int:
    """
    Compute the branch offset byte from a branch at pc to target.

    Args:
        target: Absolute target address (byte)
        pc: Address of the branch opcode byte
        carry_adjust: Extra correction for backward branches

    Returns:
        The offset encoded as a two's complement byte
    """
    if target < pc:
        offset = to_signed_byte(target) - (pc + carry_adjust)
    else:
        offset = to_signed_byte(target) - (pc + 1)
    return offset & 0xFF


class BranchResolver:
    """
    Resolves jump/branch operands against the label table.

    Attributes:
        labels: Label name -> address table from pass 1
        base_addr: Current base_addr directive value
        carry_adjust: Backward branch correction (ALU_CARRY_ADJUST)
    """

    def __init__(self, labels: Mapping[str, int], base_addr: int = 0,
                 carry_adjust: int = ALU_CARRY_ADJUST):
        self.labels = labels
        self.base_addr = base_addr
        self.carry_adjust = carry_adjust

    def resolve(
        self,
        mnemonic: str,
        token: str,
        pc: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> int:
        """
        Resolve the operand byte of a jump/branch instruction.

        Args:
            mnemonic: JMP, JSR, BR, BRZ or BRN
            token: Operand text (label name or hex value)
            pc: Address of the instruction's opcode byte

        Returns:
            The operand byte to emit

        Raises:
            UnresolvableOperandError: If the token is neither a known label
                nor a hex value of at most two digits
        """
        token = token.strip()

        literal = hex_value(token)
        if literal is not None:
            literal = (literal + self.base_addr) & 0xFF

        if token in self.labels:
            address = self.labels[token]
            if is_relative_branch(mnemonic):
                return relative_offset(address, pc, self.carry_adjust)
            return address

        digits = token[2:] if token[:2] in ("0x", "0X") else token
        if literal is None or len(digits) > MAX_LITERAL_DIGITS:
            raise UnresolvableOperandError(
                token, location, source_line,
                similar_labels=get_close_matches(token, list(self.labels), n=3),
            )
        return literal
