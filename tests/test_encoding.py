# =============================================================================
# test_encoding.py - Instruction Signature and Encoding Table Tests
# =============================================================================
# Tests for the 32-bit instruction signature and the signature -> MPC
# address table.
#
# Test coverage includes:
#   - Signature layout (mnemonic characters and operand type nibbles)
#   - Case insensitivity and injectivity
#   - Built-in default entries
#   - Lookup failures
# =============================================================================

import pytest

from asm92.assembler.encoding import (
    DEFAULT_ENCODINGS,
    EncodingTable,
    OperandType,
    describe_signature,
    instruction_signature,
    is_jump,
    is_relative_branch,
    normalize_mnemonic,
)
from asm92.errors import InvalidMnemonicError, UnmappedInstructionError


# =============================================================================
# Signature Tests
# =============================================================================

class TestInstructionSignature:
    """Test signature computation."""

    def test_no_operands(self):
        """HLT has no operands."""
        assert instruction_signature("HLT") == 0x484C5400

    def test_direct_immediate(self):
        """ADD A, X packs direct=2 then immediate=1."""
        sig = instruction_signature("ADD", OperandType.DIRECT, OperandType.IMMEDIATE)
        assert sig == 0x41444421

    def test_two_letter_mnemonic(self):
        """Unused mnemonic characters are zero."""
        assert instruction_signature("BR", OperandType.IMMEDIATE) == 0x42520010

    def test_case_insensitive(self):
        """Lowercase mnemonics produce the same signature."""
        assert (instruction_signature("mov", OperandType.DIRECT, OperandType.IMMEDIATE)
                == instruction_signature("MOV", OperandType.DIRECT, OperandType.IMMEDIATE))

    def test_operand_types_distinguish(self):
        """MOV A, X and MOV A, B are different instructions."""
        a_x = instruction_signature("MOV", OperandType.DIRECT, OperandType.IMMEDIATE)
        a_b = instruction_signature("MOV", OperandType.DIRECT, OperandType.DIRECT)
        assert a_x != a_b

    def test_operand_order_distinguishes(self):
        """Swapping operand types changes the signature."""
        a_x = instruction_signature("CMP", OperandType.DIRECT, OperandType.IMMEDIATE)
        x_a = instruction_signature("CMP", OperandType.IMMEDIATE, OperandType.DIRECT)
        assert a_x != x_a

    def test_injective_over_shapes(self):
        """Every (mnemonic, op1, op2) combination gets its own signature."""
        seen = set()
        for mnemonic in ("A", "AD", "ADD", "ADC", "B", "BR", "BRZ"):
            for op1 in OperandType:
                for op2 in OperandType:
                    seen.add(instruction_signature(mnemonic, op1, op2))
        assert len(seen) == 7 * 3 * 3

    @pytest.mark.parametrize("mnemonic", ["MOVE", "", "AD1", "A-D", "é", "Ā", "ÄDD"])
    def test_invalid_mnemonic(self, mnemonic):
        """Mnemonics must be 1 to 3 ASCII letters."""
        with pytest.raises(InvalidMnemonicError):
            instruction_signature(mnemonic)

    def test_describe_signature(self):
        """Signatures render in mapping table notation."""
        assert describe_signature(0x41444421) == "ADD A, X"
        assert describe_signature(0x484C5400) == "HLT"
        assert describe_signature(0x42520010) == "BR X"


class TestMnemonicHelpers:
    """Test mnemonic classification helpers."""

    def test_normalize_uppercases(self):
        assert normalize_mnemonic("brz") == "BRZ"

    def test_is_jump(self):
        """All five jump mnemonics are jumps."""
        for mnemonic in ("JMP", "JSR", "BR", "BRZ", "BRN"):
            assert is_jump(mnemonic)
        assert not is_jump("MOV")

    def test_relative_branches(self):
        """Only the B* jumps are PC-relative."""
        assert is_relative_branch("br")
        assert is_relative_branch("BRZ")
        assert not is_relative_branch("JMP")
        assert not is_relative_branch("JSR")


# =============================================================================
# Encoding Table Tests
# =============================================================================

class TestEncodingTable:
    """Test the signature -> MPC table."""

    def test_defaults(self):
        """The built-in entries are present."""
        table = EncodingTable()
        assert table[0x484C5400] == 0x03
        assert table[0x4D4F5621] == 0x04
        assert table[0x41444421] == 0x0B
        assert table[0x4A4D5010] == 0x50
        assert table[0x42520010] == 0x80
        assert len(table) == len(DEFAULT_ENCODINGS)

    def test_without_defaults(self):
        """A table can start empty."""
        assert len(EncodingTable(include_defaults=False)) == 0

    def test_set_overrides(self):
        """Setting an existing signature replaces its MPC address."""
        table = EncodingTable()
        table.set(0x41444421, 0x4C)
        assert table.lookup(0x41444421) == 0x4C

    def test_set_rejects_wide_mpc(self):
        """MPC addresses are one byte."""
        with pytest.raises(ValueError):
            EncodingTable().set(0x41444421, 0x100)

    def test_encode(self):
        """encode() pads missing operand slots."""
        table = EncodingTable()
        assert table.encode("hlt", []) == 0x03
        assert table.encode("JMP", [OperandType.IMMEDIATE]) == 0x50
        assert table.encode("add", [OperandType.DIRECT, OperandType.IMMEDIATE]) == 0x0B

    def test_encode_unmapped(self):
        """A shape with no entry raises UnmappedInstructionError."""
        with pytest.raises(UnmappedInstructionError) as exc_info:
            EncodingTable().encode("CMP", [OperandType.IMMEDIATE])
        assert exc_info.value.shape == "CMP X"
        assert "CMP X" in str(exc_info.value)

    def test_copy_is_independent(self):
        """Changes to a copy do not affect the original."""
        table = EncodingTable()
        clone = table.copy()
        clone.set(0x484C5400, 0x7F)
        assert table[0x484C5400] == 0x03
