# =============================================================================
# test_parser.py - Statement Classifier Tests
# =============================================================================
# Tests for classifying source lines into directives, labels and
# instructions.
#
# Test coverage includes:
#   - Comment and blank line handling
#   - Classification priority
#   - Operand forms ($HH, HH, 0xHH)
#   - Jump operands left for pass 2
#   - Syntax errors with line numbers
# =============================================================================

import pytest

from asm92.assembler.encoding import OperandType
from asm92.assembler.parser import (
    DirectiveAssignment,
    Instruction,
    LabelDef,
    classify_line,
    hex_value,
    parse_hex_byte,
    parse_source,
)
from asm92.errors import (
    InvalidDirectiveSyntaxError,
    InvalidHexDigitError,
    InvalidLabelError,
    InvalidMnemonicError,
    InvalidOperandCharacterError,
    MalformedOperandListError,
    SourceLocation,
    UnknownDirectiveError,
    ValueRangeError,
)

LOC = SourceLocation("test.asm", 1)


# =============================================================================
# Hex Value Tests
# =============================================================================

class TestHexValues:
    """Test hexadecimal literal parsing."""

    def test_plain(self):
        assert hex_value("1F") == 0x1F
        assert hex_value("c8") == 0xC8

    def test_prefixed(self):
        assert hex_value("0x12") == 0x12

    def test_not_hex(self):
        assert hex_value("loop1") is None
        assert hex_value("") is None
        assert hex_value("0x") is None

    def test_parse_byte_range(self):
        assert parse_hex_byte("FF") == 0xFF
        with pytest.raises(ValueRangeError):
            parse_hex_byte("1FF")

    def test_parse_byte_invalid(self):
        with pytest.raises(InvalidHexDigitError):
            parse_hex_byte("1G")


# =============================================================================
# Classification Tests
# =============================================================================

class TestClassifyLine:
    """Test single line classification."""

    def test_blank_and_comment(self):
        assert classify_line("", LOC) is None
        assert classify_line("    ", LOC) is None
        assert classify_line("   # just a comment", LOC) is None

    def test_directive(self):
        stmt = classify_line("@base_addr=1F", LOC)
        assert isinstance(stmt, DirectiveAssignment)
        assert stmt.name == "base_addr"
        assert stmt.value == 0x1F

    def test_directive_with_comment(self):
        stmt = classify_line("@base_addr = 10   # load at $10", LOC)
        assert stmt.value == 0x10

    def test_directive_without_value(self):
        with pytest.raises(InvalidDirectiveSyntaxError):
            classify_line("@base_addr", LOC)

    def test_unknown_directive(self):
        with pytest.raises(UnknownDirectiveError) as exc_info:
            classify_line("@origin=10", LOC)
        assert exc_info.value.name == "origin"

    def test_directive_bad_value(self):
        with pytest.raises(InvalidHexDigitError):
            classify_line("@base_addr=zz", LOC)

    def test_label(self):
        stmt = classify_line("loop1:", LOC)
        assert isinstance(stmt, LabelDef)
        assert stmt.name == "loop1"

    def test_label_with_comment(self):
        stmt = classify_line("  exit:   # the end", LOC)
        assert isinstance(stmt, LabelDef)
        assert stmt.name == "exit"

    def test_empty_label(self):
        with pytest.raises(InvalidLabelError):
            classify_line(":", LOC)

    def test_label_with_space(self):
        with pytest.raises(InvalidLabelError):
            classify_line("my label:", LOC)

    def test_label_with_instruction(self):
        """Labels must be on their own line."""
        with pytest.raises(InvalidLabelError):
            classify_line("start: hlt", LOC)

    def test_no_operands(self):
        stmt = classify_line("    hlt", LOC)
        assert isinstance(stmt, Instruction)
        assert stmt.mnemonic == "HLT"
        assert stmt.operands == []
        assert stmt.size == 1

    def test_direct_and_immediate(self):
        stmt = classify_line("mov $50, 0x12   # init", LOC)
        assert stmt.mnemonic == "MOV"
        assert stmt.operand_types == [OperandType.DIRECT, OperandType.IMMEDIATE]
        assert [op.value for op in stmt.operands] == [0x50, 0x12]
        assert stmt.size == 3

    def test_two_direct(self):
        stmt = classify_line("MOV $C0,$50", LOC)
        assert stmt.operand_types == [OperandType.DIRECT, OperandType.DIRECT]
        assert [op.value for op in stmt.operands] == [0xC0, 0x50]

    def test_single_immediate(self):
        stmt = classify_line("cmp 1", LOC)
        assert stmt.operand_types == [OperandType.IMMEDIATE]
        assert stmt.operands[0].value == 1

    def test_jump_operand_deferred(self):
        """Jump targets are resolved in pass 2."""
        stmt = classify_line("brz exit", LOC)
        assert stmt.is_jump
        assert stmt.size == 2
        assert stmt.operands[0].value is None
        assert stmt.operands[0].text == "exit"

    def test_jump_operand_sized_like_label(self):
        """Hex and label jump targets occupy the same size."""
        assert classify_line("jmp 1A", LOC).size == classify_line("jmp loop", LOC).size

    def test_long_mnemonic(self):
        with pytest.raises(InvalidMnemonicError) as exc_info:
            classify_line("move $50, 1", LOC)
        assert exc_info.value.mnemonic == "MOVE"

    def test_invalid_operand_char(self):
        with pytest.raises(InvalidOperandCharacterError) as exc_info:
            classify_line("add $5G, 1", LOC)
        assert exc_info.value.char == "G"

    def test_operand_too_wide(self):
        with pytest.raises(ValueRangeError):
            classify_line("add $50, 123", LOC)

    def test_leading_comma(self):
        with pytest.raises(MalformedOperandListError):
            classify_line("add , 5", LOC)

    def test_duplicate_comma(self):
        with pytest.raises(MalformedOperandListError):
            classify_line("mov $50,,1", LOC)

    def test_trailing_comma(self):
        with pytest.raises(MalformedOperandListError):
            classify_line("mov $50,", LOC)

    def test_bare_dollar(self):
        with pytest.raises(InvalidHexDigitError):
            classify_line("mov $, 1", LOC)


class TestParseSource:
    """Test whole-source classification."""

    def test_statements_in_order(self, sample_source):
        stmts = parse_source(sample_source, "samplecode.asm")
        kinds = [type(s).__name__ for s in stmts]
        assert kinds.count("LabelDef") == 3
        assert kinds.count("Instruction") == 11
        assert isinstance(stmts[0], LabelDef)

    def test_line_numbers(self):
        stmts = parse_source("# c\n\nhlt\n", "x.asm")
        assert stmts[0].location.line == 3
        assert stmts[0].location.filename == "x.asm"

    def test_error_line_number(self):
        with pytest.raises(InvalidMnemonicError) as exc_info:
            parse_source("hlt\nhlt\nhalt\n")
        assert exc_info.value.line == 3

    def test_pure(self, sample_source):
        """Classifying twice gives equal statements."""
        assert parse_source(sample_source) == parse_source(sample_source)
