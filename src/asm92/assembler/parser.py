"""
Source Statement Classifier
===========================

This module turns source lines into statements. The language is strictly
line oriented, so there is no separate lexer: each stripped line is
classified on its own, in priority order:

1. **Blank / comment**: empty line or line starting with '#' (ignored)
2. **Directive**: line starting with '@', of the form @name=value
   ```asm
   @base_addr=1F    # program starts at $1F
   ```
3. **LabelDef**: text followed by a colon, on its own line
   ```asm
   loop1:
   ```
4. **Instruction**: mnemonic and up to two comma-separated operands
   ```asm
   mov $50, 0x12    # '$' marks a memory address
   add $50, 05      # no prefix is an immediate
   brz exit         # jumps/branches may name a label
   ```

All values are hexadecimal, with an optional 0x prefix. Mnemonics and hex
digits are case-insensitive; labels are case-sensitive.

Classification is pure: directives are returned as statements and their
effect is applied by the code generator, so both passes can call
parse_source() on the same text and get the same statements back.
"""

from dataclasses import dataclass, field
from typing import Optional
import re
import string

from asm92.errors import (
    InvalidDirectiveSyntaxError,
    InvalidHexDigitError,
    InvalidLabelError,
    InvalidOperandCharacterError,
    MalformedOperandListError,
    SourceLocation,
    UnknownDirectiveError,
    ValueRangeError,
)
from asm92.assembler.encoding import OperandType, is_jump, normalize_mnemonic


# =============================================================================
# Syntax Constants
# =============================================================================

COMMENT_CHAR = "#"
DIRECTIVE_CHAR = "@"
LABEL_CHAR = ":"
DIRECT_PREFIX = "$"

# Recognised directives and their default values
DEFAULT_DIRECTIVES: dict[str, int] = {
    "base_addr": 0x00,  # Base address of the program in memory
}

HEX_DIGITS = frozenset(string.hexdigits)

_MNEMONIC_RE = re.compile(r"([^\s#]+)(.*)", re.DOTALL)


# =============================================================================
# Statement Data Classes
# =============================================================================

@dataclass
class Statement:
    """
    Base class for all classified statements.

    Attributes:
        location: Where the statement starts (for error reporting)
        text: The stripped source line
    """
    location: SourceLocation
    text: str


@dataclass
class DirectiveAssignment(Statement):
    """
    Assembler directive (@name=value).

    Attributes:
        name: Directive name (case-sensitive)
        value: One-byte value
    """
    name: str
    value: int


@dataclass
class LabelDef(Statement):
    """Label definition; occupies no bytes."""
    name: str


@dataclass
class Operand:
    """
    Instruction operand.

    Attributes:
        kind: IMMEDIATE or DIRECT
        value: Byte value, or None for an unresolved jump/branch target
        text: Operand text as written
        column: 1-based column of the operand in the source line
    """
    kind: OperandType
    value: Optional[int]
    text: str
    column: int = 0


@dataclass
class Instruction(Statement):
    """
    Machine instruction.

    Attributes:
        mnemonic: Upper-case mnemonic (1-3 letters)
        operands: Zero, one or two operands
    """
    mnemonic: str
    operands: list[Operand] = field(default_factory=list)

    @property
    def size(self) -> int:
        """Bytes occupied: one MPC byte plus one byte per operand."""
        return 1 + len(self.operands)

    @property
    def operand_types(self) -> list[OperandType]:
        return [op.kind for op in self.operands]

    @property
    def is_jump(self) -> bool:
        return is_jump(self.mnemonic)


# =============================================================================
# Hex Values
# =============================================================================

def hex_value(text: str) -> Optional[int]:
    """
    Interpret text as a hex literal ('1F', '0x1f').

    Returns:
        The value, or None if the text is not a hex literal
    """
    text = text.strip()
    if len(text) > 2 and text[:2] in ("0x", "0X"):
        text = text[2:]
    if not text or not all(c in HEX_DIGITS for c in text):
        return None
    return int(text, 16)


def parse_hex_byte(
    text: str,
    location: Optional[SourceLocation] = None,
    source_line: Optional[str] = None,
) -> int:
    """
    Parse a one-byte hex literal.

    Raises:
        InvalidHexDigitError: If the text is not a hex literal
        ValueRangeError: If the value is above $FF
    """
    value = hex_value(text)
    if value is None:
        raise InvalidHexDigitError(text.strip(), location, source_line)
    if value > 0xFF:
        raise ValueRangeError(value, location, source_line)
    return value


def strip_comment(text: str) -> str:
    """Remove an inline '#' comment."""
    index = text.find(COMMENT_CHAR)
    return text if index < 0 else text[:index]


# =============================================================================
# Classifier
# =============================================================================

def classify_line(line: str, location: SourceLocation) -> Optional[Statement]:
    """
    Classify a single source line.

    Args:
        line: Raw source line
        location: Location of the line (column is ignored)

    Returns:
        The statement, or None for blank and comment lines

    Raises:
        AssemblerError: If the line is malformed
    """
    text = line.strip()
    if not text or text.startswith(COMMENT_CHAR):
        return None

    indent = len(line) - len(line.lstrip())
    location = location.at_column(indent + 1)

    if text.startswith(DIRECTIVE_CHAR):
        return _parse_directive(text, location)

    body = strip_comment(text).rstrip()
    if body.endswith(LABEL_CHAR):
        return _parse_label(body, text, location)

    return _parse_instruction(body, text, location)


def parse_source(source: str, filename: str = "<input>") -> list[Statement]:
    """
    Classify every line of a source text.

    Args:
        source: Assembly source text
        filename: Source filename for error messages

    Returns:
        Statements in source order (blank and comment lines omitted)
    """
    statements = []
    for line_num, line in enumerate(source.splitlines(), start=1):
        stmt = classify_line(line, SourceLocation(filename, line_num))
        if stmt is not None:
            statements.append(stmt)
    return statements


def _parse_directive(text: str, location: SourceLocation) -> DirectiveAssignment:
    """Parse '@name=value [# comment]'."""
    body = strip_comment(text[len(DIRECTIVE_CHAR):])
    if "=" not in body:
        raise InvalidDirectiveSyntaxError(location, text)

    name, _, value_text = body.partition("=")
    name = name.strip()
    if not name or not name.isidentifier():
        raise InvalidDirectiveSyntaxError(location, text)

    if name not in DEFAULT_DIRECTIVES:
        raise UnknownDirectiveError(
            name, location, text, known=sorted(DEFAULT_DIRECTIVES)
        )

    value = parse_hex_byte(value_text, location, text)
    return DirectiveAssignment(location, text, name=name, value=value)


def _parse_label(body: str, text: str, location: SourceLocation) -> LabelDef:
    """Parse 'name:'."""
    name = body[:-len(LABEL_CHAR)].strip()
    if not name or any(c.isspace() for c in name) or LABEL_CHAR in name:
        raise InvalidLabelError(
            f"invalid label name '{name}'",
            location=location,
            hint="labels are a single word followed by ':' on their own line",
            source_line=text,
        )
    return LabelDef(location, text, name=name)


def _parse_instruction(body: str, text: str, location: SourceLocation) -> Instruction:
    """Parse 'MNEMONIC [op1[, op2]]' (comment already removed)."""
    match = _MNEMONIC_RE.match(body)
    mnemonic_text, rest = match.group(1), match.group(2)

    if mnemonic_text.endswith(LABEL_CHAR):
        raise InvalidLabelError(
            f"label '{mnemonic_text[:-1]}' must be on its own line",
            location=location,
            source_line=text,
        )

    mnemonic = normalize_mnemonic(mnemonic_text, location, text)

    operand_text = rest.strip()
    column = location.column + len(mnemonic_text) + (len(rest) - len(rest.lstrip()))

    if is_jump(mnemonic):
        # Target may be a label or a hex value; resolved in pass 2
        operands = [Operand(OperandType.IMMEDIATE, None, operand_text, column)]
    else:
        operands = _parse_operands(operand_text, location.at_column(column), text)

    return Instruction(location, text, mnemonic=mnemonic, operands=operands)


def _parse_operands(
    text: str,
    location: SourceLocation,
    source_line: str,
) -> list[Operand]:
    """Split 'op1, op2' into at most two operands."""
    if not text:
        return []

    parts = text.split(",")
    if len(parts) > 2:
        raise MalformedOperandListError(
            location, source_line, detail="duplicate comma in operand list"
        )

    operands = []
    offset = 0
    for index, part in enumerate(parts):
        token = part.strip()
        if not token:
            detail = ("leading comma in operand list" if index == 0
                      else "trailing comma in operand list")
            raise MalformedOperandListError(location, source_line, detail=detail)
        column = location.column + offset + (len(part) - len(part.lstrip()))
        operands.append(_parse_operand(token, location.at_column(column), source_line))
        offset += len(part) + 1
    return operands


def _parse_operand(token: str, location: SourceLocation, source_line: str) -> Operand:
    """Parse '[$][0x]HEX'."""
    kind = OperandType.IMMEDIATE
    digits = token
    if digits.startswith(DIRECT_PREFIX):
        kind = OperandType.DIRECT
        digits = digits[len(DIRECT_PREFIX):]
    if len(digits) > 2 and digits[:2] in ("0x", "0X"):
        digits = digits[2:]

    if not digits:
        raise InvalidHexDigitError(token, location, source_line)

    prefix_len = len(token) - len(digits)
    for i, char in enumerate(digits):
        if char not in HEX_DIGITS:
            raise InvalidOperandCharacterError(
                char, location.at_column(location.column + prefix_len + i), source_line
            )

    value = int(digits, 16)
    if value > 0xFF:
        raise ValueRangeError(value, location, source_line)
    return Operand(kind, value, token, location.column)
