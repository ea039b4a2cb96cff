"""
Instruction Mapping Table Loader
================================

The mapping table tells the assembler where each instruction's microcode
starts in the Micro Store ROM. It is a plain text file (mapping.conf by
default), one entry per line:

    # mnemonic operands : MPC address
    HLT         : 03
    MOV A, X    : 04
    MOV A, B    : 05
    ADD A, X    : 0B
    BRZ X       : 82

Operand letters describe operand *types*, not values:

| Letter | Operand type   |
|--------|----------------|
| A, B   | Direct address |
| X      | Immediate      |

Entries are added to the encoding table, overwriting built-in defaults
with the same signature. The table must be entirely valid: the first bad
entry aborts loading. A missing table file is not an error; the built-in
defaults are then used alone.
"""

from pathlib import Path
from typing import Optional
import logging

from asm92.errors import (
    InvalidOperandLetterError,
    InvalidTableSyntaxError,
    MalformedOperandListError,
    SourceLocation,
)
from asm92.assembler.encoding import (
    EncodingTable,
    OperandType,
    instruction_signature,
    normalize_mnemonic,
)
from asm92.assembler.parser import COMMENT_CHAR, parse_hex_byte

logger = logging.getLogger(__name__)


# Operand letter -> operand type
OPERAND_LETTERS: dict[str, OperandType] = {
    "A": OperandType.DIRECT,
    "B": OperandType.DIRECT,
    "X": OperandType.IMMEDIATE,
}

DEFAULT_MAPPING_FILE = "mapping.conf"


def parse_mapping_line(line: str, location: SourceLocation) -> Optional[tuple[int, int]]:
    """
    Parse one mapping table entry.

    Args:
        line: Raw table line
        location: Location of the line

    Returns:
        (signature, mpc) tuple, or None for blank and comment lines

    Raises:
        AssemblerError: If the entry is malformed
    """
    text = line.strip()
    if not text or text.startswith(COMMENT_CHAR):
        return None

    # The last ':' separates the instruction from its MPC address
    instr, sep, mpc_text = text.rpartition(":")
    if not sep:
        raise InvalidTableSyntaxError(location, text)

    words = instr.split(None, 1)
    mnemonic_text = words[0] if words else ""
    operand_text = words[1] if len(words) > 1 else ""
    mnemonic = normalize_mnemonic(mnemonic_text, location, text)

    slots = _parse_operand_letters(operand_text, location, text)
    mpc = parse_hex_byte(mpc_text, location, text)

    return instruction_signature(mnemonic, slots[0], slots[1]), mpc


def _parse_operand_letters(
    text: str,
    location: SourceLocation,
    source_line: str,
) -> list[OperandType]:
    """Parse 'A, X' style operand letters into two operand slots."""
    slots = [OperandType.NONE, OperandType.NONE]
    text = text.strip()
    if not text:
        return slots

    parts = text.split(",")
    if len(parts) > 2:
        raise MalformedOperandListError(
            location, source_line, detail="duplicate comma in operand list"
        )

    for index, part in enumerate(parts):
        letter = part.strip().upper()
        if not letter:
            detail = ("leading comma in operand list" if index == 0
                      else "trailing comma in operand list")
            raise MalformedOperandListError(location, source_line, detail=detail)
        if letter not in OPERAND_LETTERS:
            raise InvalidOperandLetterError(letter, location, source_line)
        slots[index] = OPERAND_LETTERS[letter]
    return slots


def load_mapping_string(
    text: str,
    table: EncodingTable,
    filename: str = "<mapping>",
) -> int:
    """
    Load mapping entries from text into an encoding table.

    Entries are parsed in full before any is applied, so a bad table
    leaves the encoding table untouched.

    Args:
        text: Mapping table text
        table: Table to update
        filename: Name used in error messages

    Returns:
        Number of entries loaded
    """
    entries = []
    for line_num, line in enumerate(text.splitlines(), start=1):
        entry = parse_mapping_line(line, SourceLocation(filename, line_num))
        if entry is not None:
            entries.append(entry)

    for icode, mpc in entries:
        if icode in table and table[icode] != mpc:
            logger.debug("Overriding icode 0x%08X: MPC 0x%02X -> 0x%02X",
                         icode, table[icode], mpc)
        table.set(icode, mpc)

    return len(entries)


def load_mapping_file(
    path: str | Path,
    table: EncodingTable,
    missing_ok: bool = True,
) -> int:
    """
    Load a mapping table file into an encoding table.

    Args:
        path: Mapping table file
        table: Table to update
        missing_ok: If True (default), a missing file loads nothing

    Returns:
        Number of entries loaded

    Raises:
        FileNotFoundError: If the file is missing and missing_ok is False
    """
    path = Path(path)
    if not path.is_file():
        if missing_ok:
            logger.debug("No mapping table at %s, using built-in mappings", path)
            return 0
        raise FileNotFoundError(f"mapping table not found: {path}")

    count = load_mapping_string(path.read_text(), table, str(path))
    logger.info("Loaded %d instruction mappings from %s", count, path)
    return count
