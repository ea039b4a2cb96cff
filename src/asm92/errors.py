"""
asm92 Error Hierarchy
=====================

This module defines the exception hierarchy for the asm92 assembler.
All exceptions inherit from Asm92Error, allowing callers to catch every
assembler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
Asm92Error (base)
└── AssemblerError (source, mapping table and emission errors)
    ├── AssemblySyntaxError - malformed statement text
    │   ├── MalformedOperandListError - leading/duplicate comma
    │   ├── InvalidOperandCharacterError - stray character in an operand
    │   ├── InvalidMnemonicError - mnemonic longer than 3 letters
    │   └── InvalidLabelError - empty or malformed label name
    ├── InvalidHexDigitError - hex expected, something else found
    ├── ValueRangeError - literal does not fit in one byte
    ├── UnmappedInstructionError - no microcode entry for the signature
    ├── UnresolvableOperandError - jump target neither label nor byte
    ├── DuplicateLabelError - label defined twice
    ├── AddressSpaceExhaustedError - program runs past address $FF
    ├── DirectiveError
    │   ├── InvalidDirectiveSyntaxError - not of the form @name=value
    │   ├── UnknownDirectiveError - name is not a known directive
    │   └── DirectiveOrderError - directive after code or labels
    └── MappingTableError
        ├── InvalidTableSyntaxError - entry without ':'
        └── InvalidOperandLetterError - operand letter not A, B or X

Every error is fatal: the assembler stops at the first one.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location, when the column is known)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Asm92Error(Exception):
    """
    Base exception for all asm92 errors.

        try:
            assembler.assemble_file("program.asm", "ram.b")
        except Asm92Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in a source or mapping file, used for error reporting.

    Attributes:
        filename: Name of the file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"

    def at_column(self, column: int) -> "SourceLocation":
        """Return a copy of this location pointing at another column."""
        return SourceLocation(self.filename, self.line, column)


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(Asm92Error):
    """
    Base exception for all assembler errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The offending source text (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """The 1-based line number of the error, if known."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            prog.asm:12:5: error: invalid mnemonic 'MOVE'
                move $50, 12
                ^
            hint: mnemonics are at most 3 letters
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None:
            parts.append(f"    {self.source_line}")
            if self.location is not None and self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """Statement text that cannot be classified or split into operands."""
    pass


class MalformedOperandListError(AssemblySyntaxError):
    """
    Leading, doubled or trailing comma in an operand list.

    Examples:
        ADD , 5
        MOV $50,,1
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        detail: str = "leading comma in operand list",
    ):
        super().__init__(
            detail,
            location=location,
            hint="operands are written as 'OP1' or 'OP1, OP2'",
            source_line=source_line,
        )


class InvalidOperandCharacterError(AssemblySyntaxError):
    """A character in an operand position is not a hex digit, '$' or ','."""

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' in operand",
            location=location,
            hint="operands are hex values, prefixed with '$' for memory addresses",
            source_line=source_line,
        )


class InvalidMnemonicError(AssemblySyntaxError):
    """Mnemonic longer than three letters, or containing non-letters."""

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        super().__init__(
            f"invalid mnemonic '{mnemonic}'",
            location=location,
            hint="mnemonics are 1 to 3 letters",
            source_line=source_line,
        )


class InvalidLabelError(AssemblySyntaxError):
    """Label definition with an empty or malformed name."""
    pass


class InvalidHexDigitError(AssemblerError):
    """
    A hexadecimal value was expected but the text is not one.

    Raised for directive values, operands and MPC addresses in the
    mapping table.
    """

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"invalid hex value '{text}'",
            location=location,
            hint="values are hexadecimal (0-9, A-F), e.g. 1F or 0x1F",
            source_line=source_line,
        )


class ValueRangeError(AssemblerError):
    """A literal value does not fit in a single byte ($00-$FF)."""

    def __init__(
        self,
        value: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        super().__init__(
            f"value ${value:X} does not fit in one byte",
            location=location,
            hint="values range from $00 to $FF",
            source_line=source_line,
        )


class UnmappedInstructionError(AssemblerError):
    """
    The instruction has no entry in the encoding table.

    The instruction is syntactically valid but its mnemonic and operand
    shape have no microcode address. Add an entry to the mapping table,
    e.g. "ADD A, X : 0B".
    """

    def __init__(
        self,
        shape: str,
        signature: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.shape = shape
        self.signature = signature
        super().__init__(
            f"instruction '{shape}' cannot be mapped (icode 0x{signature:08X})",
            location=location,
            hint=f"add '{shape} : <MPC>' to the mapping table",
            source_line=source_line,
        )


class UnresolvableOperandError(AssemblerError):
    """A jump/branch operand is neither a known label nor a one-byte value."""

    def __init__(
        self,
        operand: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.operand = operand
        self.similar_labels = similar_labels or []

        hint = None
        if self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"operand '{operand}' is neither a valid label nor an immediate address",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateLabelError(AssemblerError):
    """Label defined more than once."""

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{label}' was first defined at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class AddressSpaceExhaustedError(AssemblerError):
    """
    The program does not fit in the 256-byte address space.

    Addresses are a single byte wide in the target circuit, so nothing
    may be placed above $FF (including the base offset itself).
    """

    def __init__(
        self,
        address: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.address = address
        super().__init__(
            f"address ${address:X} is outside the address space ($00-$FF)",
            location=location,
            hint="shorten the program or lower @base_addr",
            source_line=source_line,
        )


class DirectiveError(AssemblerError):
    """Base class for malformed or misplaced directive lines."""
    pass


class InvalidDirectiveSyntaxError(DirectiveError):
    """Directive line not of the form '@name=value'."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "invalid assembler directive assignment",
            location=location,
            hint="directives are written as @name=value, e.g. @base_addr=1F",
            source_line=source_line,
        )


class UnknownDirectiveError(DirectiveError):
    """Directive name is not recognised."""

    def __init__(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        known: Optional[list[str]] = None,
    ):
        self.name = name
        hint = None
        if known:
            hint = "supported directives: " + ", ".join(known)
        super().__init__(
            f"invalid assembler directive '{name}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DirectiveOrderError(DirectiveError):
    """Address-affecting directive placed after a label or instruction."""
    pass


# =============================================================================
# Mapping Table Exceptions
# =============================================================================

class MappingTableError(AssemblerError):
    """Base class for malformed mapping table entries."""
    pass


class InvalidTableSyntaxError(MappingTableError):
    """Mapping entry without the 'instruction : mpc' layout."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "invalid format",
            location=location,
            hint="entries are written as 'MNEMONIC OPERANDS : MPC', e.g. 'ADD A, X : 0B'",
            source_line=source_line,
        )


class InvalidOperandLetterError(MappingTableError):
    """Operand letter in a mapping entry is not A, B or X."""

    def __init__(
        self,
        letter: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.letter = letter
        super().__init__(
            f"invalid operand type specified: '{letter}'",
            location=location,
            hint="use A or B for memory addresses and X for immediates",
            source_line=source_line,
        )
