"""
Two-Pass Code Generator
=======================

This module generates the RAM image from source text. It implements a
two-pass assembly process over the same classified statements:

Pass 1 (Label Collection)
-------------------------
- Apply @base_addr directives (they shift the whole program)
- Bind each label to the current address
- Advance the address by each instruction's size, emitting nothing

Pass 2 (Emission)
-----------------
- Start the address at the base offset recorded in pass 1
- Resolve jump/branch targets against the label table
- Look up each instruction's MPC address in the encoding table
- Emit the MPC byte, then each operand byte, recording a trace entry
  (address, byte, source line) per byte

Both passes must walk the same addresses line for line; any divergence
would silently break every label-relative address. The generator records
the instruction addresses of both passes and refuses to finish if they
differ.

Output Format
-------------
The output is a raw byte stream with no header: byte i is the i-th
emitted byte in program order. The first byte is meant to be loaded at
base_addr.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional
import logging

from asm92.errors import (
    AddressSpaceExhaustedError,
    AssemblerError,
    DirectiveOrderError,
    DuplicateLabelError,
    SourceLocation,
)
from asm92.assembler.branches import ALU_CARRY_ADJUST, BranchResolver
from asm92.assembler.encoding import EncodingTable
from asm92.assembler.parser import (
    DEFAULT_DIRECTIVES,
    DirectiveAssignment,
    Instruction,
    LabelDef,
    parse_source,
)

logger = logging.getLogger(__name__)


ADDRESS_SPACE_SIZE = 0x100


# =============================================================================
# Assembly State
# =============================================================================

@dataclass
class AssemblyContext:
    """
    State shared by both passes of one assembly run.

    Attributes:
        labels: Label name -> address, written only in pass 1
        label_locations: Where each label was defined
        directives: Directive name -> value, written only in pass 1
        adjust_base: True once a base_addr directive has been applied
    """
    labels: dict[str, int] = field(default_factory=dict)
    label_locations: dict[str, SourceLocation] = field(default_factory=dict)
    directives: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_DIRECTIVES))
    adjust_base: bool = False

    @property
    def base_addr(self) -> int:
        return self.directives["base_addr"]


@dataclass(frozen=True)
class TraceEntry:
    """
    One emitted byte, for the disassembly-style trace.

    Attributes:
        address: Address the byte is loaded at
        value: The byte
        line: Source line number
        source: Source text (only on the instruction's MPC byte)
    """
    address: int
    value: int
    line: int
    source: Optional[str] = None

    def __str__(self) -> str:
        text = f"0x{self.address:x}\t0x{self.value:x}"
        if self.source is not None:
            text += f"\t{self.source}"
        return text


TraceSink = Callable[[TraceEntry], None]


@contextmanager
def output_artifact(path: str | Path) -> Iterator[BinaryIO]:
    """
    Open the binary output file, deleting it if assembly fails.

    Usage:
        with output_artifact("ram.b") as out:
            codegen.generate(source, sink=out)
    """
    path = Path(path)
    stream = open(path, "wb")
    try:
        try:
            yield stream
        finally:
            stream.close()
    except BaseException:
        path.unlink(missing_ok=True)
        logger.debug("Removed incomplete output file %s", path)
        raise


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Generates the RAM image from assembly source.

    The code generator maintains:
    - The assembly context (labels and directives) for the current run
    - The address counter
    - Output code buffer and trace

    Usage:
        codegen = CodeGenerator(table)
        code = codegen.generate(source, "prog.asm")
        print(codegen.get_listing())
    """

    def __init__(self, table: Optional[EncodingTable] = None,
                 carry_adjust: int = ALU_CARRY_ADJUST,
                 trace: Optional[TraceSink] = None):
        """
        Initialize the code generator.

        Args:
            table: Encoding table (default: built-in mappings only)
            carry_adjust: Backward branch correction, 1 or 2
            trace: Optional callback receiving each emitted byte
        """
        if not 0 <= carry_adjust <= 0xFF:
            raise ValueError(f"carry_adjust must be a byte, got {carry_adjust}")
        self._table = table if table is not None else EncodingTable()
        self._carry_adjust = carry_adjust
        self._trace_sink = trace

        self._context = AssemblyContext()
        self._code = bytearray()
        self._trace: list[TraceEntry] = []
        self._addr = 0
        self._base_offset = 0
        self._sink: Optional[BinaryIO] = None
        self._pass_addresses: dict[int, list[int]] = {1: [], 2: []}

    # =========================================================================
    # Public Interface
    # =========================================================================

    @property
    def table(self) -> EncodingTable:
        return self._table

    @property
    def context(self) -> AssemblyContext:
        return self._context

    def generate(self, source: str, filename: str = "<input>",
                 sink: Optional[BinaryIO] = None) -> bytes:
        """
        Assemble source text into bytes.

        Args:
            source: Assembly source text
            filename: Source filename for error messages
            sink: Optional binary stream receiving each byte as it is emitted

        Returns:
            The assembled bytes

        Raises:
            AssemblerError: On the first error in either pass
        """
        # Fresh state for every run; nothing carries over between runs
        self._context = AssemblyContext()
        self._code.clear()
        self._trace.clear()
        self._pass_addresses = {1: [], 2: []}
        self._base_offset = 0
        self._sink = sink

        try:
            self._pass1(source, filename)
            self._pass2(source, filename)
        finally:
            self._sink = None

        logger.debug("%s assembled in %d bytes", filename, self.bytes_written)
        return bytes(self._code)

    def get_code(self) -> bytes:
        """Return the assembled bytes of the last run."""
        return bytes(self._code)

    @property
    def bytes_written(self) -> int:
        """Bytes emitted by the last run (end address minus base offset)."""
        return self._addr - self._base_offset

    def get_base_address(self) -> int:
        """Return the address the first byte is loaded at."""
        return self._base_offset

    def get_symbols(self) -> dict[str, int]:
        """Return the label table of the last run."""
        return dict(self._context.labels)

    def get_trace(self) -> list[TraceEntry]:
        """Return the per-byte trace of the last run."""
        return list(self._trace)

    def get_pass_addresses(self, pass_num: int) -> list[int]:
        """Return the instruction start addresses seen by pass 1 or 2."""
        return list(self._pass_addresses[pass_num])

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The trace table followed by the label table
        """
        lines = ["Addr.\tByte\tInstr."]
        lines.extend(str(entry) for entry in self._trace)
        lines.append("")
        lines.append("Labels")
        lines.append("-" * 30)
        for name, address in sorted(self._context.labels.items()):
            lines.append(f"{name:20s} = 0x{address:02X}")
        return "\n".join(lines) + "\n"

    def write_listing(self, filepath: str | Path) -> None:
        """Write the assembly listing file."""
        Path(filepath).write_text(self.get_listing())

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write the label table file.

        Format: name address (one per line)
        """
        with open(filepath, "w") as f:
            f.write("# Label table\n")
            f.write("# Generated by asm92\n")
            for name, address in sorted(self._context.labels.items()):
                f.write(f"{name} 0x{address:02X}\n")

    # =========================================================================
    # Pass 1: Label Collection
    # =========================================================================

    def _pass1(self, source: str, filename: str) -> None:
        """
        First pass: apply directives, bind labels, size instructions.
        """
        logger.debug("Pass 1: scanning %s", filename)
        self._addr = 0
        seen_code = False

        for stmt in parse_source(source, filename):
            if isinstance(stmt, DirectiveAssignment):
                if seen_code:
                    raise DirectiveOrderError(
                        f"'@{stmt.name}' must come before any label or instruction",
                        location=stmt.location,
                        hint="move the directive to the top of the file",
                        source_line=stmt.text,
                    )
                self._apply_directive(stmt)

            elif isinstance(stmt, LabelDef):
                seen_code = True
                self._define_label(stmt)

            elif isinstance(stmt, Instruction):
                seen_code = True
                self._pass_addresses[1].append(self._addr)
                self._advance(stmt.size, stmt)

        if self._context.adjust_base:
            self._base_offset = self._context.base_addr

    def _apply_directive(self, stmt: DirectiveAssignment) -> None:
        """Apply a directive; repeated base_addr values accumulate."""
        if stmt.name == "base_addr":
            offset = self._context.base_addr + stmt.value
            if offset >= ADDRESS_SPACE_SIZE:
                raise AddressSpaceExhaustedError(offset, stmt.location, stmt.text)
            self._context.directives[stmt.name] = offset
            self._context.adjust_base = True
            self._addr += stmt.value
            logger.info("Address Offset = 0x%x", offset)
        else:
            self._context.directives[stmt.name] = stmt.value

    def _define_label(self, stmt: LabelDef) -> None:
        """Bind a label to the current address."""
        if stmt.name in self._context.labels:
            raise DuplicateLabelError(
                stmt.name,
                location=stmt.location,
                original_location=self._context.label_locations[stmt.name],
                source_line=stmt.text,
            )
        if self._addr >= ADDRESS_SPACE_SIZE:
            raise AddressSpaceExhaustedError(self._addr, stmt.location, stmt.text)
        self._context.labels[stmt.name] = self._addr
        self._context.label_locations[stmt.name] = stmt.location
        logger.debug("Label '%s' = 0x%02X", stmt.name, self._addr)

    def _advance(self, size: int, inst: Instruction) -> None:
        """Move the address past an instruction, checking the address space."""
        end = self._addr + size - 1
        if end >= ADDRESS_SPACE_SIZE:
            raise AddressSpaceExhaustedError(end, inst.location, inst.text)
        self._addr += size

    # =========================================================================
    # Pass 2: Emission
    # =========================================================================

    def _pass2(self, source: str, filename: str) -> None:
        """
        Second pass: resolve operands, encode and emit.
        """
        logger.debug("Pass 2: emitting %s", filename)
        self._addr = 0

        # Base offset recorded by pass 1, applied exactly once
        if self._context.adjust_base:
            self._addr += self._base_offset

        resolver = BranchResolver(
            self._context.labels,
            base_addr=self._context.base_addr,
            carry_adjust=self._carry_adjust,
        )
        expected = self._pass_addresses[1]

        for stmt in parse_source(source, filename):
            if not isinstance(stmt, Instruction):
                continue

            index = len(self._pass_addresses[2])
            self._pass_addresses[2].append(self._addr)
            if index >= len(expected) or expected[index] != self._addr:
                raise AssemblerError(
                    f"internal error: pass 2 address 0x{self._addr:02X} does not "
                    "match pass 1",
                    location=stmt.location,
                    source_line=stmt.text,
                )

            self._generate_instruction(stmt, resolver)

        if len(self._pass_addresses[2]) != len(expected):
            raise AssemblerError(
                f"internal error: pass 2 saw {len(self._pass_addresses[2])} "
                f"instructions, pass 1 saw {len(expected)} in {filename}"
            )

    def _generate_instruction(self, inst: Instruction, resolver: BranchResolver) -> None:
        """Encode and emit one instruction."""
        start = self._addr

        values = []
        for operand in inst.operands:
            if operand.value is None:
                values.append(resolver.resolve(
                    inst.mnemonic, operand.text, start,
                    inst.location.at_column(operand.column), inst.text,
                ))
            else:
                values.append(operand.value)

        mpc = self._table.encode(
            inst.mnemonic, inst.operand_types, inst.location, inst.text
        )

        self._emit_byte(mpc, inst, inst.text)
        for value in values:
            self._emit_byte(value, inst)

    # =========================================================================
    # Code Emission Helpers
    # =========================================================================

    def _emit_byte(self, value: int, inst: Instruction,
                   source: Optional[str] = None) -> None:
        """Emit a single byte at the current address."""
        if self._addr >= ADDRESS_SPACE_SIZE:
            raise AddressSpaceExhaustedError(self._addr, inst.location, inst.text)

        value &= 0xFF
        self._code.append(value)
        if self._sink is not None:
            self._sink.write(bytes([value]))

        entry = TraceEntry(self._addr, value, inst.location.line, source)
        self._trace.append(entry)
        if self._trace_sink is not None:
            self._trace_sink(entry)
        else:
            logger.debug("%s", entry)

        self._addr += 1
