"""
asm92 Assembler
===============

Two-pass assembler for the 3P92 microcoded CPU. Each instruction assembles
to the MPC address of its microcode followed by its operand bytes; the
resulting RAM image is loaded into the logic circuit simulator.

Main Components
---------------
- **Assembler**: Main class that loads mappings and drives assembly
- **parse_source / classify_line**: Classify source lines into statements
- **EncodingTable**: Instruction signature -> MPC address table
- **load_mapping_file**: Load mapping.conf entries into an EncodingTable
- **BranchResolver**: Resolve jump/branch targets and relative offsets
- **CodeGenerator**: Two-pass label collection and emission

Assembly Process
----------------
1. **Mappings**: built-in defaults, extended by the mapping table
2. **Pass 1**: apply @base_addr, bind labels, size instructions
3. **Pass 2**: resolve operands, look up MPC addresses, emit bytes

Example Usage
-------------
>>> from asm92.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string('''
... loop1:
...     add $50, 05
...     jmp loop1
... ''')
b'\\x0bP\\x05P\\x00'
"""

from asm92.assembler.assembler import Assembler, assemble, assemble_file
from asm92.assembler.encoding import (
    DEFAULT_ENCODINGS,
    JUMP_MNEMONICS,
    EncodingTable,
    OperandType,
    describe_signature,
    instruction_signature,
)
from asm92.assembler.parser import (
    DirectiveAssignment,
    Instruction,
    LabelDef,
    Operand,
    Statement,
    classify_line,
    parse_source,
)
from asm92.assembler.mapping import load_mapping_file, load_mapping_string
from asm92.assembler.branches import (
    ALU_CARRY_ADJUST,
    BranchResolver,
    relative_offset,
)
from asm92.assembler.codegen import (
    AssemblyContext,
    CodeGenerator,
    TraceEntry,
    output_artifact,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Encoding
    "DEFAULT_ENCODINGS",
    "JUMP_MNEMONICS",
    "EncodingTable",
    "OperandType",
    "describe_signature",
    "instruction_signature",
    # Classifier
    "DirectiveAssignment",
    "Instruction",
    "LabelDef",
    "Operand",
    "Statement",
    "classify_line",
    "parse_source",
    # Mapping table
    "load_mapping_file",
    "load_mapping_string",
    # Branches
    "ALU_CARRY_ADJUST",
    "BranchResolver",
    "relative_offset",
    # Code generator
    "AssemblyContext",
    "CodeGenerator",
    "TraceEntry",
    "output_artifact",
]
