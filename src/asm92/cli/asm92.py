"""
asm92 - 3P92 Assembler Command-Line Interface
=============================================

This module implements the command-line interface for the 3P92 assembler.
It assembles a plaintext ISA-level source file into a raw RAM image that
can be loaded into the RAM modules of the logic circuit simulator.

Usage Examples
--------------
Basic assembly (writes ram.b):
    $ asm92 prog.asm

With output file and mapping table:
    $ asm92 prog.asm -o prog.b -m mapping.conf

Generate listing and label table:
    $ asm92 prog.asm -l prog.lst -s prog.sym

Circuit without the PSW carry-out fed into the ALU carry-in:
    $ asm92 --carry-adjust 1 prog.asm
"""

from pathlib import Path
from typing import Optional
import logging

import click

from asm92 import __version__
from asm92.assembler import Assembler
from asm92.cli.errors import handle_cli_exception
from asm92.config import AssemblerConfig, VALID_CARRY_ADJUST


BANNER = """
\t      3P92 Assembler
===================================
\tWritten By Tennyson Demchuk
\tv{version} December 2020
===================================
"""

TRACE_HEADER = "\nAddr.\tByte\tInstr."

SYNTAX_GUIDE = """\b
Mapping table
-------------
Each line maps a mnemonic and operand pattern to the MPC address where
its microcode begins, e.g. "ADD A, X : 4C" says ADD A, X starts at MPC
address 0x4C. A and B stand for memory operands, X for an immediate.

\b
Writing code files
------------------
    # this is a comment
    @base_addr=1F   # program is loaded at $1F
    start:
        MOV $04, 3      # (0x04) = 3
        ADD $04, 5      # (0x04) = (0x04) + 5
        BRZ start

\b
Notes:
    * Values are in hex (an optional 0x prefix is accepted)
    * '#' starts a comment
    * '$' prefix indicates a memory reference; no prefix indicates
      an immediate value
    * Lowercase is allowed and converted to uppercase for mapping
    * Labels sit on their own line and end with ':'
    * Directives (@name=value) must come before any label or instruction

\b
Jumps / Branches:
    JMP X    unconditional jump, X is an absolute memory address
    JSR X    jump to subroutine, X is an absolute memory address
    BR X     unconditional relative branch, X is an offset from PC
    BRZ X    conditional relative branch, X is an offset from PC
    BRN X    conditional relative branch, X is an offset from PC

\b
X can be a hex value or a label. For a label the correct value is
computed for the instruction used: the label's address for JMP/JSR,
the 2's complement offset from the PC for BR/BRZ/BRN.
"""


def setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure logging based on verbosity."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
        force=True,
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command(epilog=SYNTAX_GUIDE)
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output RAM image (default: ram.b, or $ASM92_OUTPUT)",
)
@click.option(
    "-m", "--mapping",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Instruction mapping table (default: mapping.conf if present, "
         "or $ASM92_MAPPING)",
)
@click.option(
    "--carry-adjust",
    type=click.IntRange(min(VALID_CARRY_ADJUST), max(VALID_CARRY_ADJUST)),
    default=None,
    help="Backward branch correction: 2 when the PSW carry-out feeds the "
         "ALU carry-in, 1 otherwise (default: 2, or $ASM92_CARRY_ADJUST)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate label table file",
)
@click.option(
    "-q", "--quiet",
    is_flag=True,
    help="Suppress the banner and the byte trace",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="asm92")
def main(
    input_file: Path,
    output: Optional[Path],
    mapping: Optional[Path],
    carry_adjust: Optional[int],
    listing: Optional[Path],
    symbols: Optional[Path],
    quiet: bool,
    verbose: bool,
) -> None:
    """
    Assemble 3P92 source code into a RAM image.

    INPUT_FILE is the plaintext file containing ISA level instructions.
    The output is a raw binary that can be loaded into the RAM modules
    of the logic circuit.

    \b
    Examples:
        asm92 prog.asm                  # Outputs ram.b
        asm92 prog.asm -o prog.b        # Specify output file
        asm92 prog.asm -m my.conf       # Use another mapping table
    """
    setup_logging(verbose, quiet)

    config = AssemblerConfig.from_env()
    if output is not None:
        config.output_file = output
    if mapping is not None:
        config.mapping_file = mapping
    if carry_adjust is not None:
        config.carry_adjust = carry_adjust
    if quiet:
        config.trace = False

    if not quiet:
        click.echo(BANNER.format(version=__version__))

    try:
        trace = (lambda entry: click.echo(str(entry))) if config.trace else None
        asm = Assembler.from_config(config, trace=trace)

        if config.trace:
            click.echo(TRACE_HEADER)

        asm.assemble_file(input_file, config.output_file)

        if listing:
            asm.write_listing(listing)
        if symbols:
            asm.write_symbols(symbols)

        click.echo(
            f"\n{input_file} successfully assembled to {config.output_file} "
            f"in {asm.get_size()} bytes."
        )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
