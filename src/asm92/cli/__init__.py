"""
asm92 Command-Line Interface
============================

This package provides the command-line tool for the 3P92 assembler:

- **asm92**: assembles ISA-level source into a RAM image (ram.b)

The tool is a Click-based CLI application with a syntax guide in its
help text and consistent exit codes (see asm92.cli.errors).
"""

__all__ = ["asm92", "errors"]
