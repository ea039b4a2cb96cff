# =============================================================================
# conftest.py - Shared Test Fixtures
# =============================================================================
# Sample program, its mapping table and the expected RAM image, shared by
# the assembler, code generator and CLI tests.
# =============================================================================

import logging

import pytest


SAMPLE_SOURCE = """\
# 0xC0 is output buffer
# 0xC4 is input buffer
# 0xC8 is PSW

init:
    mov $50, 0x12   # sum is stored at 0x50. init to 0x12
    mov $C0, $50    # update display

loop1:
    cmp 1           # clear PSW flags to avoid unintended add w/ carry
    add $50, 05     # increment sum by 0x05
    mov $C0, $50    # update display

    mov $51, $C8    # load PSW to 0x51
    and $51, 4      # isolate V flag
    cmp $51, 4      # zero set if V flag set
    brz exit        # exit if overflow occurs

    jmp loop1       # iterate

exit:
    hlt             # terminate program
"""

SAMPLE_MAPPING = """\
# mnemonic operands : MPC address
HLT         : 03
MOV A, X    : 04
MOV A, B    : 05
ADD A, X    : 0B
AND A, X    : 18
CMP X       : 20
CMP A, X    : 22
JMP X       : 50
BR X        : 80
BRZ X       : 82
BRN X       : 84
"""

SAMPLE_CODE = bytes([
    0x04, 0x50, 0x12,   # mov $50, 0x12
    0x05, 0xC0, 0x50,   # mov $C0, $50
    0x20, 0x01,         # loop1: cmp 1
    0x0B, 0x50, 0x05,   # add $50, 05
    0x05, 0xC0, 0x50,   # mov $C0, $50
    0x05, 0x51, 0xC8,   # mov $51, $C8
    0x18, 0x51, 0x04,   # and $51, 4
    0x22, 0x51, 0x04,   # cmp $51, 4
    0x82, 0x03,         # brz exit
    0x50, 0x06,         # jmp loop1
    0x03,               # exit: hlt
])


@pytest.fixture
def sample_source():
    return SAMPLE_SOURCE


@pytest.fixture
def sample_mapping():
    return SAMPLE_MAPPING


@pytest.fixture
def sample_code():
    return SAMPLE_CODE


@pytest.fixture
def sample_files(tmp_path):
    """Write the sample program and mapping table; return their paths."""
    source = tmp_path / "samplecode.asm"
    source.write_text(SAMPLE_SOURCE)
    mapping = tmp_path / "mapping.conf"
    mapping.write_text(SAMPLE_MAPPING)
    return source, mapping


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep ASM92_* settings from the calling shell out of the tests."""
    for name in ("ASM92_OUTPUT", "ASM92_MAPPING", "ASM92_CARRY_ADJUST", "ASM92_TRACE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the stream handler the CLI installs so each test starts clean."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(logging.WARNING)
