"""Shared GPIF waveform constants.

This module centralizes the table geometry and the bit layouts of the four
bytes that make up one waveform state.
"""

from enum import IntFlag

# One waveform table drives the eight hardware states of the sequencer.
NUM_STATES = 8

# Each state is described by four bytes (branch, opcode, logic, output).
RECORD_SIZE = 4

# A complete table, emitted as four planes of NUM_STATES bytes.
TABLE_SIZE = NUM_STATES * RECORD_SIZE

# Byte counts accepted when importing a WaveData array (one to four tables).
VALID_WAVEDATA_LENGTHS = (32, 64, 96, 128)

# State 7 doubles as the "terminal" state and is always a legal target.
TERMINAL_STATE = 7

# Repeat counts of a non-decision-point state. 256 is stored as zero.
MIN_COUNT = 1
MAX_COUNT = 256

# Default contents of a padding state: no-op with a count of one.
DEFAULT_BRANCH = 0x01
DEFAULT_OPCODE = 0x00
DEFAULT_LOGIC = 0x00
DEFAULT_OUTPUT = 0x00


class OpcodeFlag(IntFlag):
    """Opcode byte bit masks.

    Bit layout:
        7   6    5    4     3     2    1    0
      +----+----+----+-----+-----+----+----+----+
      | -- | -- |SGL |GINT |INCAD|NEXT|DATA| DP |
      +----+----+----+-----+-----+----+----+----+
    """

    DP = 0x01  # Decision point
    DATA = 0x02  # Drive or sample the FIFO data bus
    NEXT = 0x04  # Advance FIFO / use SGLCRC
    INCAD = 0x08  # Increment GPIFADR
    GINT = 0x10  # Raise the GPIFWF interrupt
    SGL = 0x20  # Single-transaction data registers


OPCODE_RESERVED_MASK = 0xC0

# Branch byte of a decision point: branch0 in bits 0-2, branch1 in bits 3-5,
# bit 6 reserved, re-execute in bit 7.
BRANCH0_SHIFT = 0
BRANCH1_SHIFT = 3
BRANCH_MASK = 0x07
BRANCH_RESERVED_MASK = 0x40
REEXECUTE_BIT = 0x80

# Logic function byte: TERM B in bits 0-2, TERM A in bits 3-5, LFUNC in 6-7.
TERMB_SHIFT = 0
TERMA_SHIFT = 3
TERM_MASK = 0x07
LFUNC_SHIFT = 6
LFUNC_MASK = 0x03

# Output bits that only exist when tristate control is on (OE2, OE3).
TRISTATE_ONLY_OUTPUT_MASK = 0xC0
