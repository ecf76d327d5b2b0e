"""Assembly of the eight-state waveform table.

The emitted table is four planes of eight bytes each, in the order the GPIF
waveform registers expect them::

    [0:8]   branch / repeat count, states 0-7
    [8:16]  opcode
    [16:24] output
    [24:32] logic function

Records themselves travel as (branch, opcode, logic, output) quads, so the
import path de-interleaves the planes back into quads.
"""

from __future__ import annotations

import logging
from typing import Iterator, List

from .coding import Decoder
from .config import Configuration
from .constants import NUM_STATES, TABLE_SIZE
from .instr import Instruction, encode_instruction
from .record import DEFAULT_RECORD, PackedRecord

logger = logging.getLogger(__name__)

# Plane order of the emitted artifact, as PackedRecord attribute names.
PLANE_ORDER = ("branch", "opcode", "output", "logic")


class StateOverflow(Exception):
    """Raised when a table would exceed eight states."""


class WaveformTable:
    def __init__(self) -> None:
        self.instructions: List[Instruction] = []

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def append(self, instr: Instruction) -> None:
        if len(self.instructions) >= NUM_STATES:
            where = f" at line {instr.line}" if instr.line is not None else ""
            raise StateOverflow(
                f"Too many states{where}. Limit is {NUM_STATES} states max."
            )
        self.instructions.append(instr)

    def encode(self, config: Configuration) -> None:
        total = len(self.instructions)
        for instr in self.instructions:
            encode_instruction(instr, config, total)

    @property
    def has_errors(self) -> bool:
        return any(instr.errors for instr in self.instructions)

    def records(self) -> List[PackedRecord]:
        """The eight records, padding unused states with the default no-op."""
        records = []
        for instr in self.instructions:
            if instr.record is None:
                raise ValueError("table has not been encoded")
            records.append(instr.record)
        padding = NUM_STATES - len(records)
        if padding:
            logger.debug("padding %d unused states", padding)
        return records + [DEFAULT_RECORD] * padding

    def to_bytes(self) -> bytes:
        return records_to_planes(self.records())


def records_to_planes(records: List[PackedRecord]) -> bytes:
    if len(records) != NUM_STATES:
        raise ValueError(f"expected {NUM_STATES} records, got {len(records)}")
    out = bytearray()
    for plane in PLANE_ORDER:
        out += bytes(getattr(record, plane) for record in records)
    return bytes(out)


def planes_to_quads(data: bytes) -> bytes:
    """Reorder one 32-byte plane-layout table into eight record quads."""
    if len(data) != TABLE_SIZE:
        raise ValueError(f"expected {TABLE_SIZE} bytes, got {len(data)}")
    planes = {
        name: data[index * NUM_STATES:(index + 1) * NUM_STATES]
        for index, name in enumerate(PLANE_ORDER)
    }
    out = bytearray()
    for state in range(NUM_STATES):
        out += bytes(
            (
                planes["branch"][state],
                planes["opcode"][state],
                planes["logic"][state],
                planes["output"][state],
            )
        )
    return bytes(out)


def records_from_planes(data: bytes) -> List[PackedRecord]:
    decoder = Decoder(planes_to_quads(data))
    return [PackedRecord.decode(decoder) for _ in range(NUM_STATES)]
