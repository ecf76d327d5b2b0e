"""Waveform record decoder.

Decoding is the structural inverse of ``instr.encode_instruction``. Two kinds
of information are lost on the way in and cannot be recovered here:

* term values 5 and 6 name different signals depending on the ready/flag
  configuration, so they decode to every candidate joined by ``|``;
* the output byte's pin names depend on TRICTL, which is not stored in the
  table. ``TableDecoder`` guesses it: it starts with TRICTL off and switches
  to on, for the rest of the table, the first time it sees OE2 or OE3 (bits 6
  and 7), which have no TRICTL=0 meaning. The switch never reverts, so OE0 and
  OE1 in states before the first OE2/OE3 decode as CTL4 and CTL5.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, List, Optional

from .constants import (
    BRANCH_RESERVED_MASK,
    OPCODE_RESERVED_MASK,
    TRISTATE_ONLY_OUTPUT_MASK,
    OpcodeFlag,
)
from .operands import LOGIC_FUNCTION_NAMES, operand_candidates, output_pin_names
from .record import PackedRecord

logger = logging.getLogger(__name__)

# Canonical order of mnemonic characters when rendering an opcode byte.
MNEMONIC_ORDER = (
    ("J", OpcodeFlag.DP),
    ("S", OpcodeFlag.SGL),
    ("+", OpcodeFlag.INCAD),
    ("G", OpcodeFlag.GINT),
    ("D", OpcodeFlag.DATA),
    ("N", OpcodeFlag.NEXT),
)
EMPTY_MNEMONIC = "-"


@dataclass(frozen=True)
class DecodedRecord:
    record: PackedRecord
    mnemonic: str
    operands: List[str]
    tristate: int

    def operand_text(self) -> str:
        return " ".join(self.operands)

    def __str__(self) -> str:
        return f"{self.record.hex()}\t{self.mnemonic}\t{self.operand_text()}".rstrip()


def term_name(value: int) -> str:
    return "|".join(operand_candidates(value))


def decode_mnemonic(record: PackedRecord) -> str:
    chars = [char for char, flag in MNEMONIC_ORDER if record.flags & flag]
    if record.is_decision_point and record.reexecute:
        chars.append("*")
    return "".join(chars) or EMPTY_MNEMONIC


def decode_operands(record: PackedRecord, tristate: int) -> List[str]:
    pins = output_pin_names(tristate, record.output)
    if not record.is_decision_point:
        ops = [] if record.count == 1 else [str(record.count)]
        return ops + pins
    return [
        term_name(record.terma),
        LOGIC_FUNCTION_NAMES[record.lfunc],
        term_name(record.termb),
        *pins,
        f"${record.branch0}",
        f"${record.branch1}",
    ]


def decode_record(
    branch: int, opcode: int, logic: int, output: int, tristate: int = 0
) -> DecodedRecord:
    """Decode one state's bytes under a fixed TRICTL assumption."""
    record = PackedRecord(branch=branch, opcode=opcode, logic=logic, output=output)
    return _decode(record, tristate)


def _decode(record: PackedRecord, tristate: int) -> DecodedRecord:
    if record.opcode & OPCODE_RESERVED_MASK:
        logger.debug("ignoring reserved opcode bits in %02X", record.opcode)
    if record.is_decision_point and record.branch & BRANCH_RESERVED_MASK:
        logger.debug("ignoring reserved branch bit in %02X", record.branch)
    if not record.is_decision_point and record.logic:
        logger.debug("ignoring logic byte %02X of a counted state", record.logic)
    return DecodedRecord(
        record=record,
        mnemonic=decode_mnemonic(record),
        operands=decode_operands(record, tristate),
        tristate=1 if tristate else 0,
    )


class TableDecoder:
    """Decodes the records of one table, inferring TRICTL as it goes."""

    def __init__(self, assume_tristate: bool = False) -> None:
        self.tristate = 1 if assume_tristate else 0
        self.latched_at: Optional[int] = None
        self.index = 0

    def decode(self, record: PackedRecord) -> DecodedRecord:
        if not self.tristate and record.output & TRISTATE_ONLY_OUTPUT_MASK:
            logger.debug("state %d: OE2/OE3 set, assuming TRICTL=1", self.index)
            self.tristate = 1
            self.latched_at = self.index
        self.index += 1
        return _decode(record, self.tristate)

    def decode_all(self, records: Iterable[PackedRecord]) -> List[DecodedRecord]:
        return [self.decode(record) for record in records]
