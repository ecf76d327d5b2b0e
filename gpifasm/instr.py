from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional

from .config import Configuration, is_decimal
from .constants import MAX_COUNT, MIN_COUNT, NUM_STATES, TERMINAL_STATE, OpcodeFlag
from .operands import (
    UnknownOperand,
    resolve_logic_function,
    resolve_operand,
    resolve_output_pin,
)
from .record import PackedRecord

logger = logging.getLogger(__name__)

# Mnemonic characters and the opcode bit each one sets. '-' sets nothing and
# spells the flag-less no-op state; '*' is handled separately.
MNEMONIC_FLAGS: Dict[str, OpcodeFlag] = {
    "J": OpcodeFlag.DP,
    "S": OpcodeFlag.SGL,
    "+": OpcodeFlag.INCAD,
    "G": OpcodeFlag.GINT,
    "D": OpcodeFlag.DATA,
    "N": OpcodeFlag.NEXT,
    "-": OpcodeFlag(0),
}
REEXECUTE_CHAR = "*"


@dataclass
class Instruction:
    mnemonic: str
    operands: List[str] = field(default_factory=list)
    comment: Optional[str] = None
    line: Optional[int] = None
    errors: List[str] = field(default_factory=list)
    record: Optional[PackedRecord] = None

    @property
    def error(self) -> Optional[str]:
        return "\n".join(self.errors) if self.errors else None

    def add_error(self, message: str) -> None:
        logger.debug("line %s: %s", self.line, message)
        self.errors.append(message)

    def operand_text(self) -> str:
        return " ".join(self.operands)


def _pin_error(exc: UnknownOperand, tristate: int) -> str:
    return (
        f"invalid operand '{exc.name}' (TRICTL={1 if tristate else 0})\n"
        f"  Must be one of: {exc.legal_text()}"
    )


class _Encoding:
    """Scratch state while one instruction is being encoded."""

    def __init__(self, instr: Instruction, config: Configuration, total_states: int) -> None:
        self.instr = instr
        self.config = config
        self.total_states = total_states
        self.opcode = OpcodeFlag(0)
        self.reexecute = False
        self.count = 1
        self.branches: List[int] = []
        self.terma = 0
        self.termb = 0
        self.lfunc = 0
        self.output = 0

    def scan_mnemonic(self) -> None:
        for char in self.instr.mnemonic:
            if char in MNEMONIC_FLAGS:
                self.opcode |= MNEMONIC_FLAGS[char]
            elif char == REEXECUTE_CHAR and self.opcode & OpcodeFlag.DP:
                self.reexecute = True
            else:
                self.instr.add_error(f"Unknown opcode '{char}'")

    def add_pin(self, name: str) -> bool:
        tristate = self.config.tristate_control
        try:
            self.output |= resolve_output_pin(tristate, name)
        except UnknownOperand as exc:
            self.instr.add_error(_pin_error(exc, tristate))
            return False
        return True

    def encode_decision_point(self) -> None:
        ops = self.instr.operands
        if len(ops) < 3:
            self.instr.add_error("missing operand A func B")
            return
        opera, func, operb = ops[:3]
        ok = True
        try:
            self.terma = resolve_operand(self.config, opera)
        except UnknownOperand as exc:
            self.instr.add_error(
                f"Invalid operand A '{opera}'\n  Must be one of: {exc.legal_text()}"
            )
            ok = False
        try:
            self.lfunc = resolve_logic_function(func)
        except UnknownOperand as exc:
            self.instr.add_error(
                f"Invalid function '{func}'\n  Must be one of: {exc.legal_text()}"
            )
            ok = False
        try:
            self.termb = resolve_operand(self.config, operb)
        except UnknownOperand as exc:
            self.instr.add_error(
                f"Invalid operand B '{operb}'\n  Must be one of: {exc.legal_text()}"
            )
            ok = False
        if not ok:
            return

        for operand in ops[3:]:
            if operand.startswith("$"):
                if not self.add_target(operand):
                    return
            elif not self.add_pin(operand):
                return

        if len(self.branches) != 2:
            self.instr.add_error("Branch0 and/or branch1 states were not specified.")

    def add_target(self, operand: str) -> bool:
        digits = operand[1:]
        limit = min(TERMINAL_STATE, self.total_states)
        if not is_decimal(digits) or (
            int(digits) != TERMINAL_STATE and int(digits) > limit
        ):
            self.instr.add_error(f"invalid target state '{operand}'")
            return False
        if len(self.branches) == 2:
            self.instr.add_error(f"Too many target states starting with '{operand}'")
            return False
        self.branches.append(int(digits))
        return True

    def encode_counted(self) -> None:
        seen_count = False
        for operand in self.instr.operands:
            if is_decimal(operand[:1]):
                if seen_count:
                    self.instr.add_error(f"Count specified more than once at '{operand}'")
                    continue
                seen_count = True
                if not is_decimal(operand):
                    self.instr.add_error(f"Invalid count '{operand}'")
                    continue
                count = int(operand, 10)
                if not MIN_COUNT <= count <= MAX_COUNT:
                    self.instr.add_error(f"Invalid count value {count}")
                    continue
                self.count = count
            elif not self.add_pin(operand):
                break

    def record(self) -> PackedRecord:
        branch0, branch1 = (self.branches + [TERMINAL_STATE, TERMINAL_STATE])[:2]
        return PackedRecord.build(
            opcode=self.opcode,
            count=self.count,
            branch0=branch0,
            branch1=branch1,
            reexecute=self.reexecute,
            terma=self.terma,
            termb=self.termb,
            lfunc=self.lfunc,
            output=self.output,
        )


def encode_instruction(
    instr: Instruction, config: Configuration, total_states: int = NUM_STATES
) -> PackedRecord:
    """Encode ``instr`` under ``config`` and store the record on it.

    ``total_states`` is the number of instructions in the table; branch
    targets above it are rejected unless they name the terminal state 7.
    Problems are collected on ``instr.errors``; a record is always produced.
    """
    instr.errors.clear()
    enc = _Encoding(instr, config, total_states)
    enc.scan_mnemonic()
    if enc.opcode & OpcodeFlag.DP:
        enc.encode_decision_point()
    else:
        enc.encode_counted()
    instr.record = enc.record()
    return instr.record
