from __future__ import annotations

from dataclasses import dataclass

from .coding import Decoder, Encoder
from .constants import (
    BRANCH0_SHIFT,
    BRANCH1_SHIFT,
    BRANCH_MASK,
    DEFAULT_BRANCH,
    DEFAULT_LOGIC,
    DEFAULT_OPCODE,
    DEFAULT_OUTPUT,
    LFUNC_MASK,
    LFUNC_SHIFT,
    REEXECUTE_BIT,
    TERM_MASK,
    TERMA_SHIFT,
    TERMB_SHIFT,
    OpcodeFlag,
)


@dataclass(frozen=True)
class PackedRecord:
    """The four bytes describing one waveform state.

    Quads are read and written in (branch, opcode, logic, output) order; the
    emitted table stores them as planes instead (see ``table``).
    """

    branch: int = DEFAULT_BRANCH
    opcode: int = DEFAULT_OPCODE
    logic: int = DEFAULT_LOGIC
    output: int = DEFAULT_OUTPUT

    def __post_init__(self) -> None:
        for name in ("branch", "opcode", "logic", "output"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise ValueError(f"{name} byte out of range: {value:#x}")

    @classmethod
    def build(
        cls,
        *,
        opcode: OpcodeFlag = OpcodeFlag(0),
        count: int = 1,
        branch0: int = 0,
        branch1: int = 0,
        reexecute: bool = False,
        terma: int = 0,
        termb: int = 0,
        lfunc: int = 0,
        output: int = 0,
    ) -> "PackedRecord":
        if opcode & OpcodeFlag.DP:
            branch = (
                ((branch0 & BRANCH_MASK) << BRANCH0_SHIFT)
                | ((branch1 & BRANCH_MASK) << BRANCH1_SHIFT)
                | (REEXECUTE_BIT if reexecute else 0)
            )
        else:
            branch = count & 0xFF
        logic = (
            ((termb & TERM_MASK) << TERMB_SHIFT)
            | ((terma & TERM_MASK) << TERMA_SHIFT)
            | ((lfunc & LFUNC_MASK) << LFUNC_SHIFT)
        )
        return cls(branch=branch, opcode=int(opcode), logic=logic, output=output)

    @property
    def flags(self) -> OpcodeFlag:
        return OpcodeFlag(self.opcode & 0x3F)

    @property
    def is_decision_point(self) -> bool:
        return bool(self.opcode & OpcodeFlag.DP)

    @property
    def count(self) -> int:
        return self.branch or 256

    @property
    def branch0(self) -> int:
        return (self.branch >> BRANCH0_SHIFT) & BRANCH_MASK

    @property
    def branch1(self) -> int:
        return (self.branch >> BRANCH1_SHIFT) & BRANCH_MASK

    @property
    def reexecute(self) -> bool:
        return bool(self.branch & REEXECUTE_BIT)

    @property
    def terma(self) -> int:
        return (self.logic >> TERMA_SHIFT) & TERM_MASK

    @property
    def termb(self) -> int:
        return (self.logic >> TERMB_SHIFT) & TERM_MASK

    @property
    def lfunc(self) -> int:
        return (self.logic >> LFUNC_SHIFT) & LFUNC_MASK

    def quad(self) -> bytes:
        encoder = Encoder()
        self.encode(encoder)
        return bytes(encoder.buf)

    def hex(self) -> str:
        return self.quad().hex().upper()

    def encode(self, encoder: Encoder) -> None:
        encoder.unsigned_byte(self.branch)
        encoder.unsigned_byte(self.opcode)
        encoder.unsigned_byte(self.logic)
        encoder.unsigned_byte(self.output)

    @classmethod
    def decode(cls, decoder: Decoder) -> "PackedRecord":
        branch = decoder.unsigned_byte()
        opcode = decoder.unsigned_byte()
        logic = decoder.unsigned_byte()
        output = decoder.unsigned_byte()
        return cls(branch=branch, opcode=opcode, logic=logic, output=output)


DEFAULT_RECORD = PackedRecord()
