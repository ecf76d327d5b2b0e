"""Context-sensitive operand tables.

The GPIF logic function compares two 3-bit terms. Which signal a term value
selects depends on the ready/flag configuration: value 5 is RDY5 or the
transaction-count expiry TC, value 6 is whichever FIFO flag is routed by
EPxGPIFFLGSEL and value 7 is only available as INTRDY in some contexts. The
output byte has two mutually exclusive pin namespaces keyed by TRICTL.
"""

from __future__ import annotations

from functools import lru_cache
import itertools
from typing import Dict, Iterator, List, NamedTuple, Tuple

from .config import Configuration, FlagSelect


class UnknownOperand(ValueError):
    """Raised when a name has no encoding in the active context."""

    def __init__(self, name: str, legal: List[str], context: str = "") -> None:
        self.name = name
        self.legal = legal
        self.context = context
        super().__init__(f"unknown operand '{name}'")

    def legal_text(self) -> str:
        return " ".join(self.legal)


class OperandContext(NamedTuple):
    ready_config_5: int
    flag_select: FlagSelect
    ready_config_7: int

    @classmethod
    def from_config(cls, config: Configuration) -> "OperandContext":
        return cls(config.ready_config_5, config.flag_select, config.ready_config_7)


def all_contexts() -> Iterator[OperandContext]:
    for cfg5, flag, cfg7 in itertools.product((0, 1), FlagSelect, (0, 1)):
        yield OperandContext(cfg5, flag, cfg7)


@lru_cache(maxsize=None)
def _context_table(ctx: OperandContext) -> Dict[str, int]:
    table = {f"RDY{n}": n for n in range(5)}
    table["TC" if ctx.ready_config_5 else "RDY5"] = 0b101
    table[ctx.flag_select.name] = 0b110
    if ctx.ready_config_7 and ctx.flag_select is not FlagSelect.PF:
        table["INTRDY"] = 0b111
    return table


def operand_table(config: Configuration) -> Dict[str, int]:
    """Term name to 3-bit value for the configuration's context."""
    return dict(_context_table(OperandContext.from_config(config)))


def legal_operands(config: Configuration) -> List[str]:
    table = _context_table(OperandContext.from_config(config))
    return sorted(table, key=lambda name: (table[name], name))


def resolve_operand(config: Configuration, name: str) -> int:
    table = _context_table(OperandContext.from_config(config))
    try:
        return table[name]
    except KeyError:
        raise UnknownOperand(name, legal_operands(config)) from None


@lru_cache(maxsize=None)
def _candidates(value: int) -> Tuple[str, ...]:
    names: List[str] = []
    for ctx in all_contexts():
        for name, encoded in _context_table(ctx).items():
            if encoded == value and name not in names:
                names.append(name)
    return tuple(names)


def operand_candidates(value: int) -> List[str]:
    """Every name ``value`` can stand for, across all contexts."""
    return list(_candidates(value & 0x07))


# Output pin name -> bit position, keyed by TRICTL.
OUTPUT_PINS: Dict[int, Dict[str, int]] = {
    0: {
        "CTL0": 0,
        "CTL1": 1,
        "CTL2": 2,
        "CTL3": 3,
        "CTL4": 4,
        "CTL5": 5,
    },
    1: {
        "CTL0": 0,
        "CTL1": 1,
        "CTL2": 2,
        "CTL3": 3,
        "OE0": 4,
        "OE1": 5,
        "OE2": 6,
        "OE3": 7,
    },
}


def output_pins(tristate: int) -> Dict[str, int]:
    return OUTPUT_PINS[1 if tristate else 0]


def legal_output_pins(tristate: int) -> List[str]:
    pins = output_pins(tristate)
    return sorted(pins, key=pins.__getitem__)


def resolve_output_pin(tristate: int, name: str) -> int:
    """Bit mask of output pin ``name``."""
    try:
        return 1 << output_pins(tristate)[name]
    except KeyError:
        raise UnknownOperand(
            name, legal_output_pins(tristate), context=f"TRICTL={1 if tristate else 0}"
        ) from None


def output_pin_names(tristate: int, output: int) -> List[str]:
    """Names of the pins set in ``output``, in bit order."""
    return [name for name in legal_output_pins(tristate) if output & (1 << output_pins(tristate)[name])]


LOGIC_FUNCTIONS: Dict[str, int] = {
    "AND": 0b00,
    "OR": 0b01,
    "XOR": 0b10,
    "/AND": 0b11,
}

LOGIC_FUNCTION_NAMES: Dict[int, str] = {value: name for name, value in LOGIC_FUNCTIONS.items()}


def resolve_logic_function(name: str) -> int:
    try:
        return LOGIC_FUNCTIONS[name]
    except KeyError:
        raise UnknownOperand(name, list(LOGIC_FUNCTIONS)) from None
