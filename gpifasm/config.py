from __future__ import annotations

from dataclasses import dataclass, replace
import enum
import logging
import os
from typing import Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)


def is_decimal(text: str) -> bool:
    """True for a non-empty run of ASCII digits. ``str.isdecimal`` alone also
    accepts other scripts' digits, which ``int`` would then convert."""
    return text.isascii() and text.isdecimal()


class DirectiveError(Exception):
    """Raised for an unknown directive or an operand outside its legal range."""


class FlagSelect(enum.IntEnum):
    """FIFO flag routed to operand value 6 (EPxGPIFFLGSEL)."""

    PF = 0
    EF = 1
    FF = 2


@dataclass(frozen=True)
class Configuration:
    """Global mode flags set by directives, read-only while encoding."""

    tristate_control: int = 0
    ready_config_5: int = 0
    ready_config_7: int = 0
    flag_select: FlagSelect = FlagSelect.PF
    endpoint: int = 2
    waveform_id: int = 0

    def with_directive(self, directive: str, operands: List[str]) -> "Configuration":
        """Return a copy with ``directive`` applied.

        Raises DirectiveError for unknown directives, a wrong operand count or
        an operand outside the directive's legal values.
        """
        try:
            field_name, parse = DIRECTIVES[directive]
        except KeyError:
            raise DirectiveError(f"Unknown directive {directive}") from None
        if len(operands) != 1:
            raise DirectiveError(f"Only one operand valid for pseudo op {directive}")
        value = parse(directive, operands[0])
        logger.debug("%s %s -> %s=%r", directive, operands[0], field_name, value)
        return replace(self, **{field_name: value})

    def describe(self) -> List[Tuple[str, str]]:
        """Directive/value pairs in effect, in directive order."""
        return [
            (".TRICTL", str(self.tristate_control)),
            (".GPIFREADYCFG5", str(self.ready_config_5)),
            (".GPIFREADYCFG7", str(self.ready_config_7)),
            (".EPXGPIFFLGSEL", self.flag_select.name),
            (".EP", str(self.endpoint)),
            (".WAVEFORM", str(self.waveform_id)),
        ]


def _decimal(directive: str, raw: str) -> int:
    if not is_decimal(raw):
        raise DirectiveError(f"Invalid operand '{raw}' for {directive}")
    return int(raw, 10)


def _bit(directive: str, raw: str) -> int:
    value = _decimal(directive, raw)
    if value > 1:
        raise DirectiveError(f"Invalid operand '{raw}' for {directive}")
    return value


def _endpoint(directive: str, raw: str) -> int:
    value = _decimal(directive, raw)
    if value not in (2, 4, 6, 8):
        raise DirectiveError(f"Invalid operand '{raw}' for {directive}")
    return value


def _flag(directive: str, raw: str) -> FlagSelect:
    try:
        return FlagSelect[raw]
    except KeyError:
        raise DirectiveError(f"Operand of {directive} must be PF, EF, or FF") from None


DIRECTIVES: Dict[str, Tuple[str, Callable[[str, str], object]]] = {
    ".TRICTL": ("tristate_control", _bit),
    ".GPIFREADYCFG5": ("ready_config_5", _bit),
    ".GPIFREADYCFG7": ("ready_config_7", _bit),
    ".EPXGPIFFLGSEL": ("flag_select", _flag),
    ".EP": ("endpoint", _endpoint),
    ".WAVEFORM": ("waveform_id", _decimal),
}


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().casefold()
    return normalized not in {"0", "false", "off", ""}


@dataclass(frozen=True)
class ToolConfig:
    verbose: bool
    listing: bool


def load_tool_config() -> ToolConfig:
    return ToolConfig(
        verbose=_env_flag("GPIFASM_VERBOSE", default=False),
        listing=not _env_flag("GPIFASM_NO_LISTING", default=False),
    )


__all__ = [
    "Configuration",
    "DirectiveError",
    "DIRECTIVES",
    "FlagSelect",
    "ToolConfig",
    "is_decimal",
    "load_tool_config",
]
