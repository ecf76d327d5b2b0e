from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, List, Optional

from .coding import BufferTooShort
from .decoder import DecodedRecord, TableDecoder
from .table import records_from_planes
from .wavedata import (
    DecompileError,
    NumberedTable,
    load_wavedata,
    parse_wavedata,
    split_tables,
)

logger = logging.getLogger(__name__)


@dataclass
class DecompiledTable:
    waveform: int
    states: List[DecodedRecord]
    latched_at: Optional[int] = None

    def listing(self) -> List[str]:
        lines = []
        for index, state in enumerate(self.states):
            if self.latched_at == index:
                lines.append("; OE2/OE3 in use, TRICTL=1 assumed from here")
            lines.append(f"${index}  {state}")
        return lines


class Decompiler:
    """Turns imported WaveData bytes back into source-like listings."""

    def __init__(self, assume_tristate: bool = False) -> None:
        self.assume_tristate = assume_tristate

    def decompile_tables(self, numbered: Iterable[NumberedTable]) -> List[DecompiledTable]:
        tables = []
        for waveform, chunk in numbered:
            decoder = TableDecoder(self.assume_tristate)
            try:
                states = decoder.decode_all(records_from_planes(chunk))
            except (BufferTooShort, ValueError) as e:
                raise DecompileError(f"Truncated waveform {waveform}: {e}") from e
            tables.append(DecompiledTable(waveform, states, decoder.latched_at))
        logger.debug("decoded %d waveform table(s)", len(tables))
        return tables

    def decompile_bytes(self, data: bytes) -> List[DecompiledTable]:
        return self.decompile_tables(enumerate(split_tables(data)))

    def decompile_text(self, text: str) -> List[DecompiledTable]:
        return self.decompile_bytes(parse_wavedata(text))

    def decompile_file(self, path: str) -> List[DecompiledTable]:
        return self.decompile_tables(load_wavedata(path))


def format_decompiled(tables: List[DecompiledTable], source: str = "") -> str:
    out: List[str] = []
    for table in tables:
        header = f"; {source} waveform {table.waveform}" if source else f"; waveform {table.waveform}"
        out.append(header)
        out.extend(table.listing())
    return "\n".join(out) + "\n"


__all__ = [
    "DecompiledTable",
    "DecompileError",
    "Decompiler",
    "format_decompiled",
]
