from __future__ import annotations

from typing import List

import bincopy  # type: ignore[import-untyped]

from .config import Configuration
from .constants import NUM_STATES, TABLE_SIZE
from .instr import Instruction


def format_listing(config: Configuration, instructions: List[Instruction]) -> str:
    """Configuration echo plus one line per state, with any errors below it."""
    lines = [";", ";\tEnvironment in effect:", ";"]
    for directive, value in config.describe():
        lines.append(f"\t{directive}\t{value}")
    lines.append(";")

    for index, instr in enumerate(instructions):
        record = instr.record.hex() if instr.record is not None else "--------"
        line = f"${index}  {record}\t{instr.mnemonic}\t{instr.operand_text()}"
        if instr.comment:
            line += f"\t; {instr.comment}"
        lines.append(line.rstrip())
        for error in instr.errors:
            lines.append(f"*** ERROR: {error}")
    return "\n".join(lines) + "\n"


def format_c_array(data: bytes, waveform_id: int = 0) -> str:
    """The table as a C declaration, one tab-indented line per plane."""
    if len(data) != TABLE_SIZE:
        raise ValueError(f"expected {TABLE_SIZE} bytes, got {len(data)}")
    lines = [f"static unsigned char waveform{waveform_id}[{TABLE_SIZE}] = {{"]
    for offset in range(0, TABLE_SIZE, NUM_STATES):
        plane = data[offset:offset + NUM_STATES]
        lines.append("\t" + "".join(f"0x{byte:02X}," for byte in plane))
    lines.append("};")
    return "\n".join(lines) + "\n\n"


def format_ihex(data: bytes, waveform_id: int = 0) -> str:
    """Intel HEX image with the table at ``32 * waveform_id``."""
    binfile = bincopy.BinFile()
    binfile.add_binary(data, address=waveform_id * TABLE_SIZE)
    return binfile.as_ihex()
