"""GPIF waveform assembler and decompiler facade exports."""

from .config import Configuration, DirectiveError, FlagSelect
from .decoder import DecodedRecord, TableDecoder, decode_record
from .gpif_asm import Assembler, AssemblerError, AssemblyResult
from .gpif_disasm import DecompileError, Decompiler
from .instr import Instruction, encode_instruction
from .record import PackedRecord
from .table import StateOverflow, WaveformTable

__all__ = [
    "Assembler",
    "AssemblerError",
    "AssemblyResult",
    "Configuration",
    "DecodedRecord",
    "DecompileError",
    "Decompiler",
    "DirectiveError",
    "FlagSelect",
    "Instruction",
    "PackedRecord",
    "StateOverflow",
    "TableDecoder",
    "WaveformTable",
    "decode_record",
    "encode_instruction",
]
