from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Optional, cast

from lark.exceptions import LarkError

from .asm import DirectiveNode, InstructionNode, parse_source
from .config import Configuration, DirectiveError
from .instr import Instruction
from .table import StateOverflow, WaveformTable

logger = logging.getLogger(__name__)


class AssemblerError(Exception):
    def __init__(self, message: str, result: Optional[AssemblyResult] = None) -> None:
        super().__init__(message)
        # states collected before the failure, when there are any to list
        self.result = result


@dataclass
class AssemblyResult:
    config: Configuration
    table: WaveformTable

    @property
    def instructions(self) -> List[Instruction]:
        return self.table.instructions

    @property
    def has_errors(self) -> bool:
        return self.table.has_errors

    def to_bytes(self) -> bytes:
        """The 32-byte plane-layout table; refused while any state has errors."""
        if self.has_errors:
            bad = sum(1 for instr in self.instructions if instr.errors)
            raise AssemblerError(f"{bad} state(s) have errors, no output generated")
        return self.table.to_bytes()


class Assembler:
    """
    Single-pass assembler for one GPIF waveform.

    Directives are applied in source order before any instruction is encoded,
    so every instruction sees the final configuration.
    """

    def __init__(self, config: Configuration | None = None) -> None:
        self.initial_config = config or Configuration()

    def _collect(self, source_text: str) -> AssemblyResult:
        try:
            program = parse_source(source_text)
        except LarkError as e:
            raise AssemblerError(f"Parsing failed: {e}") from e

        config = self.initial_config
        table = WaveformTable()
        for node in program["lines"]:
            if "directive" in node:
                directive = cast(DirectiveNode, node)
                try:
                    config = config.with_directive(directive["directive"], directive["args"])
                except DirectiveError as e:
                    raise AssemblerError(f"on line {directive['line']}: {e}") from e
                continue

            stmt = cast(InstructionNode, node)
            instr = Instruction(
                mnemonic=stmt["mnemonic"],
                operands=stmt["operands"],
                comment=stmt["comment"],
                line=stmt["line"],
            )
            try:
                table.append(instr)
            except StateOverflow as e:
                table.encode(config)
                raise AssemblerError(str(e), AssemblyResult(config=config, table=table)) from e
        return AssemblyResult(config=config, table=table)

    def assemble(self, source_text: str) -> AssemblyResult:
        """Assembles the given source text.

        Fatal problems (parse failure, bad directive, more than eight states)
        raise AssemblerError. Per-state problems are left on the instructions;
        check ``has_errors`` before asking for bytes.
        """
        result = self._collect(source_text)
        logger.debug("encoding %d states with %r", len(result.table), result.config)
        result.table.encode(result.config)
        return result
