#!/usr/bin/env python3
import logging
import sys
from typing import Optional

from plumbum import cli  # type: ignore[import-untyped]

from .config import load_tool_config
from .gpif_asm import Assembler, AssemblerError
from .gpif_disasm import Decompiler, DecompileError, format_decompiled
from .output import format_c_array, format_ihex, format_listing


class GpifAsmCLI(cli.Application):
    """Assembles a GPIF waveform from stdin, or decompiles WaveData arrays
    from the given files."""

    PROGNAME = "gpifasm"
    VERSION = "1.0.0"

    ihex_file = cli.SwitchAttr(
        ["--ihex"], str, help="Also write the assembled table as Intel HEX to this file"
    )
    trictl = cli.Flag(
        ["--trictl"], help="Decompile assuming TRICTL=1 from the first state"
    )
    quiet = cli.Flag(["-q", "--quiet"], help="Suppress the listing on stderr")
    verbose = cli.Flag(["-v", "--verbose"], help="Enable debug logging")

    def _setup_logging(self, verbose: bool) -> None:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    def assemble(self, listing: bool) -> int:
        source_code = sys.stdin.read()
        try:
            result = Assembler().assemble(source_code)
        except AssemblerError as e:
            if listing and e.result is not None:
                sys.stderr.write(format_listing(e.result.config, e.result.instructions))
            print(f"*** ERROR: {e}", file=sys.stderr)
            return 1

        if listing or result.has_errors:
            sys.stderr.write(format_listing(result.config, result.instructions))
        if result.has_errors:
            return 1

        data = result.to_bytes()
        sys.stdout.write(format_c_array(data, result.config.waveform_id))
        if self.ihex_file:
            try:
                with open(self.ihex_file, "w") as f:
                    f.write(format_ihex(data, result.config.waveform_id))
            except OSError as e:
                print(f"*** ERROR: Unable to write '{self.ihex_file}': {e}", file=sys.stderr)
                return 1
        return 0

    def decompile(self, files: tuple) -> int:
        decompiler = Decompiler(assume_tristate=self.trictl)
        for path in files:
            try:
                tables = decompiler.decompile_file(path)
            except DecompileError as e:
                print(f"*** ERROR: {path}: {e}", file=sys.stderr)
                return 1
            sys.stdout.write(format_decompiled(tables, path))
        return 0

    def main(self, *files: str) -> Optional[int]:
        tool_config = load_tool_config()
        self._setup_logging(self.verbose or tool_config.verbose)
        if files:
            return self.decompile(files)
        return self.assemble(listing=tool_config.listing and not self.quiet)


def main() -> None:
    GpifAsmCLI.run()


if __name__ == "__main__":
    main()
