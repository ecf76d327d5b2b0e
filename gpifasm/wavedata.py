"""Import of existing waveform tables.

Firmware sources carry the tables as a C byte array, typically::

    const char xdata WaveData[128] =
    {
    // Wave 0
    /* LenBr */ 0x01, 0x01, ...
    ...
    };

This module finds the declaration, parses its initializer list with the
``wavedata.lark`` grammar and splits the bytes into 32-byte tables. Arrays
written by this tool (``waveform<N>[32]``) are accepted as well. Intel HEX
images are read through bincopy; a table at address ``32 * n`` is waveform n.
"""

from __future__ import annotations

import logging
import os
import re
from typing import List, Tuple

import bincopy  # type: ignore[import-untyped]
from lark import Lark, Token, Transformer
from lark.exceptions import LarkError

from .config import is_decimal
from .constants import TABLE_SIZE, VALID_WAVEDATA_LENGTHS

logger = logging.getLogger(__name__)

grammar_path = os.path.join(os.path.dirname(__file__), "wavedata.lark")
with open(grammar_path, "r") as f:
    wavedata_grammar = f.read()

wavedata_parser = Lark(wavedata_grammar, parser="lalr", maybe_placeholders=False)

# The declaration marker, an optional dimension and the '=' before the list.
_DECL_RE = re.compile(
    r"\b(?P<name>WaveData|waveform\d+)\s*(?:\[\s*(?P<size>[^\]]*?)\s*\])?\s*="
)

_INT_SUFFIX_RE = re.compile(r"(?:[uU](?:ll|LL|l|L)?|(?:ll|LL|l|L)[uU]?)$")

IHEX_SUFFIXES = (".hex", ".ihex")

# (waveform index, 32 table bytes)
NumberedTable = Tuple[int, bytes]


class DecompileError(Exception):
    pass


class _ValueCollector(Transformer):
    def start(self, items: List[str]) -> List[str]:
        return items

    def value(self, items: List[Token]) -> str:
        return str(items[0])


def parse_c_integer(literal: str) -> int:
    """Value of a C integer literal: hex, binary, octal or decimal."""
    body = _INT_SUFFIX_RE.sub("", literal)
    lowered = body.lower()
    # int() also takes underscores, signs and non-ASCII digits
    if body.isascii() and body.isalnum():
        try:
            if lowered.startswith("0x"):
                return int(body[2:], 16)
            if lowered.startswith("0b"):
                return int(body[2:], 2)
            if len(body) > 1 and body.startswith("0"):
                return int(body[1:], 8)
            if is_decimal(body):
                return int(body, 10)
        except ValueError:
            pass
    raise DecompileError(f"Invalid byte literal '{literal}'")


def parse_wavedata(text: str) -> bytes:
    """Bytes of the first WaveData (or waveform<N>) array in ``text``."""
    match = _DECL_RE.search(text)
    if match is None:
        raise DecompileError("WaveData declaration not found")
    try:
        tree = wavedata_parser.parse(text[match.end():])
    except LarkError as e:
        raise DecompileError(f"Malformed {match.group('name')} declaration: {e}") from e

    out = bytearray()
    for literal in _ValueCollector().transform(tree):
        value = parse_c_integer(literal)
        if value > 0xFF:
            raise DecompileError(f"Invalid byte literal '{literal}' (value {value:#x})")
        out.append(value)

    size = match.group("size")
    if size and is_decimal(size) and int(size) != len(out):
        logger.warning(
            "%s declares %s bytes but initializes %d", match.group("name"), size, len(out)
        )
    return bytes(out)


def split_tables(data: bytes) -> List[bytes]:
    """Split an imported array into 32-byte tables after validating its size."""
    if len(data) % TABLE_SIZE or len(data) not in VALID_WAVEDATA_LENGTHS:
        raise DecompileError(
            f"Unsupported WaveData length {len(data)} "
            f"(must be one of {', '.join(map(str, VALID_WAVEDATA_LENGTHS))})"
        )
    return [data[offset:offset + TABLE_SIZE] for offset in range(0, len(data), TABLE_SIZE)]


def load_ihex(text: str) -> List[NumberedTable]:
    """Tables of an Intel HEX image, numbered by address (``32 * waveform``)."""
    binfile = bincopy.BinFile()
    try:
        binfile.add_ihex(text)
    except bincopy.Error as e:
        raise DecompileError(f"Invalid Intel HEX: {e}") from e

    tables: List[NumberedTable] = []
    for segment in binfile.segments:
        address = segment.minimum_address
        data = bytes(segment.data)
        if address % TABLE_SIZE or len(data) % TABLE_SIZE:
            raise DecompileError(
                f"Intel HEX data at {address:#06x} ({len(data)} bytes) "
                f"does not hold whole {TABLE_SIZE}-byte tables"
            )
        first = address // TABLE_SIZE
        for index, offset in enumerate(range(0, len(data), TABLE_SIZE)):
            tables.append((first + index, data[offset:offset + TABLE_SIZE]))
    if not tables:
        raise DecompileError("Intel HEX image holds no data")
    return tables


def load_wavedata(path: str) -> List[NumberedTable]:
    """Numbered tables of a C source file, or of an Intel HEX image by suffix."""
    try:
        with open(path, "r") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise DecompileError(f"Unable to read '{path}': {e}") from e
    if path.lower().endswith(IHEX_SUFFIXES):
        return load_ihex(text)
    return list(enumerate(split_tables(parse_wavedata(text))))
