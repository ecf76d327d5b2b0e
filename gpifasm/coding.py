"""Byte-level encode/decode helpers for waveform records."""

import struct


class BufferTooShort(Exception):
    """Raised when attempting to read past the end of the buffer."""


class Decoder:
    def __init__(self, buf: bytes) -> None:
        self.buf, self.pos = buf, 0

    def _unpack(self, fmt: str) -> int:
        size = struct.calcsize(fmt)
        if len(self.buf) - self.pos < size:
            raise BufferTooShort
        items = struct.unpack_from("<" + fmt, self.buf, self.pos)
        self.pos += size
        return items[0]  # type: ignore

    def unsigned_byte(self) -> int:
        return self._unpack("B")


class Encoder:
    def __init__(self) -> None:
        self.buf = bytearray()

    def _pack(self, fmt: str, item: int) -> None:
        offset = len(self.buf)
        self.buf += b"\x00" * struct.calcsize(fmt)
        struct.pack_into("<" + fmt, self.buf, offset, item)

    def unsigned_byte(self, value: int) -> None:
        self._pack("B", value)
