"""Byte layout of the accumulator update format.

Header (big-endian throughout)::

    magic u32 | major u16 | minor u16 | trailing header size u16 | trailing header
    | update type u8 | message count u16 | messages...

Message::

    length u16 | type u8 | feed id [32] | price i64 | conf u64 | expo i32
    | publish time u64 | prev publish time u64 | ema price i64 | ema conf u64

``length`` counts every byte after the length field itself.
"""

from __future__ import annotations

import struct

from ..core.errors import TruncatedPayloadError

ACCUMULATOR_MAGIC = 0x504E4155  # b"PNAU"
MAJOR_VERSION = 1
MINOR_VERSION = 0
UPDATE_TYPE_PRICE = 0
MESSAGE_TYPE_PRICE_FEED = 0
FEED_ID_SIZE = 32

MAGIC = struct.Struct(">I")
# major, minor, trailing header size
VERSION_HEADER = struct.Struct(">HHH")
UPDATE_TYPE = struct.Struct(">B")
U16 = struct.Struct(">H")
# type, feed id, price, conf, expo, publish time, prev publish time, ema price, ema conf
PRICE_MESSAGE = struct.Struct(">B32sqQiQQqQ")

PRICE_MESSAGE_SIZE = PRICE_MESSAGE.size  # 85 bytes
MAX_MESSAGES = 0xFFFF

INT64_MIN, INT64_MAX = -(1 << 63), (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1
INT32_MIN, INT32_MAX = -(1 << 31), (1 << 31) - 1


class ByteReader:
    """Forward-only cursor over an immutable buffer with bounds checks."""

    __slots__ = ("_buffer", "offset")

    def __init__(self, buffer: bytes, offset: int = 0) -> None:
        self._buffer = memoryview(buffer)
        self.offset = offset

    @property
    def remaining(self) -> int:
        return len(self._buffer) - self.offset

    def require(self, size: int, *, what: str) -> None:
        if size > self.remaining:
            raise TruncatedPayloadError(
                f"Truncated accumulator update: {what} needs {size} bytes at offset "
                f"{self.offset}, only {self.remaining} available",
                offset=self.offset,
                needed=size,
                available=self.remaining,
            )

    def unpack(self, layout: struct.Struct, *, what: str) -> tuple:
        self.require(layout.size, what=what)
        values = layout.unpack_from(self._buffer, self.offset)
        self.offset += layout.size
        return values

    def read(self, size: int, *, what: str) -> bytes:
        self.require(size, what=what)
        chunk = bytes(self._buffer[self.offset : self.offset + size])
        self.offset += size
        return chunk
