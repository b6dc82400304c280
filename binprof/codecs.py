"""
Little-endian primitive decoders for the binary body of a profiler log.

``ByteReader`` keeps a cursor over the fully buffered payload. Every read
either consumes exactly the bytes of its field or raises without moving the
cursor, so callers can rewind to a record boundary with ``seek``.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Tuple

from .errors import DimensionError, InvalidStringError, ShortReadError

U8 = struct.Struct("<B")
U32 = struct.Struct("<I")
I32 = struct.Struct("<i")
U64 = struct.Struct("<Q")
I64 = struct.Struct("<q")

NUL = b"\x00"


@dataclass(frozen=True)
class Array:
    """Rectangle bounds: ``2 * max_dim`` unsigned 64-bit values."""

    values: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.values)

    @property
    def dim(self) -> int:
        return len(self.values) // 2


@dataclass(frozen=True)
class Point:
    """One unsigned 64-bit coordinate per dimension."""

    values: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.values)

    @property
    def dim(self) -> int:
        return len(self.values)


class ByteReader:
    __slots__ = ("data", "offset")

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self.data = data
        self.offset = offset

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def at_end(self) -> bool:
        return self.offset >= len(self.data)

    def seek(self, offset: int) -> None:
        self.offset = offset

    def _unpack(self, layout: struct.Struct) -> int:
        if self.remaining < layout.size:
            raise ShortReadError(layout.size, self.remaining, offset=self.offset)
        (value,) = layout.unpack_from(self.data, self.offset)
        self.offset += layout.size
        return value

    def u8(self) -> int:
        return self._unpack(U8)

    def u32(self) -> int:
        return self._unpack(U32)

    def i32(self) -> int:
        return self._unpack(I32)

    def u64(self) -> int:
        return self._unpack(U64)

    def i64(self) -> int:
        return self._unpack(I64)

    def boolean(self) -> bool:
        return self._unpack(U8) != 0

    def string(self) -> str:
        end = self.data.find(NUL, self.offset)
        if end == -1:
            # The terminator is part of the field; without it the field is short.
            raise ShortReadError(self.remaining + 1, self.remaining, offset=self.offset)
        raw = self.data[self.offset : end]
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidStringError(f"string is not valid UTF-8: {exc.reason}", offset=self.offset) from exc
        self.offset = end + 1
        return text

    def u64_run(self, count: int) -> Tuple[int, ...]:
        if count == 0:
            return ()
        size = 8 * count
        if self.remaining < size:
            raise ShortReadError(size, self.remaining, offset=self.offset)
        values = struct.unpack_from(f"<{count}Q", self.data, self.offset)
        self.offset += size
        return values

    def array(self, max_dim: int | None) -> Array:
        return Array(self.u64_run(2 * _checked_dim(max_dim, self.offset)))

    def point(self, max_dim: int | None) -> Point:
        return Point(self.u64_run(_checked_dim(max_dim, self.offset)))


def _checked_dim(max_dim: int | None, offset: int) -> int:
    if max_dim is None or max_dim < 0:
        raise DimensionError(max_dim, offset=offset)
    return max_dim
