"""
Big-Endian Byte Cursor
=======================

A small position-tracking reader over an in-memory buffer.  Every read
checks the remaining length first and raises
:class:`~eifscope.core.errors.TruncatedInput` instead of returning short
data, so decoders never do offset arithmetic by hand.
"""

from __future__ import annotations

import struct

from eifscope.core.errors import TruncatedInput

_U16 = struct.Struct(">H")
_U32 = struct.Struct(">I")
_U64 = struct.Struct(">Q")


class ByteCursor:
    """Sequential big-endian reader over a bytes-like object.

    Usage::

        cur = ByteCursor(buf, what="section header")
        kind = cur.read_u16()
        size = cur.read_u64()
    """

    __slots__ = ("_view", "_pos", "_what")

    def __init__(self, data: bytes | bytearray | memoryview, what: str = "input") -> None:
        self._view = memoryview(data).cast("B")
        self._pos = 0
        self._what = what

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._view) - self._pos

    def require(self, count: int) -> None:
        """Raise :class:`TruncatedInput` unless *count* bytes remain."""
        if count > self.remaining:
            raise TruncatedInput(self._what, self._pos + count, len(self._view))

    def read_bytes(self, count: int) -> bytes:
        self.require(count)
        chunk = self._view[self._pos:self._pos + count].tobytes()
        self._pos += count
        return chunk

    def _unpack(self, fmt: struct.Struct) -> int:
        self.require(fmt.size)
        (value,) = fmt.unpack_from(self._view, self._pos)
        self._pos += fmt.size
        return value

    def read_u16(self) -> int:
        return self._unpack(_U16)

    def read_u32(self) -> int:
        return self._unpack(_U32)

    def read_u64(self) -> int:
        return self._unpack(_U64)

    def read_u64_array(self, count: int) -> tuple[int, ...]:
        """Read *count* consecutive big-endian u64 values."""
        self.require(count * _U64.size)
        values = struct.unpack_from(f">{count}Q", self._view, self._pos)
        self._pos += count * _U64.size
        return values
