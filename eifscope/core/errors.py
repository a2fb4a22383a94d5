"""
eifscope Errors
================

Fatal, structural failures raised while decoding an image.  Any of these
aborts the whole parse; no partial header or section list is returned.

Advisory conditions (size mismatches, a non-strict checksum mismatch)
are not exceptions; they are collected on the parse result instead.
"""

from __future__ import annotations


class EifError(Exception):
    """Base class for all fatal image decoding errors."""


class TruncatedInput(EifError):
    """Fewer bytes were available than a structure requires."""

    def __init__(self, what: str, needed: int, available: int) -> None:
        self.what = what
        self.needed = needed
        self.available = available
        super().__init__(
            f"Truncated {what}: needed {needed} bytes, {available} available"
        )


class BadMagic(EifError):
    """The header's magic tag is not the image identifier."""

    def __init__(self, found: bytes, expected: bytes) -> None:
        self.found = found
        self.expected = expected
        super().__init__(f"Bad magic {found!r} (expected {expected!r})")


class TooManySections(EifError):
    """The header declares more sections than the table can hold."""

    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(
            f"Section count {count} exceeds the maximum of {limit}"
        )


class SeekFailed(EifError):
    """A declared section offset lies outside the input."""

    def __init__(self, offset: int, size: int) -> None:
        self.offset = offset
        self.size = size
        super().__init__(
            f"Failed to seek to offset {offset} (input is {size} bytes)"
        )


class ChecksumMismatch(EifError):
    """The stored crc32 does not match the image contents (strict mode)."""

    def __init__(self, stored: int, computed: int) -> None:
        self.stored = stored
        self.computed = computed
        super().__init__(
            f"CRC32 mismatch: header stores 0x{stored:08x}, "
            f"computed 0x{computed:08x}"
        )
