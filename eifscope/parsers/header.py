"""
Image File Header Decoder
==========================

Decodes (and encodes) the fixed 548-byte header at the start of an image
file.  All integers are big-endian and the fields appear in this order::

    magic            4s
    version          u16
    flags            u16
    default_memory   u64
    default_cpus     u64
    reserved         u16
    section_count    u16
    section_offsets  u64 x 32
    section_sizes    u64 x 32
    unused           u32
    crc32            u32

Decoding is a pure transformation.  It does not check the magic tag or
the section count bound; callers do that with
:meth:`EifHeader.validate_structure` before using the record.
"""

from __future__ import annotations

import struct

from eifscope.core.errors import TruncatedInput
from eifscope.core.models import EifHeader
from eifscope.parsers.constants import HEADER_SIZE, MAX_SECTIONS
from eifscope.parsers.cursor import ByteCursor

_HEADER_STRUCT = struct.Struct(f">4sHHQQHH{MAX_SECTIONS}Q{MAX_SECTIONS}QII")

assert _HEADER_STRUCT.size == HEADER_SIZE


def decode_header(data: bytes | bytearray | memoryview) -> EifHeader:
    """Decode the first :data:`HEADER_SIZE` bytes of *data*.

    Args:
        data: Buffer holding at least 548 bytes; extra bytes are ignored.

    Returns:
        The decoded :class:`EifHeader`.

    Raises:
        TruncatedInput: Fewer than 548 bytes were supplied.
    """
    if len(data) < HEADER_SIZE:
        raise TruncatedInput("header", HEADER_SIZE, len(data))

    cur = ByteCursor(data, what="header")
    magic = cur.read_bytes(4)
    version = cur.read_u16()
    flags = cur.read_u16()
    default_memory = cur.read_u64()
    default_cpus = cur.read_u64()
    reserved = cur.read_u16()
    section_count = cur.read_u16()
    section_offsets = cur.read_u64_array(MAX_SECTIONS)
    section_sizes = cur.read_u64_array(MAX_SECTIONS)
    unused = cur.read_u32()
    crc32 = cur.read_u32()

    return EifHeader(
        magic=magic,
        version=version,
        flags=flags,
        default_memory=default_memory,
        default_cpus=default_cpus,
        reserved=reserved,
        section_count=section_count,
        section_offsets=section_offsets,
        section_sizes=section_sizes,
        unused=unused,
        crc32=crc32,
    )


def encode_header(header: EifHeader) -> bytes:
    """Serialise *header* to its 548-byte on-disk form."""
    return _HEADER_STRUCT.pack(
        header.magic,
        header.version,
        header.flags,
        header.default_memory,
        header.default_cpus,
        header.reserved,
        header.section_count,
        *header.section_offsets,
        *header.section_sizes,
        header.unused,
        header.crc32,
    )
