"""
Section Sub-Header Decoder
===========================

Each section starts with a 12-byte big-endian sub-header::

    section_type  u16
    flags         u16
    section_size  u64

followed by ``section_size`` bytes of payload.
"""

from __future__ import annotations

import struct

from eifscope.core.errors import TruncatedInput
from eifscope.core.models import SectionHeader
from eifscope.parsers.constants import SECTION_HEADER_SIZE
from eifscope.parsers.cursor import ByteCursor

_SECTION_STRUCT = struct.Struct(">HHQ")


def decode_section_header(
    data: bytes | bytearray | memoryview, offset: int = 0
) -> SectionHeader:
    """Decode a section sub-header from the start of *data*.

    Args:
        data: Buffer holding at least 12 bytes.
        offset: File offset *data* was read from, recorded on the result.

    Raises:
        TruncatedInput: Fewer than 12 bytes were supplied.
    """
    if len(data) < SECTION_HEADER_SIZE:
        raise TruncatedInput("section header", SECTION_HEADER_SIZE, len(data))

    cur = ByteCursor(data, what="section header")
    return SectionHeader(
        section_type=cur.read_u16(),
        flags=cur.read_u16(),
        section_size=cur.read_u64(),
        offset=offset,
    )


def encode_section_header(section: SectionHeader) -> bytes:
    """Serialise *section* to its 12-byte on-disk form."""
    return _SECTION_STRUCT.pack(
        section.section_type, section.flags, section.section_size
    )
