"""
Image File Layout Constants
============================

Fixed sizes and limits of the on-disk image format.  All multi-byte
integers in the format are big-endian.
"""

MAGIC: bytes = b".eif"

MAX_SECTIONS: int = 32

# magic(4) version(2) flags(2) default_memory(8) default_cpus(8)
# reserved(2) section_count(2) offsets(32*8) sizes(32*8) unused(4) crc32(4)
HEADER_SIZE: int = 548

# Bytes covered by the header checksum: everything before the crc32 field.
HEADER_CRC_SPAN: int = HEADER_SIZE - 4

# section_type(2) flags(2) section_size(8)
SECTION_HEADER_SIZE: int = 12
