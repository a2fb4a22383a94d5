"""
eifscope -- Enclave Image File Inspector
=========================================

Decodes and validates the ``.eif`` container format: a fixed 548-byte
big-endian header followed by up to 32 self-describing sections
(kernel, cmdline, ramdisk, signature, metadata).

Capabilities:
    - Header and section sub-header decoding with bounds checking
    - Structural validation (magic tag, section count ceiling, offsets)
    - Size cross-checks between the header table and each section
    - Metadata section extraction as text / JSON
    - crc32 verification over header and section contents
    - Rich console view and JSON report
"""

from eifscope.core.errors import (
    BadMagic,
    ChecksumMismatch,
    EifError,
    SeekFailed,
    TooManySections,
    TruncatedInput,
)
from eifscope.core.models import (
    EifHeader,
    MetadataPayload,
    ParseResult,
    SectionHeader,
    SectionKind,
)
from eifscope.core.reader import EifReader, parse

__version__ = "1.0.0"
__all__ = [
    "BadMagic",
    "ChecksumMismatch",
    "EifError",
    "EifHeader",
    "EifReader",
    "MetadataPayload",
    "ParseResult",
    "SectionHeader",
    "SectionKind",
    "SeekFailed",
    "TooManySections",
    "TruncatedInput",
    "parse",
]
