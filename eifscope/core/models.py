"""
eifscope Data Models
=====================

Pydantic-based records for a decoded image file: the fixed file header,
the per-section sub-headers, the captured metadata payload, advisory
conditions, and the aggregate :class:`ParseResult`.

All records are immutable once built; one set is produced per parse.
"""

from __future__ import annotations

import enum
import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from eifscope.core.errors import BadMagic, TooManySections
from eifscope.parsers.constants import MAGIC, MAX_SECTIONS
from shared.models import Finding, Severity

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFF_FFFF
_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class SectionKind(str, enum.Enum):
    """Closed set of section types; unrecognised raw values are UNKNOWN."""
    INVALID = "invalid"
    KERNEL = "kernel"
    CMDLINE = "cmdline"
    RAMDISK = "ramdisk"
    SIGNATURE = "signature"
    METADATA = "metadata"
    UNKNOWN = "unknown"

    @classmethod
    def from_raw(cls, value: int) -> SectionKind:
        """Map an on-disk type tag to a kind.  Never fails."""
        return _KIND_BY_RAW.get(value, cls.UNKNOWN)

    @property
    def raw(self) -> Optional[int]:
        """On-disk tag of this kind, or ``None`` for UNKNOWN."""
        return _RAW_BY_KIND.get(self)


_KIND_BY_RAW: dict[int, SectionKind] = {
    0: SectionKind.INVALID,
    1: SectionKind.KERNEL,
    2: SectionKind.CMDLINE,
    3: SectionKind.RAMDISK,
    4: SectionKind.SIGNATURE,
    5: SectionKind.METADATA,
}

_RAW_BY_KIND: dict[SectionKind, int] = {v: k for k, v in _KIND_BY_RAW.items()}


# ---------------------------------------------------------------------------
# File header
# ---------------------------------------------------------------------------

class EifHeader(BaseModel):
    """The fixed-layout descriptor at the start of an image file.

    The section tables always hold all ``MAX_SECTIONS`` slots exactly as
    stored on disk; only the first ``section_count`` entries are
    meaningful and :meth:`entries` is the checked way to get at them.

    Attributes:
        magic: 4-byte format tag, ``b".eif"`` for a valid image.
        version: Format revision (not validated).
        flags: Behaviour flags (not validated).
        default_memory: Memory hint for the payload, in bytes.
        default_cpus: vCPU count hint for the payload.
        reserved: Ignored.
        section_count: Number of valid section table entries.
        section_offsets: File offsets of each section's sub-header.
        section_sizes: Declared payload size of each section.
        unused: Ignored.
        crc32: Stored checksum of the header and all sections.
    """
    model_config = ConfigDict(frozen=True)

    magic: bytes = Field(default=MAGIC, min_length=4, max_length=4)
    version: int = Field(default=0, ge=0, le=_U16_MAX)
    flags: int = Field(default=0, ge=0, le=_U16_MAX)
    default_memory: int = Field(default=0, ge=0, le=_U64_MAX)
    default_cpus: int = Field(default=0, ge=0, le=_U64_MAX)
    reserved: int = Field(default=0, ge=0, le=_U16_MAX)
    section_count: int = Field(default=0, ge=0, le=_U16_MAX)
    section_offsets: tuple[int, ...] = (0,) * MAX_SECTIONS
    section_sizes: tuple[int, ...] = (0,) * MAX_SECTIONS
    unused: int = Field(default=0, ge=0, le=_U32_MAX)
    crc32: int = Field(default=0, ge=0, le=_U32_MAX)

    @field_validator("section_offsets", "section_sizes")
    @classmethod
    def _check_table(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        if len(v) != MAX_SECTIONS:
            raise ValueError(
                f"section table must have {MAX_SECTIONS} entries, got {len(v)}"
            )
        for value in v:
            if not 0 <= value <= _U64_MAX:
                raise ValueError(f"table entry {value} is not a u64")
        return v

    def validate_structure(self) -> None:
        """Check the invariants a decoded header must satisfy before use.

        Raises:
            BadMagic: The magic tag is not the image identifier.
            TooManySections: ``section_count`` exceeds ``MAX_SECTIONS``.
        """
        if self.magic != MAGIC:
            raise BadMagic(self.magic, MAGIC)
        if self.section_count > MAX_SECTIONS:
            raise TooManySections(self.section_count, MAX_SECTIONS)

    def entries(self) -> list[tuple[int, int]]:
        """Return the ``(offset, size)`` pairs of the declared sections.

        Raises:
            TooManySections: ``section_count`` exceeds ``MAX_SECTIONS``.
        """
        if self.section_count > MAX_SECTIONS:
            raise TooManySections(self.section_count, MAX_SECTIONS)
        count = self.section_count
        return list(zip(self.section_offsets[:count], self.section_sizes[:count]))


# ---------------------------------------------------------------------------
# Section sub-header
# ---------------------------------------------------------------------------

class SectionHeader(BaseModel):
    """The 12-byte descriptor preceding each section's payload.

    Attributes:
        section_type: Raw on-disk type tag.
        flags: Section-specific flags (not interpreted).
        section_size: Declared payload length in bytes.
        offset: File offset the sub-header was read from.
    """
    model_config = ConfigDict(frozen=True)

    section_type: int = Field(default=0, ge=0, le=_U16_MAX)
    flags: int = Field(default=0, ge=0, le=_U16_MAX)
    section_size: int = Field(default=0, ge=0, le=_U64_MAX)
    offset: int = Field(default=0, ge=0)

    @property
    def kind(self) -> SectionKind:
        return SectionKind.from_raw(self.section_type)

    @property
    def type_name(self) -> str:
        return self.kind.value


# ---------------------------------------------------------------------------
# Metadata payload
# ---------------------------------------------------------------------------

class MetadataPayload(BaseModel):
    """Captured content of the first metadata section.

    ``data`` holds exactly the declared payload bytes followed by a single
    NUL terminator, so the text view stops at the payload end even when the
    payload itself carries no terminator.
    """
    model_config = ConfigDict(frozen=True)

    data: bytes
    offset: int = 0
    encoding: str = "utf-8"

    @classmethod
    def from_payload(
        cls, payload: bytes, offset: int = 0, encoding: str = "utf-8"
    ) -> MetadataPayload:
        return cls(data=payload + b"\x00", offset=offset, encoding=encoding)

    @property
    def size(self) -> int:
        """Payload length, excluding the terminator."""
        return len(self.data) - 1

    @property
    def payload(self) -> bytes:
        return self.data[:-1]

    @property
    def text(self) -> str:
        """Payload interpreted as text up to the first NUL."""
        raw = self.data.split(b"\x00", 1)[0]
        return raw.decode(self.encoding, errors="replace")

    def as_json(self) -> Any:
        """Parse the text as JSON, or return ``None`` if it is not JSON."""
        try:
            return json.loads(self.text)
        except ValueError:
            return None


# ---------------------------------------------------------------------------
# Advisories
# ---------------------------------------------------------------------------

class SizeMismatch(BaseModel):
    """Header table size disagrees with the section's own declared size.

    Attributes:
        index: Position of the section in the header table.
        offset: File offset of the section's sub-header.
        header_size: Size recorded in the header's section table.
        section_size: Size recorded in the section sub-header.
    """
    model_config = ConfigDict(frozen=True)

    index: int
    offset: int
    header_size: int
    section_size: int


class ChecksumReport(BaseModel):
    """Outcome of recomputing the image crc32.

    ``complete`` is ``False`` when some section payload was shorter than
    declared, in which case ``computed`` covers only the bytes present.
    """
    model_config = ConfigDict(frozen=True)

    stored: int
    computed: int
    complete: bool = True

    @property
    def matches(self) -> bool:
        return self.complete and self.stored == self.computed


# ---------------------------------------------------------------------------
# Aggregate parse result
# ---------------------------------------------------------------------------

class ParseResult(BaseModel):
    """Everything decoded from one image file.

    Attributes:
        source: Path or description of the parsed input.
        file_size: Total input size in bytes.
        header: The decoded file header.
        sections: Decoded sub-headers in header table order.
        metadata: The first metadata payload, or ``None``.
        size_mismatches: Advisory size disagreements.
        checksum: crc32 verification outcome, ``None`` when skipped.
    """
    model_config = ConfigDict(frozen=True)

    source: str = ""
    file_size: int = 0
    header: EifHeader
    sections: list[SectionHeader] = Field(default_factory=list)
    metadata: Optional[MetadataPayload] = None
    size_mismatches: list[SizeMismatch] = Field(default_factory=list)
    checksum: Optional[ChecksumReport] = None

    @property
    def has_warnings(self) -> bool:
        return bool(self.size_mismatches) or (
            self.checksum is not None and not self.checksum.matches
        )

    def findings(self) -> list[Finding]:
        """Convert advisories into :class:`~shared.models.Finding` records."""
        findings: list[Finding] = []

        for mm in self.size_mismatches:
            findings.append(Finding(
                severity=Severity.MEDIUM,
                title="Section size mismatch",
                description=(
                    f"Section {mm.index} at offset 0x{mm.offset:x}: header "
                    f"table declares {mm.header_size} bytes, section header "
                    f"declares {mm.section_size} bytes"
                ),
                evidence=mm.model_dump(),
            ))

        for index, section in enumerate(self.sections):
            if section.kind is SectionKind.UNKNOWN:
                findings.append(Finding(
                    severity=Severity.INFO,
                    title="Unrecognised section type",
                    description=(
                        f"Section {index} has type tag {section.section_type}"
                    ),
                ))

        cs = self.checksum
        if cs is not None and not cs.complete:
            findings.append(Finding(
                severity=Severity.LOW,
                title="Checksum not verifiable",
                description=(
                    "A section payload is shorter than declared; the crc32 "
                    "could only be computed over the bytes present"
                ),
                evidence={"stored": f"0x{cs.stored:08x}",
                          "partial": f"0x{cs.computed:08x}"},
            ))
        elif cs is not None and not cs.matches:
            findings.append(Finding(
                severity=Severity.HIGH,
                title="CRC32 mismatch",
                description=(
                    f"Header stores 0x{cs.stored:08x} but the image contents "
                    f"hash to 0x{cs.computed:08x}"
                ),
                recommendation="Rebuild the image or verify its origin.",
            ))

        return findings
