"""
Image Reader
=============

Orchestrates decoding of one image file: reads and validates the fixed
header, walks the section table in declaration order, cross-checks each
section's own size against the table, captures the first metadata
payload and, optionally, recomputes the image crc32.

Parse Pipeline:
    1. Read the 548-byte header from offset 0 and decode it
    2. Validate magic tag and section count (fatal on failure)
    3. For each declared section: seek, read 12 bytes, decode
    4. Record a size-mismatch advisory when table and sub-header disagree
    5. Capture the first metadata payload (exactly ``section_size`` bytes)
    6. Compare the accumulated crc32 with the stored value

Every structural failure raises an :class:`~eifscope.core.errors.EifError`
and aborts the whole parse.  Files opened by the reader are closed on
every exit path.
"""

from __future__ import annotations

import io
import os
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from shared.config import ScopeConfig
from shared.logger import ScopeLogger

from eifscope.core.errors import ChecksumMismatch, SeekFailed, TruncatedInput
from eifscope.core.models import (
    ChecksumReport,
    MetadataPayload,
    ParseResult,
    SectionHeader,
    SectionKind,
    SizeMismatch,
)
from eifscope.parsers.constants import (
    HEADER_CRC_SPAN,
    HEADER_SIZE,
    SECTION_HEADER_SIZE,
)
from eifscope.parsers.header import decode_header
from eifscope.parsers.section import decode_section_header

Source = Union[str, os.PathLike, bytes, bytearray, memoryview, BinaryIO]


class EifReader:
    """Decode and validate image files.

    Usage::

        reader = EifReader()
        result = reader.parse("enclave.eif")
        for section in result.sections:
            print(section.type_name, section.section_size)
        if result.metadata is not None:
            print(result.metadata.text)

    The reader keeps no state between parses, so one instance may be
    reused for any number of images.
    """

    def __init__(
        self,
        config: ScopeConfig | None = None,
        logger: ScopeLogger | None = None,
    ) -> None:
        """Initialise the reader.

        Args:
            config: Toolkit configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: ScopeConfig = config or ScopeConfig()
        settings = self._config.global_settings
        self._logger: ScopeLogger = logger or ScopeLogger(
            "reader",
            log_level=settings.log_level,
            log_file=settings.log_file or None,
            json_logs=settings.log_json,
        )

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def parse(self, source: Source) -> ParseResult:
        """Parse an image from a path, a bytes-like object or a binary stream.

        Streams supplied by the caller must be seekable and are left open.

        Raises:
            TruncatedInput: A structure or the metadata payload is cut short.
            BadMagic: The header's magic tag is wrong.
            TooManySections: The header declares more than 32 sections.
            SeekFailed: A section offset lies beyond the end of the input.
            ChecksumMismatch: The crc32 does not match and strict
                verification is enabled.
        """
        label = self._describe(source)
        with self._logger.timed(f"parse {label}"):
            with self._open(source) as handle:
                return self._parse_stream(handle, label)

    # ------------------------------------------------------------------ #
    #  Pipeline
    # ------------------------------------------------------------------ #

    def _parse_stream(self, handle: BinaryIO, label: str) -> ParseResult:
        cfg = self._config.reader
        file_size = handle.seek(0, io.SEEK_END)
        handle.seek(0)

        header_buf = handle.read(HEADER_SIZE)
        header = decode_header(header_buf)
        header.validate_structure()
        self._logger.debug(
            "Header: version=%d flags=%d sections=%d crc32=0x%08x",
            header.version, header.flags, header.section_count, header.crc32,
        )

        crc: Optional[int] = None
        if cfg.verify_crc32:
            crc = zlib.crc32(header_buf[:HEADER_CRC_SPAN])
        crc_complete = True

        sections: list[SectionHeader] = []
        mismatches: list[SizeMismatch] = []
        metadata: Optional[MetadataPayload] = None

        with self._logger.operation("section_scan"):
            for index, (offset, declared_size) in enumerate(header.entries()):
                self._seek(handle, offset, file_size)
                raw = handle.read(SECTION_HEADER_SIZE)
                section = decode_section_header(raw, offset=offset)
                sections.append(section)
                self._logger.debug(
                    "Section %d at 0x%x: type=%s flags=%d size=%d",
                    index, offset, section.type_name,
                    section.flags, section.section_size,
                )

                if declared_size != section.section_size:
                    mismatches.append(SizeMismatch(
                        index=index,
                        offset=offset,
                        header_size=declared_size,
                        section_size=section.section_size,
                    ))
                    self._logger.warning(
                        "Section size mismatch between header and section "
                        "header: header %d, section header %d",
                        declared_size, section.section_size,
                    )

                payload_offset = offset + SECTION_HEADER_SIZE
                if metadata is None and section.kind is SectionKind.METADATA:
                    payload = self._read_payload(
                        handle, section.section_size, payload_offset, file_size
                    )
                    metadata = MetadataPayload.from_payload(
                        payload,
                        offset=payload_offset,
                        encoding=cfg.metadata_encoding,
                    )
                    if crc is not None:
                        crc = zlib.crc32(payload, zlib.crc32(raw, crc))
                elif crc is not None:
                    crc = zlib.crc32(raw, crc)
                    crc, complete = self._crc_payload(
                        handle, section.section_size, crc, cfg.crc_chunk_size
                    )
                    crc_complete = crc_complete and complete

        checksum: Optional[ChecksumReport] = None
        if crc is not None:
            checksum = ChecksumReport(
                stored=header.crc32, computed=crc, complete=crc_complete
            )
            if not checksum.complete:
                # A short payload is reported, never treated as a mismatch.
                self._logger.warning(
                    "CRC32 not verifiable: image ends inside a section payload"
                )
            elif not checksum.matches:
                if cfg.strict_crc32:
                    raise ChecksumMismatch(checksum.stored, checksum.computed)
                self._logger.warning(
                    "CRC32 mismatch: stored 0x%08x, computed 0x%08x",
                    checksum.stored, checksum.computed,
                )

        return ParseResult(
            source=label,
            file_size=file_size,
            header=header,
            sections=sections,
            metadata=metadata,
            size_mismatches=mismatches,
            checksum=checksum,
        )

    # ------------------------------------------------------------------ #
    #  I/O helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _seek(handle: BinaryIO, offset: int, file_size: int) -> None:
        if offset > file_size:
            raise SeekFailed(offset, file_size)
        if handle.seek(offset) != offset:
            raise SeekFailed(offset, file_size)

    @staticmethod
    def _read_payload(
        handle: BinaryIO, size: int, offset: int, file_size: int
    ) -> bytes:
        """Read exactly *size* payload bytes starting at the current position."""
        available = file_size - offset
        if size > available:
            raise TruncatedInput("metadata", size, available)
        payload = handle.read(size)
        if len(payload) != size:
            raise TruncatedInput("metadata", size, len(payload))
        return payload

    @staticmethod
    def _crc_payload(
        handle: BinaryIO, size: int, crc: int, chunk_size: int
    ) -> tuple[int, bool]:
        """Fold *size* payload bytes into *crc*, streaming in chunks.

        Returns the updated crc and whether the full payload was present.
        """
        remaining = size
        while remaining > 0:
            chunk = handle.read(min(chunk_size, remaining))
            if not chunk:
                return crc, False
            crc = zlib.crc32(chunk, crc)
            remaining -= len(chunk)
        return crc, True

    @staticmethod
    @contextmanager
    def _open(source: Source) -> Iterator[BinaryIO]:
        if isinstance(source, (str, os.PathLike)):
            with open(source, "rb") as fh:
                yield fh
        elif isinstance(source, (bytes, bytearray, memoryview)):
            with io.BytesIO(bytes(source)) as buf:
                yield buf
        else:
            yield source

    @staticmethod
    def _describe(source: Source) -> str:
        if isinstance(source, (str, os.PathLike)):
            return str(Path(source))
        if isinstance(source, (bytes, bytearray, memoryview)):
            return f"<{len(source)} bytes>"
        return str(getattr(source, "name", None) or "<stream>")


def parse(source: Source, config: ScopeConfig | None = None) -> ParseResult:
    """Module-level convenience wrapper around :meth:`EifReader.parse`."""
    return EifReader(config=config).parse(source)
