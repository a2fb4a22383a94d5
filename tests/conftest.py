"""
Shared fixtures: an in-memory image builder and quiet reader instances.
"""

from __future__ import annotations

import zlib
from typing import Any, Optional, Sequence

import pytest

from shared.config import ScopeConfig
from shared.logger import ScopeLogger

from eifscope.core.models import EifHeader, SectionHeader
from eifscope.core.reader import EifReader
from eifscope.parsers.constants import HEADER_CRC_SPAN, HEADER_SIZE, MAGIC, MAX_SECTIONS
from eifscope.parsers.header import encode_header
from eifscope.parsers.section import encode_section_header


def section(
    kind: int,
    payload: bytes = b"",
    *,
    size: Optional[int] = None,
    table_size: Optional[int] = None,
) -> dict[str, Any]:
    """Describe one section for :func:`_build_image`.

    ``size`` overrides the sub-header's declared size and ``table_size``
    the header table's; both default to ``len(payload)``.
    """
    return {
        "kind": kind,
        "payload": payload,
        "size": len(payload) if size is None else size,
        "table_size": len(payload) if table_size is None else table_size,
    }


def _build_image(
    sections: Sequence[dict[str, Any]] = (),
    *,
    magic: bytes = MAGIC,
    section_count: Optional[int] = None,
    fix_crc: bool = True,
    **header_fields: Any,
) -> bytes:
    """Lay out a header followed by each section back to back."""
    offsets: list[int] = []
    sizes: list[int] = []
    chunks: list[bytes] = []
    pos = HEADER_SIZE

    for spec in sections:
        sub = encode_section_header(
            SectionHeader(section_type=spec["kind"], section_size=spec["size"])
        )
        offsets.append(pos)
        sizes.append(spec["table_size"])
        chunks.append(sub + spec["payload"])
        pos += len(sub) + len(spec["payload"])

    pad = MAX_SECTIONS - len(offsets)
    header = EifHeader(
        magic=magic,
        section_count=len(offsets) if section_count is None else section_count,
        section_offsets=tuple(offsets + [0] * pad),
        section_sizes=tuple(sizes + [0] * pad),
        **header_fields,
    )
    body = b"".join(chunks)

    if fix_crc:
        crc = zlib.crc32(encode_header(header)[:HEADER_CRC_SPAN])
        crc = zlib.crc32(body, crc)
        header = header.model_copy(update={"crc32": crc})

    return encode_header(header) + body


@pytest.fixture
def build_image():
    return _build_image


@pytest.fixture
def make_section():
    return section


@pytest.fixture
def quiet_logger() -> ScopeLogger:
    return ScopeLogger("test", console_output=False)


@pytest.fixture
def reader(quiet_logger: ScopeLogger) -> EifReader:
    return EifReader(config=ScopeConfig(), logger=quiet_logger)


@pytest.fixture
def make_reader(quiet_logger: ScopeLogger):
    def _make(**reader_settings: Any) -> EifReader:
        config = ScopeConfig()
        for key, value in reader_settings.items():
            setattr(config.reader, key, value)
        return EifReader(config=config, logger=quiet_logger)
    return _make
