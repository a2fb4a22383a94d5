"""
eifscope JSON Report
=====================

Structured JSON rendering of a :class:`ParseResult` for machine
consumption.  Byte fields are rendered as text (magic) or left out in
favour of decoded views (metadata), so every value is JSON-native.

Usage::

    generator = EifReportGenerator()
    data = generator.build(result)
    generator.generate_json(result, "report.json")
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from shared.models import severity_counts

from eifscope.core.models import ParseResult

_REPORT_VERSION = "1.0.0"


class EifReportGenerator:
    """Generate JSON reports from image parse results."""

    def build(self, result: ParseResult) -> dict[str, Any]:
        """Build the report as a plain dictionary."""
        header = result.header
        findings = result.findings()

        report: dict[str, Any] = {
            "report_type": "eif_image_inspection",
            "version": _REPORT_VERSION,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "source": result.source,
            "file_size": result.file_size,
            "header": {
                "magic": header.magic.decode("ascii", errors="replace"),
                "version": header.version,
                "flags": header.flags,
                "default_memory": header.default_memory,
                "default_cpus": header.default_cpus,
                "section_count": header.section_count,
                "crc32": f"0x{header.crc32:08x}",
            },
            "sections": [
                {
                    "index": index,
                    "offset": section.offset,
                    "type": section.type_name,
                    "type_raw": section.section_type,
                    "flags": section.flags,
                    "size": section.section_size,
                }
                for index, section in enumerate(result.sections)
            ],
            "size_mismatches": [mm.model_dump() for mm in result.size_mismatches],
            "checksum": None,
            "metadata": None,
            "findings": [f.model_dump(mode="json") for f in findings],
            "severity_counts": severity_counts(findings),
        }

        if result.checksum is not None:
            report["checksum"] = {
                "stored": f"0x{result.checksum.stored:08x}",
                "computed": f"0x{result.checksum.computed:08x}",
                "complete": result.checksum.complete,
                "matches": result.checksum.matches,
            }

        if result.metadata is not None:
            parsed = result.metadata.as_json()
            report["metadata"] = {
                "offset": result.metadata.offset,
                "size": result.metadata.size,
                "json": parsed,
                "text": result.metadata.text if parsed is None else None,
            }

        return report

    def to_json(self, result: ParseResult, indent: int = 2) -> str:
        return json.dumps(self.build(result), indent=indent, default=str)

    def generate_json(self, result: ParseResult, output_path: str) -> str:
        """Write the JSON report to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(result), encoding="utf-8")
        return str(path.resolve())
