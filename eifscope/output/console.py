"""
eifscope Console Output
========================

Rich-powered terminal display of image parse results: a header panel,
the section table in declaration order, advisories, and the metadata
payload (pretty-printed when it is JSON).

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from rich.json import JSON
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shared.console import ScopeConsole

from eifscope.core.models import (
    ChecksumReport,
    EifHeader,
    MetadataPayload,
    ParseResult,
    SectionHeader,
    SectionKind,
)

_KIND_COLOURS: dict[SectionKind, str] = {
    SectionKind.INVALID: "red",
    SectionKind.KERNEL: "bright_cyan",
    SectionKind.CMDLINE: "bright_blue",
    SectionKind.RAMDISK: "bright_magenta",
    SectionKind.SIGNATURE: "bright_yellow",
    SectionKind.METADATA: "bright_green",
    SectionKind.UNKNOWN: "dim",
}


def _format_size(size: int) -> str:
    if size >= 1 << 20:
        return f"{size:,} ({size / (1 << 20):.1f} MiB)"
    if size >= 1 << 10:
        return f"{size:,} ({size / (1 << 10):.1f} KiB)"
    return f"{size:,}"


class EifConsoleOutput:
    """Rich terminal display for image parse results.

    Usage::

        output = EifConsoleOutput()
        output.display(result)
    """

    def __init__(self, console: ScopeConsole | None = None) -> None:
        self._console: ScopeConsole = console or ScopeConsole()

    def display(self, result: ParseResult) -> None:
        """Display the complete parse result."""
        self._console.section("EIF Header")
        self.display_header(result.header, result.source, result.file_size)

        self._console.section("EIF Section Headers")
        self.display_sections(result)

        if result.checksum is not None:
            self.display_checksum(result.checksum)

        findings = result.findings()
        if findings:
            self._console.section("Findings")
            self._console.findings_table(findings)

        if result.metadata is not None:
            self._console.section("Metadata")
            self.display_metadata(result.metadata)

        self._console.divider()

    def display_header(self, header: EifHeader, source: str = "", file_size: int = 0) -> None:
        magic = header.magic.decode("ascii", errors="replace")
        lines: list[str] = []
        if source:
            lines.append(f"[bold]File:[/bold]            {escape(source)}")
            lines.append(f"[bold]File size:[/bold]       {_format_size(file_size)}")
        lines.extend([
            f"[bold]Magic:[/bold]           {escape(magic)}",
            f"[bold]Version:[/bold]         {header.version}",
            f"[bold]Flags:[/bold]           {header.flags}",
            f"[bold]Default memory:[/bold]  {_format_size(header.default_memory)}",
            f"[bold]Default CPUs:[/bold]    {header.default_cpus}",
            f"[bold]Section count:[/bold]   {header.section_count}",
            f"[bold]CRC32:[/bold]           0x{header.crc32:08x}",
        ])

        panel = Panel(
            Text.from_markup("\n".join(lines)),
            title="[bold bright_cyan]Image Header[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        )
        self._console.rich.print(panel)
        self._console.blank()

    def display_sections(self, result: ParseResult) -> None:
        if not result.sections:
            self._console.info("Image declares no sections.")
            self._console.blank()
            return

        mismatched = {mm.index for mm in result.size_mismatches}

        tbl = Table(
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
            padding=(0, 1),
        )
        tbl.add_column("#", style="dim", width=4, justify="right")
        tbl.add_column("Type", min_width=9)
        tbl.add_column("Offset", justify="right")
        tbl.add_column("Flags", justify="right")
        tbl.add_column("Size", justify="right")

        for index, section in enumerate(result.sections):
            tbl.add_row(*self._section_row(index, section, index in mismatched))

        self._console.rich.print(tbl)
        self._console.blank()

    @staticmethod
    def _section_row(index: int, section: SectionHeader, mismatch: bool) -> list[str]:
        colour = _KIND_COLOURS[section.kind]
        size = f"{section.section_size:,}"
        if mismatch:
            size = f"[bold yellow]{size} ⚠[/bold yellow]"
        return [
            str(index),
            f"[{colour}]{section.type_name}[/{colour}]",
            f"0x{section.offset:x}",
            str(section.flags),
            size,
        ]

    def display_checksum(self, checksum: ChecksumReport) -> None:
        if checksum.matches:
            self._console.success(f"CRC32 verified (0x{checksum.stored:08x})")
        elif not checksum.complete:
            self._console.warning("CRC32 could not be verified: image is truncated")
        else:
            self._console.warning(
                f"CRC32 mismatch: stored 0x{checksum.stored:08x}, "
                f"computed 0x{checksum.computed:08x}"
            )
        self._console.blank()

    def display_metadata(self, metadata: MetadataPayload) -> None:
        parsed = metadata.as_json()
        if parsed is not None:
            body = JSON.from_data(parsed, indent=2)
            title = "Metadata (JSON)"
        else:
            body = Text(metadata.text)
            title = "Metadata"
        panel = Panel(
            body,
            title=f"[bold bright_green]{title}[/bold bright_green]",
            subtitle=f"{metadata.size:,} bytes at 0x{metadata.offset:x}",
            border_style="bright_green",
            padding=(0, 1),
        )
        self._console.rich.print(panel)
