"""
eifscope Console
================

Themed Rich console used by the CLI: section rules, one-line status
messages and the findings table.  Status text is escaped before
printing, so file names and metadata containing ``[...]`` are shown
verbatim.  Errors go to stderr so that stdout stays clean for reports.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from shared.models import Finding, Severity

_SCOPE_THEME = Theme(
    {
        "scope.section": "bold bright_magenta",
        "scope.success": "bold green",
        "scope.warning": "bold yellow",
        "scope.error": "bold red",
        "scope.info": "bold bright_blue",
    }
)

_SEVERITY_STYLES: dict[Severity, str] = {
    Severity.CRITICAL: "bold white on red",
    Severity.HIGH: "bold red",
    Severity.MEDIUM: "bold yellow",
    Severity.LOW: "bold bright_cyan",
    Severity.INFO: "bold bright_blue",
}


class ScopeConsole:
    """Console front end for eifscope.

    Args:
        quiet:  Suppress all output.
        record: Keep a record of stdout output for :meth:`rich.console.Console.export_text`.
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        self._console = Console(
            theme=_SCOPE_THEME, quiet=quiet, record=record, highlight=False
        )
        self._err_console = Console(
            theme=_SCOPE_THEME, stderr=True, quiet=quiet, highlight=False
        )

    @property
    def rich(self) -> Console:
        """The stdout Rich console, for renderables built by callers."""
        return self._console

    def section(self, title: str) -> None:
        self._console.rule(f"  {title}  ", style="scope.section", characters="─")
        self._console.print()

    # Status lines: "[icon] LABEL: message"

    def success(self, message: str) -> None:
        self._status("success", "✔", "SUCCESS", message)

    def warning(self, message: str) -> None:
        self._status("warning", "⚠", "WARNING", message)

    def info(self, message: str) -> None:
        self._status("info", "ℹ", "INFO", message)

    def error(self, message: str) -> None:
        """Print an error line to stderr."""
        self._status("error", "✘", "ERROR", message, console=self._err_console)

    def _status(
        self,
        kind: str,
        icon: str,
        label: str,
        message: str,
        *,
        console: Console | None = None,
    ) -> None:
        style = f"scope.{kind}"
        (console or self._console).print(
            f"[{style}]\\[{icon}] {label}:[/{style}] {escape(message)}"
        )

    def findings_table(self, findings: Sequence[Finding]) -> None:
        """Render *findings* as a numbered table coloured by severity."""
        tbl = Table(
            title="Findings",
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
            padding=(0, 1),
        )
        tbl.add_column("#", style="dim", width=4, justify="right")
        tbl.add_column("Severity", width=10)
        tbl.add_column("Title")
        tbl.add_column("Description", ratio=2)

        for idx, finding in enumerate(findings, start=1):
            style = _SEVERITY_STYLES[finding.severity]
            tbl.add_row(
                str(idx),
                f"[{style}]{finding.severity.value}[/{style}]",
                escape(finding.title),
                escape(finding.description),
            )

        self._console.print(tbl)

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def divider(self, style: str = "dim") -> None:
        self._console.rule(style=style)
