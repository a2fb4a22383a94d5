"""
eifscope Logging
================

:class:`ScopeLogger` binds a stdlib logger named ``eifscope.<component>``
to a Rich handler on stderr and, when configured, a rotating log file in
plain text or JSON lines.  Records carry the component, the current
parse stage and any keyword fields passed to the log call.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler

_MAX_LOG_BYTES = 10_485_760  # 10 MiB
_LOG_BACKUPS = 5
_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(stage)s | %(message)s"


class _JSONLineFormatter(logging.Formatter):
    """One JSON object per record::

        {"timestamp": "...", "level": "WARNING", "logger": "eifscope.reader",
         "component": "reader", "stage": "section_scan",
         "message": "...", "fields": {"index": 3}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": getattr(record, "component", None),
            "stage": getattr(record, "stage", None),
            "message": record.getMessage(),
        }
        if getattr(record, "fields", None):
            entry["fields"] = record.fields
        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


class ScopeLogger:
    """Logger for one eifscope component.

    Usage::

        log = ScopeLogger("reader", log_file="eifscope.log", json_logs=True)
        with log.timed("parse enclave.eif"), log.operation("section_scan"):
            log.warning("Size mismatch in section %d", 3, index=3)

    Creating a second logger for the same component replaces the
    handlers of the first.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        console_output: bool = True,
    ) -> None:
        self._component = component
        self._operation: str | None = None

        self._logger = logging.getLogger(f"eifscope.{component}")
        self._logger.setLevel(_level(log_level))
        self._logger.propagate = False
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        if console_output:
            self._logger.addHandler(RichHandler(
                console=Console(stderr=True),
                show_path=False,
                rich_tracebacks=True,
                markup=False,
            ))

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = RotatingFileHandler(
                path,
                maxBytes=_MAX_LOG_BYTES,
                backupCount=_LOG_BACKUPS,
                encoding="utf-8",
            )
            fh.setFormatter(
                _JSONLineFormatter() if json_logs
                else logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
            )
            self._logger.addHandler(fh)

    @contextmanager
    def operation(self, name: str) -> Iterator[None]:
        """Tag every record logged inside the block with stage *name*."""
        previous, self._operation = self._operation, name
        try:
            yield
        finally:
            self._operation = previous

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        """Log how long the block took, at DEBUG level."""
        start = time.perf_counter()
        outcome = "Aborted"
        try:
            yield
            outcome = "Completed"
        finally:
            self.debug(
                "%s: %s (%.3f sec)", outcome, label, time.perf_counter() - start
            )

    def debug(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, args, fields)

    def warning(self, msg: str, *args: Any, **fields: Any) -> None:
        self._log(logging.WARNING, msg, args, fields)

    def _log(self, level: int, msg: str, args: tuple, fields: dict[str, Any]) -> None:
        self._logger.log(level, msg, *args, extra={
            "component": self._component,
            "stage": self._operation or "-",
            "fields": fields,
        })
