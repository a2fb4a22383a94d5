"""
eifscope Configuration
=======================

Dataclass settings for the image reader and the command-line driver,
optionally overridden from a TOML file.  A file only needs to declare
the keys it changes; anything else keeps its default.

Example ``config.toml``::

    [global]
    log_level = "DEBUG"
    log_file = "logs/eifscope.log"
    output_dir = "reports"

    [reader]
    strict_crc32 = true

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# Picked up when no explicit path is given; absence is not an error.
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"


@dataclass(slots=True)
class ReaderConfig:
    """Checksum and metadata handling for :class:`~eifscope.core.reader.EifReader`."""

    verify_crc32: bool = True
    strict_crc32: bool = False
    metadata_encoding: str = "utf-8"
    crc_chunk_size: int = 1_048_576  # 1 MiB

    def __post_init__(self) -> None:
        if self.crc_chunk_size < 1:
            raise ValueError(
                f"crc_chunk_size must be at least 1, got {self.crc_chunk_size}"
            )


@dataclass(slots=True)
class GlobalConfig:
    """Logging and report placement.

    ``output_dir`` is the directory relative ``--output`` report paths are
    written under; empty means the working directory.
    """

    log_level: str = "INFO"
    log_file: str = ""
    log_json: bool = False
    output_dir: str = ""

    def report_path(self, path: str | Path) -> Path:
        """Resolve a report path against :attr:`output_dir`."""
        target = Path(path)
        if self.output_dir and not target.is_absolute():
            return Path(self.output_dir) / target
        return target


@dataclass(slots=True)
class ScopeConfig:
    """All eifscope settings, grouped by TOML table.

    Usage:
        >>> config = ScopeConfig.load("custom.toml")
        >>> config.reader.verify_crc32
        True
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    reader: ReaderConfig = field(default_factory=ReaderConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> ScopeConfig:
        """Load the ``[global]`` and ``[reader]`` tables of a TOML file.

        Without *path*, ``config.toml`` in the project root is used when it
        exists and defaults otherwise.

        Raises:
            FileNotFoundError: An explicit *path* does not exist.
            ValueError: The file is not valid TOML or holds an invalid value.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=_from_table(GlobalConfig, raw.get("global", {})),
            reader=_from_table(ReaderConfig, raw.get("reader", {})),
        )


def _from_table(cls: type, table: dict[str, Any]) -> Any:
    # Unknown keys are dropped so newer config files still load.
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in table.items() if k in known})
