"""
eifscope CLI -- Image File Inspector
=====================================

Click-based command-line interface: decodes one image file and prints
its header, section headers, advisories and metadata.

Usage::

    # Inspect an image
    eifscope enclave.eif

    # Machine-readable output
    eifscope enclave.eif --json

    # Also save a JSON report
    eifscope enclave.eif --output report.json

    # Skip or enforce checksum verification
    eifscope enclave.eif --no-crc
    eifscope enclave.eif --strict-crc

Exit status is 1 on any fatal failure (missing argument, unreadable file,
structural error) and 0 otherwise.

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys

import click

from shared.config import ScopeConfig
from shared.console import ScopeConsole
from shared.logger import ScopeLogger

from eifscope.core.errors import EifError
from eifscope.core.reader import EifReader
from eifscope.output.console import EifConsoleOutput
from eifscope.output.report import EifReportGenerator


@click.command("eifscope")
@click.argument("paths", nargs=-1, metavar="PATH", type=click.Path())
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the JSON report to stdout instead of the console view.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(),
    default=None,
    help="Also write the JSON report to this path.",
)
@click.option(
    "--no-crc",
    is_flag=True,
    default=False,
    help="Skip crc32 verification.",
)
@click.option(
    "--strict-crc",
    is_flag=True,
    default=False,
    help="Treat a crc32 mismatch as a fatal error.",
)
@click.option(
    "--config", "config_path",
    type=click.Path(),
    default=None,
    help="TOML configuration file.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
def eifscope_cli(
    paths: tuple[str, ...],
    json_output: bool,
    output_path: str | None,
    no_crc: bool,
    strict_crc: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Inspect an enclave image file (.eif).

    PATH is the image file to decode.
    """
    console = ScopeConsole()

    if len(paths) != 1:
        console.error("Expected EIF file path as argument")
        sys.exit(1)
    path = paths[0]

    try:
        config = ScopeConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Failed to load config {config_path or 'config.toml'}: {exc}")
        sys.exit(1)

    if no_crc:
        config.reader.verify_crc32 = False
    if strict_crc:
        config.reader.strict_crc32 = True

    settings = config.global_settings
    logger = ScopeLogger(
        "reader",
        log_level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file or None,
        json_logs=settings.log_json,
    )
    reader = EifReader(config=config, logger=logger)

    try:
        result = reader.parse(path)
    except OSError as exc:
        console.error(f"Failed to open file {path}: {exc.strerror or exc}")
        sys.exit(1)
    except MemoryError:
        console.error("Failed to allocate memory")
        sys.exit(1)
    except EifError as exc:
        console.error(str(exc))
        sys.exit(1)

    report_gen = EifReportGenerator()

    if json_output:
        click.echo(report_gen.to_json(result))
    else:
        EifConsoleOutput(console=console).display(result)

    if output_path:
        target = settings.report_path(output_path)
        try:
            report_path = report_gen.generate_json(result, str(target))
        except OSError as exc:
            console.error(f"Failed to write report {target}: {exc.strerror or exc}")
            sys.exit(1)
        if not json_output:
            console.success(f"JSON report saved: {report_path}")


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for ``eifscope`` and ``python -m eifscope``."""
    eifscope_cli()


if __name__ == "__main__":
    main()
