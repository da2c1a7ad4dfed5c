"""``jdkscout watch`` — Print detection results every time they change.

Runs until interrupted (or after the first results with ``--once``).

Exit Codes:
    0 — Stopped by the user or after ``--once``.
    1 — The watch session failed.
"""

from __future__ import annotations

import json
import sys

import click

from jdkscout.cli.options import build_config, configure_logging, detection_options, run_async
from jdkscout.cli.output import print_records, records_to_json
from jdkscout.config import DetectConfig, DetectorSettings
from jdkscout.core.engine import JDKDetector
from jdkscout.probe.models import JDKRecord


async def _watch_session(
    detector: JDKDetector,
    config: DetectConfig,
    output_format: str,
    once: bool,
) -> list[BaseException]:
    failures: list[BaseException] = []
    handle = detector.watch(config)

    def on_results(records: list[JDKRecord]) -> None:
        if output_format == "json":
            click.echo(json.dumps(records_to_json(records)))
        else:
            print_records(records)
        if once:
            handle.stop()

    handle.on("results", on_results).on("error", failures.append)
    try:
        await handle.wait()
    finally:
        handle.stop()
    return failures


@click.command("watch")
@detection_options
@click.option(
    "--debounce-ms", type=click.IntRange(min=0), default=None,
    help="Coalesce filesystem events within this window (default 300).",
)
@click.option(
    "--once", is_flag=True, default=False,
    help="Exit after printing the initial results.",
)
def watch_command(
    paths: tuple[str, ...],
    force: bool,
    ignore_platform_paths: bool,
    java_home: str | None,
    output_format: str,
    verbose: bool,
    debounce_ms: int | None,
    once: bool,
) -> None:
    """Watch JDK locations and print results whenever they change.

    Examples:

        jdkscout watch --path ~/jdks

        jdkscout watch --format json --debounce-ms 1000
    """
    configure_logging(verbose)
    config = build_config(paths, force, ignore_platform_paths, java_home)
    settings = DetectorSettings.from_env()
    if debounce_ms is not None:
        settings.debounce_seconds = debounce_ms / 1000.0
    detector = JDKDetector(settings=settings)

    try:
        failures = run_async(_watch_session(detector, config, output_format, once))
    except KeyboardInterrupt:
        return

    if failures:
        click.echo(f"Error: {failures[0]}", err=True)
        sys.exit(1)
