"""``jdkscout detect`` — One-shot JDK detection.

Exit Codes:
    0 — Detection completed (including when no JDK was found).
    2 — Invalid input.
"""

from __future__ import annotations

import json
import sys

import click

from jdkscout.cli.options import build_config, configure_logging, detection_options, run_async
from jdkscout.cli.output import print_records, records_to_json
from jdkscout.config import DetectorSettings
from jdkscout.core.engine import JDKDetector
from jdkscout.exceptions import InvalidInputError


@click.command("detect")
@detection_options
def detect_command(
    paths: tuple[str, ...],
    force: bool,
    ignore_platform_paths: bool,
    java_home: str | None,
    output_format: str,
    verbose: bool,
) -> None:
    """Detect installed JDKs and print them, default marked.

    Examples:

        jdkscout detect

        jdkscout detect --path ~/jdks --ignore-platform-paths --format json
    """
    configure_logging(verbose)
    config = build_config(paths, force, ignore_platform_paths, java_home)
    detector = JDKDetector(settings=DetectorSettings.from_env())

    try:
        records = run_async(detector.detect(config))
    except InvalidInputError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if output_format == "json":
        click.echo(json.dumps(records_to_json(records), indent=2))
    else:
        print_records(records, java_home=detector.java_home(config))
