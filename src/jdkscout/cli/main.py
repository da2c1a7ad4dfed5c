"""jdkscout CLI — Find installed JDKs and keep watching them.

Entry point for the ``jdkscout`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    detect — Detect installed JDKs once.
    watch  — Print results every time a watched location changes.

Usage::

    jdkscout detect                              # Default search locations
    jdkscout detect --path ~/jdks --format json  # Extra location, JSON out
    jdkscout watch --path ~/jdks                 # Live updates
"""

from __future__ import annotations

import click

from jdkscout import __version__
from jdkscout.cli.detect_cmd import detect_command
from jdkscout.cli.watch_cmd import watch_command


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """jdkscout: Detect installed Java Development Kits.

    Searches JAVA_HOME, the javac on PATH, well-known OS locations and
    any extra paths you pass, and reports every valid JDK with its
    version, build, architecture and whether it is the default.
    """


# Register all subcommands
cli.add_command(detect_command)
cli.add_command(watch_command)
