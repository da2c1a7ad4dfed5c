"""Rich output formatting helpers for the jdkscout CLI.

Provides consistent terminal output for detection results: a table of
installations with the default one highlighted, and a JSON form for
tooling.
"""

from __future__ import annotations

from typing import Any, Iterable

from rich.console import Console
from rich.table import Table
from rich.text import Text

from jdkscout.probe.models import JDKRecord

console = Console()


def records_to_json(records: Iterable[JDKRecord]) -> list[dict[str, Any]]:
    """Convert records to JSON-serializable dicts."""
    return [r.to_dict() for r in records]


def print_records(
    records: list[JDKRecord], title: str = "Detected JDKs", java_home: str | None = None,
) -> None:
    """Print a table of detected JDKs.

    Args:
        records: Records in collection order.
        title: Table title.
        java_home: Resolved Java home, printed under the table when set.
    """
    if not records:
        console.print("[dim]No JDKs found.[/dim]")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Version", style="bold")
    table.add_column("Build", justify="right")
    table.add_column("Arch", justify="center")
    table.add_column("Default", justify="center")
    table.add_column("Path", style="dim")

    for record in records:
        default = Text("*", style="bold green") if record.is_default else Text("")
        table.add_row(
            record.version or "?",
            str(record.build) if record.build is not None else "?",
            record.architecture or "?",
            default,
            record.path,
        )

    console.print(table)
    console.print(f"[bold]{len(records)}[/bold] JDK(s) found")
    if java_home:
        console.print(f"Java home: {java_home}")

