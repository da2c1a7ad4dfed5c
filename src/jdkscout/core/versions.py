"""Version comparison and record ordering.

JDK version strings are compared segment by segment, numerically, so
``1.10.0`` sorts after ``1.9.0`` (a lexical compare would invert them).
Trailing zero segments are insignificant: ``1.8`` equals ``1.8.0``.

Record ordering (ascending):
    1. version (records without a version first),
    2. build number (records without a build first),
    3. architecture, lexically.
"""

from __future__ import annotations

import re

from jdkscout.probe.models import JDKRecord

_SEGMENT_RE = re.compile(r"\d+|[A-Za-z]+")

VersionKey = tuple[tuple[int, int | str], ...]


def version_key(version: str) -> VersionKey:
    """Parse a version string into a comparable tuple.

    Numeric segments compare as integers; alphabetic segments (``ea``,
    ``u``) compare lexically and sort below any number in the same
    position.
    """
    segments: list[tuple[int, int | str]] = []
    for token in _SEGMENT_RE.findall(version):
        if token.isdigit():
            segments.append((1, int(token)))
        else:
            segments.append((0, token.lower()))
    while segments and segments[-1] == (1, 0):
        segments.pop()
    return tuple(segments)


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as *a* is older than, equal to, or newer than *b*."""
    ka, kb = version_key(a), version_key(b)
    if ka < kb:
        return -1
    if ka > kb:
        return 1
    return 0


def record_sort_key(record: JDKRecord) -> tuple:
    """Sort key implementing the collection ordering."""
    return (
        record.version is not None,
        version_key(record.version) if record.version is not None else (),
        record.build is not None,
        record.build if record.build is not None else 0,
        record.architecture or "",
    )


def sort_records(records: list[JDKRecord]) -> list[JDKRecord]:
    """Return *records* in collection order (stable)."""
    return sorted(records, key=record_sort_key)
