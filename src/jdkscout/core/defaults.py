"""Default JDK selection.

The default installation is the first record, in collection order, whose
``javac`` lives in a directory on the executable search path. When no
record qualifies, the last record (the highest version) is the default.
"""

from __future__ import annotations

import os
from typing import Iterable, Mapping

from jdkscout.probe.models import JDKRecord


def search_path_dirs(environ: Mapping[str, str] | None = None) -> frozenset[str]:
    """Return the resolved, deduplicated directories of ``PATH``."""
    env = os.environ if environ is None else environ
    raw = env.get("PATH", "")
    dirs: set[str] = set()
    for entry in raw.split(os.pathsep):
        if not entry:
            continue
        expanded = os.path.abspath(os.path.expanduser(entry))
        dirs.add(os.path.realpath(expanded) if os.path.exists(expanded) else expanded)
    return frozenset(dirs)


def select_default(records: list[JDKRecord], search_dirs: Iterable[str]) -> JDKRecord | None:
    """Mark exactly one record of a sorted list as default.

    Args:
        records: Records already in collection order. Mutated in place.
        search_dirs: Resolved search-path directories.

    Returns:
        The record marked default, or None for an empty list.
    """
    for record in records:
        record.is_default = False
    if not records:
        return None

    dirs = frozenset(search_dirs)
    chosen: JDKRecord | None = None
    for record in records:
        javac = record.executables.get("javac")
        if javac and os.path.dirname(javac) in dirs:
            chosen = record
            break
    if chosen is None:
        chosen = records[-1]
    chosen.is_default = True
    return chosen
