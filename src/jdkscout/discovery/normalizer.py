"""Path set normalization and fingerprinting.

Turns a heterogeneous list of candidate directories into a canonical,
deduplicated, deterministically ordered tuple, and computes the
fingerprint used as the detection cache key.

Determinism guarantee: two inputs containing the same directories in a
different order (or with duplicates, ``~``, environment variables, or
symlinks that resolve to the same place) produce the same ``PathSet``
and therefore the same fingerprint.
"""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from typing import Any, Iterable

from jdkscout.exceptions import InvalidInputError

FINGERPRINT_ALGORITHM: str = "sha256"


@dataclass(frozen=True)
class PathSet:
    """A canonical candidate directory set.

    Attributes:
        paths: Sorted, deduplicated absolute paths.
        fingerprint: Hex digest over the JSON-encoded ``paths``.
    """

    paths: tuple[str, ...]
    fingerprint: str

    def __iter__(self):
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)


def coerce_path_list(paths: Any) -> list[str]:
    """Validate a user-supplied ``paths`` value and return it as a list.

    Args:
        paths: None, a single string, or a list/tuple of strings.

    Returns:
        The paths as a list (empty strings are kept; see ``normalize_paths``).

    Raises:
        InvalidInputError: If *paths* is another type, or any element is
            not a string.
    """
    if paths is None:
        return []
    if isinstance(paths, str):
        return [paths]
    if not isinstance(paths, (list, tuple)):
        raise InvalidInputError("Expected paths to be a string or a list of strings")
    for item in paths:
        if not isinstance(item, str):
            raise InvalidInputError("Expected paths to be a list of strings")
    return list(paths)


def expand_path(path: str) -> str:
    """Expand ``~`` and environment variables, then absolutize.

    The result is symlink-resolved only when the path currently exists;
    non-existent paths are kept as literal absolute candidates.
    """
    expanded = os.path.expandvars(os.path.expanduser(path))
    absolute = os.path.abspath(expanded)
    if os.path.exists(absolute):
        return os.path.realpath(absolute)
    return absolute


def compute_fingerprint(paths: Iterable[str]) -> str:
    """Hash an ordered path sequence into a stable cache key."""
    encoded = json.dumps(list(paths), separators=(",", ":")).encode("utf-8")
    return hashlib.new(FINGERPRINT_ALGORITHM, encoded).hexdigest()


def normalize_paths(paths: Any) -> PathSet:
    """Canonicalize a candidate directory list.

    Args:
        paths: None, a string, or a list of strings. Empty strings are
            dropped silently.

    Returns:
        The canonical ``PathSet``.

    Raises:
        InvalidInputError: On non-string input (see ``coerce_path_list``).
    """
    raw = coerce_path_list(paths)
    resolved = {expand_path(p) for p in raw if p != ""}
    ordered = tuple(sorted(resolved))
    return PathSet(paths=ordered, fingerprint=compute_fingerprint(ordered))


def is_within(path: str, directory: str) -> bool:
    """Return True if *path* is *directory* or lies beneath it."""
    if path == directory:
        return True
    prefix = directory if directory.endswith(os.sep) else directory + os.sep
    return path.startswith(prefix)
