"""Detection cache: path-set fingerprint -> ``ResultCollection``.

Entries are created on first use, updated in place by later scans, and
only dropped by ``reset()``. There is no eviction: the number of distinct
path sets a process asks about is small.
"""

from __future__ import annotations

import logging

from jdkscout.core.collection import ResultCollection

logger = logging.getLogger(__name__)


class DetectionCache:
    """Owns every ``ResultCollection`` produced by a detector."""

    def __init__(self) -> None:
        self._entries: dict[str, ResultCollection] = {}

    def __contains__(self, fingerprint: str) -> bool:
        return fingerprint in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, fingerprint: str) -> ResultCollection | None:
        """Return the collection for *fingerprint*, or None."""
        return self._entries.get(fingerprint)

    def get_or_create(self, fingerprint: str) -> ResultCollection:
        """Return the collection for *fingerprint*, creating an empty one."""
        collection = self._entries.get(fingerprint)
        if collection is None:
            collection = ResultCollection(fingerprint)
            self._entries[fingerprint] = collection
            logger.debug("Created cache entry %s", fingerprint[:12])
        return collection

    def reset(self) -> None:
        """Drop every entry."""
        self._entries.clear()
