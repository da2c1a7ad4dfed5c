"""Observable result collection with identity-preserving merges.

A ``ResultCollection`` holds the detected JDKs for one candidate path set.
It is owned by the detection cache and updated in place, never replaced,
so callers holding a reference keep seeing current results.

Merge Algorithm (``merge``):
    1. Build the candidate list: every new record for a full merge, or the
       records outside the rescanned directories plus the new records for
       a scoped merge.
    2. Drop duplicate ``(version, build, architecture)`` triples, keeping
       the first.
    3. Sort (see ``jdkscout.core.versions``) and select the default.
    4. Match each record to a previous record with the same
       ``(version, build)`` and move that record's subscribers onto it.
    5. Swap the contents in one assignment, then notify record subscribers
       (changed / removed) and collection subscribers (one ``ChangeEvent``).

Step 2 hides later duplicates, so the collection also keeps the raw
per-directory scan results (``sources``). A scoped rescan feeds the
remembered records of the other directories back in as candidates,
letting a hidden duplicate take over when the record hiding it is gone.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Mapping

from jdkscout.core.defaults import select_default
from jdkscout.core.versions import sort_records
from jdkscout.discovery.normalizer import is_within
from jdkscout.probe.models import JDKRecord, RecordEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    """Outcome of one merge, delivered to collection subscribers.

    Attributes:
        collection: The collection that changed.
        records: Full contents after the merge.
        added: Records with no previous counterpart.
        removed: Previous records with no counterpart after the merge.
        changed: Records whose values differ from their previous counterpart.
    """

    collection: ResultCollection
    records: tuple[JDKRecord, ...]
    added: tuple[JDKRecord, ...] = ()
    removed: tuple[JDKRecord, ...] = ()
    changed: tuple[JDKRecord, ...] = ()

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.changed)


CollectionHandler = Callable[[ChangeEvent], Any]


class ResultCollection:
    """Ordered, observable sequence of ``JDKRecord``.

    Usage::

        unwatch = collection.watch(lambda evt: print(len(evt.records)))
        record = collection.find("1.8.0", 92)
        record.subscribe(lambda evt: print(evt.kind, evt.record.path))

    Args:
        fingerprint: Cache key of the path set this collection belongs to.

    Attributes:
        java_home: The resolved Java home of the last detection, or None
            when neither the request nor ``JAVA_HOME`` names an existing
            directory.
        sources: Latest scan results per candidate directory, before
            duplicate removal.
    """

    def __init__(self, fingerprint: str = "") -> None:
        self.fingerprint = fingerprint
        self.lock = asyncio.Lock()
        self.populated = False
        self.java_home: str | None = None
        self.sources: dict[str, list[JDKRecord]] = {}
        self._records: list[JDKRecord] = []
        self._subscribers: list[CollectionHandler] = []

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[JDKRecord]:
        return iter(tuple(self._records))

    def __getitem__(self, index: int) -> JDKRecord:
        return self._records[index]

    def __repr__(self) -> str:
        labels = ", ".join(r.label for r in self._records)
        return f"ResultCollection([{labels}])"

    @property
    def records(self) -> tuple[JDKRecord, ...]:
        return tuple(self._records)

    @property
    def default(self) -> JDKRecord | None:
        for record in self._records:
            if record.is_default:
                return record
        return None

    def find(self, version: str | None, build: int | None) -> JDKRecord | None:
        """Return the first live record with the given identity."""
        for record in self._records:
            if record.identity == (version, build):
                return record
        return None

    def watch(self, handler: CollectionHandler) -> Callable[[], None]:
        """Subscribe to change events; returns an unsubscribe callable."""
        self._subscribers.append(handler)

        def unwatch() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unwatch

    def snapshot(self) -> list[JDKRecord]:
        """Return detached copies of the current records."""
        return [r.snapshot() for r in self._records]

    def to_list(self) -> list[dict[str, Any]]:
        return [r.to_dict() for r in self._records]

    def record_sources(
        self, groups: Mapping[str, Iterable[JDKRecord]], *, replace: bool = False,
    ) -> None:
        """Remember scan results per directory; *replace* drops all others."""
        if replace:
            self.sources.clear()
        for directory, records in groups.items():
            self.sources[directory] = [r.snapshot() for r in records]

    def forget_source(self, directory: str) -> None:
        self.sources.pop(directory, None)

    def source_records(self, *, exclude: Iterable[str] = ()) -> list[JDKRecord]:
        """Detached copies of the remembered records, in directory order."""
        skipped = set(exclude)
        return [
            record.snapshot()
            for directory, records in self.sources.items()
            if directory not in skipped
            for record in records
        ]

    def merge(
        self,
        records: Iterable[JDKRecord],
        *,
        search_dirs: Iterable[str] = (),
        scope: Iterable[str] | None = None,
    ) -> ChangeEvent:
        """Merge freshly probed records into the collection.

        Args:
            records: New scan results, unsorted, in candidate order.
            search_dirs: Resolved search-path directories for default
                selection.
            scope: Directories that were rescanned. When given, only
                previous records under these directories are replaced;
                None replaces everything.

        Returns:
            The ``ChangeEvent`` describing the merge (also delivered to
            subscribers when anything changed).
        """
        previous = list(self._records)
        previous_state = {id(r): r.snapshot() for r in previous}

        if scope is None:
            candidates = list(records)
        else:
            scope_dirs = list(scope)
            candidates = [
                r for r in previous
                if not any(is_within(r.path, d) for d in scope_dirs)
            ]
            candidates.extend(records)

        unique: list[JDKRecord] = []
        seen: set[tuple] = set()
        for record in candidates:
            if record.key in seen:
                logger.debug("Dropping duplicate %s at %s", record.label, record.path)
                continue
            seen.add(record.key)
            unique.append(record)

        ordered = sort_records(unique)
        select_default(ordered, search_dirs)

        by_identity: dict[tuple, list[JDKRecord]] = {}
        for old in previous:
            by_identity.setdefault(old.identity, []).append(old)

        added: list[JDKRecord] = []
        changed: list[tuple[JDKRecord, JDKRecord]] = []
        for record in ordered:
            old = _take_match(by_identity, record)
            if old is None:
                added.append(record)
                continue
            old.transfer_subscribers(record)
            before = previous_state[id(old)]
            if record != before:
                changed.append((record, before))
        removed = [old for olds in by_identity.values() for old in olds]

        self._records = ordered
        first_population = not self.populated
        self.populated = True

        for record, before in changed:
            record.notify(RecordEvent("changed", record, before))
        for old in removed:
            old.notify(RecordEvent("removed", old, old))

        event = ChangeEvent(
            collection=self,
            records=tuple(ordered),
            added=tuple(added),
            removed=tuple(removed),
            changed=tuple(r for r, _ in changed),
        )
        if event.has_changes or first_population:
            for handler in list(self._subscribers):
                try:
                    handler(event)
                except Exception:
                    logger.warning("Collection subscriber failed", exc_info=True)
        return event


def _take_match(
    by_identity: dict[tuple, list[JDKRecord]], record: JDKRecord,
) -> JDKRecord | None:
    """Pop the previous record matching *record*, preferring the same arch."""
    olds = by_identity.get(record.identity)
    if not olds:
        return None
    for i, old in enumerate(olds):
        if old.architecture == record.architecture:
            return olds.pop(i)
    return olds.pop(0)
