"""Scan orchestration over a candidate directory set.

Fans ``probe()`` out over every candidate directory concurrently, with at
most one probe in flight per directory: a request for a directory that
is already being probed awaits the pending outcome instead of launching
a second probe. A failing directory is "no JDK here" and never aborts
the scan.

When a candidate is not itself a JDK, its immediate subdirectories are
probed too, so a parent such as ``/usr/lib/jvm`` yields every JDK inside.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Iterable

from jdkscout.probe.models import JDKRecord
from jdkscout.probe.prober import ProbeFunc

logger = logging.getLogger(__name__)


class ScanOrchestrator:
    """Runs a probe function over many directories.

    Usage::

        orchestrator = ScanOrchestrator(JDKProber().probe)
        records = await orchestrator.scan(["/usr/lib/jvm", "/opt/jdk"])

    Args:
        probe: Coroutine function ``probe(dir) -> JDKRecord | None``.
        scan_subdirectories: Probe one level of subdirectories for
            candidates that are not a JDK themselves.
    """

    def __init__(self, probe: ProbeFunc, *, scan_subdirectories: bool = True) -> None:
        self._probe = probe
        self.scan_subdirectories = scan_subdirectories
        self._in_flight: dict[str, asyncio.Future[JDKRecord | None]] = {}

    @property
    def in_flight(self) -> int:
        """Number of directories with a probe currently running."""
        return len(self._in_flight)

    async def scan(self, directories: Iterable[str]) -> list[JDKRecord]:
        """Probe every directory; return found records in candidate order."""
        dirs = list(directories)
        nested = await asyncio.gather(*(self._scan_directory(d) for d in dirs))
        records = [record for group in nested for record in group]
        logger.info("Scanned %d directories, found %d JDKs", len(dirs), len(records))
        return records

    async def scan_grouped(self, directories: Iterable[str]) -> dict[str, list[JDKRecord]]:
        """Like ``scan`` but keyed by candidate directory, duplicates kept.

        Insertion order follows *directories*.
        """
        dirs = list(dict.fromkeys(directories))
        nested = await asyncio.gather(*(self._scan_directory(d) for d in dirs))
        groups = dict(zip(dirs, nested))
        logger.info(
            "Scanned %d directories, found %d JDKs",
            len(dirs), sum(len(group) for group in nested),
        )
        return groups

    async def _scan_directory(self, directory: str) -> list[JDKRecord]:
        record = await self.probe_once(directory)
        if record is not None:
            return [record]
        if not self.scan_subdirectories:
            return []
        children = _subdirectories(directory)
        if not children:
            return []
        found = await asyncio.gather(*(self.probe_once(c) for c in children))
        return [r for r in found if r is not None]

    async def probe_once(self, directory: str) -> JDKRecord | None:
        """Probe *directory*, sharing any probe already in flight for it.

        Every caller receives its own copy of the record so that results
        handed to different collections never share subscriber bindings.
        """
        future = self._in_flight.get(directory)
        if future is None:
            future = asyncio.ensure_future(self._guarded_probe(directory))
            self._in_flight[directory] = future
            future.add_done_callback(lambda f, d=directory: self._release(d, f))
        else:
            logger.debug("Joining in-flight probe of %s", directory)
        record = await asyncio.shield(future)
        return record.snapshot() if record is not None else None

    def _release(self, directory: str, future: asyncio.Future) -> None:
        if self._in_flight.get(directory) is future:
            del self._in_flight[directory]

    async def _guarded_probe(self, directory: str) -> JDKRecord | None:
        try:
            return await self._probe(directory)
        except Exception:
            logger.warning("Probe of %s raised", directory, exc_info=True)
            return None


def _subdirectories(directory: str) -> list[str]:
    """Return the immediate subdirectories of *directory*, sorted."""
    try:
        with os.scandir(directory) as entries:
            children = [
                entry.path for entry in entries
                if _is_dir(entry)
            ]
    except OSError:
        return []
    return sorted(children)


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False
