"""Periodic re-resolution of candidate paths without change notification.

The Windows registry offers no native change event the watcher could
subscribe to, so registered JDK homes are re-read on a fixed interval.
``RegistryPoller`` owns its own cancellable task, separate from the
filesystem watches of the session using it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Iterable

from jdkscout.discovery.normalizer import expand_path

logger = logging.getLogger(__name__)

PathReader = Callable[[], Iterable[str]]
ChangeCallback = Callable[[set[str], set[str]], Any]


class RegistryPoller:
    """Re-reads a path source every *interval* seconds and reports changes.

    Args:
        read_paths: Synchronous callable returning the current paths.
        interval: Seconds between reads.
        on_change: Called with ``(added, removed)`` path sets whenever the
            source differs from the previous read. May be a coroutine
            function.
    """

    def __init__(
        self,
        read_paths: PathReader,
        interval: float,
        on_change: ChangeCallback,
    ) -> None:
        self._read_paths = read_paths
        self.interval = interval
        self._on_change = on_change
        self._known: set[str] = set()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def known(self) -> frozenset[str]:
        return frozenset(self._known)

    def start(self, initial: Iterable[str] = ()) -> None:
        """Start polling; *initial* is the baseline the first read diffs against."""
        if self.running:
            return
        self._known = {expand_path(p) for p in initial}
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def poll_once(self) -> tuple[set[str], set[str]]:
        """Read the source once; returns ``(added, removed)``."""
        try:
            current = {expand_path(p) for p in self._read_paths() if p}
        except OSError:
            logger.warning("Path source read failed", exc_info=True)
            return set(), set()
        added = current - self._known
        removed = self._known - current
        self._known = current
        if added or removed:
            logger.info("Registry paths changed: +%d -%d", len(added), len(removed))
            result = self._on_change(added, removed)
            if inspect.isawaitable(result):
                await result
        return added, removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.poll_once()
