"""Live detection: keep a result collection current as directories change.

A ``WatchHandle`` is one watch session. Its lifecycle:

    init    -> resolve candidate directories, run the baseline scan
    active  -> one watchdog watch per directory; a burst of events for a
               directory is debounced into a single rescan of that
               directory alone, merged into the shared collection
    stopped -> every watch, timer and poller released (terminal)

Filesystem events arrive on the watchdog observer thread and are handed
to the event loop with ``call_soon_threadsafe``; all session state is
touched on the loop only.

Each candidate directory ``D`` is watched recursively when it exists,
and its nearest existing ancestor is watched non-recursively so that the
creation or deletion of ``D`` itself is noticed.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from jdkscout.config import DetectConfig
from jdkscout.discovery.normalizer import is_within
from jdkscout.exceptions import WatchError
from jdkscout.watch.polling import RegistryPoller

if TYPE_CHECKING:
    from watchdog.observers.api import ObservedWatch

    from jdkscout.core.collection import ResultCollection
    from jdkscout.core.engine import JDKDetector

logger = logging.getLogger(__name__)

EVENTS: tuple[str, ...] = ("results", "error")

WatchKey = tuple[str, bool]

# Access notifications; probing a JDK (running javac) produces these.
_IGNORED_EVENT_TYPES = frozenset({"opened", "closed", "closed_no_write"})


class _LoopForwardingHandler(FileSystemEventHandler):
    """Forwards watchdog events from the observer thread to the loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, callback: Callable[[list[str]], None]) -> None:
        super().__init__()
        self._loop = loop
        self._callback = callback

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in _IGNORED_EVENT_TYPES:
            return
        paths = [os.fsdecode(event.src_path)]
        dest = getattr(event, "dest_path", None)
        if dest:
            paths.append(os.fsdecode(dest))
        try:
            self._loop.call_soon_threadsafe(self._callback, paths)
        except RuntimeError:
            # Loop already closed; the session is gone.
            pass


def _nearest_existing_ancestor(path: str) -> str | None:
    parent = os.path.dirname(path)
    while parent and parent != path:
        if os.path.isdir(parent):
            return parent
        path, parent = parent, os.path.dirname(parent)
    return None


class WatchHandle:
    """One watch session over a resolved candidate directory set.

    Usage::

        handle = detector.watch(DetectConfig(paths=["/opt/jdks"]))
        handle.on("results", lambda results: print(results))
        handle.on("error", lambda exc: print("failed:", exc))
        ...
        handle.stop()

    Handlers for ``"results"`` receive the live collection when the
    request is observable, otherwise a detached snapshot list.
    """

    def __init__(self, detector: JDKDetector, config: DetectConfig) -> None:
        self._detector = detector
        self._config = config
        self._handlers: dict[str, list[Callable[[Any], Any]]] = {e: [] for e in EVENTS}
        self.state = "init"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._init_task: asyncio.Task[None] | None = None
        self._stopped_event: asyncio.Event | None = None
        self._collection: ResultCollection | None = None
        self._directories: list[str] = []
        # Candidates from JAVA_HOME, PATH and config.paths; never dropped.
        self._requested: frozenset[str] = frozenset()
        self._observer: Any = None
        self._watches: dict[WatchKey, ObservedWatch] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._rescans: dict[str, asyncio.Task[None]] = {}
        self._pending: set[str] = set()
        self._poller: RegistryPoller | None = None
        self._joiner: asyncio.Future[Any] | None = None

    # -- Public API ---------------------------------------------------------

    def on(self, event: str, handler: Callable[[Any], Any]) -> WatchHandle:
        """Register *handler* for ``"results"`` or ``"error"``; chainable."""
        if event not in self._handlers:
            raise ValueError(f"Unknown watch event: {event!r}")
        self._handlers[event].append(handler)
        return self

    @property
    def stopped(self) -> bool:
        return self.state == "stopped"

    @property
    def collection(self) -> ResultCollection | None:
        return self._collection

    @property
    def directories(self) -> tuple[str, ...]:
        return tuple(self._directories)

    @property
    def watched_paths(self) -> frozenset[WatchKey]:
        """``(path, recursive)`` pairs currently under a filesystem watch."""
        return frozenset(self._watches)

    def start(self) -> WatchHandle:
        """Begin the session on the running loop. Called by the detector."""
        self._loop = asyncio.get_running_loop()
        self._stopped_event = asyncio.Event()
        self._init_task = self._loop.create_task(self._initialize())
        return self

    def stop(self) -> None:
        """Release every watch, timer and poller. Idempotent.

        A rescan already dispatched is not cancelled; its result is
        discarded when it arrives.
        """
        if self.state == "stopped":
            return
        self.state = "stopped"
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._pending.clear()
        if self._poller is not None:
            self._poller.stop()
            self._poller = None
        if self._observer is not None:
            observer, self._observer = self._observer, None
            observer.unschedule_all()
            observer.stop()
            if observer.is_alive() and self._loop is not None and not self._loop.is_closed():
                self._joiner = self._loop.run_in_executor(None, observer.join, 5.0)
        self._watches.clear()
        if self._stopped_event is not None:
            self._stopped_event.set()
        logger.info("Watch session stopped")

    async def wait(self) -> None:
        """Block until the session is stopped."""
        if self._stopped_event is None:
            raise RuntimeError("watch session was never started")
        await self._stopped_event.wait()
        if self._joiner is not None:
            await self._joiner

    # -- Init -----------------------------------------------------------------

    async def _initialize(self) -> None:
        try:
            path_set = await self._detector.resolve(self._config)
            requested = await self._detector.resolve(
                replace(self._config, ignore_platform_paths=True),
            )
            collection = await self._detector.detect_path_set(
                path_set, force=self._config.force,
            )
            collection.java_home = self._detector.java_home(self._config)
        except Exception as exc:
            self._fail(exc)
            return
        if self.stopped:
            return

        self._collection = collection
        self._directories = list(path_set.paths)
        self._requested = frozenset(requested.paths)
        try:
            self._observer = Observer()
            self._refresh_watches(strict=True)
            self._observer.start()
        except WatchError as exc:
            self._fail(exc)
            return

        self.state = "active"
        logger.info("Watching %d directories", len(self._directories))
        self._start_poller()
        self._emit("results", self._payload())

    def _start_poller(self) -> None:
        detector = self._detector
        if detector.platform != "win32" or self._config.ignore_platform_paths:
            return
        self._poller = RegistryPoller(
            detector.registry_reader,
            detector.settings.registry_poll_seconds,
            self._on_registry_change,
        )
        self._poller.start(initial=detector.registry_reader())

    # -- Filesystem watches -------------------------------------------------

    def _desired_watches(self) -> set[WatchKey]:
        desired: set[WatchKey] = set()
        for directory in self._directories:
            if os.path.isdir(directory):
                desired.add((directory, True))
            ancestor = _nearest_existing_ancestor(directory)
            if ancestor is not None:
                desired.add((ancestor, False))
        recursive_roots = [path for path, recursive in desired if recursive]
        return {
            (path, recursive) for path, recursive in desired
            if recursive or not any(is_within(path, root) for root in recursive_roots)
        }

    def _refresh_watches(self, *, strict: bool = False) -> None:
        """Bring scheduled watches in line with the current filesystem."""
        if self._observer is None:
            return
        desired = self._desired_watches()
        for key in set(self._watches) - desired:
            watch = self._watches.pop(key)
            try:
                self._observer.unschedule(watch)
            except (KeyError, OSError) as exc:
                logger.debug("Unschedule of %s failed: %s", key[0], exc)
        handler = _LoopForwardingHandler(self._loop, self._on_paths)
        for key in sorted(desired - set(self._watches)):
            path, recursive = key
            try:
                self._watches[key] = self._observer.schedule(handler, path, recursive=recursive)
            except OSError as exc:
                if strict or os.path.isdir(path):
                    raise WatchError(f"Cannot watch {path}: {exc}") from exc
                logger.debug("Skipping vanished watch target %s", path)

    def _on_paths(self, paths: list[str]) -> None:
        if self.state != "active":
            return
        watched = {path for path, _ in self._watches}
        for directory in self._directories:
            for path in paths:
                inside = is_within(path, directory)
                creates_parent = is_within(directory, path) and path not in watched
                if inside or creates_parent:
                    self._schedule_rescan(directory)
                    break

    # -- Debounced rescans --------------------------------------------------

    def _schedule_rescan(self, directory: str) -> None:
        """(Re)arm the single-shot debounce timer for *directory*."""
        if self.state != "active" or self._loop is None:
            return
        timer = self._timers.pop(directory, None)
        if timer is not None:
            timer.cancel()
        self._timers[directory] = self._loop.call_later(
            self._detector.settings.debounce_seconds, self._dispatch, directory,
        )

    def _dispatch(self, directory: str) -> None:
        self._timers.pop(directory, None)
        if self.state != "active":
            return
        if directory in self._rescans:
            self._pending.add(directory)
            return
        logger.debug("Rescanning %s", directory)
        self._rescans[directory] = self._loop.create_task(self._rescan(directory))

    async def _rescan(self, directory: str) -> None:
        try:
            groups = await self._detector.scanner.scan_grouped([directory])
            if self.stopped:
                return
            collection = self._collection
            async with collection.lock:
                if self.stopped:
                    return
                collection.record_sources(groups)
                # Other directories' records re-enter so hidden duplicates can resurface.
                records = list(groups.get(directory, []))
                records += collection.source_records(exclude=[directory])
                collection.merge(
                    records,
                    search_dirs=self._detector.search_dirs(),
                    scope=[directory],
                )
            self._refresh_watches()
        except Exception as exc:
            self._fail(exc)
            return
        finally:
            self._rescans.pop(directory, None)

        self._emit("results", self._payload())
        if directory in self._pending:
            self._pending.discard(directory)
            self._schedule_rescan(directory)

    # -- Registry polling ---------------------------------------------------

    async def _on_registry_change(self, added: set[str], removed: set[str]) -> None:
        if self.state != "active":
            return
        dropped = sorted(removed - self._requested)
        try:
            for directory in dropped:
                if directory in self._directories:
                    self._directories.remove(directory)
                collection = self._collection
                async with collection.lock:
                    collection.forget_source(directory)
                    collection.merge(
                        collection.source_records(),
                        search_dirs=self._detector.search_dirs(),
                        scope=[directory],
                    )
            for directory in sorted(added):
                if directory not in self._directories:
                    self._directories.append(directory)
            self._refresh_watches()
        except Exception as exc:
            self._fail(exc)
            return
        if dropped:
            self._emit("results", self._payload())
        for directory in sorted(added):
            self._schedule_rescan(directory)

    # -- Notifications --------------------------------------------------------

    def _payload(self) -> Any:
        if self._config.observable:
            return self._collection
        return self._collection.snapshot()

    def _emit(self, event: str, payload: Any) -> None:
        handlers = list(self._handlers[event])
        if event == "error" and not handlers:
            logger.error("Watch session failed: %s", payload)
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.warning("Watch %r handler failed", event, exc_info=True)

    def _fail(self, exc: BaseException) -> None:
        logger.warning("Watch session error: %s", exc)
        self.stop()
        self._emit("error", exc)
