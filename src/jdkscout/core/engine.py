"""The detection service: ``detect``, ``watch`` and ``reset_cache``.

``JDKDetector`` is constructed once by the hosting tool and owns the
detection cache, the scan orchestrator, and the probe. Nothing here is a
module-level singleton; tests construct a fresh detector (or call
``reset_cache``) for isolation.

Detection Pipeline:
    1. Resolve candidate directories (config paths, ``JAVA_HOME``,
       ``javac`` on ``PATH``, OS locations) and normalize them into a
       ``PathSet`` with a fingerprint.
    2. Look the fingerprint up in the cache; a populated entry is returned
       as-is unless the request forces a rescan.
    3. Probe every candidate concurrently.
    4. Merge the records into the cached collection (sort, default
       selection, identity-preserving swap) under the collection's lock.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Iterable, Mapping

from jdkscout.config import DetectConfig, DetectorSettings
from jdkscout.core.cache import DetectionCache
from jdkscout.core.collection import ResultCollection
from jdkscout.core.defaults import search_path_dirs
from jdkscout.core.scanner import ScanOrchestrator
from jdkscout.discovery.normalizer import PathSet, normalize_paths
from jdkscout.discovery.platform_paths import resolve_candidate_paths, resolve_java_home
from jdkscout.discovery.registry import read_registry_java_homes
from jdkscout.probe.models import JDKRecord
from jdkscout.probe.prober import JDKProber, ProbeFunc, current_platform
from jdkscout.watch.coordinator import WatchHandle

logger = logging.getLogger(__name__)


class JDKDetector:
    """Discovers installed JDKs and keeps the results current.

    Usage::

        detector = JDKDetector()
        jdks = await detector.detect(DetectConfig(paths=["~/jdks"]))
        for jdk in jdks:
            print(jdk.version, jdk.build, jdk.path, jdk.is_default)

    Args:
        probe: Coroutine function validating one directory. Defaults to a
            ``JDKProber`` for the host platform.
        settings: Service tuning (debounce, polling, subdirectory scans).
        environ: Environment to read ``JAVA_HOME``/``PATH`` from. Defaults
            to the live process environment at call time.
        platform: Override the host platform (for testing).
        registry_reader: Source re-read by the registry poller on Windows.
    """

    def __init__(
        self,
        probe: ProbeFunc | None = None,
        *,
        settings: DetectorSettings | None = None,
        environ: Mapping[str, str] | None = None,
        platform: str | None = None,
        registry_reader: Callable[[], Iterable[str]] = read_registry_java_homes,
    ) -> None:
        self.platform = platform or current_platform()
        self.settings = settings or DetectorSettings()
        self.probe = probe or JDKProber(self.platform).probe
        self.registry_reader = registry_reader
        self.cache = DetectionCache()
        self.scanner = ScanOrchestrator(
            self.probe, scan_subdirectories=self.settings.scan_subdirectories,
        )
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def search_dirs(self) -> frozenset[str]:
        """Resolved ``PATH`` directories used for default selection."""
        return search_path_dirs(self.environ)

    async def resolve(self, config: DetectConfig) -> PathSet:
        """Resolve and normalize the candidate directories of *config*.

        Raises:
            InvalidInputError: If ``config.paths`` is malformed.
        """
        raw = await resolve_candidate_paths(
            config, environ=self.environ, platform=self.platform,
        )
        return normalize_paths(raw)

    def java_home(
        self, config: DetectConfig | Mapping[str, Any] | None = None, **options: Any,
    ) -> str | None:
        """The Java home *config* resolves to, if that directory exists.

        ``config.java_home`` wins over ``JAVA_HOME``.
        """
        return resolve_java_home(coerce_config(config, options), self.environ)

    async def detect(
        self, config: DetectConfig | Mapping[str, Any] | None = None, **options: Any,
    ) -> ResultCollection | list[JDKRecord]:
        """Detect installed JDKs.

        Args:
            config: A ``DetectConfig``, an option mapping, or None.
            **options: Option overrides (``force``, ``paths``,
                ``ignore_platform_paths``, ``observable``, ``java_home``).

        Returns:
            The live shared ``ResultCollection`` for observable requests,
            otherwise a detached list of records. Finding nothing is an
            empty result, not an error. The collection's ``java_home``
            holds the resolved Java home.

        Raises:
            InvalidInputError: If ``paths`` is malformed. No probe runs.
        """
        config = coerce_config(config, options)
        path_set = await self.resolve(config)
        collection = await self.detect_path_set(path_set, force=config.force)
        collection.java_home = resolve_java_home(config, self.environ)
        if config.observable:
            return collection
        return collection.snapshot()

    async def detect_path_set(self, path_set: PathSet, *, force: bool = False) -> ResultCollection:
        """Return the cached collection for *path_set*, scanning if needed."""
        collection = self.cache.get_or_create(path_set.fingerprint)
        async with collection.lock:
            if collection.populated and not force:
                logger.debug("Cache hit for %s", path_set.fingerprint[:12])
                return collection
            groups = await self.scanner.scan_grouped(path_set.paths)
            collection.record_sources(groups, replace=True)
            records = [record for group in groups.values() for record in group]
            event = collection.merge(records, search_dirs=self.search_dirs())
        logger.info(
            "Detected %d JDKs (+%d -%d ~%d)",
            len(collection), len(event.added), len(event.removed), len(event.changed),
        )
        return collection

    def watch(
        self, config: DetectConfig | Mapping[str, Any] | None = None, **options: Any,
    ) -> WatchHandle:
        """Start a watch session; must be called with a running event loop.

        Validation errors are delivered through the handle's ``"error"``
        event, like every other session failure.
        """
        config = coerce_config(config, options)
        return WatchHandle(self, config).start()

    def reset_cache(self) -> None:
        """Forget every cached collection."""
        self.cache.reset()


def coerce_config(
    config: DetectConfig | Mapping[str, Any] | None, options: Mapping[str, Any],
) -> DetectConfig:
    if config is None:
        return DetectConfig.from_options(options)
    if isinstance(config, DetectConfig):
        if not options:
            return config
        merged = {**vars(config), **options}
        return DetectConfig.from_options(merged)
    return DetectConfig.from_options(config, **options)
