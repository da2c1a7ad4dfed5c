"""Configuration objects for detection requests and the detector service.

``DetectConfig`` describes one ``detect()``/``watch()`` request.
``DetectorSettings`` tunes a long-lived ``JDKDetector`` and can be read
from the environment:

    JDKSCOUT_DEBOUNCE_MS             Debounce window for watch rescans.
    JDKSCOUT_REGISTRY_POLL_SECONDS   Registry re-resolution interval (Windows).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS: float = 0.3
DEFAULT_REGISTRY_POLL_SECONDS: float = 60.0

# camelCase option names accepted for compatibility with option dicts
# produced by other tooling.
_OPTION_ALIASES: dict[str, str] = {
    "ignorePlatformPaths": "ignore_platform_paths",
    "javaHome": "java_home",
    "jdkPaths": "paths",
}


@dataclass
class DetectConfig:
    """A single detection request.

    Attributes:
        force: Bypass the cache and rescan every candidate directory.
        paths: Additional candidate directories (a string or a list of
            strings). Validated by the path normalizer.
        ignore_platform_paths: Skip well-known OS installation locations.
        observable: Return the live shared collection instead of a
            detached snapshot.
        java_home: Explicit Java home; falls back to ``JAVA_HOME``.
    """

    force: bool = False
    paths: Any = None
    ignore_platform_paths: bool = False
    observable: bool = False
    java_home: str | None = None

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None, **kwargs: Any) -> DetectConfig:
        """Build a config from a loose option mapping.

        Unknown keys are ignored; camelCase aliases are accepted.
        """
        merged = dict(options or {})
        merged.update(kwargs)
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in merged.items():
            name = _OPTION_ALIASES.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)


@dataclass
class DetectorSettings:
    """Service-wide tuning for ``JDKDetector``.

    Attributes:
        debounce_seconds: Window in which bursts of filesystem events for
            one directory are coalesced into a single rescan.
        registry_poll_seconds: Interval between registry re-resolutions on
            platforms without native change notification for that source.
        scan_subdirectories: Probe immediate subdirectories of candidates
            that are not themselves a JDK.
    """

    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    registry_poll_seconds: float = DEFAULT_REGISTRY_POLL_SECONDS
    scan_subdirectories: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DetectorSettings:
        env = os.environ if environ is None else environ
        settings = cls()
        debounce_ms = _read_float(env, "JDKSCOUT_DEBOUNCE_MS")
        if debounce_ms is not None:
            settings.debounce_seconds = debounce_ms / 1000.0
        poll = _read_float(env, "JDKSCOUT_REGISTRY_POLL_SECONDS")
        if poll is not None:
            settings.registry_poll_seconds = poll
        return settings


def _read_float(env: Mapping[str, str], name: str) -> float | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r", name, raw)
        return None
    if value < 0:
        logger.warning("Ignoring negative %s=%r", name, raw)
        return None
    return value
