"""Candidate directory discovery for the running host.

Collects the directories the detection engine should probe. Sources are
consulted in order and each one failing contributes nothing, so a broken
registry or a missing ``/usr/libexec/java_home`` never aborts detection.

Discovery Sources:
    1. The configured Java home, or ``JAVA_HOME``.
    2. The JDK root owning ``javac`` on ``PATH``.
    3. User-supplied paths.
    4. Well-known OS locations (skipped with ``ignore_platform_paths``):
       ``/usr/lib/jvm`` and friends on Linux, JavaVirtualMachines bundles
       and ``/usr/libexec/java_home`` on macOS, the registry on Windows.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from typing import Mapping

from jdkscout.config import DetectConfig
from jdkscout.discovery.normalizer import coerce_path_list, expand_path
from jdkscout.discovery.registry import read_registry_java_homes
from jdkscout.probe.prober import current_platform

logger = logging.getLogger(__name__)

LINUX_JDK_PARENTS: tuple[str, ...] = ("/usr/lib/jvm", "/usr/java", "/opt/java")

DARWIN_JDK_PARENTS: tuple[str, ...] = (
    "/Library/Java/JavaVirtualMachines",
    "/System/Library/Java/JavaVirtualMachines",
)

DARWIN_JAVA_HOME_TOOL = "/usr/libexec/java_home"


def java_home_candidate(config: DetectConfig, environ: Mapping[str, str]) -> str | None:
    """Return the configured Java home, falling back to ``JAVA_HOME``."""
    home = config.java_home or environ.get("JAVA_HOME") or None
    return home


def resolve_java_home(config: DetectConfig, environ: Mapping[str, str]) -> str | None:
    """Return the Java home as an absolute real path, or None if it does not exist."""
    home = java_home_candidate(config, environ)
    if home is None:
        return None
    resolved = expand_path(home)
    if not os.path.isdir(resolved):
        return None
    return resolved


def path_javac_candidate(environ: Mapping[str, str]) -> str | None:
    """Return the JDK root owning the first ``javac`` on ``PATH``."""
    search_path = environ.get("PATH", "")
    if not search_path:
        return None
    javac = shutil.which("javac", path=search_path)
    if javac is None:
        return None
    return os.path.dirname(os.path.dirname(os.path.realpath(javac)))


def _existing(paths: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for path in paths:
        try:
            if os.path.isdir(path):
                found.append(path)
        except OSError:
            continue
    return found


def _darwin_bundles() -> list[str]:
    bundles: list[str] = []
    for parent in _existing(DARWIN_JDK_PARENTS):
        try:
            names = sorted(os.listdir(parent))
        except OSError:
            logger.warning("Cannot list %s", parent)
            continue
        bundles.extend(os.path.join(parent, name, "Contents", "Home") for name in names)
    return bundles


async def _darwin_java_home() -> str | None:
    try:
        proc = await asyncio.create_subprocess_exec(
            DARWIN_JAVA_HOME_TOOL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
        stdout, _ = await proc.communicate()
    except OSError as exc:
        logger.debug("%s unavailable: %s", DARWIN_JAVA_HOME_TOOL, exc)
        return None
    if proc.returncode != 0:
        return None
    home = stdout.decode(errors="replace").strip()
    return home or None


async def platform_candidates(platform: str | None = None) -> list[str]:
    """Return well-known JDK locations for *platform* (default: this host)."""
    platform = platform or current_platform()
    if platform == "linux":
        return _existing(LINUX_JDK_PARENTS)
    if platform == "darwin":
        paths = _darwin_bundles()
        home = await _darwin_java_home()
        if home:
            paths.append(home)
        return paths
    if platform == "win32":
        try:
            return read_registry_java_homes()
        except OSError:
            logger.warning("Registry lookup failed", exc_info=True)
            return []
    return []


async def resolve_candidate_paths(
    config: DetectConfig,
    *,
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> list[str]:
    """Collect every candidate directory for a detection request.

    Args:
        config: The detection request.
        environ: Override the process environment (for testing).
        platform: Override the host platform (for testing).

    Returns:
        Candidate paths in source order, not yet normalized.

    Raises:
        InvalidInputError: If ``config.paths`` is malformed.
    """
    env = os.environ if environ is None else environ
    user_paths = coerce_path_list(config.paths)

    candidates: list[str] = []
    home = java_home_candidate(config, env)
    if home:
        candidates.append(home)
    javac_root = path_javac_candidate(env)
    if javac_root:
        candidates.append(javac_root)
    candidates.extend(user_paths)
    if not config.ignore_platform_paths:
        candidates.extend(await platform_candidates(platform))

    logger.debug("Resolved %d candidate paths", len(candidates))
    return candidates
