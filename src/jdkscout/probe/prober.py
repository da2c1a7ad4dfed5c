"""Directory prober: decides whether a directory holds a JDK.

``JDKProber.probe`` is the uniform contract the detection engine relies
on. It never raises; every failure (missing JVM library, missing
executables, a non-directory target, a ``javac`` that cannot run) is
reported as ``None``.

Probe Algorithm:
    1. A macOS bundle (``<dir>/Contents/Home``) is probed at its home.
    2. At least one JVM shared library must exist at a platform-specific
       location relative to the directory.
    3. ``bin/`` must contain ``java``, ``javac``, ``keytool`` and
       ``jarsigner``; each is recorded as its real path.
    4. ``javac -version -d64`` exiting 0 means 64-bit; otherwise
       ``javac -version`` exiting 0 means 32-bit; otherwise not a JDK.
    5. The banner is matched against ``javac <version>_<build>``.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import sys
from typing import Awaitable, Callable

from jdkscout.probe.models import REQUIRED_EXECUTABLES, JDKRecord

logger = logging.getLogger(__name__)

ProbeFunc = Callable[[str], Awaitable["JDKRecord | None"]]

_JAVAC_BANNER_RE = re.compile(r"javac (.+)_(.+)")

LIBJVM_LOCATIONS: dict[str, tuple[str, ...]] = {
    "linux": (
        "lib/amd64/client/libjvm.so",
        "lib/amd64/server/libjvm.so",
        "lib/i386/client/libjvm.so",
        "lib/i386/server/libjvm.so",
        "jre/lib/amd64/client/libjvm.so",
        "jre/lib/amd64/server/libjvm.so",
        "jre/lib/i386/client/libjvm.so",
        "jre/lib/i386/server/libjvm.so",
        "lib/server/libjvm.so",
        "lib/client/libjvm.so",
    ),
    "darwin": (
        "jre/lib/server/libjvm.dylib",
        "../Libraries/libjvm.dylib",
        "lib/server/libjvm.dylib",
    ),
    "win32": (
        "jre/bin/server/jvm.dll",
        "jre/bin/client/jvm.dll",
        "bin/server/jvm.dll",
        "bin/client/jvm.dll",
    ),
}


def current_platform() -> str:
    """Return ``linux``, ``darwin`` or ``win32`` for the running host."""
    if sys.platform.startswith("linux"):
        return "linux"
    return sys.platform


def parse_javac_banner(output: str) -> tuple[str | None, int | None]:
    """Extract ``(version, build)`` from ``javac -version`` output.

    Args:
        output: Combined stdout/stderr of the ``javac`` invocation.

    Returns:
        The version string and integer build, either of which may be None.
    """
    m = _JAVAC_BANNER_RE.search(output)
    if not m:
        return None, None
    version = m.group(1).strip()
    try:
        build: int | None = int(m.group(2).strip())
    except ValueError:
        build = None
    return version, build


class JDKProber:
    """Validates a single directory and extracts its JDK metadata.

    Usage::

        prober = JDKProber()
        record = await prober.probe("/usr/lib/jvm/java-8-openjdk")
        if record is not None:
            print(record.version, record.build, record.architecture)

    Args:
        platform: Override the platform used to pick JVM library locations
            and executable suffixes (for testing).
    """

    def __init__(self, platform: str | None = None) -> None:
        self.platform = platform or current_platform()
        self._exe_suffix = ".exe" if self.platform == "win32" else ""

    async def __call__(self, directory: str) -> JDKRecord | None:
        return await self.probe(directory)

    async def probe(self, directory: str) -> JDKRecord | None:
        """Probe *directory*; return its record or None. Never raises."""
        try:
            return await self._probe(directory)
        except OSError as exc:
            logger.debug("Probe of %s failed: %s", directory, exc)
            return None
        except Exception:
            logger.warning("Unexpected error probing %s", directory, exc_info=True)
            return None

    async def _probe(self, directory: str) -> JDKRecord | None:
        bundle_home = os.path.join(directory, "Contents", "Home")
        if os.path.isdir(bundle_home):
            directory = bundle_home
        if not os.path.isdir(directory):
            return None
        directory = os.path.realpath(directory)

        if not self._has_libjvm(directory):
            logger.debug("No JVM library under %s", directory)
            return None

        executables = self._find_executables(directory)
        if executables is None:
            logger.debug("Missing required executables under %s", directory)
            return None

        details = await self._run_javac(executables["javac"])
        if details is None:
            logger.debug("javac under %s did not run", directory)
            return None

        output, architecture = details
        version, build = parse_javac_banner(output)
        return JDKRecord(
            path=directory,
            version=version,
            build=build,
            architecture=architecture,
            executables=executables,
        )

    def _has_libjvm(self, directory: str) -> bool:
        for rel in LIBJVM_LOCATIONS.get(self.platform, ()):
            if os.path.exists(os.path.normpath(os.path.join(directory, rel))):
                return True
        return False

    def _find_executables(self, directory: str) -> dict[str, str] | None:
        found: dict[str, str] = {}
        for name in REQUIRED_EXECUTABLES:
            candidate = os.path.join(directory, "bin", name + self._exe_suffix)
            if not os.path.isfile(candidate):
                return None
            found[name] = os.path.realpath(candidate)
        return found

    async def _run_javac(self, javac: str) -> tuple[str, str] | None:
        """Return ``(banner output, architecture)`` or None if javac fails."""
        code, output = await _run(javac, "-version", "-d64")
        if code == 0:
            return output, "64bit"
        code, output = await _run(javac, "-version")
        if code == 0:
            return output, "32bit"
        return None


async def _run(*cmd: str) -> tuple[int, str]:
    """Run a command, returning its exit code and combined output."""
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    output = stderr.decode(errors="replace") + stdout.decode(errors="replace")
    return proc.returncode if proc.returncode is not None else -1, output
