"""Shared test helpers for creating fake JDK installation directories.

Each helper creates a minimal but realistic JDK layout: a JVM shared
library at a platform-appropriate location and shell-script executables
under ``bin/``. The fake ``javac`` prints a ``javac <version>_<build>``
banner on stderr, like a real Java 8 compiler.
"""

from __future__ import annotations

import shutil
import stat
from pathlib import Path

from jdkscout.probe.prober import current_platform

_LIBJVM_BY_PLATFORM = {
    "linux": "jre/lib/amd64/server/libjvm.so",
    "darwin": "jre/lib/server/libjvm.dylib",
}

_TOOL_SCRIPT = "#!/bin/sh\nexit 0\n"

_JAVAC_64 = """#!/bin/sh
echo "javac {banner}" >&2
exit 0
"""

_JAVAC_32 = """#!/bin/sh
for arg in "$@"; do
  if [ "$arg" = "-d64" ]; then
    echo "javac: invalid flag: -d64" >&2
    exit 2
  fi
done
echo "javac {banner}" >&2
exit 0
"""

_JAVAC_BROKEN = """#!/bin/sh
echo "Segmentation fault" >&2
exit 1
"""


def _write_executable(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def libjvm_location() -> str:
    """Relative libjvm location recognized on the test host."""
    return _LIBJVM_BY_PLATFORM.get(current_platform(), "jre/lib/amd64/server/libjvm.so")


def create_jdk(
    root: Path,
    version: str = "1.8.0",
    build: int | str = 92,
    arch: str = "64bit",
) -> Path:
    """Create a fake JDK at *root* and return it."""
    root.mkdir(parents=True, exist_ok=True)
    lib = root / libjvm_location()
    lib.parent.mkdir(parents=True, exist_ok=True)
    lib.write_bytes(b"\x7fELF")
    banner = f"{version}_{build}"
    template = _JAVAC_32 if arch == "32bit" else _JAVAC_64
    _write_executable(root / "bin" / "javac", template.format(banner=banner))
    for tool in ("java", "keytool", "jarsigner"):
        _write_executable(root / "bin" / tool, _TOOL_SCRIPT)
    return root


def create_jdk_with_banner(root: Path, banner: str) -> Path:
    """Create a fake 64-bit JDK whose javac prints *banner* verbatim."""
    create_jdk(root)
    _write_executable(
        root / "bin" / "javac",
        f'#!/bin/sh\necho "{banner}" >&2\nexit 0\n',
    )
    return root


def create_incomplete_jdk(root: Path) -> Path:
    """Create a JDK missing ``keytool`` and ``jarsigner``."""
    create_jdk(root)
    (root / "bin" / "keytool").unlink()
    (root / "bin" / "jarsigner").unlink()
    return root


def create_bad_bin_jdk(root: Path) -> Path:
    """Create a JDK whose ``javac`` always fails."""
    create_jdk(root)
    _write_executable(root / "bin" / "javac", _JAVAC_BROKEN)
    return root


def create_jdk_without_libjvm(root: Path) -> Path:
    """Create a JDK layout with executables but no JVM library."""
    create_jdk(root)
    shutil.rmtree(root / "jre")
    return root


def create_mock_jdk_tree(root: Path) -> Path:
    """Create a parent directory holding four JDKs.

    Layout::

        root/jdk-1.6        1.6.0_45  64bit
        root/jdk-1.7        1.7.0_80  64bit
        root/jdk-1.8        1.8.0_92  64bit
        root/jdk-1.8-32bit  1.8.0_92  32bit
    """
    create_jdk(root / "jdk-1.6", "1.6.0", 45)
    create_jdk(root / "jdk-1.7", "1.7.0", 80)
    create_jdk(root / "jdk-1.8", "1.8.0", 92)
    create_jdk(root / "jdk-1.8-32bit", "1.8.0", 92, arch="32bit")
    return root


def labels(records: object) -> list[str]:
    """Return ``version_build`` labels in collection order."""
    return [f"{r.version}_{r.build}" for r in records]  # type: ignore[attr-defined]
