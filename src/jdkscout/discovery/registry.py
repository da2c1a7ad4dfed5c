"""Windows registry lookup of installed JDK homes.

Reads ``JavaHome`` of the ``CurrentVersion`` entry under the JavaSoft
"Java Development Kit" key, for both the native and the 32-bit
(``Wow6432Node``) views. Any registry failure means "no paths from this
source". Returns nothing on other platforms.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

logger = logging.getLogger(__name__)

REGISTRY_KEYS: tuple[str, ...] = (
    "Software\\JavaSoft\\Java Development Kit",
    "Software\\Wow6432Node\\JavaSoft\\Java Development Kit",
)


def read_registry_java_homes() -> list[str]:
    """Return the JDK homes registered in ``HKEY_LOCAL_MACHINE``."""
    if sys.platform != "win32":
        return []
    import winreg

    homes: list[str] = []
    for key in REGISTRY_KEYS:
        home = _read_current_java_home(winreg, key)
        if home and home not in homes:
            homes.append(home)
    return homes


def _read_current_java_home(winreg: Any, key: str) -> str | None:
    try:
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, key) as root:
            current, _ = winreg.QueryValueEx(root, "CurrentVersion")
        if not current:
            return None
        with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, f"{key}\\{current}") as sub:
            home, _ = winreg.QueryValueEx(sub, "JavaHome")
    except OSError as exc:
        logger.debug("Registry key %s unavailable: %s", key, exc)
        return None
    return home or None
