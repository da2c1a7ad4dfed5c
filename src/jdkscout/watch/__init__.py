"""Live JDK detection driven by filesystem notifications.

Public API::

    from jdkscout.watch import WatchHandle

    handle = detector.watch(DetectConfig(paths=["/opt/jdks"]))
    handle.on("results", print).on("error", print)
"""

from __future__ import annotations

from jdkscout.watch.coordinator import WatchHandle
from jdkscout.watch.polling import RegistryPoller

__all__ = [
    "RegistryPoller",
    "WatchHandle",
]
