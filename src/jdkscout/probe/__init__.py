"""Single-directory JDK probing.

Public API::

    from jdkscout.probe import JDKProber, JDKRecord

    record = await JDKProber().probe("/opt/jdk1.8.0_92")
"""

from __future__ import annotations

from jdkscout.probe.models import REQUIRED_EXECUTABLES, JDKRecord, RecordEvent
from jdkscout.probe.prober import JDKProber, ProbeFunc, parse_javac_banner

__all__ = [
    "JDKProber",
    "JDKRecord",
    "ProbeFunc",
    "REQUIRED_EXECUTABLES",
    "RecordEvent",
    "parse_javac_banner",
]
