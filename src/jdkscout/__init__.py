"""jdkscout: Detect installed JDKs and keep the results current."""

from __future__ import annotations

from jdkscout.config import DetectConfig, DetectorSettings
from jdkscout.core import ChangeEvent, JDKDetector, ResultCollection
from jdkscout.exceptions import InvalidInputError, JdkScoutError, WatchError
from jdkscout.probe import JDKProber, JDKRecord, RecordEvent
from jdkscout.watch import WatchHandle

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "ChangeEvent",
    "DetectConfig",
    "DetectorSettings",
    "InvalidInputError",
    "JDKDetector",
    "JDKProber",
    "JDKRecord",
    "JdkScoutError",
    "RecordEvent",
    "ResultCollection",
    "WatchError",
    "WatchHandle",
    "__version__",
]
