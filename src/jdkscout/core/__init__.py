"""Detection caching and live-update engine.

Submodules
----------
- ``versions``: Segment-wise version comparison and record ordering.
- ``defaults``: Search-path based default JDK selection.
- ``collection``: The observable ``ResultCollection`` and its merge.
- ``cache``: Fingerprint -> collection store.
- ``scanner``: Concurrent, per-directory deduplicated probing.
- ``engine``: The ``JDKDetector`` service tying it all together.

All public names are re-exported here::

    from jdkscout.core import JDKDetector, ResultCollection
"""

from jdkscout.core.cache import DetectionCache
from jdkscout.core.collection import ChangeEvent, ResultCollection
from jdkscout.core.defaults import search_path_dirs, select_default
from jdkscout.core.engine import JDKDetector
from jdkscout.core.scanner import ScanOrchestrator
from jdkscout.core.versions import compare_versions, record_sort_key, sort_records, version_key

__all__ = [
    "ChangeEvent",
    "DetectionCache",
    "JDKDetector",
    "ResultCollection",
    "ScanOrchestrator",
    "compare_versions",
    "record_sort_key",
    "search_path_dirs",
    "select_default",
    "sort_records",
    "version_key",
]
