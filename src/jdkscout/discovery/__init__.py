"""Candidate directory discovery and path set normalization.

Public API::

    from jdkscout.discovery import normalize_paths, resolve_candidate_paths

    raw = await resolve_candidate_paths(DetectConfig(paths=["~/jdks"]))
    path_set = normalize_paths(raw)
    print(path_set.fingerprint, path_set.paths)
"""

from __future__ import annotations

from jdkscout.discovery.normalizer import (
    PathSet,
    coerce_path_list,
    compute_fingerprint,
    expand_path,
    is_within,
    normalize_paths,
)
from jdkscout.discovery.platform_paths import platform_candidates, resolve_candidate_paths
from jdkscout.discovery.registry import read_registry_java_homes

__all__ = [
    "PathSet",
    "coerce_path_list",
    "compute_fingerprint",
    "expand_path",
    "is_within",
    "normalize_paths",
    "platform_candidates",
    "read_registry_java_homes",
    "resolve_candidate_paths",
]
