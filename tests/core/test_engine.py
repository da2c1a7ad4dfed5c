"""Tests for JDKDetector.detect caching, validation and determinism.

A fake probe maps directories to records so the detector's behaviour
can be checked without running any executable. Each test builds a fresh
detector and runs it under its own event loop.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import pytest

from jdkscout.config import DetectConfig, DetectorSettings
from jdkscout.core.collection import ResultCollection
from jdkscout.core.engine import JDKDetector, coerce_config
from jdkscout.exceptions import InvalidInputError
from jdkscout.probe.models import JDKRecord


class FakeProbe:
    """Returns a record for every directory registered with ``add``."""

    def __init__(self) -> None:
        self.records: dict[str, JDKRecord] = {}
        self.calls = 0

    def add(self, directory: Path, version: str, build: int, arch: str = "64bit") -> str:
        directory.mkdir(parents=True, exist_ok=True)
        real = os.path.realpath(directory)
        self.records[real] = JDKRecord(
            path=real,
            version=version,
            build=build,
            architecture=arch,
            executables={"javac": os.path.join(real, "bin", "javac")},
        )
        return real

    async def __call__(self, directory: str) -> JDKRecord | None:
        self.calls += 1
        return self.records.get(directory)


def _detector(probe: FakeProbe, path_env: str = "") -> JDKDetector:
    return JDKDetector(
        probe,
        settings=DetectorSettings(scan_subdirectories=False),
        environ={"PATH": path_env},
    )


@pytest.fixture
def three_jdks(tmp_path: Path) -> tuple[FakeProbe, list[str]]:
    probe = FakeProbe()
    dirs = [
        probe.add(tmp_path / "jdk8", "1.8.0", 92),
        probe.add(tmp_path / "jdk6", "1.6.0", 45),
        probe.add(tmp_path / "jdk7", "1.7.0", 80),
    ]
    return probe, dirs


# ---------------------------------------------------------------------------
# Basic detection
# ---------------------------------------------------------------------------


class TestDetect:
    """Results, ordering and default selection."""

    def test_sorted_results(self, three_jdks: tuple[FakeProbe, list[str]]) -> None:
        probe, dirs = three_jdks
        records = asyncio.run(
            _detector(probe).detect(paths=dirs, ignore_platform_paths=True),
        )
        assert [r.label for r in records] == ["1.6.0_45", "1.7.0_80", "1.8.0_92"]
        assert [r.is_default for r in records] == [False, False, True]

    def test_default_from_path(self, three_jdks: tuple[FakeProbe, list[str]]) -> None:
        """The JDK whose javac directory is on PATH is the default."""
        probe, dirs = three_jdks
        jdk7_bin = os.path.join(dirs[2], "bin")
        os.makedirs(jdk7_bin)
        detector = _detector(probe, path_env=jdk7_bin)
        records = asyncio.run(detector.detect(paths=dirs, ignore_platform_paths=True))
        assert [r.label for r in records if r.is_default] == ["1.7.0_80"]

    def test_nothing_found_is_empty(self, tmp_path: Path) -> None:
        probe = FakeProbe()
        records = asyncio.run(
            _detector(probe).detect(paths=[str(tmp_path)], ignore_platform_paths=True),
        )
        assert records == []

    def test_deterministic(self, three_jdks: tuple[FakeProbe, list[str]]) -> None:
        """Input order does not affect output."""
        probe, dirs = three_jdks
        forward = asyncio.run(_detector(probe).detect(paths=dirs, ignore_platform_paths=True))
        backward = asyncio.run(
            _detector(probe).detect(paths=list(reversed(dirs)), ignore_platform_paths=True),
        )
        assert forward == backward

    def test_java_home_candidate(self, tmp_path: Path) -> None:
        """An explicit java_home is probed."""
        probe = FakeProbe()
        home = probe.add(tmp_path / "home-jdk", "1.8.0", 92)
        records = asyncio.run(
            _detector(probe).detect(java_home=home, ignore_platform_paths=True),
        )
        assert [r.path for r in records] == [home]

    def test_accepts_option_mapping(self, three_jdks: tuple[FakeProbe, list[str]]) -> None:
        probe, dirs = three_jdks
        records = asyncio.run(
            _detector(probe).detect({"jdkPaths": dirs, "ignorePlatformPaths": True}),
        )
        assert len(records) == 3


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------


class TestCaching:
    """Cache hits, forced rescans and reset."""

    def test_second_call_uses_cache(self, three_jdks: tuple[FakeProbe, list[str]]) -> None:
        probe, dirs = three_jdks
        detector = _detector(probe)

        async def scenario() -> None:
            await detector.detect(paths=dirs, ignore_platform_paths=True)
            calls = probe.calls
            await detector.detect(paths=dirs, ignore_platform_paths=True)
            assert probe.calls == calls

        asyncio.run(scenario())

    def test_observable_returns_same_object(self, three_jdks: tuple[FakeProbe, list[str]]) -> None:
        probe, dirs = three_jdks
        detector = _detector(probe)

        async def scenario() -> tuple[object, object]:
            first = await detector.detect(paths=dirs, ignore_platform_paths=True, observable=True)
            second = await detector.detect(
                paths=list(reversed(dirs)), ignore_platform_paths=True, observable=True,
            )
            return first, second

        first, second = asyncio.run(scenario())
        assert isinstance(first, ResultCollection)
        assert first is second

    def test_snapshot_is_detached(self, three_jdks: tuple[FakeProbe, list[str]]) -> None:
        """Plain detect returns copies, not the cached records."""
        probe, dirs = three_jdks
        detector = _detector(probe)

        async def scenario() -> tuple[list, ResultCollection]:
            snap = await detector.detect(paths=dirs, ignore_platform_paths=True)
            live = await detector.detect(paths=dirs, ignore_platform_paths=True, observable=True)
            return snap, live

        snap, live = asyncio.run(scenario())
        assert isinstance(snap, list)
        assert snap == list(live)
        assert all(a is not b for a, b in zip(snap, live))

    def test_different_path_sets_different_entries(self, three_jdks: tuple[FakeProbe, list[str]]) -> None:
        probe, dirs = three_jdks
        detector = _detector(probe)

        async def scenario() -> tuple[object, object]:
            a = await detector.detect(paths=dirs[:1], ignore_platform_paths=True, observable=True)
            b = await detector.detect(paths=dirs, ignore_platform_paths=True, observable=True)
            return a, b

        a, b = asyncio.run(scenario())
        assert a is not b
        assert len(detector.cache) == 2

    def test_force_rescans_in_place(self, tmp_path: Path) -> None:
        """A forced rescan updates the same collection and keeps identities."""
        probe = FakeProbe()
        jdk8 = probe.add(tmp_path / "jdk8", "1.8.0", 92)
        jdk7_dir = tmp_path / "jdk7"
        jdk7_dir.mkdir()
        paths = [jdk8, str(jdk7_dir)]
        detector = _detector(probe)

        async def scenario() -> None:
            live = await detector.detect(paths=paths, ignore_platform_paths=True, observable=True)
            assert [r.label for r in live] == ["1.8.0_92"]
            events = []
            live[0].subscribe(events.append)

            probe.add(jdk7_dir, "1.7.0", 80)
            cached = await detector.detect(paths=paths, ignore_platform_paths=True)
            assert [r.label for r in cached] == ["1.8.0_92"]

            forced = await detector.detect(
                paths=paths, ignore_platform_paths=True, observable=True, force=True,
            )
            assert forced is live
            assert [r.label for r in live] == ["1.7.0_80", "1.8.0_92"]
            assert live.find("1.8.0", 92).subscriber_count == 1

        asyncio.run(scenario())

    def test_reset_cache(self, three_jdks: tuple[FakeProbe, list[str]]) -> None:
        probe, dirs = three_jdks
        detector = _detector(probe)

        async def scenario() -> None:
            first = await detector.detect(paths=dirs, ignore_platform_paths=True, observable=True)
            detector.reset_cache()
            second = await detector.detect(paths=dirs, ignore_platform_paths=True, observable=True)
            assert first is not second

        asyncio.run(scenario())

    def test_concurrent_detects_probe_once(self, three_jdks: tuple[FakeProbe, list[str]]) -> None:
        """Simultaneous requests for one path set share a single scan."""
        probe, dirs = three_jdks
        detector = _detector(probe)

        async def scenario() -> None:
            await asyncio.gather(*(
                detector.detect(paths=dirs, ignore_platform_paths=True) for _ in range(5)
            ))

        asyncio.run(scenario())
        assert probe.calls == 3


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    """Malformed input fails before any probe runs."""

    def test_non_string_path(self) -> None:
        probe = FakeProbe()
        with pytest.raises(InvalidInputError, match="Expected paths to be a list of strings"):
            asyncio.run(_detector(probe).detect(paths=[123]))
        assert probe.calls == 0

    def test_non_list_paths(self) -> None:
        probe = FakeProbe()
        with pytest.raises(InvalidInputError):
            asyncio.run(_detector(probe).detect(paths=42))
        assert probe.calls == 0


class TestCoerceConfig:

    def test_config_with_overrides(self) -> None:
        """Keyword overrides are applied on top of a DetectConfig."""
        config = coerce_config(DetectConfig(paths=["/a"]), {"force": True})
        assert config.paths == ["/a"]
        assert config.force is True

    def test_config_returned_unchanged(self) -> None:
        config = DetectConfig()
        assert coerce_config(config, {}) is config


# ---------------------------------------------------------------------------
# Java home
# ---------------------------------------------------------------------------


class TestJavaHome:
    """The resolved Java home is reported alongside the results."""

    def test_reported_on_collection(self, tmp_path: Path) -> None:
        probe = FakeProbe()
        home = probe.add(tmp_path / "home-jdk", "1.8.0", 92)
        live = asyncio.run(
            _detector(probe).detect(java_home=home, ignore_platform_paths=True, observable=True),
        )
        assert live.java_home == home

    def test_falls_back_to_environment(self, tmp_path: Path) -> None:
        """JAVA_HOME is used when no java_home is configured."""
        probe = FakeProbe()
        home = probe.add(tmp_path / "env-jdk", "1.7.0", 80)
        detector = JDKDetector(
            probe,
            settings=DetectorSettings(scan_subdirectories=False),
            environ={"PATH": "", "JAVA_HOME": home},
        )
        assert detector.java_home() == home
        live = asyncio.run(detector.detect(ignore_platform_paths=True, observable=True))
        assert live.java_home == home
        assert [r.path for r in live] == [home]

    def test_symlinked_home_resolved(self, tmp_path: Path) -> None:
        probe = FakeProbe()
        home = probe.add(tmp_path / "real-jdk", "1.8.0", 92)
        link = tmp_path / "current"
        try:
            link.symlink_to(home, target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks unavailable")
        assert _detector(probe).java_home(java_home=str(link)) == home

    def test_missing_home_is_none(self, tmp_path: Path) -> None:
        """A Java home that does not exist is reported as None."""
        probe = FakeProbe()
        missing = str(tmp_path / "gone")
        assert _detector(probe).java_home(java_home=missing) is None
        live = asyncio.run(
            _detector(probe).detect(java_home=missing, ignore_platform_paths=True, observable=True),
        )
        assert live.java_home is None
        assert len(live) == 0

    def test_unset_is_none(self) -> None:
        assert _detector(FakeProbe()).java_home() is None
