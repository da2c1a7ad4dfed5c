"""Tests for default JDK selection."""

from __future__ import annotations

import os
from pathlib import Path

from jdkscout.core.defaults import search_path_dirs, select_default
from jdkscout.core.versions import sort_records
from jdkscout.probe.models import JDKRecord


def _rec(version: str, build: int, root: str = "/jdks") -> JDKRecord:
    home = f"{root}/{version}_{build}"
    return JDKRecord(
        path=home,
        version=version,
        build=build,
        architecture="64bit",
        executables={"javac": f"{home}/bin/javac"},
    )


def _three() -> list[JDKRecord]:
    return sort_records([_rec("1.6.0", 45), _rec("1.7.0", 80), _rec("1.8.0", 92)])


class TestSelectDefault:
    """Exactly one default, chosen by PATH then by highest version."""

    def test_javac_on_path_wins(self) -> None:
        """The record whose javac directory is on PATH is the default."""
        records = _three()
        chosen = select_default(records, {"/jdks/1.7.0_80/bin"})
        assert chosen is records[1]
        assert [r.is_default for r in records] == [False, True, False]

    def test_fallback_to_last(self) -> None:
        """Without a PATH match, the highest version is the default."""
        records = _three()
        chosen = select_default(records, {"/usr/bin"})
        assert chosen is records[-1]
        assert chosen.version == "1.8.0"

    def test_first_match_in_collection_order(self) -> None:
        """Several PATH matches pick the earliest in collection order."""
        records = _three()
        chosen = select_default(records, {"/jdks/1.8.0_92/bin", "/jdks/1.6.0_45/bin"})
        assert chosen is records[0]

    def test_previous_flags_cleared(self) -> None:
        """Selecting again leaves exactly one default."""
        records = _three()
        select_default(records, {"/jdks/1.6.0_45/bin"})
        select_default(records, set())
        assert sum(r.is_default for r in records) == 1
        assert records[-1].is_default

    def test_empty(self) -> None:
        assert select_default([], {"/usr/bin"}) is None


class TestSearchPathDirs:
    """PATH parsing for default selection."""

    def test_resolves_and_skips_empty(self, tmp_path: Path) -> None:
        """Empty entries are skipped and existing entries resolved."""
        real = tmp_path / "bin"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real)
        raw = os.pathsep.join(["", str(link), str(real)])
        assert search_path_dirs({"PATH": raw}) == frozenset({os.path.realpath(real)})

    def test_missing_path_var(self) -> None:
        assert search_path_dirs({}) == frozenset()
