"""Shared fixtures for jdkscout tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.probe.helpers import create_mock_jdk_tree


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Hide the host's JAVA_HOME and PATH so only mock JDKs are found.

    Returns the environment mapping to hand to ``JDKDetector(environ=...)``.
    """
    monkeypatch.delenv("JAVA_HOME", raising=False)
    monkeypatch.setenv("PATH", "")
    return {"PATH": ""}


@pytest.fixture
def jdk_parent(tmp_path: Path) -> Path:
    """Create a directory simulating a parent of several JDK installs."""
    return create_mock_jdk_tree(tmp_path / "mocks")
