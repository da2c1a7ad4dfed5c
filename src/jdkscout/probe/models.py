"""Data models for the probe module.

Contains ``JDKRecord``, the description of a single detected JDK
installation, plus the record-level event payload delivered to record
subscribers when a rescan changes or removes the installation they are
bound to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

# Logical tool names every valid JDK must provide.
REQUIRED_EXECUTABLES: tuple[str, ...] = ("java", "javac", "keytool", "jarsigner")

ARCHITECTURES: tuple[str, ...] = ("32bit", "64bit")


@dataclass(frozen=True)
class RecordEvent:
    """Notification delivered to subscribers bound to one installation.

    Attributes:
        kind: ``"changed"`` when a rescan produced different values for the
            installation, ``"removed"`` when it disappeared.
        record: The live record after the rescan (``"changed"``) or the last
            known record (``"removed"``).
        previous: The record instance that was replaced.
    """

    kind: str
    record: JDKRecord
    previous: JDKRecord


RecordHandler = Callable[[RecordEvent], Any]


@dataclass
class JDKRecord:
    """A single detected JDK installation.

    Attributes:
        path: Absolute, symlink-resolved installation directory.
        version: Dotted version string (e.g. ``"1.8.0"``), or None when the
            ``javac`` banner could not be parsed.
        build: Integer build number, or None.
        architecture: ``"32bit"`` or ``"64bit"``, or None.
        executables: Tool name -> resolved absolute path for ``java``,
            ``javac``, ``keytool`` and ``jarsigner``.
        is_default: True for the single default installation of a collection.
    """

    path: str
    version: str | None = None
    build: int | None = None
    architecture: str | None = None
    executables: dict[str, str] = field(default_factory=dict)
    is_default: bool = False
    _subscribers: list[RecordHandler] = field(
        default_factory=list, init=False, repr=False, compare=False,
    )

    @property
    def identity(self) -> tuple[str | None, int | None]:
        """Key used to match the same installation across rescans."""
        return (self.version, self.build)

    @property
    def key(self) -> tuple[str | None, int | None, str | None]:
        """Uniqueness key within a collection."""
        return (self.version, self.build, self.architecture)

    @property
    def label(self) -> str:
        """Human-readable ``version_build`` label."""
        return f"{self.version}_{self.build}"

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, handler: RecordHandler) -> Callable[[], None]:
        """Bind *handler* to this installation.

        The binding follows the installation across rescans: when a rescan
        replaces this record with a new instance sharing the same
        ``identity``, the handler moves to the new instance.

        Returns:
            A callable that removes the binding.
        """
        subscribers = self._subscribers
        subscribers.append(handler)

        def unsubscribe() -> None:
            if handler in subscribers:
                subscribers.remove(handler)

        return unsubscribe

    def transfer_subscribers(self, target: JDKRecord) -> None:
        """Move every subscriber binding from this record onto *target*.

        The list object itself moves, so unsubscribe callables handed out
        by this record keep working against the new instance.
        """
        if target is self:
            return
        self._subscribers.extend(
            h for h in target._subscribers if h not in self._subscribers
        )
        target._subscribers = self._subscribers
        self._subscribers = []

    def notify(self, event: RecordEvent) -> None:
        for handler in list(self._subscribers):
            try:
                handler(event)
            except Exception:
                logger.warning("Record subscriber for %s failed", self.label, exc_info=True)

    def snapshot(self) -> JDKRecord:
        """Return a detached copy carrying no subscriber bindings."""
        return JDKRecord(
            path=self.path,
            version=self.version,
            build=self.build,
            architecture=self.architecture,
            executables=dict(self.executables),
            is_default=self.is_default,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "path": self.path,
            "version": self.version,
            "build": self.build,
            "architecture": self.architecture,
            "executables": dict(sorted(self.executables.items())),
            "default": self.is_default,
        }
