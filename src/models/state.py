"""
Watcher state models.

Paths are POSIX-style labels whose first segment is the watched root's name,
e.g. ``project/src/main.py``. They are not filesystem paths.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:
    from handles.fs_handles import DirectoryHandle


@dataclass
class WatchedRoot:
    """A directory the watcher has been granted and is polling."""

    label: str
    handle: DirectoryHandle


@dataclass
class ContentCacheEntry:
    """Cached file content and the time it was captured."""

    content: str
    captured_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.captured_at < ttl


@dataclass
class ChangeSet:
    """
    Result of diffing one cycle against the previous one.

    ``added``, ``changed`` and ``deleted`` map path -> content (new content for
    added/changed, last committed content for deleted). ``previous`` holds the
    committed content of every path known before the cycle.
    """

    added: Dict[str, str] = field(default_factory=dict)
    changed: Dict[str, str] = field(default_factory=dict)
    deleted: Dict[str, str] = field(default_factory=dict)
    previous: Dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.changed or self.deleted)

    def summary(self) -> str:
        return f"+{len(self.added)} ~{len(self.changed)} -{len(self.deleted)}"


@dataclass
class SelectRootResult:
    """Outcome of a root selection. Never raised; the caller decides what to surface."""

    ok: bool
    label: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def success(cls, label: str) -> SelectRootResult:
        return cls(ok=True, label=label)

    @classmethod
    def failure(cls, exc: Exception) -> SelectRootResult:
        return cls(ok=False, error=str(exc) or type(exc).__name__, error_kind=type(exc).__name__)
