"""
Watcher configuration.

Intervals are stored in seconds. The environment uses milliseconds, matching
the units users see in logs and the REST status payload.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, List, Mapping, Optional

if TYPE_CHECKING:
    from filters.base import FilterFactory

FilesCallback = Callable[[Dict[str, str], Dict[str, str]], None]

DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_BATCH_SIZE = 50
DEFAULT_DEBOUNCE_INTERVAL = 0.05
DEFAULT_FILE_CACHE_TTL = 5.0
DEFAULT_FILTER_NAMES = "dist,misc,git"


def _env_ms(env: Mapping[str, str], name: str, default_seconds: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default_seconds
    value = float(raw)
    if value < 0:
        raise ValueError(f"{name} must not be negative: {raw}")
    return value / 1000.0


def _split_names(raw: str) -> List[str]:
    """Parse a comma-separated list, dropping blanks."""
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class WatcherConfig:
    """
    Construction options for FileSystemWatcher.

    ``filters`` is None for the default set (COMMON_FILTERS). Callbacks receive
    ``(delta, previous)`` path -> content mappings.
    """

    filters: Optional[List["FilterFactory"]] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    batch_size: int = DEFAULT_BATCH_SIZE
    debounce_interval: float = DEFAULT_DEBOUNCE_INTERVAL
    file_cache_ttl: float = DEFAULT_FILE_CACHE_TTL
    on_files_added: Optional[FilesCallback] = None
    on_files_changed: Optional[FilesCallback] = None
    on_files_deleted: Optional[FilesCallback] = None
    roots: List[Path] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.debounce_interval < 0 or self.file_cache_ttl < 0:
            raise ValueError("debounce_interval and file_cache_ttl must not be negative")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> WatcherConfig:
        """
        Build a config from environment variables:

            WATCH_ROOTS           os.pathsep-separated directories to watch
            WATCH_FILTERS         comma-separated filter names (default dist,misc,git)
            POLL_INTERVAL_MS      default 100
            BATCH_SIZE            default 50
            DEBOUNCE_INTERVAL_MS  default 50
            FILE_CACHE_TTL_MS     default 5000
        """
        from filters import resolve_filters

        env = os.environ if env is None else env
        roots_raw = env.get("WATCH_ROOTS", "")
        return cls(
            filters=resolve_filters(_split_names(env.get("WATCH_FILTERS", DEFAULT_FILTER_NAMES))),
            poll_interval=_env_ms(env, "POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL),
            batch_size=int(env.get("BATCH_SIZE", "").strip() or DEFAULT_BATCH_SIZE),
            debounce_interval=_env_ms(env, "DEBOUNCE_INTERVAL_MS", DEFAULT_DEBOUNCE_INTERVAL),
            file_cache_ttl=_env_ms(env, "FILE_CACHE_TTL_MS", DEFAULT_FILE_CACHE_TTL),
            roots=[Path(p) for p in roots_raw.split(os.pathsep) if p.strip()],
        )
