"""
TTL-bounded file content cache.

Amortizes reads across poll cycles: a path read within the last ``ttl``
seconds is served from memory. Mutations write through so a write is visible
to the next cycle without a re-read.

All methods take the lock; the batched reader calls get/put from worker threads.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from models.state import ContentCacheEntry

log = logging.getLogger(__name__)


class ContentCache:
    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, ContentCacheEntry] = {}

    @property
    def ttl(self) -> float:
        return self._ttl

    def now(self) -> float:
        return self._clock()

    def get(self, path: str, now: Optional[float] = None) -> Tuple[Optional[str], bool]:
        """Return ``(content, True)`` for a fresh entry, ``(None, False)`` otherwise."""
        now = self._clock() if now is None else now
        with self._lock:
            entry = self._entries.get(path)
            if entry is not None and entry.is_fresh(now, self._ttl):
                return entry.content, True
        return None, False

    def put(self, path: str, content: str, now: Optional[float] = None) -> None:
        now = self._clock() if now is None else now
        with self._lock:
            self._entries[path] = ContentCacheEntry(content=content, captured_at=now)

    def discard(self, path: str) -> None:
        with self._lock:
            self._entries.pop(path, None)

    def evict_expired(self, now: Optional[float] = None) -> int:
        """Drop entries older than the TTL, touched or not. Returns the count dropped."""
        now = self._clock() if now is None else now
        with self._lock:
            expired = [
                path
                for path, entry in self._entries.items()
                if now - entry.captured_at > self._ttl
            ]
            for path in expired:
                del self._entries[path]
        if expired:
            log.debug("Evicted %d expired cache entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def peek(self, path: str) -> Optional[str]:
        """Return cached content regardless of age, without counting as a read."""
        with self._lock:
            entry = self._entries.get(path)
            return entry.content if entry else None

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return path in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
