"""
Batched content reader and cycle diff.

Reading: paths are resolved in fixed-size batches. Reads inside a batch run
concurrently on a thread pool no wider than the batch; the next batch starts
only when the previous one is done, which bounds open files. A cache hit
within the TTL skips the read. A read that fails (file vanished or became
unreadable after the scan) marks the path failed and drops it from the cache;
the rest of the batch carries on.

Diffing: each path lands in at most one of added / changed / deleted.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from cache.content_cache import ContentCache
from handles.fs_handles import FileHandle
from models.state import ChangeSet

log = logging.getLogger(__name__)


@dataclass
class ReadResult:
    resolved: Dict[str, str] = field(default_factory=dict)
    failed: Set[str] = field(default_factory=set)
    cache_hits: int = 0
    reads: int = 0


class BatchReader:
    def __init__(self, cache: ContentCache, batch_size: int) -> None:
        self._cache = cache
        self._batch_size = batch_size

    def _resolve(self, item: Tuple[str, FileHandle], now: float) -> Tuple[Optional[str], bool]:
        """Return ``(content, from_cache)``; content is None when the read failed."""
        path, handle = item
        content, hit = self._cache.get(path, now)
        if hit:
            return content, True
        try:
            text = handle.read_text()
        except (OSError, UnicodeDecodeError) as exc:
            log.debug("Read failed for %s: %s", path, exc)
            self._cache.discard(path)
            return None, False
        self._cache.put(path, text, now)
        return text, False

    def read_all(self, handles: Mapping[str, FileHandle], now: float) -> ReadResult:
        result = ReadResult()
        items: List[Tuple[str, FileHandle]] = list(handles.items())
        if items:
            workers = min(self._batch_size, len(items))
            resolve = partial(self._resolve, now=now)
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fs-read") as pool:
                for start in range(0, len(items), self._batch_size):
                    batch = items[start:start + self._batch_size]
                    outcomes = list(pool.map(resolve, batch))
                    for (path, _), (content, from_cache) in zip(batch, outcomes):
                        if content is None:
                            result.failed.add(path)
                            continue
                        result.resolved[path] = content
                        if from_cache:
                            result.cache_hits += 1
                        else:
                            result.reads += 1
        self._cache.evict_expired(now)
        return result


def diff(
    previous_files: Mapping[str, str],
    previous_paths: Iterable[str],
    resolved: Mapping[str, str],
    failed: Iterable[str] = (),
) -> ChangeSet:
    """
    Classify this cycle's content against the previous committed cycle.

    added   -- resolved now, not seen by the previous cycle
    changed -- seen before and resolved now with different content
    deleted -- seen before (or failed to read now) and not resolved now;
               valued with the last committed content. A failed path the
               previous cycle never committed has no content to report and is
               left out.
    """
    previous_paths = set(previous_paths)
    changes = ChangeSet(
        previous={path: previous_files[path] for path in previous_paths if path in previous_files}
    )

    for path, content in resolved.items():
        if path not in previous_paths:
            changes.added[path] = content
        elif content != previous_files.get(path):
            changes.changed[path] = content

    for path in previous_paths.union(failed):
        if path in resolved:
            continue
        if path in previous_files:
            changes.deleted[path] = previous_files[path]

    return changes
