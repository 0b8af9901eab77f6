"""
Poll-and-diff file system watcher.

Design:
    Roots        : Dict[str, DirectoryHandle]   (granted directories, by label)
    Handles      : Dict[str, FileHandle]        (replaced by every scan)
    Committed    : Dict[str, str]               (path -> content, last cycle or mutation)
    Known        : Set[str]                     (paths seen by the last cycle)
    Cache        : ContentCache                 (TTL-bounded, shared with mutations)
    Snapshot     : SnapshotPublisher            (raw committed + debounced view)

A cycle scans and reads without holding _lock, then commits under it. Mutations
hold _lock for their whole duration. A mutation that lands while a cycle is in
flight bumps a per-path sequence number; at commit the cycle defers to the
mutation for that path, so a stale read never overwrites a write.

clear() does not wait for an in-flight cycle. It bumps the epoch instead, and
a cycle whose epoch is stale at commit throws its result away.

Callbacks run under _lock on the thread that produced the change (the poll
worker for cycles, the caller for mutations). They may call back into the
watcher from that thread.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set, Union

from cache.content_cache import ContentCache
from filters import COMMON_FILTERS
from handles.fs_handles import DirectoryHandle, DirectoryPicker, FileHandle, PlatformCapabilities
from models.config import FilesCallback, WatcherConfig
from models.errors import (
    NotFoundError,
    PermissionDeclinedError,
    UnsupportedPlatformError,
    WriteFailureError,
)
from models.state import ChangeSet, SelectRootResult, WatchedRoot
from scanner.tree_scanner import ScanResult, scan_roots
from utils.paths import is_under, normalize_path, split_path
from watcher.change_detector import BatchReader, ReadResult, diff
from watcher.poll_scheduler import PollScheduler
from watcher.snapshot_publisher import SnapshotObserver, SnapshotPublisher

log = logging.getLogger(__name__)


class FileSystemWatcher:
    """
    Watches granted directories and keeps a debounced path -> content snapshot.

    Usage:
        watcher = FileSystemWatcher(WatcherConfig(on_files_changed=handler))
        watcher.select_root(StaticDirectoryPicker("~/project"))
        ...
        watcher.write_file("project/notes.txt", "hello")
        ...
        watcher.clear()
    """

    def __init__(
        self,
        config: Optional[WatcherConfig] = None,
        capabilities: Optional[PlatformCapabilities] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._config = config or WatcherConfig()
        self._capabilities = capabilities or PlatformCapabilities.detect()
        # Probed once; never re-checked mid-cycle
        self._supported = self._capabilities.is_supported
        self._filters = (
            list(self._config.filters) if self._config.filters is not None else list(COMMON_FILTERS)
        )

        self._lock = threading.RLock()
        self._cycle_lock = threading.Lock()
        self._roots: Dict[str, DirectoryHandle] = {}
        self._directories: Dict[str, DirectoryHandle] = {}
        self._handles: Dict[str, FileHandle] = {}
        self._files: Dict[str, str] = {}
        self._known: Set[str] = set()
        self._mutations: Dict[str, int] = {}
        self._mutation_seq = 0
        self._epoch = 0
        self._cycle_count = 0
        self._last_cycle_at: Optional[datetime] = None

        self._cache = ContentCache(self._config.file_cache_ttl, clock=clock or time.monotonic)
        self._reader = BatchReader(self._cache, self._config.batch_size)
        self._publisher = SnapshotPublisher(self._config.debounce_interval)
        self._scheduler = PollScheduler(self.run_cycle, self._config.poll_interval)

    # ------------------------------------------------------------------
    # Roots
    # ------------------------------------------------------------------

    def select_root(self, picker: Optional[DirectoryPicker] = None) -> SelectRootResult:
        """
        Run the picker flow and start watching the granted directory.

        Never raises: a declined, cancelled or unsupported selection comes back
        as a failed SelectRootResult and nothing is registered.
        """
        if not self._supported:
            log.warning("Cannot select a directory: directory access is not supported")
            return SelectRootResult.failure(
                UnsupportedPlatformError("Directory access is not supported on this platform")
            )

        picker = picker or self._capabilities.picker
        if picker is None:
            return SelectRootResult.failure(PermissionDeclinedError("No directory picker configured"))

        try:
            handle = picker()
        except PermissionDeclinedError as exc:
            log.warning("Directory selection declined: %s", exc)
            return SelectRootResult.failure(exc)
        except OSError as exc:
            log.warning("Directory selection failed: %s", exc)
            return SelectRootResult.failure(PermissionDeclinedError(str(exc)))

        if handle is None:
            log.info("Directory selection cancelled")
            return SelectRootResult.failure(PermissionDeclinedError("Directory selection cancelled"))

        return SelectRootResult.success(self.add_root(handle))

    def add_root(self, handle: DirectoryHandle) -> str:
        """Register an already-granted directory and start polling. Returns its label."""
        self._require_supported()
        label = handle.name
        with self._lock:
            if label in self._roots:
                log.warning("Replacing watched root with the same name: %s", label)
            self._roots[label] = handle
        log.info("Watching %s as '%s'", handle, label)
        self._scheduler.start()
        return label

    def clear(self) -> None:
        """
        Stop polling and drop every root, handle, cache entry and snapshot entry.

        Returns immediately; a cycle still in flight finishes in the background
        and its result is discarded.
        """
        self._scheduler.stop()
        with self._lock:
            self._epoch += 1
            self._roots.clear()
            self._directories.clear()
            self._handles.clear()
            self._files = {}
            self._known = set()
            self._mutations.clear()
            self._cache.clear()
            self._publisher.publish_now({})
        log.info("Watch state cleared")

    # ------------------------------------------------------------------
    # Poll cycle
    # ------------------------------------------------------------------

    def run_cycle(self) -> Optional[ChangeSet]:
        """
        Run one scan -> read -> diff -> publish cycle.

        Returns the ChangeSet, or None if another cycle was in flight, nothing
        is being watched, or clear() ran while this cycle was working.
        """
        if not self._cycle_lock.acquire(blocking=False):
            log.debug("Cycle already in flight")
            return None
        try:
            with self._lock:
                epoch = self._epoch
                start_seq = self._mutation_seq
                roots = dict(self._roots)
            if not roots:
                return None

            now = self._cache.now()
            scan = scan_roots(roots, self._filters)
            read = self._reader.read_all(scan.files, now)
            return self._commit(epoch, start_seq, scan, read)
        finally:
            self._cycle_lock.release()

    def _commit(
        self, epoch: int, start_seq: int, scan: ScanResult, read: ReadResult
    ) -> Optional[ChangeSet]:
        with self._lock:
            if epoch != self._epoch:
                log.debug("Discarding cycle result: watch state was cleared")
                return None

            handles = scan.files
            resolved = read.resolved
            failed = read.failed

            # Mutations made after this cycle started win over what it read
            for path, seq in self._mutations.items():
                if seq <= start_seq:
                    continue
                failed.discard(path)
                if path in self._files:
                    resolved[path] = self._files[path]
                    handles[path] = self._handles[path]
                    self._cache.put(path, self._files[path])
                else:
                    resolved.pop(path, None)
                    if path in self._handles:
                        handles[path] = self._handles[path]
                    else:
                        handles.pop(path, None)
            self._mutations.clear()

            changes = diff(self._files, self._known, resolved, failed)

            for path in failed:
                handles.pop(path, None)
            for path in changes.deleted:
                self._cache.discard(path)

            self._handles = handles
            self._directories = scan.directories
            self._files = resolved
            self._known = set(resolved)
            self._cycle_count += 1
            self._last_cycle_at = datetime.now()

            if changes.is_empty:
                return changes

            log.debug(
                "Cycle %d: %s (%d read, %d cached, %d failed)",
                self._cycle_count,
                changes.summary(),
                read.reads,
                read.cache_hits,
                len(failed),
            )
            self._fire(self._config.on_files_changed, changes.changed, changes.previous)
            self._fire(self._config.on_files_deleted, changes.deleted, changes.previous)
            self._fire(self._config.on_files_added, changes.added, changes.previous)
            self._publisher.update(self._files)
            return changes

    def _fire(
        self,
        callback: Optional[FilesCallback],
        delta: Dict[str, str],
        previous: Dict[str, str],
    ) -> None:
        if callback is None or not delta:
            return
        try:
            callback(dict(delta), dict(previous))
        except Exception:
            log.exception("File change callback failed")

    # ------------------------------------------------------------------
    # Mutations (write-through to disk)
    # ------------------------------------------------------------------

    def write_file(
        self,
        path: str,
        data: Union[str, bytes],
        *,
        create: bool = True,
        truncate: bool = False,
    ) -> str:
        """
        Write ``data`` to ``path`` and return the file's resulting content.

        The write is a transaction: it either commits completely or leaves the
        file untouched. ``truncate=False`` writes over the existing content from
        offset 0 and keeps whatever lies beyond the new data; ``truncate=True``
        replaces the file.

        A new file is only created on disk when the transaction commits.

        Raises:
            NotFoundError: no tracked handle and ``create`` is False, or the
                parent directory is not a watched root
            ValueError: the resulting content would not be valid UTF-8;
                nothing is written
            WriteFailureError: the transaction failed and was aborted
        """
        self._require_supported()
        path = normalize_path(path)
        with self._lock:
            handle = self._resolve_handle(path, create=create, touch=False)
            try:
                with handle.open_writable(keep_existing_data=not truncate) as writer:
                    writer.write(data)
                    # Same strict decoding the poll cycle uses
                    content = writer.staged().decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ValueError(f"Content for {path} is not valid UTF-8") from exc
            except OSError as exc:
                log.warning("Write to %s failed: %s", path, exc)
                raise WriteFailureError(f"Write to {path} failed: {exc}") from exc

            previous = dict(self._files)
            self._handles[path] = handle
            self._files[path] = content
            self._known.add(path)
            self._cache.put(path, content)
            self._mark_mutated(path)
            self._fire(self._config.on_files_changed, {path: content}, previous)
            self._publisher.publish_now(self._files)
        log.debug("Wrote %s (%d chars)", path, len(content))
        return content

    def create_file(self, path: str, initial_data: Optional[Union[str, bytes]] = None) -> str:
        """
        Create ``path`` (parent must be a watched root) and return its label.

        Without ``initial_data`` the empty file is tracked but not yet part of
        the snapshot; the next cycle reports it as added. With ``initial_data``
        this is a truncating write_file.
        """
        self._require_supported()
        path = normalize_path(path)
        with self._lock:
            if initial_data is not None:
                self.write_file(path, initial_data, create=True, truncate=True)
                return path
            handle = self._resolve_handle(path, create=True)
            self._handles[path] = handle
            self._mark_mutated(path)
        log.debug("Created %s", path)
        return path

    def delete_file(self, path: str) -> None:
        """
        Remove a tracked file and drop it from handles, cache and snapshot.

        Raises:
            NotFoundError: the path is not tracked
            WriteFailureError: the filesystem refused the removal
        """
        self._require_supported()
        path = normalize_path(path)
        with self._lock:
            if path not in self._handles:
                raise NotFoundError(f"No such file: {path}")
            parent, name = split_path(path)
            directory = self._directories.get(parent) or self._roots.get(parent)
            if directory is None:
                raise NotFoundError(f"Parent directory is not watched: {parent}")
            try:
                directory.remove_entry(name)
            except FileNotFoundError:
                log.debug("%s was already gone", path)
            except OSError as exc:
                raise WriteFailureError(f"Delete of {path} failed: {exc}") from exc

            previous = dict(self._files)
            last_content = self._files.pop(path, None)
            if last_content is None:
                last_content = self._cache.peek(path) or ""
            self._handles.pop(path, None)
            self._known.discard(path)
            self._cache.discard(path)
            self._mark_mutated(path)
            self._fire(self._config.on_files_deleted, {path: last_content}, previous)
            self._publisher.publish_now(self._files)
        log.debug("Deleted %s", path)

    def _resolve_handle(self, path: str, create: bool, touch: bool = True) -> FileHandle:
        """
        Return the tracked handle for ``path`` or create one under a watched root.

        With ``touch=False`` a missing file is not created yet; the caller's
        write transaction brings it into existence.
        """
        handle = self._handles.get(path)
        if handle is not None:
            return handle
        if not create:
            raise NotFoundError(f"No such file: {path}")
        parent, name = split_path(path)
        root = self._roots.get(parent)
        if root is None:
            raise NotFoundError(f"Parent directory is not watched: {parent or '(none)'}")
        try:
            if touch:
                return root.get_file_handle(name, create=True)
            return root.new_file_handle(name)
        except IsADirectoryError as exc:
            raise NotFoundError(f"{path} is a directory") from exc
        except OSError as exc:
            raise WriteFailureError(f"Cannot create {path}: {exc}") from exc

    def _mark_mutated(self, path: str) -> None:
        self._mutation_seq += 1
        self._mutations[path] = self._mutation_seq

    def _require_supported(self) -> None:
        if not self._supported:
            raise UnsupportedPlatformError("Directory access is not supported on this platform")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_file(self, path: str) -> str:
        """
        Return the content of a tracked file: committed content if any, else
        read through the handle (and cache it).
        """
        path = normalize_path(path)
        with self._lock:
            if path in self._files:
                return self._files[path]
            handle = self._handles.get(path)
        if handle is None:
            raise NotFoundError(f"No such file: {path}")
        content, hit = self._cache.get(path)
        if hit:
            return content
        try:
            content = handle.read_text()
        except (OSError, UnicodeDecodeError) as exc:
            raise NotFoundError(f"Cannot read {path}: {exc}") from exc
        self._cache.put(path, content)
        return content

    def list_files(self, prefix: Optional[str] = None) -> List[str]:
        """Return tracked paths, optionally restricted to those under ``prefix``."""
        with self._lock:
            paths = list(self._handles)
        if prefix:
            prefix = normalize_path(prefix)
            paths = [p for p in paths if is_under(p, prefix)]
        return sorted(paths)

    def subscribe(self, observer: SnapshotObserver) -> Callable[[], None]:
        """Observe every published (debounced) snapshot."""
        return self._publisher.subscribe(observer)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def files(self) -> Dict[str, str]:
        """The debounced snapshot."""
        return self._publisher.published

    @property
    def raw_files(self) -> Dict[str, str]:
        """The latest committed snapshot, ahead of the debounce."""
        return self._publisher.raw

    @property
    def handles(self) -> Dict[str, FileHandle]:
        with self._lock:
            return dict(self._handles)

    @property
    def handle_count(self) -> int:
        with self._lock:
            return len(self._handles)

    @property
    def roots(self) -> List[str]:
        with self._lock:
            return sorted(self._roots)

    @property
    def watched_roots(self) -> List[WatchedRoot]:
        with self._lock:
            return [WatchedRoot(label, handle) for label, handle in sorted(self._roots.items())]

    @property
    def is_processing(self) -> bool:
        return self._cycle_lock.locked()

    @property
    def is_supported(self) -> bool:
        return self._supported

    @property
    def cache(self) -> ContentCache:
        return self._cache

    @property
    def scheduler(self) -> PollScheduler:
        return self._scheduler

    def status(self) -> dict:
        with self._lock:
            return {
                "roots": sorted(self._roots),
                "files_tracked": len(self._files),
                "handle_count": len(self._handles),
                "cache_entries": len(self._cache),
                "cycles": self._cycle_count,
                "last_cycle_at": self._last_cycle_at.isoformat() if self._last_cycle_at else None,
                "is_running": self._scheduler.is_running,
                "is_processing": self.is_processing,
                "is_supported": self._supported,
                "poll_interval_ms": round(self._config.poll_interval * 1000),
                "batch_size": self._config.batch_size,
                "debounce_interval_ms": round(self._config.debounce_interval * 1000),
                "file_cache_ttl_ms": round(self._config.file_cache_ttl * 1000),
            }
