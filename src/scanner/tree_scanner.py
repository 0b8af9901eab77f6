"""
Watched-tree scanner.

Walks every watched root depth-first and returns the files that survive the
filter pipeline, keyed by path label (``<root>/<sub>/<name>``).

Per directory:
  - a path already in the exclusion set is skipped without asking the filters
  - a directory the pipeline rejects is pruned; nothing beneath it is visited
  - files are judged before subdirectories, so rules a filter loads while
    processing a directory apply to its children

The exclusion set belongs to one scan. The tree may change between cycles, so
nothing is carried over.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Set

from filters.base import FilterFactory, FilterPipeline
from handles.fs_handles import DirectoryHandle, FileHandle

log = logging.getLogger(__name__)


@dataclass
class ScanResult:
    files: Dict[str, FileHandle] = field(default_factory=dict)
    directories: Dict[str, DirectoryHandle] = field(default_factory=dict)
    excluded: Set[str] = field(default_factory=set)


class TreeScanner:
    """One-shot scanner; build a new one per scan."""

    def __init__(self, pipeline: FilterPipeline) -> None:
        self._pipeline = pipeline
        self._result = ScanResult()

    def scan(self, roots: Mapping[str, DirectoryHandle]) -> ScanResult:
        for label, handle in roots.items():
            self._walk(label, handle)
        result = self._result
        for path in result.excluded.intersection(result.files):
            del result.files[path]
        return result

    def _walk(self, dir_path: str, handle: DirectoryHandle) -> None:
        result = self._result
        if dir_path in result.excluded:
            return
        if not self._pipeline.should_process_directory(dir_path, handle):
            log.debug("Pruned directory %s", dir_path)
            result.excluded.add(dir_path)
            return
        result.directories[dir_path] = handle

        try:
            entries = sorted(handle.entries(), key=lambda e: e.name)
        except OSError:
            # Directory vanished or became unreadable since its parent was listed
            log.debug("Cannot enumerate %s", dir_path, exc_info=True)
            return

        for entry in entries:
            if entry.kind != "file":
                continue
            path = f"{dir_path}/{entry.name}"
            if path in result.excluded:
                continue
            if self._pipeline.should_include_file(path, entry):
                result.files[path] = entry
            else:
                result.files.pop(path, None)
                result.excluded.add(path)

        for entry in entries:
            if entry.kind == "directory":
                self._walk(f"{dir_path}/{entry.name}", entry)


def scan_roots(
    roots: Mapping[str, DirectoryHandle], factories: Iterable[FilterFactory]
) -> ScanResult:
    """Instantiate fresh filters from ``factories`` and scan ``roots``."""
    pipeline = FilterPipeline.from_factories(factories)
    return TreeScanner(pipeline).scan(roots)
