"""
Exclusion policy contract and the conjunction pipeline.

A filter decides per path whether a file is watched and whether a directory is
descended into. Filters may carry state for the duration of one scan (e.g.
ignore rules collected along the walk), so the watcher never reuses them: it
calls each FilterFactory at the start of every scan and throws the instances
away afterwards.
"""

from typing import Callable, Iterable, List, Protocol, Union

from handles.fs_handles import DirectoryHandle, FileHandle

Handle = Union[DirectoryHandle, FileHandle]


class Filter(Protocol):
    def should_include_file(self, path: str, handle: FileHandle) -> bool: ...

    def should_process_directory(self, path: str, handle: DirectoryHandle) -> bool: ...


FilterFactory = Callable[[], Filter]


class FilterPipeline:
    """
    Combine filters by conjunction.

    A path passes only if every filter approves; evaluation stops at the first
    rejection, so later filters never see a path an earlier one refused.
    """

    def __init__(self, filters: Iterable[Filter]) -> None:
        self._filters: List[Filter] = list(filters)

    @classmethod
    def from_factories(cls, factories: Iterable[FilterFactory]) -> "FilterPipeline":
        return cls(factory() for factory in factories)

    def should_include_file(self, path: str, handle: FileHandle) -> bool:
        return all(f.should_include_file(path, handle) for f in self._filters)

    def should_process_directory(self, path: str, handle: DirectoryHandle) -> bool:
        return all(f.should_process_directory(path, handle) for f in self._filters)

    def __len__(self) -> int:
        return len(self._filters)
