"""
Path-fragment blacklist and OS-noise filters.

Both are stateless; the factories still return a new instance per scan so they
fit the same contract as stateful filters.
"""

from typing import Iterable, Set, Tuple

from handles.fs_handles import TEMP_SUFFIX, DirectoryHandle, FileHandle

# Build output and dependency directories never worth watching
DIST_FRAGMENTS: Tuple[str, ...] = ("dist", "out", "build", "vendor", "node_modules", ".next")

# Files dropped by the OS or desktop shell
MISC_NAMES: Set[str] = {".DS_Store", "Thumbs.db", "desktop.ini"}


class DistFilter:
    """Reject anything under a build-output or dependency directory."""

    def __init__(self, fragments: Iterable[str] = DIST_FRAGMENTS) -> None:
        self._needles = tuple(f"/{frag}/" for frag in fragments)

    def _is_dist(self, probe: str) -> bool:
        return any(needle in probe for needle in self._needles)

    def should_include_file(self, path: str, handle: FileHandle) -> bool:
        return not self._is_dist(path)

    def should_process_directory(self, path: str, handle: DirectoryHandle) -> bool:
        # Trailing slash so the directory itself matches, pruning its subtree.
        # The root label is the first segment and never matches.
        return not self._is_dist(f"{path}/")


class MiscFilter:
    """Reject OS noise files and in-flight write staging files."""

    def __init__(self, names: Iterable[str] = MISC_NAMES) -> None:
        self._names = set(names)

    def _is_misc(self, path: str) -> bool:
        name = path.rsplit("/", 1)[-1]
        return name in self._names or name.endswith(TEMP_SUFFIX)

    def should_include_file(self, path: str, handle: FileHandle) -> bool:
        return not self._is_misc(path)

    def should_process_directory(self, path: str, handle: DirectoryHandle) -> bool:
        return not self._is_misc(path)


def dist_filter() -> DistFilter:
    return DistFilter()


def misc_filter() -> MiscFilter:
    return MiscFilter()
