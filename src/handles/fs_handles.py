"""
Filesystem handles: the platform boundary of the watcher.

A handle is a capability for one file or directory. The watcher never builds
filesystem paths itself: it enumerates, reads, writes and removes entries only
through handles obtained from a granted root directory.

Writes are transactional. ``WritableFile`` stages data in a temporary sibling
of the target and commits with an atomic ``os.replace`` on close; ``abort``
discards the staging file, so a failed write never leaves partial content.
"""

import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from models.errors import PermissionDeclinedError

log = logging.getLogger(__name__)

# Suffix of staging files created by WritableFile (skipped by misc_filter)
TEMP_SUFFIX = ".fswatch-tmp"


class WritableFile:
    """
    A write transaction against one file.

    Usage:
        with handle.open_writable() as writer:
            writer.write("new content")

    Leaving the block normally commits; an exception aborts and re-raises.
    """

    def __init__(self, target: Path, keep_existing_data: bool = False) -> None:
        self._target = target
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=TEMP_SUFFIX
        )
        self._tmp_path = Path(tmp_name)
        self._fh = os.fdopen(fd, "w+b")
        self._closed = False
        # Bytes that landed in the target; set by close()
        self.committed: bytes = b""
        try:
            try:
                mode = stat.S_IMODE(target.stat().st_mode)
            except FileNotFoundError:
                mode = 0o644
            os.chmod(self._tmp_path, mode)
            if keep_existing_data and target.is_file():
                self._fh.write(target.read_bytes())
                self._fh.seek(0)
        except BaseException:
            self.abort()
            raise

    def write(self, data: Union[str, bytes]) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._fh.write(data)

    def truncate(self, size: int) -> None:
        self._fh.truncate(size)

    def staged(self) -> bytes:
        """Return everything staged so far, as close() would commit it."""
        position = self._fh.tell()
        self._fh.flush()
        self._fh.seek(0)
        data = self._fh.read()
        self._fh.seek(position)
        return data

    def close(self) -> None:
        """Commit the staged content to the target."""
        if self._closed:
            return
        self._fh.flush()
        self._fh.seek(0)
        self.committed = self._fh.read()
        os.fsync(self._fh.fileno())
        self._fh.close()
        os.replace(self._tmp_path, self._target)
        self._closed = True

    def abort(self) -> None:
        """Discard the staged content; the target is left untouched."""
        if self._closed:
            return
        self._closed = True
        try:
            self._fh.close()
        finally:
            self._tmp_path.unlink(missing_ok=True)

    def __enter__(self) -> "WritableFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.close()
            except BaseException:
                self.abort()
                raise
        else:
            self.abort()


class FileHandle:
    """Capability to read and write a single file."""

    kind = "file"

    def __init__(self, path: Path) -> None:
        self._path = path
        self.name = path.name

    def read_text(self) -> str:
        # Decoded from raw bytes: newlines are kept exactly as on disk
        return self._path.read_bytes().decode("utf-8")

    def open_writable(self, keep_existing_data: bool = False) -> WritableFile:
        return WritableFile(self._path, keep_existing_data=keep_existing_data)

    def exists(self) -> bool:
        return self._path.is_file()

    def __repr__(self) -> str:
        return f"FileHandle({self._path})"


class DirectoryHandle:
    """Capability to enumerate a directory and create or remove its entries."""

    kind = "directory"

    def __init__(self, path: Path, name: Optional[str] = None) -> None:
        self._path = path
        self.name = name or path.name

    def entries(self) -> Iterator[Union["DirectoryHandle", FileHandle]]:
        """
        Yield a handle per child entry. Symlinks and special files are skipped;
        entries that disappear during enumeration are skipped too.
        """
        with os.scandir(self._path) as it:
            for entry in it:
                try:
                    if entry.is_symlink():
                        continue
                    if entry.is_dir(follow_symlinks=False):
                        yield DirectoryHandle(Path(entry.path))
                    elif entry.is_file(follow_symlinks=False):
                        yield FileHandle(Path(entry.path))
                except OSError:
                    continue

    def get_file_handle(self, name: str, create: bool = False) -> FileHandle:
        """
        Return a handle for the child file ``name``.

        With ``create=True`` a missing file is created empty. Raises
        FileNotFoundError otherwise, IsADirectoryError if ``name`` is a directory.
        """
        path = self._path / name
        if path.is_dir():
            raise IsADirectoryError(f"{name} is a directory")
        if not path.exists():
            if not create:
                raise FileNotFoundError(f"File not found: {name}")
            path.touch()
        return FileHandle(path)

    def new_file_handle(self, name: str) -> FileHandle:
        """
        Return a handle for the child file ``name`` without creating it.

        The file comes into existence when a write through the handle commits.
        Raises IsADirectoryError if ``name`` is a directory.
        """
        path = self._path / name
        if path.is_dir():
            raise IsADirectoryError(f"{name} is a directory")
        return FileHandle(path)

    def get_directory_handle(self, name: str) -> "DirectoryHandle":
        path = self._path / name
        if not path.is_dir():
            raise NotADirectoryError(f"Directory not found: {name}")
        return DirectoryHandle(path)

    def remove_entry(self, name: str) -> None:
        """Remove the child file ``name``. Raises FileNotFoundError if absent."""
        (self._path / name).unlink()

    def __repr__(self) -> str:
        return f"DirectoryHandle({self._path})"


# A picker runs the permission / selection flow and returns the granted
# directory, None if the user cancelled, or raises PermissionDeclinedError.
DirectoryPicker = Callable[[], Optional[DirectoryHandle]]


class StaticDirectoryPicker:
    """Picker that grants one preconfigured directory if it is readable."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path).expanduser()

    def __call__(self) -> Optional[DirectoryHandle]:
        path = self._path.resolve()
        if not path.is_dir():
            raise PermissionDeclinedError(f"Not a directory: {path}")
        if not os.access(path, os.R_OK | os.X_OK):
            raise PermissionDeclinedError(f"Access denied: {path}")
        return DirectoryHandle(path)


@dataclass(frozen=True)
class PlatformCapabilities:
    """
    Directory-access capability, probed once and injected into the watcher.

    ``directory_access`` is False on platforms without the APIs the handles
    need; every operation that touches the filesystem then fails fast.
    """

    directory_access: bool
    picker: Optional[DirectoryPicker] = None

    @property
    def is_supported(self) -> bool:
        return self.directory_access

    @classmethod
    def detect(cls, picker: Optional[DirectoryPicker] = None) -> "PlatformCapabilities":
        supported = all(hasattr(os, name) for name in ("scandir", "replace", "fsync"))
        if not supported:
            log.warning("Directory access is not supported on this platform")
        return cls(directory_access=supported, picker=picker)
