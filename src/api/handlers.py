"""
File handler functions shared by MCP tools and REST API.

Handlers return dicts. Expected failures come back as
``{"error": message, "kind": kind}`` rather than raising; ``kind`` lets the
REST layer pick a status code.
"""

import logging
from dataclasses import asdict
from typing import Optional

from handles.fs_handles import StaticDirectoryPicker
from models.errors import (
    NotFoundError,
    UnsupportedPlatformError,
    WatchError,
    WriteFailureError,
)

log = logging.getLogger(__name__)

_ERROR_KINDS = {
    NotFoundError: "not_found",
    WriteFailureError: "write_failure",
    UnsupportedPlatformError: "unsupported",
}


def _error(exc: Exception) -> dict:
    kind = "invalid"
    for cls, name in _ERROR_KINDS.items():
        if isinstance(exc, cls):
            kind = name
            break
    return {"error": str(exc), "kind": kind}


def handle_file_list(watcher, *, prefix: Optional[str] = None, include_content: bool = False) -> dict:
    try:
        paths = watcher.list_files(prefix)
    except ValueError as e:
        return _error(e)
    result = {"count": len(paths), "files": paths}
    if include_content:
        snapshot = watcher.files
        result["contents"] = {p: snapshot[p] for p in paths if p in snapshot}
    return result


def handle_file_read(watcher, *, path: str) -> dict:
    try:
        content = watcher.read_file(path)
    except (WatchError, ValueError) as e:
        return _error(e)
    return {"path": path, "content": content}


def handle_file_write(
    watcher,
    *,
    path: str,
    content: str,
    create: bool = True,
    truncate: bool = False,
) -> dict:
    try:
        written = watcher.write_file(path, content, create=create, truncate=truncate)
    except (WatchError, ValueError) as e:
        log.info("Write to %s rejected: %s", path, e)
        return _error(e)
    return {"path": path, "content": written}


def handle_file_create(watcher, *, path: str, content: Optional[str] = None) -> dict:
    try:
        created = watcher.create_file(path, content)
    except (WatchError, ValueError) as e:
        return _error(e)
    return {"path": created, "created": True}


def handle_file_delete(watcher, *, path: str) -> dict:
    try:
        watcher.delete_file(path)
    except (WatchError, ValueError) as e:
        return _error(e)
    return {"path": path, "deleted": True}


def handle_root_add(watcher, *, path: str) -> dict:
    result = watcher.select_root(StaticDirectoryPicker(path))
    return asdict(result)


def handle_clear(watcher) -> dict:
    watcher.clear()
    return {"cleared": True}


def handle_status(watcher) -> dict:
    return watcher.status()
