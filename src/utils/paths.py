"""
Path label helpers.

Labels are POSIX-style and rooted at a watched directory's name:
``project/src/main.py``. They never contain ``.`` or ``..`` segments.
"""

from typing import Tuple


def normalize_path(path: str) -> str:
    """
    Canonicalize a caller-supplied label.

    Backslashes become slashes; empty and ``.`` segments are dropped.
    Raises ValueError for an empty label or one containing ``..``.
    """
    parts = [part for part in path.replace("\\", "/").split("/") if part not in ("", ".")]
    if not parts:
        raise ValueError("Empty path")
    if ".." in parts:
        raise ValueError(f"Path must not contain '..': {path}")
    return "/".join(parts)


def split_path(path: str) -> Tuple[str, str]:
    """
    Split a label into (parent label, leaf name).

    A bare name has no parent: ``("", name)``.
    """
    parent, _, name = path.rpartition("/")
    return parent, name


def is_under(path: str, prefix: str) -> bool:
    """True if ``path`` equals ``prefix`` or lies beneath it."""
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")
