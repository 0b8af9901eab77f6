from .config import WatcherConfig
from .errors import (
    NotFoundError,
    PermissionDeclinedError,
    UnsupportedPlatformError,
    WatchError,
    WriteFailureError,
)
from .state import ChangeSet, ContentCacheEntry, SelectRootResult, WatchedRoot

__all__ = [
    "WatcherConfig",
    "WatchError",
    "NotFoundError",
    "PermissionDeclinedError",
    "UnsupportedPlatformError",
    "WriteFailureError",
    "ChangeSet",
    "ContentCacheEntry",
    "SelectRootResult",
    "WatchedRoot",
]
