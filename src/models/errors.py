"""
Watcher error taxonomy.

Read failures inside a poll cycle are never raised; they are reclassified as
deletions by the change detector. Everything here is raised to the caller of
a mutation or reported through a SelectRootResult.
"""


class WatchError(Exception):
    """Base class for all watcher errors."""


class PermissionDeclinedError(WatchError):
    """Root selection was cancelled or the platform refused access."""


class NotFoundError(WatchError):
    """A mutation targeted an untracked path or an unwatched parent directory."""


class WriteFailureError(WatchError):
    """A write transaction failed mid-stream and was aborted."""


class UnsupportedPlatformError(WatchError):
    """The directory-access capability is not available on this platform."""
