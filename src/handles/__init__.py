from .fs_handles import (
    TEMP_SUFFIX,
    DirectoryHandle,
    DirectoryPicker,
    FileHandle,
    PlatformCapabilities,
    StaticDirectoryPicker,
    WritableFile,
)

__all__ = [
    "TEMP_SUFFIX",
    "DirectoryHandle",
    "DirectoryPicker",
    "FileHandle",
    "PlatformCapabilities",
    "StaticDirectoryPicker",
    "WritableFile",
]
