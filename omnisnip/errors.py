"""Error taxonomy for the snippet store."""

from __future__ import annotations

from pathlib import Path


class StorageError(Exception):
    """Base class for failures touching the on-disk collection."""

    action = "access storage"

    def __init__(self, path: Path | str, reason: str | None = None) -> None:
        self.path = Path(path)
        self.reason = reason
        message = f"Failed to {self.action} at {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StorageDirectoryError(StorageError):
    action = "prepare storage directory"


class StorageReadError(StorageError):
    action = "read storage file"


class StorageWriteError(StorageError):
    action = "write storage file"


__all__ = [
    "StorageDirectoryError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
