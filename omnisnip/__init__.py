"""Personal code-snippet manager backed by a local JSON file."""

from .errors import StorageDirectoryError, StorageError, StorageReadError, StorageWriteError
from .snippet import (
    CreateSnippetInput,
    Snippet,
    SnippetFilter,
    StorageService,
    UpdateSnippetInput,
)

__all__ = [
    "CreateSnippetInput",
    "Snippet",
    "SnippetFilter",
    "StorageDirectoryError",
    "StorageError",
    "StorageReadError",
    "StorageService",
    "StorageWriteError",
    "UpdateSnippetInput",
]
