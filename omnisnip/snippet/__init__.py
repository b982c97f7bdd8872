"""Snippet models and their JSON-file storage."""

from .model import (
    SNIPPET_CATEGORIES,
    SNIPPET_LANGUAGES,
    SORT_FIELDS,
    CreateSnippetInput,
    Snippet,
    SnippetFilter,
    UpdateSnippetInput,
)
from .storage import StorageService

__all__ = [
    "CreateSnippetInput",
    "SNIPPET_CATEGORIES",
    "SNIPPET_LANGUAGES",
    "SORT_FIELDS",
    "Snippet",
    "SnippetFilter",
    "StorageService",
    "UpdateSnippetInput",
]
