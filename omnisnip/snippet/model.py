"""Pydantic models describing stored snippets and the inputs that shape them."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SnippetLanguage = Literal[
    "javascript",
    "typescript",
    "python",
    "java",
    "csharp",
    "bash",
    "cpp",
    "ruby",
    "go",
    "php",
    "swift",
    "kotlin",
    "rust",
    "html",
    "css",
    "json",
    "yaml",
    "markdown",
    "shell",
    "sql",
    "r",
    "perl",
    "dart",
    "objective-c",
    "scala",
    "haskell",
    "lua",
    "elixir",
    "clojure",
    "groovy",
    "plaintext",
]

SnippetCategory = Literal[
    "function",
    "utility",
    "config",
    "algorithm",
    "boilerplate",
    "example",
    "other",
]

SortField = Literal["createdAt", "updatedAt", "title", "language", "category", "favorite"]
SortOrder = Literal["asc", "desc"]

SNIPPET_LANGUAGES: tuple[str, ...] = get_args(SnippetLanguage)
SNIPPET_CATEGORIES: tuple[str, ...] = get_args(SnippetCategory)
SORT_FIELDS: tuple[str, ...] = get_args(SortField)
SORT_ORDERS: tuple[str, ...] = get_args(SortOrder)


class _CamelModel(BaseModel):
    # Stored documents use camelCase keys; Python callers may use either form.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Snippet(_CamelModel):
    """A stored unit of code text with its descriptive metadata."""

    id: str
    title: str
    description: str
    code: str
    language: SnippetLanguage
    category: SnippetCategory
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    favorite: bool = False

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, value: datetime) -> datetime:
        # Timestamps stored without an offset are taken to be UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def to_document(self) -> dict:
        """Return the JSON-ready mapping written to disk."""
        return self.model_dump(mode="json", by_alias=True)


class CreateSnippetInput(_CamelModel):
    title: str
    description: str
    code: str
    language: SnippetLanguage
    category: SnippetCategory
    tags: List[str] | None = None
    favorite: bool | None = None


class UpdateSnippetInput(_CamelModel):
    """Partial update; fields left as ``None`` keep their stored value."""

    title: str | None = None
    description: str | None = None
    code: str | None = None
    language: SnippetLanguage | None = None
    category: SnippetCategory | None = None
    tags: List[str] | None = None
    favorite: bool | None = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class SnippetFilter(_CamelModel):
    """Criteria for querying the collection. Every field is optional."""

    query: str | None = None
    language: SnippetLanguage | None = None
    category: SnippetCategory | None = None
    tags: List[str] | None = None
    favorite: bool | None = None
    sort_by: SortField | None = None
    sort_order: SortOrder | None = None


__all__ = [
    "CreateSnippetInput",
    "SNIPPET_CATEGORIES",
    "SNIPPET_LANGUAGES",
    "SORT_FIELDS",
    "SORT_ORDERS",
    "Snippet",
    "SnippetCategory",
    "SnippetFilter",
    "SnippetLanguage",
    "SortField",
    "SortOrder",
    "UpdateSnippetInput",
]
