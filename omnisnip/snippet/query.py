"""Criteria matching and ordering for snippet queries."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List

from .model import Snippet, SnippetFilter, SortField


def _timestamp_key(value: datetime) -> float:
    return value.timestamp()


def _text_key(value: str) -> str:
    return value.casefold()


def _flag_key(value: bool) -> int:
    return 1 if value else 0


SORT_KEYS: Dict[SortField, Callable[[Snippet], Any]] = {
    "createdAt": lambda snippet: _timestamp_key(snippet.created_at),
    "updatedAt": lambda snippet: _timestamp_key(snippet.updated_at),
    "title": lambda snippet: _text_key(snippet.title),
    "language": lambda snippet: _text_key(snippet.language),
    "category": lambda snippet: _text_key(snippet.category),
    "favorite": lambda snippet: _flag_key(snippet.favorite),
}


def matches(snippet: Snippet, criteria: SnippetFilter) -> bool:
    """Return True when the snippet satisfies every supplied criterion."""
    if criteria.query:
        needle = criteria.query.casefold()
        if not any(
            needle in field.casefold()
            for field in (snippet.title, snippet.description, snippet.code)
        ):
            return False

    if criteria.language and snippet.language != criteria.language:
        return False

    if criteria.category and snippet.category != criteria.category:
        return False

    # An empty tag list means "no tag filter", not "match nothing".
    if criteria.tags and not any(tag in snippet.tags for tag in criteria.tags):
        return False

    if criteria.favorite is not None and snippet.favorite != criteria.favorite:
        return False

    return True


def sort_snippets(
    snippets: Iterable[Snippet],
    field: SortField,
    order: str | None = None,
) -> List[Snippet]:
    """Stable sort on one field; ``desc`` keeps ties in their incoming order."""
    key = SORT_KEYS[field]
    return sorted(snippets, key=key, reverse=(order == "desc"))


def apply_filter(snippets: Iterable[Snippet], criteria: SnippetFilter) -> List[Snippet]:
    selected = [snippet for snippet in snippets if matches(snippet, criteria)]
    if criteria.sort_by:
        selected = sort_snippets(selected, criteria.sort_by, criteria.sort_order)
    return selected


__all__ = ["SORT_KEYS", "apply_filter", "matches", "sort_snippets"]
