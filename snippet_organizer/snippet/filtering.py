"""Pure filtering, sorting and lookup helpers over a snippet list."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Literal, Sequence

from .model import Snippet

SortKey = Literal["date", "language", "favorites"]

SORT_KEYS: tuple[str, ...] = ("date", "language", "favorites")

EMPTY_NO_DATA = "no_data"
EMPTY_NO_MATCHES = "no_matches"


@dataclass(frozen=True, slots=True)
class SnippetQuery:
    """View parameters for the active snippet list."""

    search: str = ""
    tag: str | None = None
    language: str | None = None
    sort_by: SortKey = "date"

    def __post_init__(self) -> None:
        if self.sort_by not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {self.sort_by}")

    @property
    def is_filtered(self) -> bool:
        return bool(self.search or self.tag or self.language)


@dataclass(frozen=True, slots=True)
class Facets:
    tags: List[str]
    languages: List[str]


def filter_snippets(snippets: Iterable[Snippet], query: SnippetQuery | None = None) -> List[Snippet]:
    """Return the active snippets matching ``query`` in display order."""
    query = query or SnippetQuery()
    results = [snippet for snippet in snippets if snippet.is_active]

    if query.search:
        needle = query.search.lower()
        results = [
            snippet
            for snippet in results
            if needle in snippet.title.lower()
            or needle in snippet.description.lower()
            or needle in snippet.code.lower()
        ]

    if query.tag:
        results = [snippet for snippet in results if query.tag in snippet.tags]

    if query.language:
        results = [snippet for snippet in results if snippet.language == query.language]

    return sort_snippets(results, query.sort_by)


def sort_snippets(snippets: Sequence[Snippet], sort_by: SortKey) -> List[Snippet]:
    # sorted() is stable, so ties keep their incoming order.
    if sort_by == "date":
        return sorted(snippets, key=lambda snippet: snippet.created_at, reverse=True)
    if sort_by == "language":
        return sorted(snippets, key=lambda snippet: snippet.language.casefold())
    if sort_by == "favorites":
        return sorted(snippets, key=lambda snippet: not snippet.is_favorite)
    raise ValueError(f"Unknown sort key: {sort_by}")


def trash_view(snippets: Iterable[Snippet]) -> List[Snippet]:
    return [snippet for snippet in snippets if snippet.is_trashed]


def empty_state(
    snippets: Iterable[Snippet],
    query: SnippetQuery,
    results: Sequence[Snippet],
) -> str | None:
    """Explain an empty view: nothing stored yet, or filters too narrow."""
    if results:
        return None
    has_active = any(snippet.is_active for snippet in snippets)
    if has_active and query.is_filtered:
        return EMPTY_NO_MATCHES
    return EMPTY_NO_DATA


def facets(snippets: Iterable[Snippet]) -> Facets:
    """Distinct tags and languages of the active snippets, sorted."""
    tags: set[str] = set()
    languages: set[str] = set()
    for snippet in snippets:
        if not snippet.is_active:
            continue
        tags.update(snippet.tags)
        if snippet.language:
            languages.add(snippet.language)
    return Facets(tags=sorted(tags), languages=sorted(languages))


def suggest_tags(
    snippets: Iterable[Snippet],
    text: str,
    selected: Sequence[str] = (),
) -> List[str]:
    """Known tags containing ``text`` that are not already selected."""
    if not text:
        return []
    needle = text.lower()
    suggestions: List[str] = []
    for snippet in snippets:
        for tag in snippet.tags:
            if tag in suggestions or tag in selected:
                continue
            if needle in tag.lower():
                suggestions.append(tag)
    return suggestions


def highlight(text: str, search: str) -> List[tuple[str, bool]]:
    """Split ``text`` into ``(segment, matched)`` pairs around ``search``."""
    if not search:
        return [(text, False)] if text else []
    pattern = re.compile(f"({re.escape(search)})", re.IGNORECASE)
    segments: List[tuple[str, bool]] = []
    for index, part in enumerate(pattern.split(text)):
        if part:
            segments.append((part, index % 2 == 1))
    return segments


__all__ = [
    "EMPTY_NO_DATA",
    "EMPTY_NO_MATCHES",
    "Facets",
    "SORT_KEYS",
    "SnippetQuery",
    "SortKey",
    "empty_state",
    "facets",
    "filter_snippets",
    "highlight",
    "sort_snippets",
    "suggest_tags",
    "trash_view",
]
