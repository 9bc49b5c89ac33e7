"""Snippet records and the pure view helpers over them."""

from .filtering import SnippetQuery, empty_state, facets, filter_snippets, trash_view
from .model import Draft, Snippet, SnippetFields, SnippetVersion

__all__ = [
    "Draft",
    "Snippet",
    "SnippetFields",
    "SnippetQuery",
    "SnippetVersion",
    "empty_state",
    "facets",
    "filter_snippets",
    "trash_view",
]
