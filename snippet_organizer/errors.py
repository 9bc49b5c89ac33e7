"""Error taxonomy shared by the snippet library, auth client and API."""

from __future__ import annotations


class SnippetOrganizerError(Exception):
    """Base class for errors surfaced to the user as notifications."""

    default_message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class DuplicateUsername(SnippetOrganizerError):
    default_message = "Username already exists"


class InvalidCredentials(SnippetOrganizerError):
    default_message = "Invalid credentials"


class NetworkFailure(SnippetOrganizerError):
    default_message = "Network error"


class ValidationFailure(SnippetOrganizerError):
    default_message = "Invalid snippet"


class MalformedImport(SnippetOrganizerError):
    default_message = "Invalid format"


class SnippetNotFound(SnippetOrganizerError):
    default_message = "Snippet not found"

    def __init__(self, snippet_id: str) -> None:
        super().__init__(f"Snippet not found: {snippet_id}")
        self.snippet_id = snippet_id


class VersionNotFound(SnippetOrganizerError):
    default_message = "Version not found"


__all__ = [
    "SnippetOrganizerError",
    "DuplicateUsername",
    "InvalidCredentials",
    "NetworkFailure",
    "ValidationFailure",
    "MalformedImport",
    "SnippetNotFound",
    "VersionNotFound",
]
