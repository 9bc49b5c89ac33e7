from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, List

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

DEFAULT_LANGUAGE = "javascript"

SUPPORTED_LANGUAGES = (
    "javascript",
    "typescript",
    "python",
    "java",
    "c",
    "cpp",
    "csharp",
    "ruby",
    "go",
    "php",
    "swift",
    "kotlin",
    "rust",
    "scala",
    "shell",
    "json",
    "html",
    "css",
    "markdown",
)


def utc_now() -> datetime:
    """Current UTC instant truncated to milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def format_timestamp(value: datetime) -> str:
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{value.microsecond // 1000:03d}Z"


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


Timestamp = Annotated[
    datetime,
    AfterValidator(_ensure_utc),
    PlainSerializer(format_timestamp, return_type=str, when_used="json"),
]


def normalize_tags(tags: Any) -> List[str]:
    """Trim labels and drop blanks and duplicates, keeping first occurrences."""
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    normalized: List[str] = []
    for raw in tags:
        tag = str(raw).strip()
        if tag and tag not in normalized:
            normalized.append(tag)
    return normalized


class SnippetFields(BaseModel):
    """User-authored fields shared by snippets, versions and drafts."""

    title: str = ""
    description: str = ""
    language: str = DEFAULT_LANGUAGE
    tags: List[str] = Field(default_factory=list)
    code: str = ""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> List[str]:
        return normalize_tags(value)

    def fields(self) -> "SnippetFields":
        return SnippetFields(
            title=self.title,
            description=self.description,
            language=self.language,
            tags=list(self.tags),
            code=self.code,
        )


class Draft(SnippetFields):
    """Unsaved edit-form state."""


class SnippetVersion(SnippetFields):
    """Field values of a snippet immediately before an edit or restore."""

    saved_at: Timestamp | None = None


class Snippet(SnippetFields):
    """A stored code snippet with its trash flag and version history."""

    id: str
    title: str
    code: str
    is_favorite: bool = False
    created_at: Timestamp
    updated_at: Timestamp | None = None
    deleted_at: Timestamp | None = None
    versions: List[SnippetVersion] = Field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None

    def snapshot(self) -> SnippetVersion:
        return SnippetVersion(
            **self.fields().model_dump(),
            saved_at=self.updated_at or self.created_at,
        )

    def apply(self, fields: SnippetFields) -> None:
        self.title = fields.title
        self.description = fields.description
        self.language = fields.language
        self.tags = list(fields.tags)
        self.code = fields.code

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "DEFAULT_LANGUAGE",
    "SUPPORTED_LANGUAGES",
    "Draft",
    "Snippet",
    "SnippetFields",
    "SnippetVersion",
    "Timestamp",
    "format_timestamp",
    "normalize_tags",
    "utc_now",
]
