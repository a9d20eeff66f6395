"""Data models for journals and imported media."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class JournalContent:
    """Structured journal body: ordered bullets plus image and video references."""

    bullets: list[str] = field(default_factory=list)
    images: list[Any] = field(default_factory=list)
    videos: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[Any]]:
        return {
            "bullets": list(self.bullets),
            "images": list(self.images),
            "videos": list(self.videos),
        }

    def is_empty(self) -> bool:
        return not (self.bullets or self.images or self.videos)


@dataclass
class JournalRecord:
    """A row of the journals table as stored, with content kept as text."""

    id: str
    title: str
    content: str | None = None
    created_at: str = ""
    updated_at: str = ""
    is_published: bool = False


@dataclass
class Journal:
    """A journal as seen by the presentation layer, with structured content."""

    id: str
    title: str
    content: JournalContent | None = None
    created_at: str = ""
    updated_at: str = ""
    is_published: bool = False

    def to_record(self) -> dict[str, Any]:
        """Return the request payload shape used by the write requests."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content.to_dict() if self.content is not None else None,
        }


@dataclass
class WriteResult:
    """Outcome of a write statement: how many rows it touched."""

    changes: int


@dataclass
class MediaSelection:
    """A picked media file together with its inline data URI."""

    path: str
    base64: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)
