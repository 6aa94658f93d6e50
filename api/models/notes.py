"""Notes-related Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from .common import as_utc
from .tags import Tag


class NoteCreate(BaseModel):
    """Request model for creating a note. Both fields are optional."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    content: str | None = None


class NoteUpdate(BaseModel):
    """Partial update of a note.

    A key missing from the request body means "leave unchanged"; an explicit
    ``null`` clears the field. Presence is read from ``model_fields_set``.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    content: str | None = None
    icon: str | None = Field(default=None, max_length=32)
    cover_url: str | None = Field(default=None, max_length=2048)

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually sent."""
        return self.model_dump(include=self.model_fields_set)


class Note(BaseModel):
    """A note as stored, plus its derived tags when loaded individually."""

    id: str
    user_id: str
    title: str | None = None
    content: str | None = None
    icon: str | None = None
    cover_url: str | None = None
    created_at: datetime
    updated_at: datetime
    tags: list[Tag] | None = None

    def to_document(self) -> dict[str, Any]:
        """Storage form. Tags live in the link collection, not on the note."""
        return {
            "_id": ObjectId(self.id),
            "user_id": ObjectId(self.user_id),
            "title": self.title,
            "content": self.content,
            "icon": self.icon,
            "cover_url": self.cover_url,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any], tags: list[Tag] | None = None) -> Note:
        return cls(
            id=str(doc["_id"]),
            user_id=str(doc["user_id"]),
            title=doc.get("title"),
            content=doc.get("content"),
            icon=doc.get("icon"),
            cover_url=doc.get("cover_url"),
            created_at=as_utc(doc["created_at"]),
            updated_at=as_utc(doc["updated_at"]),
            tags=tags,
        )
