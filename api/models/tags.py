"""Tag-related Pydantic models."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, StringConstraints

from .common import as_utc

TagName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
TagColor = Annotated[str, StringConstraints(pattern=r"^#[0-9a-fA-F]{3,8}$")]


class TagCreate(BaseModel):
    """Request model for creating a tag."""

    model_config = ConfigDict(extra="forbid")

    name: TagName
    color: TagColor | None = None


class TagUpdate(BaseModel):
    """Request model for renaming/recolouring a tag. Omitted colour is kept."""

    model_config = ConfigDict(extra="forbid")

    name: TagName
    color: TagColor | None = None


class Tag(BaseModel):
    """A user-owned label that can be attached to notes."""

    id: str
    user_id: str
    name: str
    color: str | None = None
    created_at: datetime

    def to_document(self) -> dict[str, Any]:
        return {
            "_id": ObjectId(self.id),
            "user_id": ObjectId(self.user_id),
            "name": self.name,
            "color": self.color,
            "created_at": self.created_at,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Tag:
        return cls(
            id=str(doc["_id"]),
            user_id=str(doc["user_id"]),
            name=doc["name"],
            color=doc.get("color"),
            created_at=as_utc(doc["created_at"]),
        )
