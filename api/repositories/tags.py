"""Tags and the note-tag association."""

from __future__ import annotations

import random
from typing import Any

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..auth import Identity
from ..errors import DuplicateName, NoteNotFound, PersistenceError, TagNotFound
from ..models import Tag
from ..models.common import parse_object_id, utc_now
from .owned import OwnedCollection

logger = structlog.get_logger(__name__)

PRESET_COLORS = (
    "#64748b",  # Slate
    "#ef4444",  # Red
    "#f97316",  # Orange
    "#f59e0b",  # Amber
    "#22c55e",  # Green
    "#10b981",  # Emerald
    "#14b8a6",  # Teal
    "#06b6d4",  # Cyan
    "#3b82f6",  # Blue
    "#6366f1",  # Indigo
    "#8b5cf6",  # Violet
    "#a855f7",  # Purple
    "#d946ef",  # Fuchsia
    "#ec4899",  # Pink
    "#f43f5e",  # Rose
)


def pick_color() -> str:
    return random.choice(PRESET_COLORS)


class TagRepository:
    """Tags visible to one identity, and links between them and the caller's notes.

    Names are compared exactly (case-sensitive) after trimming. The link
    collection has no owner column, so both sides of a link are checked
    through their owner-scoped collections before it is touched.
    """

    def __init__(self, db: AsyncIOMotorDatabase, identity: Identity):
        self.identity = identity
        self.tags = OwnedCollection(db.tags, identity)
        self.notes = OwnedCollection(db.notes, identity)
        self.links = db.note_tags

    async def create(self, name: str, color: str | None = None) -> Tag:
        if await self._name_taken(name):
            raise DuplicateName()

        doc = {"name": name, "color": color or pick_color(), "created_at": utc_now()}
        try:
            result = await self.tags.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateName() from e
        except PyMongoError as e:
            logger.error("tag_create_failed", user_id=self.identity.user_id, error=str(e))
            raise PersistenceError("Failed to create tag") from e

        doc["_id"] = result.inserted_id
        doc["user_id"] = self.tags.owner_id
        logger.info("tag_created", user_id=self.identity.user_id, tag_id=str(result.inserted_id))
        return Tag.from_document(doc)

    async def get(self, tag_id: str) -> Tag:
        doc = await self._find_one(tag_id)
        if doc is None:
            raise TagNotFound()
        return Tag.from_document(doc)

    async def list_tags(self) -> list[Tag]:
        """All of the caller's tags, alphabetically."""
        try:
            docs = await self.tags.find({}).sort("name", 1).to_list(length=None)
        except PyMongoError as e:
            logger.error("tags_fetch_failed", user_id=self.identity.user_id, error=str(e))
            raise PersistenceError("Failed to fetch tags") from e

        return [Tag.from_document(doc) for doc in docs]

    async def update(self, tag_id: str, name: str, color: str | None = None) -> Tag:
        """Rename a tag; the colour is only changed when one is given."""
        existing = await self._find_one(tag_id)
        if existing is None:
            raise TagNotFound()

        oid = existing["_id"]
        if await self._name_taken(name, exclude=oid):
            raise DuplicateName("Tag name already exists")

        changes: dict[str, Any] = {"name": name}
        if color is not None:
            changes["color"] = color

        try:
            result = await self.tags.update_one({"_id": oid}, {"$set": changes})
        except DuplicateKeyError as e:
            raise DuplicateName("Tag name already exists") from e
        except PyMongoError as e:
            logger.error("tag_update_failed", user_id=self.identity.user_id, tag_id=tag_id, error=str(e))
            raise PersistenceError("Failed to update tag") from e

        if result.matched_count == 0:
            raise TagNotFound()

        logger.info("tag_updated", user_id=self.identity.user_id, tag_id=tag_id)
        return Tag.from_document({**existing, **changes})

    async def delete(self, tag_id: str) -> bool:
        """Delete a tag and its links; notes are left alone. Idempotent."""
        oid = parse_object_id(tag_id)
        if oid is None:
            return False

        try:
            result = await self.tags.delete_one({"_id": oid})
            if result.deleted_count:
                await self.links.delete_many({"tag_id": oid})
        except PyMongoError as e:
            logger.error("tag_delete_failed", user_id=self.identity.user_id, tag_id=tag_id, error=str(e))
            raise PersistenceError("Failed to delete tag") from e

        deleted = bool(result.deleted_count)
        logger.info("tag_deleted", user_id=self.identity.user_id, tag_id=tag_id, deleted=deleted)
        return deleted

    async def add_to_note(self, note_id: str, tag_id: str) -> None:
        """Link a tag to a note. Linking twice is not an error."""
        note_oid, tag_oid = await self._require_pair(note_id, tag_id)
        link = {"note_id": note_oid, "tag_id": tag_oid}

        try:
            if await self.links.find_one(link, {"_id": 1}) is not None:
                logger.debug("note_tag_already_linked", note_id=note_id, tag_id=tag_id)
                return
            await self.links.insert_one(link)
        except DuplicateKeyError:
            logger.debug("note_tag_already_linked", note_id=note_id, tag_id=tag_id)
            return
        except PyMongoError as e:
            logger.error("note_tag_link_failed", note_id=note_id, tag_id=tag_id, error=str(e))
            raise PersistenceError("Failed to add tag to note") from e

        logger.info("note_tag_linked", user_id=self.identity.user_id, note_id=note_id, tag_id=tag_id)

    async def remove_from_note(self, note_id: str, tag_id: str) -> None:
        """Unlink a tag from a note. Removing an absent link is a no-op."""
        note_oid, tag_oid = await self._require_pair(note_id, tag_id)

        try:
            result = await self.links.delete_one({"note_id": note_oid, "tag_id": tag_oid})
        except PyMongoError as e:
            logger.error("note_tag_unlink_failed", note_id=note_id, tag_id=tag_id, error=str(e))
            raise PersistenceError("Failed to remove tag from note") from e

        logger.info(
            "note_tag_unlinked",
            user_id=self.identity.user_id,
            note_id=note_id,
            tag_id=tag_id,
            removed=bool(result.deleted_count),
        )

    async def _require_pair(self, note_id: str, tag_id: str) -> tuple[ObjectId, ObjectId]:
        """Both ends of a link must be visible to the caller."""
        note_oid = parse_object_id(note_id)
        tag_oid = parse_object_id(tag_id)

        try:
            note = None if note_oid is None else await self.notes.find_one({"_id": note_oid}, {"_id": 1})
            tag = None if tag_oid is None else await self.tags.find_one({"_id": tag_oid}, {"_id": 1})
        except PyMongoError as e:
            logger.error("note_tag_lookup_failed", note_id=note_id, tag_id=tag_id, error=str(e))
            raise PersistenceError() from e

        if note is None:
            raise NoteNotFound()
        if tag is None:
            raise TagNotFound()
        return note_oid, tag_oid

    async def _find_one(self, tag_id: str) -> dict[str, Any] | None:
        oid = parse_object_id(tag_id)
        if oid is None:
            return None

        try:
            return await self.tags.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("tag_fetch_failed", user_id=self.identity.user_id, tag_id=tag_id, error=str(e))
            raise PersistenceError("Failed to fetch tag") from e

    async def _name_taken(self, name: str, exclude: ObjectId | None = None) -> bool:
        filter: dict[str, Any] = {"name": name}
        if exclude is not None:
            filter["_id"] = {"$ne": exclude}

        try:
            return await self.tags.find_one(filter, {"_id": 1}) is not None
        except PyMongoError as e:
            logger.error("tag_fetch_failed", user_id=self.identity.user_id, error=str(e))
            raise PersistenceError("Failed to save tag") from e
