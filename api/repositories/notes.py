"""Note lifecycle: create, list, read, partially update and delete notes."""

from __future__ import annotations

from typing import Any

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ..auth import Identity
from ..errors import NoteNotFound, PersistenceError, TagNotFound
from ..models import Note, NoteCreate, Tag
from ..models.common import parse_object_id, utc_now
from .owned import OwnedCollection, object_ids

logger = structlog.get_logger(__name__)

# Most recently modified first; _id breaks ties so one query is stable
RECENT_FIRST = [("updated_at", -1), ("_id", -1)]


class NoteRepository:
    """Notes visible to one identity."""

    def __init__(self, db: AsyncIOMotorDatabase, identity: Identity):
        self.identity = identity
        self.notes = OwnedCollection(db.notes, identity)
        self.tags = OwnedCollection(db.tags, identity)
        self.links = db.note_tags

    async def create(self, data: NoteCreate | None = None) -> Note:
        data = data or NoteCreate()
        now = utc_now()
        doc = {
            "title": data.title if data.title is not None else "",
            "content": data.content if data.content is not None else "",
            "icon": None,
            "cover_url": None,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.notes.insert_one(doc)
        except PyMongoError as e:
            logger.error("note_create_failed", user_id=self.identity.user_id, error=str(e))
            raise PersistenceError("Failed to create note") from e

        doc["_id"] = result.inserted_id
        doc["user_id"] = self.notes.owner_id
        logger.info("note_created", user_id=self.identity.user_id, note_id=str(result.inserted_id))
        return Note.from_document(doc)

    async def list_notes(self) -> list[Note]:
        return await self._find_notes({})

    async def list_by_tag(self, tag_id: str) -> list[Note]:
        """Notes carrying ``tag_id``. The tag itself must be visible to the caller."""
        tag_oid = parse_object_id(tag_id)
        if tag_oid is None or await self.tags.find_one({"_id": tag_oid}, {"_id": 1}) is None:
            raise TagNotFound()

        try:
            links = await self.links.find({"tag_id": tag_oid}, {"note_id": 1}).to_list(length=None)
        except PyMongoError as e:
            logger.error("note_tag_links_fetch_failed", tag_id=tag_id, error=str(e))
            raise PersistenceError("Failed to fetch notes") from e

        note_ids = object_ids([link.get("note_id") for link in links])
        if not note_ids:
            return []
        return await self._find_notes({"_id": {"$in": note_ids}})

    async def get(self, note_id: str) -> Note:
        """A single note with its tags, or ``NoteNotFound``."""
        doc = await self._find_one(note_id)
        if doc is None:
            raise NoteNotFound()

        return Note.from_document(doc, tags=await self._tags_for(doc["_id"]))

    async def update(self, note_id: str, changes: dict[str, Any]) -> Note:
        """Apply only the given fields and refresh ``updated_at``."""
        existing = await self._find_one(note_id)
        if existing is None:
            raise NoteNotFound()

        oid = existing["_id"]
        # Clock skew must never move updated_at backwards
        previous = Note.from_document(existing).updated_at
        update_doc = {**changes, "updated_at": max(utc_now(), previous)}

        try:
            result = await self.notes.update_one({"_id": oid}, {"$set": update_doc})
        except PyMongoError as e:
            logger.error("note_update_failed", user_id=self.identity.user_id, note_id=note_id, error=str(e))
            raise PersistenceError("Failed to update note") from e

        if result.matched_count == 0:
            # Deleted between the read and the write
            raise NoteNotFound()

        updated = await self._find_one(oid)
        if updated is None:
            raise NoteNotFound()

        logger.info(
            "note_updated",
            user_id=self.identity.user_id,
            note_id=note_id,
            fields=sorted(changes),
        )
        return Note.from_document(updated)

    async def delete(self, note_id: str) -> bool:
        """Hard-delete a note and its tag links.

        Idempotent: a missing or foreign note is a no-op and returns False.
        """
        oid = parse_object_id(note_id)
        if oid is None:
            return False

        try:
            result = await self.notes.delete_one({"_id": oid})
            if result.deleted_count:
                await self.links.delete_many({"note_id": oid})
        except PyMongoError as e:
            logger.error("note_delete_failed", user_id=self.identity.user_id, note_id=note_id, error=str(e))
            raise PersistenceError("Failed to delete note") from e

        deleted = bool(result.deleted_count)
        logger.info("note_deleted", user_id=self.identity.user_id, note_id=note_id, deleted=deleted)
        return deleted

    async def _find_one(self, note_id: str | ObjectId) -> dict[str, Any] | None:
        oid = parse_object_id(note_id)
        if oid is None:
            return None

        try:
            return await self.notes.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("note_fetch_failed", user_id=self.identity.user_id, note_id=str(note_id), error=str(e))
            raise PersistenceError("Failed to fetch note") from e

    async def _find_notes(self, filter: dict[str, Any]) -> list[Note]:
        try:
            docs = await self.notes.find(filter).sort(RECENT_FIRST).to_list(length=None)
        except PyMongoError as e:
            logger.error("notes_fetch_failed", user_id=self.identity.user_id, error=str(e))
            raise PersistenceError("Failed to fetch notes") from e

        return [Note.from_document(doc) for doc in docs]

    async def _tags_for(self, note_oid: ObjectId) -> list[Tag]:
        """Tags linked to a note, deduplicated; links to invisible tags are dropped."""
        try:
            links = await self.links.find({"note_id": note_oid}, {"tag_id": 1}).to_list(length=None)
            tag_ids = object_ids([link.get("tag_id") for link in links])
            if not tag_ids:
                return []
            docs = await self.tags.find({"_id": {"$in": tag_ids}}).sort("name", 1).to_list(length=None)
        except PyMongoError as e:
            logger.error("note_tags_fetch_failed", note_id=str(note_oid), error=str(e))
            raise PersistenceError("Failed to fetch note") from e

        return [Tag.from_document(doc) for doc in docs]
