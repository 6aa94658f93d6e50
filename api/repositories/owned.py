"""Owner-scoped access to MongoDB collections.

Every query that goes through :class:`OwnedCollection` is AND-ed with the
caller's ``user_id``. Rows owned by someone else are therefore invisible:
reading, updating or deleting them behaves exactly like addressing a row that
does not exist. Inserts are stamped with the caller as owner.
"""

from __future__ import annotations

from typing import Any

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorCursor
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from ..auth import Identity
from ..errors import OwnershipViolation

logger = structlog.get_logger(__name__)

IMMUTABLE_FIELDS = frozenset({"_id", "user_id", "created_at"})


class OwnedCollection:
    """A collection view restricted to one owner's rows."""

    def __init__(self, collection: AsyncIOMotorCollection, identity: Identity):
        self._collection = collection
        self.identity = identity
        self.owner_id = identity.object_id

    @property
    def name(self) -> str:
        return self._collection.name

    def scope(self, filter: dict[str, Any] | None = None) -> dict[str, Any]:
        """Restrict ``filter`` to the owner. A conflicting ``user_id`` matches nothing."""
        if not filter:
            return {"user_id": self.owner_id}
        return {"$and": [filter, {"user_id": self.owner_id}]}

    async def find_one(self, filter: dict[str, Any], *args, **kwargs) -> dict[str, Any] | None:
        return await self._collection.find_one(self.scope(filter), *args, **kwargs)

    def find(self, filter: dict[str, Any] | None = None, *args, **kwargs) -> AsyncIOMotorCursor:
        return self._collection.find(self.scope(filter), *args, **kwargs)

    async def count_documents(self, filter: dict[str, Any] | None = None) -> int:
        return await self._collection.count_documents(self.scope(filter))

    async def insert_one(self, document: dict[str, Any]) -> InsertOneResult:
        owner = document.get("user_id", self.owner_id)
        if owner != self.owner_id:
            logger.warning(
                "owned_insert_rejected",
                collection=self.name,
                user_id=self.identity.user_id,
                claimed_owner=str(owner),
            )
            raise OwnershipViolation()

        return await self._collection.insert_one({**document, "user_id": self.owner_id})

    async def update_one(self, filter: dict[str, Any], update: dict[str, Any]) -> UpdateResult:
        self._check_update(update)
        return await self._collection.update_one(self.scope(filter), update)

    async def delete_one(self, filter: dict[str, Any]) -> DeleteResult:
        return await self._collection.delete_one(self.scope(filter))

    async def delete_many(self, filter: dict[str, Any] | None = None) -> DeleteResult:
        return await self._collection.delete_many(self.scope(filter))

    def _check_update(self, update: dict[str, Any]) -> None:
        for operator, fields in update.items():
            if not operator.startswith("$") or not isinstance(fields, dict):
                raise OwnershipViolation("Replacement updates are not allowed")

            touched = IMMUTABLE_FIELDS.intersection(fields)
            if touched:
                logger.warning(
                    "owned_update_rejected",
                    collection=self.name,
                    user_id=self.identity.user_id,
                    fields=sorted(touched),
                )
                raise OwnershipViolation()


def object_ids(values: list[Any]) -> list[ObjectId]:
    """Deduplicate ids while keeping first-seen order."""
    seen: dict[ObjectId, None] = {}
    for value in values:
        if value is not None:
            seen.setdefault(value, None)
    return list(seen)
