"""Shared response envelope and timestamp helpers."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Generic, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel

T = TypeVar("T")


class ActionResult(BaseModel, Generic[T]):
    """Uniform result returned by every operation."""

    success: bool = True
    data: T | None = None
    error: str | None = None


def utc_now() -> datetime:
    """Current UTC time truncated to the store's millisecond precision."""
    now = datetime.now(UTC)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime read back from the store to an aware UTC value."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def parse_object_id(value: str | ObjectId | None) -> ObjectId | None:
    """Parse an id from a request. Malformed ids yield None, never an error."""
    if isinstance(value, ObjectId):
        return value
    if value is None:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None
