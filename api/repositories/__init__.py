"""Owner-scoped data access. Routes reach the store only through these."""

from fastapi import Depends

from ..auth import Identity, get_identity
from ..database import get_db
from .notes import NoteRepository
from .owned import OwnedCollection
from .tags import PRESET_COLORS, TagRepository


def get_note_repository(identity: Identity = Depends(get_identity)) -> NoteRepository:
    return NoteRepository(get_db(), identity)


def get_tag_repository(identity: Identity = Depends(get_identity)) -> TagRepository:
    return TagRepository(get_db(), identity)


__all__ = [
    "PRESET_COLORS",
    "NoteRepository",
    "OwnedCollection",
    "TagRepository",
    "get_note_repository",
    "get_tag_repository",
]
