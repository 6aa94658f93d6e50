"""Object storage for uploaded images."""

import os

from .base import ObjectStore, StoredObject, make_key
from .local import LocalObjectStore

__all__ = [
    "LocalObjectStore",
    "ObjectStore",
    "StoredObject",
    "get_object_store",
    "make_key",
    "reset_object_store",
]

MEDIA_ROOT = os.getenv("MEDIA_ROOT", "./media")
MEDIA_BASE_URL = os.getenv("MEDIA_BASE_URL", "/media")

_store: ObjectStore | None = None


def get_object_store() -> ObjectStore:
    """Get or create the object store instance."""
    global _store
    if _store is None:
        _store = LocalObjectStore(base_path=MEDIA_ROOT, base_url=MEDIA_BASE_URL)
    return _store


def reset_object_store(store: ObjectStore | None = None) -> None:
    """Replace the object store instance (for testing)."""
    global _store
    _store = store
