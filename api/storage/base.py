"""Object store interface for user uploads."""

from __future__ import annotations

import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class StoredObject:
    """An object written to the store."""

    key: str
    size_bytes: int
    content_type: str | None
    url: str


def make_key(bucket: str, owner_id: str, extension: str) -> str:
    """
    Build a collision-resistant key scoped to the owner.

    Layout: ``<bucket>/<owner_id>/<epoch-ms>-<random>.<extension>``. The
    extension is chosen by the server; client filenames never reach the key.
    """
    ext = extension.lower().lstrip(".")
    if not ext.isalnum():
        raise ValueError(f"Invalid extension: {extension}")
    return f"{bucket}/{owner_id}/{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"


class ObjectStore(ABC):
    """Abstract base class for object store backends."""

    @abstractmethod
    def put(self, key: str, content: bytes, content_type: str | None = None) -> StoredObject:
        """
        Write an object.

        Args:
            key: Object key (see :func:`make_key`)
            content: Raw bytes
            content_type: Optional MIME type

        Returns:
            StoredObject including its public URL
        """
        ...

    @abstractmethod
    def public_url(self, key: str) -> str:
        """URL under which the object can be fetched without credentials."""
        ...

    def upload(
        self, bucket: str, owner_id: str, extension: str, content: bytes, content_type: str
    ) -> StoredObject:
        """Store ``content`` under a fresh key owned by ``owner_id``."""
        return self.put(make_key(bucket, owner_id, extension), content, content_type)
