"""Local filesystem object store."""

from __future__ import annotations

from pathlib import Path

import structlog

from .base import ObjectStore, StoredObject

logger = structlog.get_logger(__name__)


class LocalObjectStore(ObjectStore):
    """
    Stores objects in a base directory, preserving the key as a path.

    The directory is expected to be served at ``base_url`` (the app mounts
    it as static files).
    """

    def __init__(self, base_path: str | Path = "./media", base_url: str = "/media"):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")
        logger.info("local_object_store_initialized", base_path=str(self.base_path))

    def _resolve_path(self, key: str) -> Path:
        """Resolve a key to an absolute path inside the base directory."""
        clean_key = Path(key).as_posix().lstrip("/")
        full_path = self.base_path / clean_key

        try:
            full_path.resolve().relative_to(self.base_path)
        except ValueError:
            raise ValueError(f"Invalid key: {key} (outside base directory)")

        return full_path

    def put(self, key: str, content: bytes, content_type: str | None = None) -> StoredObject:
        full_path = self._resolve_path(key)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(content)

        logger.info("object_written", key=key, size=len(content))

        return StoredObject(
            key=key,
            size_bytes=len(content),
            content_type=content_type,
            url=self.public_url(key),
        )

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/{key.lstrip('/')}"
