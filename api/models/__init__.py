"""Pydantic models for API requests and responses."""

from .auth import AuthSession, Credentials, Redirect, UserResponse
from .common import ActionResult
from .notes import Note, NoteCreate, NoteUpdate
from .tags import Tag, TagCreate, TagUpdate
from .uploads import UploadedFile

__all__ = [
    "ActionResult",
    # Auth models
    "AuthSession",
    "Credentials",
    # Notes models
    "Note",
    "NoteCreate",
    "NoteUpdate",
    "Redirect",
    # Tag models
    "Tag",
    "TagCreate",
    "TagUpdate",
    "UploadedFile",
    "UserResponse",
]
