"""CLI command handlers."""

from .auth import login_user, logout_user, signup_user
from .notes import create_note, delete_note, list_notes, rename_note, set_icon, view_note
from .tags import create_tag, delete_tag, list_tags, notes_by_tag, tag_note, untag_note
from .write import write_note

__all__ = [
    # Auth commands
    "login_user",
    "logout_user",
    "signup_user",
    # Notes commands
    "create_note",
    "delete_note",
    "list_notes",
    "rename_note",
    "set_icon",
    "view_note",
    "write_note",
    # Tag commands
    "create_tag",
    "delete_tag",
    "list_tags",
    "notes_by_tag",
    "tag_note",
    "untag_note",
]
