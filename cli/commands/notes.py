"""Notes command handlers."""

from datetime import datetime

from ..transport import api_request, require_token


def _format_time(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except (AttributeError, ValueError):
        return value or ""


def print_note_summary(note: dict):
    icon = f"{note['icon']} " if note.get("icon") else ""
    print(f"{icon}{note.get('title') or 'Untitled'}")
    print(f"  ID: {note['id']}")
    print(f"  Updated: {_format_time(note.get('updated_at', ''))}\n")


def create_note(args: str = ""):
    """Create a note, optionally with a title."""
    token = require_token("create notes")
    if not token:
        return

    title = args.strip() or input("Title (optional): ").strip()
    envelope = api_request("POST", "/notes", token=token, json={"title": title})
    if not envelope:
        return

    note = envelope["data"]
    print("\n✓ Note created successfully!")
    print(f"  Note ID: {note['id']}")
    print(f"  Title: {note['title'] or 'Untitled'}")
    print(f"  Created: {_format_time(note['created_at'])}")
    print(f"  Use /write {note['id']} to start writing.\n")


def list_notes(args: str = ""):
    """List all notes for the authenticated user."""
    token = require_token("list notes")
    if not token:
        return

    envelope = api_request("GET", "/notes", token=token)
    if not envelope:
        return

    notes = envelope["data"] or []
    if not notes:
        print("\nNo notes yet. Use /new to create one.\n")
        return

    print(f"\n=== Your Notes ({len(notes)} total) ===\n")
    for note in notes:
        print_note_summary(note)


def view_note(note_id: str):
    """View a specific note by ID."""
    if not note_id or not note_id.strip():
        print("Error: Note ID is required. Usage: /view <note_id>\n")
        return

    token = require_token("view notes")
    if not token:
        return

    envelope = api_request("GET", f"/notes/{note_id.strip()}", token=token)
    if not envelope:
        return

    note = envelope["data"]
    tags = ", ".join(tag["name"] for tag in note.get("tags") or []) or "no tags"

    print(f"\n{'=' * 60}")
    if note.get("icon"):
        print(f"Icon: {note['icon']}")
    print(f"Title: {note.get('title') or 'Untitled'}")
    print(f"ID: {note['id']}")
    print(f"Tags: {tags}")
    if note.get("cover_url"):
        print(f"Cover: {note['cover_url']}")
    print(f"Created: {_format_time(note['created_at'])}")
    print(f"Updated: {_format_time(note['updated_at'])}")
    print(f"{'=' * 60}\n")
    print(note.get("content") or "")
    print(f"\n{'=' * 60}\n")


def rename_note(args: str):
    """Rename a note (update its title)."""
    parts = args.strip().split(maxsplit=1)
    if len(parts) < 2:
        print("Error: Usage: /rename <note_id> <new_title>\n")
        return

    note_id, new_title = parts
    token = require_token("rename notes")
    if not token:
        return

    envelope = api_request("PATCH", f"/notes/{note_id}", token=token, json={"title": new_title})
    if envelope:
        print("\n✓ Note renamed successfully!")
        print(f"  New title: {envelope['data']['title']}\n")


def set_icon(args: str):
    """Set or clear a note's icon: /icon <note_id> [emoji]."""
    parts = args.strip().split(maxsplit=1)
    if not parts:
        print("Error: Usage: /icon <note_id> [emoji]\n")
        return

    note_id = parts[0]
    icon = parts[1] if len(parts) > 1 else None
    token = require_token("edit notes")
    if not token:
        return

    envelope = api_request("PATCH", f"/notes/{note_id}", token=token, json={"icon": icon})
    if envelope:
        print(f"\n✓ Icon {'set to ' + icon if icon else 'removed'}.\n")


def delete_note(note_id: str):
    """Permanently delete a note after confirmation."""
    if not note_id or not note_id.strip():
        print("Error: Note ID is required. Usage: /delete <note_id>\n")
        return

    token = require_token("delete notes")
    if not token:
        return

    confirm = input("This cannot be undone. Delete? [y/N]: ").strip().lower()
    if confirm != "y":
        print("Cancelled.\n")
        return

    if api_request("DELETE", f"/notes/{note_id.strip()}", token=token):
        print("\n✓ Note deleted.\n")
