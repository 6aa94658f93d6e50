"""Interactive writing mode with debounced autosave."""

import asyncio

import httpx

from ..autosave import AutosaveSession, SaveStatus
from ..config import API_URL, AUTOSAVE_DELAY
from ..transport import api_request, error_message, require_token

HELP = """
Writing mode. Each line you type is appended to the note and autosaved.
  :title <text>   rename the note
  :icon [emoji]   set or clear the icon
  :cover [url]    set or clear the cover image
  :show           print the current content
  :done           save and leave writing mode
"""

STATUS_LABELS = {
    SaveStatus.SAVING: "[saving...]",
    SaveStatus.SAVED: "[saved]",
    SaveStatus.ERROR: "[save failed]",
}


def make_persist(client: httpx.AsyncClient, note_id: str, token: str):
    """Build the coroutine the autosave session uses to PATCH the note."""

    async def persist(changes: dict):
        response = await client.patch(
            f"{API_URL}/notes/{note_id}",
            json=changes,
            headers={"Authorization": f"Bearer {token}"},
            timeout=10.0,
        )
        if response.is_error:
            raise RuntimeError(error_message(response, f"HTTP {response.status_code}"))

    return persist


async def run_writer(note: dict, token: str):
    content = note.get("content") or ""
    initial = {field: note.get(field) for field in ("title", "content", "icon", "cover_url")}

    def on_status(status: SaveStatus):
        label = STATUS_LABELS[status]
        if status is SaveStatus.ERROR and session.error:
            label = f"{label} {session.error}"
        print(f"  {label}")

    async with httpx.AsyncClient() as client:
        session = AutosaveSession(
            make_persist(client, note["id"], token),
            delay=AUTOSAVE_DELAY,
            on_status=on_status,
            initial=initial,
        )
        async with session:
            while True:
                line = await asyncio.to_thread(input, "> ")
                command, _, arg = line.partition(" ")
                arg = arg.strip() or None

                if command == ":done":
                    break
                if command == ":show":
                    print(content or "(empty)")
                elif command == ":title":
                    session.set_title(arg or "")
                elif command == ":icon":
                    session.set_icon(arg)
                elif command == ":cover":
                    session.set_cover(arg)
                elif command == ":help":
                    print(HELP)
                else:
                    content = f"{content}\n{line}" if content else line
                    session.set_content(content)

    if session.status is SaveStatus.ERROR:
        print(f"\nWarning: last save failed: {session.error}\n")
    else:
        print("\n✓ All changes saved.\n")


def write_note(note_id: str):
    """Open a note in writing mode: /write <note_id>."""
    if not note_id or not note_id.strip():
        print("Error: Note ID is required. Usage: /write <note_id>\n")
        return

    token = require_token("edit notes")
    if not token:
        return

    envelope = api_request("GET", f"/notes/{note_id.strip()}", token=token)
    if not envelope:
        return

    note = envelope["data"]
    print(f"\n=== Writing: {note.get('title') or 'Untitled'} ===")
    print(HELP)
    try:
        asyncio.run(run_writer(note, token))
    except (EOFError, KeyboardInterrupt):
        print("\nLeft writing mode.\n")
