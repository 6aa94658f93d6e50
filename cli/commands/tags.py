"""Tag command handlers."""

from ..transport import api_request, require_token
from .notes import print_note_summary


def list_tags(args: str = ""):
    """List the user's tags."""
    token = require_token("list tags")
    if not token:
        return

    envelope = api_request("GET", "/tags", token=token)
    if not envelope:
        return

    tags = envelope["data"] or []
    if not tags:
        print("\nNo tags yet. Use /newtag <name> [#color] to create one.\n")
        return

    print("\n=== Your Tags ===\n")
    for tag in tags:
        print(f"  {tag['name']}  {tag.get('color') or ''}  (ID: {tag['id']})")
    print()


def create_tag(args: str):
    """Create a tag: /newtag <name> [#color]."""
    parts = args.strip().rsplit(maxsplit=1)
    if not parts:
        print("Error: Usage: /newtag <name> [#color]\n")
        return

    payload = {"name": args.strip()}
    if len(parts) == 2 and parts[1].startswith("#"):
        payload = {"name": parts[0], "color": parts[1]}

    token = require_token("create tags")
    if not token:
        return

    envelope = api_request("POST", "/tags", token=token, json=payload)
    if envelope:
        tag = envelope["data"]
        print(f"\n✓ Tag '{tag['name']}' created ({tag['color']}). ID: {tag['id']}\n")


def delete_tag(tag_id: str):
    if not tag_id.strip():
        print("Error: Usage: /deltag <tag_id>\n")
        return

    token = require_token("delete tags")
    if token and api_request("DELETE", f"/tags/{tag_id.strip()}", token=token):
        print("\n✓ Tag deleted. Notes that carried it are kept.\n")


def tag_note(args: str):
    """Attach a tag: /tag <note_id> <tag_id>."""
    parts = args.split()
    if len(parts) != 2:
        print("Error: Usage: /tag <note_id> <tag_id>\n")
        return

    token = require_token("tag notes")
    if token and api_request("PUT", f"/notes/{parts[0]}/tags/{parts[1]}", token=token):
        print("\n✓ Tag added.\n")


def untag_note(args: str):
    """Detach a tag: /untag <note_id> <tag_id>."""
    parts = args.split()
    if len(parts) != 2:
        print("Error: Usage: /untag <note_id> <tag_id>\n")
        return

    token = require_token("tag notes")
    if token and api_request("DELETE", f"/notes/{parts[0]}/tags/{parts[1]}", token=token):
        print("\n✓ Tag removed.\n")


def notes_by_tag(tag_id: str):
    """List notes carrying a tag: /tagged <tag_id>."""
    if not tag_id.strip():
        print("Error: Usage: /tagged <tag_id>\n")
        return

    token = require_token("list notes")
    if not token:
        return

    envelope = api_request("GET", f"/tags/{tag_id.strip()}/notes", token=token)
    if not envelope:
        return

    notes = envelope["data"] or []
    if not notes:
        print("\nNo notes carry this tag.\n")
        return

    print(f"\n=== Tagged Notes ({len(notes)}) ===\n")
    for note in notes:
        print_note_summary(note)
