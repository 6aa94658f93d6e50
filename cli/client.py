"""Main CLI client with REPL loop."""

import os

from dotenv import load_dotenv

from .commands import (
    create_note,
    create_tag,
    delete_note,
    delete_tag,
    list_notes,
    list_tags,
    login_user,
    logout_user,
    notes_by_tag,
    rename_note,
    set_icon,
    signup_user,
    tag_note,
    untag_note,
    view_note,
    write_note,
)
from .config import load_token

COMMANDS = {
    "/signup": lambda args: signup_user(),
    "/login": lambda args: login_user(),
    "/logout": lambda args: logout_user(),
    "/new": create_note,
    "/notes": list_notes,
    "/view": view_note,
    "/rename": rename_note,
    "/icon": set_icon,
    "/delete": delete_note,
    "/write": write_note,
    "/tags": list_tags,
    "/newtag": create_tag,
    "/deltag": delete_tag,
    "/tag": tag_note,
    "/untag": untag_note,
    "/tagged": notes_by_tag,
}


def print_help():
    print("\nAuth Commands:")
    print("  /signup - Create a new account")
    print("  /login - Log in to an existing account")
    print("  /logout - Log out")
    print("\nNote Commands:")
    print("  /new [title] - Create a new note")
    print("  /notes - List your notes, most recently modified first")
    print("  /view <note_id> - Show a note with its tags")
    print("  /write <note_id> - Edit a note with autosave")
    print("  /rename <note_id> <title> - Rename a note")
    print("  /icon <note_id> [emoji] - Set or clear a note's icon")
    print("  /delete <note_id> - Delete a note")
    print("\nTag Commands:")
    print("  /tags - List your tags")
    print("  /newtag <name> [#color] - Create a tag")
    print("  /deltag <tag_id> - Delete a tag")
    print("  /tag <note_id> <tag_id> - Attach a tag to a note")
    print("  /untag <note_id> <tag_id> - Detach a tag from a note")
    print("  /tagged <tag_id> - List notes carrying a tag")
    print("\nUtility Commands:")
    print("  /help - Show this list")
    print("  /clear - Clear the terminal screen")
    print("\nType 'exit' or 'quit' to leave.")


def main():
    """CLI client for the Vibe Notes API."""
    load_dotenv()

    print("Welcome to Vibe Notes!")
    print_help()
    print("Note: Make sure the API server is running (python -m api.server)\n")

    if load_token():
        print("✓ You are already logged in.\n")
    else:
        print("⚠ You are not logged in. Please /signup or /login.\n")

    while True:
        try:
            user_input = input("vibenotes> ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\nGoodbye!")
            break

        if user_input.lower() in ["exit", "quit"]:
            print("\nGoodbye!")
            break

        if not user_input:
            continue

        command, _, args = user_input.partition(" ")
        command = command.lower()

        if command == "/help":
            print_help()
            continue

        if command == "/clear":
            # Clear terminal screen (cross-platform)
            os.system("cls" if os.name == "nt" else "clear")
            continue

        handler = COMMANDS.get(command)
        if handler is None:
            print(f"Unknown command: {command}. Type /help for the list.\n")
            continue

        try:
            handler(args)
        except KeyboardInterrupt:
            print("\nCancelled.\n")


if __name__ == "__main__":
    main()
