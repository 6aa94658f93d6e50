"""Configuration and storage utilities for CLI client."""

import os
from pathlib import Path

# Configuration
API_URL = os.getenv("VIBENOTES_API_URL", "http://localhost:8000").rstrip("/")
AUTOSAVE_DELAY = float(os.getenv("VIBENOTES_AUTOSAVE_DELAY", "1.5"))
TOKEN_FILE = Path.home() / ".vibenotes" / "token"


def save_token(token: str):
    """Save JWT token to local file."""
    TOKEN_FILE.parent.mkdir(parents=True, exist_ok=True)
    TOKEN_FILE.write_text(token)
    TOKEN_FILE.chmod(0o600)


def load_token() -> str | None:
    """Load JWT token from local file."""
    if TOKEN_FILE.exists():
        return TOKEN_FILE.read_text().strip() or None
    return None


def delete_token():
    """Delete JWT token file."""
    if TOKEN_FILE.exists():
        TOKEN_FILE.unlink()
