"""Authentication command handlers."""

from getpass import getpass

from api.validation import validate_credentials

from ..config import delete_token, load_token, save_token
from ..transport import api_request


def _prompt_credentials(title: str) -> tuple[str, str] | None:
    print(f"\n=== {title} ===")
    email = input("Email: ").strip()
    password = getpass("Password: ")

    # Same checks the server runs, before any request is made
    result = validate_credentials(email, password)
    if not result.valid:
        print(f"Error: {result.error}\n")
        return None

    return email, password


def _start_session(envelope: dict, message: str):
    session = envelope["data"]
    save_token(session["access_token"])

    user = session["user"]
    print(f"\n✓ {message}")
    print(f"  User ID: {user['id']}")
    print(f"  Email: {user['email']}\n")


def signup_user():
    """Handle user registration and auto-login."""
    credentials = _prompt_credentials("Sign Up")
    if credentials is None:
        return

    email, password = credentials
    envelope = api_request("POST", "/auth/signup", json={"email": email, "password": password})
    if envelope:
        _start_session(envelope, "Sign-up successful! You are now logged in.")


def login_user():
    """Handle user login."""
    credentials = _prompt_credentials("Log In")
    if credentials is None:
        return

    email, password = credentials
    envelope = api_request("POST", "/auth/login", json={"email": email, "password": password})
    if envelope:
        _start_session(envelope, "Login successful!")


def logout_user():
    """Handle user logout. The local token is dropped even if the server is unreachable."""
    token = load_token()
    if token:
        api_request("POST", "/auth/logout", token=token)
    delete_token()
    print("\n✓ Logged out successfully.\n")
