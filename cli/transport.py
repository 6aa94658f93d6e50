"""HTTP helpers shared by the CLI commands."""

import httpx

from .config import API_URL, delete_token, load_token


def error_message(response: httpx.Response, default: str = "Unknown error") -> str:
    """Pull the error out of a failure envelope."""
    try:
        return response.json().get("error") or default
    except ValueError:
        return default


def require_token(action: str) -> str | None:
    """Return the saved token, or explain that the user must log in first."""
    token = load_token()
    if not token:
        print(f"Error: You must be logged in to {action}. Use /signup or /login.\n")
    return token


def api_request(method: str, path: str, token: str | None = None, **kwargs) -> dict | None:
    """
    Call the API and return the decoded result envelope.

    Failures are printed and reported as None. A rejected token is
    forgotten so the next command asks the user to log in again.
    """
    headers = {"Authorization": f"Bearer {token}"} if token else {}

    try:
        response = httpx.request(
            method, f"{API_URL}{path}", headers=headers, timeout=10.0, **kwargs
        )
        response.raise_for_status()
        return response.json()
    except httpx.ConnectError:
        print("Error: Could not connect to API server.")
        print("Please start the server with: python -m api.server\n")
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 401 and token:
            print("Error: Authentication failed. Please /login again.\n")
            delete_token()
        else:
            print(f"Error: {error_message(e.response)}\n")
    except httpx.HTTPError as e:
        print(f"Error: API request failed: {e}\n")

    return None
