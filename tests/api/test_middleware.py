"""Tests for the route guard and the dashboard."""

import asyncio

import pytest
from bson import ObjectId

from api.middleware import is_auth_route, is_protected_route

HTML = {"Accept": "text/html"}


class TestRouteMatching:
    @pytest.mark.parametrize("path", ["/dashboard", "/notes", "/notes/abc", "/tags/x/notes"])
    def test_protected(self, path):
        assert is_protected_route(path)

    @pytest.mark.parametrize("path", ["/", "/health", "/notesy", "/auth/login", "/login"])
    def test_not_protected(self, path):
        assert not is_protected_route(path)

    def test_auth_routes(self):
        assert is_auth_route("/login")
        assert is_auth_route("/signup")
        assert not is_auth_route("/auth/signup")


class TestRouteGuard:
    def test_browser_without_session_goes_to_login(self, api_client):
        response = api_client.get("/dashboard", headers=HTML, follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    def test_api_client_without_session_gets_401(self, api_client):
        response = api_client.get("/dashboard", follow_redirects=False)

        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_signed_in_user_skips_login_page(self, api_client, alice):
        response = api_client.get(
            "/login", headers={**HTML, **alice["headers"]}, follow_redirects=False
        )

        assert response.status_code == 307
        assert response.headers["location"] == "/dashboard"

    def test_login_page_for_anonymous_user(self, api_client):
        response = api_client.get("/login", headers=HTML)

        assert response.status_code == 200
        assert response.json()["data"] == {"view": "login", "action": "/auth/login"}

    def test_protected_responses_are_not_cached(self, api_client, alice):
        response = api_client.get("/notes", headers=alice["headers"])

        assert response.headers["cache-control"] == "no-store"

    def test_public_paths_pass_through(self, api_client):
        response = api_client.get("/health", headers=HTML)

        assert response.status_code == 200


class TestInactiveAccounts:
    """A token for a deleted or disabled user counts as no session at all."""

    @staticmethod
    def disable(mock_db, user):
        asyncio.run(
            mock_db.users.update_one({"_id": ObjectId(user["id"])}, {"$set": {"status": "disabled"}})
        )

    def test_disabled_user_is_sent_to_login(self, api_client, mock_db, alice):
        self.disable(mock_db, alice["user"])

        response = api_client.get(
            "/dashboard", headers={**HTML, **alice["headers"]}, follow_redirects=False
        )

        assert response.status_code == 307
        assert response.headers["location"] == "/login"

    def test_disabled_user_can_open_login_page(self, api_client, mock_db, alice):
        self.disable(mock_db, alice["user"])

        response = api_client.get(
            "/login", headers={**HTML, **alice["headers"]}, follow_redirects=False
        )

        assert response.status_code == 200
        assert response.json()["data"]["view"] == "login"

    def test_deleted_user_can_open_signup_page(self, api_client, mock_db, alice):
        asyncio.run(mock_db.users.delete_many({}))

        response = api_client.get(
            "/signup", headers={**HTML, **alice["headers"]}, follow_redirects=False
        )

        assert response.status_code == 200

    def test_stale_session_cookie_is_cleared(self, api_client, mock_db, sample_user_data):
        signup = api_client.post("/auth/signup", json=sample_user_data)
        self.disable(mock_db, signup.json()["data"]["user"])

        response = api_client.get("/dashboard", headers=HTML, follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/login"
        assert "access_token=" in response.headers["set-cookie"]
        assert "Max-Age=0" in response.headers["set-cookie"]


class TestDashboard:
    def test_dashboard_lists_notes_and_tags(self, api_client, alice):
        api_client.post("/notes", json={"title": "hello"}, headers=alice["headers"])
        api_client.post("/tags", json={"name": "work"}, headers=alice["headers"])

        response = api_client.get("/dashboard", headers=alice["headers"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert [note["title"] for note in data["notes"]] == ["hello"]
        assert [tag["name"] for tag in data["tags"]] == ["work"]
