"""Tests for tags and the note-tag association."""

from api.repositories import PRESET_COLORS

MISSING_ID = "507f1f77bcf86cd799439011"


def create_note(client, auth, title="note"):
    return client.post("/notes", json={"title": title}, headers=auth["headers"]).json()["data"]


def create_tag(client, auth, name, color=None):
    body = {"name": name} if color is None else {"name": name, "color": color}
    response = client.post("/tags", json=body, headers=auth["headers"])
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestTags:
    def test_create_tag_with_color(self, api_client, alice):
        tag = create_tag(api_client, alice, "work", "#3b82f6")

        assert tag["name"] == "work"
        assert tag["color"] == "#3b82f6"
        assert tag["user_id"] == alice["user"]["id"]

    def test_create_tag_picks_preset_color(self, api_client, alice):
        tag = create_tag(api_client, alice, "ideas")

        assert tag["color"] in PRESET_COLORS

    def test_name_is_trimmed(self, api_client, alice):
        tag = create_tag(api_client, alice, "  spaced  ")

        assert tag["name"] == "spaced"

    def test_blank_name_rejected(self, api_client, alice):
        response = api_client.post("/tags", json={"name": "   "}, headers=alice["headers"])

        assert response.status_code == 422

    def test_duplicate_name_rejected(self, api_client, alice):
        create_tag(api_client, alice, "work")

        response = api_client.post("/tags", json={"name": "work"}, headers=alice["headers"])

        assert response.status_code == 409
        assert response.json()["error"] == "Tag already exists"

    def test_same_name_allowed_for_different_users(self, api_client, alice, bob):
        create_tag(api_client, alice, "work")

        response = api_client.post("/tags", json={"name": "work"}, headers=bob["headers"])

        assert response.status_code == 201

    def test_list_tags_sorted_and_scoped(self, api_client, alice, bob):
        create_tag(api_client, alice, "zeta")
        create_tag(api_client, alice, "alpha")
        create_tag(api_client, bob, "bob-only")

        response = api_client.get("/tags", headers=alice["headers"])

        assert [tag["name"] for tag in response.json()["data"]] == ["alpha", "zeta"]

    def test_rename_tag_keeps_color(self, api_client, alice):
        tag = create_tag(api_client, alice, "old", "#ef4444")

        response = api_client.patch(f"/tags/{tag['id']}", json={"name": "new"}, headers=alice["headers"])

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "new"
        assert response.json()["data"]["color"] == "#ef4444"

    def test_rename_to_existing_name_rejected(self, api_client, alice):
        create_tag(api_client, alice, "taken")
        tag = create_tag(api_client, alice, "mine")

        response = api_client.patch(f"/tags/{tag['id']}", json={"name": "taken"}, headers=alice["headers"])

        assert response.status_code == 409

    def test_foreign_tag_invisible(self, api_client, alice, bob):
        tag = create_tag(api_client, alice, "private")

        assert api_client.get(f"/tags/{tag['id']}", headers=bob["headers"]).status_code == 404
        assert (
            api_client.patch(f"/tags/{tag['id']}", json={"name": "x"}, headers=bob["headers"]).status_code
            == 404
        )


class TestTagging:
    def test_tag_round_trip(self, api_client, alice):
        note = create_note(api_client, alice)
        work = create_tag(api_client, alice, "work")
        urgent = create_tag(api_client, alice, "urgent")

        for tag in (work, urgent):
            response = api_client.put(f"/notes/{note['id']}/tags/{tag['id']}", headers=alice["headers"])
            assert response.status_code == 200

        fetched = api_client.get(f"/notes/{note['id']}", headers=alice["headers"]).json()["data"]
        assert [tag["name"] for tag in fetched["tags"]] == ["urgent", "work"]

        api_client.delete(f"/notes/{note['id']}/tags/{work['id']}", headers=alice["headers"])

        fetched = api_client.get(f"/notes/{note['id']}", headers=alice["headers"]).json()["data"]
        assert [tag["name"] for tag in fetched["tags"]] == ["urgent"]

    def test_tagging_twice_is_harmless(self, api_client, alice):
        note = create_note(api_client, alice)
        tag = create_tag(api_client, alice, "work")

        api_client.put(f"/notes/{note['id']}/tags/{tag['id']}", headers=alice["headers"])
        response = api_client.put(f"/notes/{note['id']}/tags/{tag['id']}", headers=alice["headers"])

        assert response.status_code == 200
        fetched = api_client.get(f"/notes/{note['id']}", headers=alice["headers"]).json()["data"]
        assert len(fetched["tags"]) == 1

    def test_removing_absent_link_is_fine(self, api_client, alice):
        note = create_note(api_client, alice)
        tag = create_tag(api_client, alice, "work")

        response = api_client.delete(f"/notes/{note['id']}/tags/{tag['id']}", headers=alice["headers"])

        assert response.status_code == 200

    def test_cannot_attach_foreign_tag(self, api_client, alice, bob):
        note = create_note(api_client, alice)
        foreign_tag = create_tag(api_client, bob, "bob's")

        response = api_client.put(f"/notes/{note['id']}/tags/{foreign_tag['id']}", headers=alice["headers"])

        assert response.status_code == 404
        assert response.json()["error"] == "Tag not found"

    def test_cannot_tag_foreign_note(self, api_client, alice, bob):
        foreign_note = create_note(api_client, bob)
        tag = create_tag(api_client, alice, "mine")

        response = api_client.put(f"/notes/{foreign_note['id']}/tags/{tag['id']}", headers=alice["headers"])

        assert response.status_code == 404
        assert response.json()["error"] == "Note not found"

    def test_notes_by_tag(self, api_client, alice):
        tagged = create_note(api_client, alice, "tagged")
        create_note(api_client, alice, "untagged")
        tag = create_tag(api_client, alice, "work")
        api_client.put(f"/notes/{tagged['id']}/tags/{tag['id']}", headers=alice["headers"])

        response = api_client.get(f"/tags/{tag['id']}/notes", headers=alice["headers"])

        assert response.status_code == 200
        assert [note["title"] for note in response.json()["data"]] == ["tagged"]

    def test_notes_by_foreign_tag(self, api_client, alice, bob):
        tag = create_tag(api_client, bob, "bob's")

        response = api_client.get(f"/tags/{tag['id']}/notes", headers=alice["headers"])

        assert response.status_code == 404


class TestCascades:
    def test_deleting_tag_keeps_notes(self, api_client, alice):
        note = create_note(api_client, alice)
        tag = create_tag(api_client, alice, "work")
        api_client.put(f"/notes/{note['id']}/tags/{tag['id']}", headers=alice["headers"])

        response = api_client.delete(f"/tags/{tag['id']}", headers=alice["headers"])

        assert response.status_code == 200
        fetched = api_client.get(f"/notes/{note['id']}", headers=alice["headers"]).json()["data"]
        assert fetched["tags"] == []

    def test_deleting_note_removes_links(self, api_client, mock_db, alice):
        import asyncio

        note = create_note(api_client, alice)
        tag = create_tag(api_client, alice, "work")
        api_client.put(f"/notes/{note['id']}/tags/{tag['id']}", headers=alice["headers"])

        api_client.delete(f"/notes/{note['id']}", headers=alice["headers"])

        assert asyncio.run(mock_db.note_tags.count_documents({})) == 0
        response = api_client.get(f"/tags/{tag['id']}/notes", headers=alice["headers"])
        assert response.json()["data"] == []

    def test_delete_tag_is_idempotent(self, api_client, alice):
        response = api_client.delete(f"/tags/{MISSING_ID}", headers=alice["headers"])

        assert response.status_code == 200
        assert response.json()["success"] is True
