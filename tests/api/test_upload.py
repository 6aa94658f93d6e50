"""Tests for image uploads and the object store."""

import mimetypes

import pytest

from api.routes.upload import COVER_MAX_BYTES, IMAGE_MAX_BYTES
from api.storage import LocalObjectStore, make_key

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class TestUploadEndpoints:
    def test_upload_image(self, api_client, alice, media_store):
        response = api_client.post(
            "/upload/image",
            files={"file": ("photo.png", PNG, "image/png")},
            headers=alice["headers"],
        )

        assert response.status_code == 201
        url = response.json()["data"]["url"]
        assert url.startswith(f"/media/note-images/{alice['user']['id']}/")
        assert url.endswith(".png")
        assert (media_store.base_path / url.removeprefix("/media/")).read_bytes() == PNG

    def test_upload_cover_uses_cover_bucket(self, api_client, alice):
        response = api_client.post(
            "/upload/cover",
            files={"file": ("cover.jpg", PNG, "image/jpeg")},
            headers=alice["headers"],
        )

        assert response.status_code == 201
        assert "/note-covers/" in response.json()["data"]["url"]

    def test_rejects_non_image(self, api_client, alice):
        response = api_client.post(
            "/upload/image",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=alice["headers"],
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Only image files are allowed"

    def test_rejects_oversized_image(self, api_client, alice):
        response = api_client.post(
            "/upload/image",
            files={"file": ("big.png", b"\x00" * (IMAGE_MAX_BYTES + 1), "image/png")},
            headers=alice["headers"],
        )

        assert response.status_code == 400
        assert response.json()["error"] == "File size must be less than 5MB"

    def test_cover_limit_is_larger(self, api_client, alice):
        assert COVER_MAX_BYTES > IMAGE_MAX_BYTES

        response = api_client.post(
            "/upload/cover",
            files={"file": ("big.png", b"\x00" * (IMAGE_MAX_BYTES + 1), "image/png")},
            headers=alice["headers"],
        )

        assert response.status_code == 201

    def test_rejects_empty_file(self, api_client, alice):
        response = api_client.post(
            "/upload/image",
            files={"file": ("empty.png", b"", "image/png")},
            headers=alice["headers"],
        )

        assert response.status_code == 400
        assert response.json()["error"] == "No file provided"

    def test_requires_auth(self, api_client):
        response = api_client.post("/upload/image", files={"file": ("photo.png", PNG, "image/png")})

        assert response.status_code == 401

    def test_extension_comes_from_content_type_not_filename(self, api_client, alice, media_store):
        response = api_client.post(
            "/upload/cover",
            files={"file": ("evil.html", b"<html><script>alert(1)</script></html>", "image/png")},
            headers=alice["headers"],
        )

        assert response.status_code == 201
        url = response.json()["data"]["url"]
        assert url.endswith(".png")
        assert mimetypes.guess_type(url)[0] == "image/png"
        assert (media_store.base_path / url.removeprefix("/media/")).is_file()

    @pytest.mark.parametrize("content_type", ["image/svg+xml", "image/x-icon", "text/html"])
    def test_rejects_non_raster_types(self, api_client, alice, media_store, content_type):
        response = api_client.post(
            "/upload/image",
            files={"file": ("drawing.svg", b"<svg onload='alert(1)'/>", content_type)},
            headers=alice["headers"],
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Only image files are allowed"
        assert not any(path.is_file() for path in media_store.base_path.rglob("*"))

    def test_content_type_parameters_are_ignored(self, api_client, alice):
        response = api_client.post(
            "/upload/image",
            files={"file": ("photo", PNG, "image/JPEG; q=1")},
            headers=alice["headers"],
        )

        assert response.status_code == 201
        assert response.json()["data"]["url"].endswith(".jpg")


class TestLocalObjectStore:
    def test_put(self, tmp_path):
        store = LocalObjectStore(base_path=tmp_path, base_url="/media")

        stored = store.put("bucket/owner/file.png", b"data", "image/png")

        assert stored.url == "/media/bucket/owner/file.png"
        assert stored.size_bytes == 4
        assert (tmp_path / "bucket/owner/file.png").read_bytes() == b"data"

    def test_rejects_path_traversal(self, tmp_path):
        store = LocalObjectStore(base_path=tmp_path / "media")

        with pytest.raises(ValueError):
            store.put("../escape.txt", b"nope")

    def test_keys_are_unique_and_owner_scoped(self):
        first = make_key("note-images", "owner", "PNG")
        second = make_key("note-images", "owner", "png")

        assert first != second
        assert first.startswith("note-images/owner/")
        assert first.endswith(".png")

    def test_rejects_unsafe_extension(self):
        with pytest.raises(ValueError):
            make_key("note-images", "owner", "p$g")
