"""
Tests for profile picture and avatar uploads.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from reelshelf.config import settings
from reelshelf.models.user import User
from reelshelf.services.upload_service import format_size_limit

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.mark.unit
class TestUploads:
    """Test image upload endpoints."""

    def test_upload_profile_picture(
        self, client: TestClient, test_db: Session, test_user: User, auth_headers: dict
    ):
        response = client.post(
            "/api/uploads/profile-picture",
            headers=auth_headers,
            files={"file": ("me.png", PNG_BYTES, "image/png")}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["url"].startswith("/uploads/profiles/")
        assert data["url"].endswith("_me.png")
        assert data["size"] == len(PNG_BYTES)
        assert (Path(settings.UPLOAD_DIR) / "profiles" / data["filename"]).read_bytes() == PNG_BYTES

        test_db.refresh(test_user)
        assert test_user.profile_picture == data["url"]

    def test_uploaded_file_is_served(self, client: TestClient, auth_headers: dict):
        url = client.post(
            "/api/uploads/avatar",
            headers=auth_headers,
            files={"file": ("a.png", PNG_BYTES, "image/png")}
        ).json()["url"]

        response = client.get(url)

        assert response.status_code == 200
        assert response.content == PNG_BYTES

    def test_filename_is_sanitized(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/uploads/profile-picture",
            headers=auth_headers,
            files={"file": ("my photo (1).png", PNG_BYTES, "image/png")}
        )

        assert response.status_code == 200
        assert " " not in response.json()["filename"]
        assert "/" not in response.json()["filename"]

    def test_profile_picture_too_large(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/uploads/profile-picture",
            headers=auth_headers,
            files={"file": ("big.png", b"\x00" * (1024 * 1024 + 1), "image/png")}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "File size must be less than 1MB"

    def test_avatar_too_large(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/uploads/avatar",
            headers=auth_headers,
            files={"file": ("big.jpg", b"\x00" * (500 * 1024 + 1), "image/jpeg")}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "File size must be less than 500KB"

    def test_avatar_at_limit_accepted(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/uploads/avatar",
            headers=auth_headers,
            files={"file": ("edge.jpg", b"\x00" * (500 * 1024), "image/jpeg")}
        )

        assert response.status_code == 200

    def test_unsupported_type(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/uploads/profile-picture",
            headers=auth_headers,
            files={"file": ("anim.gif", b"GIF89a", "image/gif")}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "File must be JPG, PNG, or SVG"

    def test_empty_file(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/uploads/profile-picture",
            headers=auth_headers,
            files={"file": ("empty.png", b"", "image/png")}
        )

        assert response.status_code == 400

    def test_requires_authentication(self, client: TestClient):
        response = client.post(
            "/api/uploads/profile-picture",
            files={"file": ("me.png", PNG_BYTES, "image/png")}
        )

        assert response.status_code in (401, 403)


@pytest.mark.unit
@pytest.mark.parametrize("max_bytes,expected", [
    (1024 * 1024, "1MB"),
    (500 * 1024, "500KB"),
    (1500, "1500 bytes"),
])
def test_format_size_limit(max_bytes, expected):
    assert format_size_limit(max_bytes) == expected
