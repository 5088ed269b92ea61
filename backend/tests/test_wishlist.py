"""
Tests for per-type wishlists.
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from reelshelf.models.media import Media
from reelshelf.models.user import User
from reelshelf.models.wishlist import WishlistItem


def _add(client: TestClient, headers: dict, media_type: str, item_id: str, name: str, **extra):
    return client.post(
        f"/api/wishlist/{media_type}",
        headers=headers,
        json={"item_id": item_id, "item_name": name, **extra}
    )


@pytest.mark.unit
class TestWishlistAdd:
    """Test adding titles."""

    def test_add_movie(self, client: TestClient, auth_headers: dict):
        response = _add(client, auth_headers, "movie", "tt0133093", "The Matrix", item_year=1999, item_cover="https://img/m.jpg")

        assert response.status_code == 201
        data = response.json()
        assert data["item_type"] == "movie"
        assert data["item_id"] == "tt0133093"
        assert data["item_name"] == "The Matrix"
        assert data["item_year"] == 1999
        assert data["item_cover"] == "https://img/m.jpg"
        assert data["added_at"]

    @pytest.mark.parametrize("media_type,label", [
        ("movie", "Movie"),
        ("tv", "TV show"),
        ("game", "Game"),
    ])
    def test_duplicate_rejected(self, client: TestClient, test_db: Session, auth_headers: dict, media_type, label):
        assert _add(client, auth_headers, media_type, "x-1", "Title").status_code == 201

        response = _add(client, auth_headers, media_type, "x-1", "Title")

        assert response.status_code == 400
        assert response.json()["detail"] == f"{label} already in wishlist"
        assert test_db.query(WishlistItem).count() == 1

    @pytest.mark.parametrize("body", [
        {"item_name": "The Matrix"},
        {"item_id": "tt0133093"},
        {"item_id": "  ", "item_name": "The Matrix"},
    ])
    def test_missing_fields_rejected(self, client: TestClient, auth_headers: dict, body: dict):
        response = client.post("/api/wishlist/movie", headers=auth_headers, json=body)

        assert response.status_code == 400
        assert response.json()["detail"] == "item_id and item_name are required"

    def test_invalid_media_type(self, client: TestClient, auth_headers: dict):
        response = _add(client, auth_headers, "book", "isbn-1", "Dune")

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid media type. Must be movie, tv, or game"

    def test_same_id_on_different_types_is_separate(self, client: TestClient, auth_headers: dict):
        assert _add(client, auth_headers, "movie", "42", "Movie 42").status_code == 201
        assert _add(client, auth_headers, "game", "42", "Game 42").status_code == 201

    def test_reuses_catalogued_media(self, client: TestClient, test_db: Session, auth_headers: dict, movie: Media):
        response = _add(client, auth_headers, "movie", movie.external_id, movie.title)

        assert response.status_code == 201
        assert test_db.query(Media).filter(Media.external_id == movie.external_id).count() == 1

    def test_requires_authentication(self, client: TestClient):
        response = client.post("/api/wishlist/movie", json={"item_id": "tt1", "item_name": "X"})

        assert response.status_code in (401, 403)


@pytest.mark.unit
class TestWishlistReadRemove:
    """Test listing, checking and removing."""

    def test_list_is_per_type_newest_first(self, client: TestClient, test_db: Session, auth_headers: dict):
        _add(client, auth_headers, "tv", "tt0903747", "Breaking Bad")
        _add(client, auth_headers, "tv", "tt0944947", "Game of Thrones")
        _add(client, auth_headers, "game", "1942", "The Witcher 3")

        older = test_db.query(WishlistItem).join(Media).filter(Media.external_id == "tt0903747").one()
        older.created_at = datetime.utcnow() - timedelta(days=1)
        test_db.commit()

        response = client.get("/api/wishlist/tv", headers=auth_headers)

        assert response.status_code == 200
        assert [i["item_name"] for i in response.json()] == ["Game of Thrones", "Breaking Bad"]

    def test_lists_are_private(self, client: TestClient, auth_headers: dict, auth_headers2: dict):
        _add(client, auth_headers, "movie", "tt0133093", "The Matrix")

        assert client.get("/api/wishlist/movie", headers=auth_headers2).json() == []
        check = client.get("/api/wishlist/movie/check", headers=auth_headers2, params={"item_id": "tt0133093"})
        assert check.json() == {"in_wishlist": False}

    def test_check(self, client: TestClient, auth_headers: dict):
        _add(client, auth_headers, "game", "1942", "The Witcher 3")

        hit = client.get("/api/wishlist/game/check", headers=auth_headers, params={"item_id": "1942"})
        miss = client.get("/api/wishlist/movie/check", headers=auth_headers, params={"item_id": "1942"})

        assert hit.json() == {"in_wishlist": True}
        assert miss.json() == {"in_wishlist": False}

    def test_remove_is_idempotent(self, client: TestClient, test_db: Session, auth_headers: dict):
        _add(client, auth_headers, "movie", "tt0133093", "The Matrix")

        first = client.delete("/api/wishlist/movie/tt0133093", headers=auth_headers)
        second = client.delete("/api/wishlist/movie/tt0133093", headers=auth_headers)

        assert first.status_code == 200
        assert first.json() == {"removed": True}
        assert second.json() == {"removed": False}
        assert test_db.query(WishlistItem).count() == 0
        # The catalogued title outlives the wishlist entry
        assert test_db.query(Media).count() == 1

    def test_removed_title_can_be_added_again(self, client: TestClient, auth_headers: dict):
        _add(client, auth_headers, "movie", "tt0133093", "The Matrix")
        client.delete("/api/wishlist/movie/tt0133093", headers=auth_headers)

        assert _add(client, auth_headers, "movie", "tt0133093", "The Matrix").status_code == 201

    def test_account_deletion_clears_wishlist(
        self, client: TestClient, test_db: Session, test_user: User, auth_headers: dict
    ):
        _add(client, auth_headers, "movie", "tt0133093", "The Matrix")
        user_id = test_user.id

        response = client.delete("/api/users/account", headers=auth_headers)

        assert response.status_code == 200
        test_db.expire_all()
        assert test_db.query(User).filter(User.id == user_id).first() is None
        assert test_db.query(WishlistItem).count() == 0
