"""
End-to-end tests for complete user journeys.
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from reelshelf.models.media import Media
from reelshelf.models.media_list import MediaList
from reelshelf.models.platform import PlatformConnection
from reelshelf.models.user import User


def _register(client: TestClient, username: str) -> dict:
    response = client.post(
        "/api/auth/register",
        json={"email": f"{username}@example.com", "username": username, "password": "secret123"}
    )
    assert response.status_code == 201
    data = response.json()
    return {"Authorization": f"Bearer {data['access_token']}", "_id": data["user"]["id"]}


def _headers(account: dict) -> dict:
    return {"Authorization": account["Authorization"]}


@pytest.mark.e2e
class TestCuratorJourney:
    """A new user builds a list, reviews a title and is discovered by a friend."""

    def test_list_review_and_social_flow(self, client: TestClient, test_db: Session):
        alice = _register(client, "alice")
        bob = _register(client, "bob")

        # Alice personalizes her profile; the refreshed token replaces the old one
        profile = client.put("/api/users/profile", headers=_headers(alice), json={"bio": "Sci-fi only"}).json()
        alice["Authorization"] = f"Bearer {profile['access_token']}"

        # She builds a ranked list
        created = client.post("/api/lists", headers=_headers(alice), json={
            "title": "Best of the 90s",
            "is_public": True,
            "items": [
                {"item_type": "movie", "external_id": "tt0133093", "item_name": "The Matrix", "item_year": 1999},
                {"item_type": "movie", "external_id": "tt0114369", "item_name": "Se7en", "item_year": 1995},
            ]
        })
        assert created.status_code == 201
        list_id = created.json()["id"]

        added = client.post(f"/api/lists/{list_id}/items", headers=_headers(alice), json={
            "item_type": "movie", "external_id": "tt0110912", "item_name": "Pulp Fiction", "item_year": 1994
        })
        assert added.json()["position"] == 3

        items = client.get(f"/api/lists/{list_id}").json()["items"]
        new_order = [items[2]["id"], items[0]["id"], items[1]["id"]]
        reordered = client.put(f"/api/lists/{list_id}/reorder", headers=_headers(alice), json={"item_ids": new_order})
        assert [i["title"] for i in reordered.json()["items"]] == ["Pulp Fiction", "The Matrix", "Se7en"]

        # The review reuses the title catalogued by the list
        review = client.post("/api/reviews", headers=_headers(alice), json={
            "media_type": "movie",
            "media_id": "tt0133093",
            "media_title": "The Matrix",
            "rating": 5.0,
            "content": "Changed everything."
        }).json()
        assert test_db.query(Media).filter(Media.external_id == "tt0133093").count() == 1

        status = client.get("/api/reviews/status/movie/tt0133093", headers=_headers(alice)).json()
        assert status["reviewed"] is True
        assert status["list_ids"] == [list_id]

        # Bob finds Alice, follows her and reacts to her review
        found = client.get("/api/search", params={"q": "ali"}).json()
        assert [u["username"] for u in found["users"]] == ["alice"]
        assert found["movies"] == []
        matrix = client.get("/api/search", params={"q": "matrix"}).json()["movies"]
        assert [(m["title"], m["year"]) for m in matrix] == [("The Matrix", 1999)]

        assert client.post(f"/api/social/friends/{alice['_id']}", headers=_headers(bob)).status_code == 201
        assert client.post(f"/api/reviews/{review['id']}/like", headers=_headers(bob)).json()["liked"] is True
        client.post(f"/api/reviews/{review['id']}/comments", headers=_headers(bob), json={"content": "Agreed!"})

        friends = client.get("/api/social/friends", headers=_headers(bob)).json()
        assert friends[0]["username"] == "alice"
        assert friends[0]["review_count"] == 1
        assert friends[0]["list_count"] == 1

        public = client.get("/api/users/alice", headers=_headers(bob)).json()
        assert public["followers_count"] == 1
        assert public["is_following"] is True
        assert public["bio"] == "Sci-fi only"

        seen_by_alice = client.get(f"/api/reviews/{review['id']}", headers=_headers(alice)).json()
        assert seen_by_alice["likes_count"] == 1
        assert [c["content"] for c in seen_by_alice["comments"]] == ["Agreed!"]

    def test_private_list_and_watch_later(self, client: TestClient, test_db: Session):
        carol = _register(client, "carol")
        dave = _register(client, "dave")

        private = client.post("/api/lists", headers=_headers(carol), json={"title": "Guilty pleasures", "is_public": False})
        assert client.get(f"/api/lists/{private.json()['id']}", headers=_headers(dave)).status_code == 403

        client.post("/api/watchlater", headers=_headers(carol), json={
            "item_type": "game", "external_id": "1942", "item_name": "The Witcher 3", "priority": "high"
        })
        client.post("/api/watchlater", headers=_headers(carol), json={
            "item_type": "tv", "external_id": "tt0903747", "item_name": "Breaking Bad"
        })

        watch_later = client.get("/api/watchlater", headers=_headers(carol)).json()
        assert [i["title"] for i in watch_later] == ["The Witcher 3", "Breaking Bad"]
        assert watch_later[0]["priority"] == "high"
        assert watch_later[1]["priority"] == "medium"

        carol_lists = client.get(f"/api/users/{carol['_id']}/lists", headers=_headers(dave)).json()
        assert carol_lists == []


@pytest.mark.e2e
@pytest.mark.platform
class TestGamerJourney:
    """A user links a console account and their activity appears on their profile."""

    def test_link_xbox_then_delete_account(self, client: TestClient, test_db: Session):
        erin = _register(client, "erin")

        xbox = MagicMock()
        xbox.get_library.return_value = {"xuid": "2535", "games": [
            {"name": "Halo Infinite", "hours_total": 40.5, "last_played": "2024-05-01T20:00:00Z", "image_url": "halo.png"},
            {"name": "Forza Horizon 5", "hours_total": 12.0, "last_played": "2024-04-01T20:00:00Z"},
        ]}

        with patch("reelshelf.services.platform_service.XboxAPI", return_value=xbox):
            connected = client.post("/api/platforms/xbox/connect", headers=_headers(erin), json={"gamertag": "ErinPlays"})

        assert connected.status_code == 200
        assert connected.json()["games_count"] == 2

        activity = client.get(f"/api/users/{erin['_id']}/activity").json()
        assert [a["name"] for a in activity] == ["Halo Infinite", "Forza Horizon 5"]
        assert activity[0]["platform"] == "xbox"

        profile = client.get("/api/users/erin").json()
        assert profile["connections"][0]["platform_user_id"] == "ErinPlays"

        client.post("/api/watchlater", headers=_headers(erin), json={
            "item_type": "game", "external_id": "119171", "item_name": "Baldur's Gate 3"
        })

        deleted = client.delete("/api/users/account", headers=_headers(erin))
        assert deleted.status_code == 200

        test_db.expire_all()
        assert test_db.query(User).filter(User.username == "erin").first() is None
        assert test_db.query(PlatformConnection).count() == 0
        assert test_db.query(MediaList).count() == 0
        assert client.get("/api/auth/me", headers=_headers(erin)).status_code == 401
