"""
Tests for the movie, TV and game catalog proxies.

Third-party calls are mocked at the requests.Session level.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from reelshelf.config import settings
from reelshelf.platforms.hltb.hltb_api import HLTBAPI
from reelshelf.platforms.igdb.igdb_api import get_cover_image_url
from reelshelf.services import catalog_service
from reelshelf.services.logging_service import app_metrics


@pytest.fixture
def catalog_keys():
    """Configure every catalog credential for the duration of a test."""
    with patch.object(settings, "OMDB_API_KEY", "omdb-key"), \
            patch.object(settings, "TWITCH_CLIENT_ID", "twitch-id"), \
            patch.object(settings, "TWITCH_CLIENT_SECRET", "twitch-secret"), \
            patch.object(settings, "RAWG_API_KEY", "rawg-key"):
        yield


@pytest.mark.unit
class TestMissingCredentials:
    """Catalog endpoints report 503 when their keys are absent."""

    @pytest.mark.parametrize("path", [
        "/api/catalog/movies/search?q=alien",
        "/api/catalog/tv/tt0903747",
        "/api/catalog/games/search?q=zelda",
        "/api/catalog/games/popular",
        "/api/catalog/rawg/platforms",
        "/api/catalog/movies/popular",
        "/api/catalog/tv/genre?genre=drama",
        "/api/catalog/games/genre?genre=Shooter",
    ])
    def test_unconfigured_catalog(self, client: TestClient, path: str):
        with patch.object(settings, "OMDB_API_KEY", ""), \
                patch.object(settings, "TWITCH_CLIENT_ID", ""), \
                patch.object(settings, "RAWG_API_KEY", ""):
            response = client.get(path)

        assert response.status_code == 503
        assert "not configured" in response.json()["detail"]


@pytest.mark.unit
class TestOMDB:
    """Movie and TV lookups."""

    def test_search_movies(self, client: TestClient, catalog_keys, mock_response):
        upstream = mock_response({
            "Response": "True",
            "totalResults": "2",
            "Search": [
                {"imdbID": "tt0078748", "Title": "Alien", "Year": "1979", "Type": "movie", "Poster": "https://img/alien.jpg"},
                {"imdbID": "tt0090605", "Title": "Aliens", "Year": "1986", "Type": "movie", "Poster": "N/A"},
            ]
        })

        with patch.object(requests.Session, "request", return_value=upstream) as request:
            response = client.get("/api/catalog/movies/search", params={"q": "alien", "page": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["total_results"] == 2
        assert data["page"] == 2
        assert data["results"][0] == {
            "imdb_id": "tt0078748",
            "title": "Alien",
            "year": "1979",
            "type": "movie",
            "poster_url": "https://img/alien.jpg"
        }
        assert data["results"][1]["poster_url"] is None

        params = request.call_args.kwargs["params"]
        assert params["s"] == "alien"
        assert params["type"] == "movie"
        assert params["page"] == 2
        assert params["apikey"] == "omdb-key"

    def test_tv_search_uses_series_type(self, client: TestClient, catalog_keys, mock_response):
        upstream = mock_response({"Response": "True", "totalResults": "0", "Search": []})

        with patch.object(requests.Session, "request", return_value=upstream) as request:
            client.get("/api/catalog/tv/search", params={"q": "office"})

        assert request.call_args.kwargs["params"]["type"] == "series"

    def test_title_not_found(self, client: TestClient, catalog_keys, mock_response):
        upstream = mock_response({"Response": "False", "Error": "Incorrect IMDb ID."})

        with patch.object(requests.Session, "request", return_value=upstream):
            response = client.get("/api/catalog/movies/tt9999999")

        assert response.status_code == 404
        assert response.json()["detail"] == "Incorrect IMDb ID."

    def test_upstream_http_error(self, client: TestClient, catalog_keys, mock_response):
        with patch.object(requests.Session, "request", return_value=mock_response(status_code=500, text="boom")):
            response = client.get("/api/catalog/movies/search", params={"q": "alien"})

        assert response.status_code == 502
        assert app_metrics.get_metrics()["upstream"]["by_service"]["omdb"] == {"success": 0, "failed": 1}

    def test_upstream_connection_error(self, client: TestClient, catalog_keys):
        with patch.object(requests.Session, "request", side_effect=requests.ConnectionError("down")):
            response = client.get("/api/catalog/movies/tt0078748")

        assert response.status_code == 502


@pytest.mark.unit
class TestIGDB:
    """Game lookups through IGDB with a Twitch app token."""

    def test_search_sorted_by_rating_then_name(self, client: TestClient, catalog_keys, mock_response):
        token = mock_response({"access_token": "app-token", "expires_in": 5000000})
        games = mock_response([
            {"id": 1, "name": "Zeta", "rating": 80.0},
            {"id": 2, "name": "Alpha", "rating": 80.0},
            {"id": 3, "name": "Best", "rating": 95.44, "cover": {"image_id": "abc"}, "first_release_date": 1490000000},
            {"id": 4, "name": "Unrated"},
        ])

        with patch.object(requests.Session, "request", side_effect=[token, games]):
            response = client.get("/api/catalog/games/search", params={"q": "game"})

        assert response.status_code == 200
        data = response.json()
        assert [g["name"] for g in data] == ["Best", "Alpha", "Zeta", "Unrated"]
        assert data[0]["id"] == "3"
        assert data[0]["rating"] == 95.4
        assert data[0]["year"] == 2017
        assert data[0]["cover_url"] == "https://images.igdb.com/igdb/image/upload/t_cover_big/abc.jpg"

    def test_token_is_cached(self, client: TestClient, catalog_keys, mock_response):
        token = mock_response({"access_token": "app-token", "expires_in": 5000000})

        with patch.object(
            requests.Session, "request",
            side_effect=[token, mock_response([]), mock_response([])]
        ) as request:
            client.get("/api/catalog/games/search", params={"q": "one"})
            client.get("/api/catalog/games/search", params={"q": "two"})

        assert request.call_count == 3
        urls = [c.args[1] for c in request.call_args_list]
        assert urls.count("https://id.twitch.tv/oauth2/token") == 1
        assert request.call_args.kwargs["headers"]["Authorization"] == "Bearer app-token"

    def test_game_not_found(self, client: TestClient, catalog_keys, mock_response):
        token = mock_response({"access_token": "app-token", "expires_in": 5000000})

        with patch.object(requests.Session, "request", side_effect=[token, mock_response([])]):
            response = client.get("/api/catalog/games/42")

        assert response.status_code == 404

    def test_quotes_stripped_from_query(self, client: TestClient, catalog_keys, mock_response):
        token = mock_response({"access_token": "app-token", "expires_in": 5000000})

        with patch.object(requests.Session, "request", side_effect=[token, mock_response([])]) as request:
            client.get("/api/catalog/games/search", params={"q": 'say "hi"'})

        assert request.call_args.kwargs["data"].startswith('search "say hi";')

    def test_cover_url_helper(self):
        assert get_cover_image_url(None) == ""
        assert get_cover_image_url("xyz", size="huge").endswith("/t_cover_big/xyz.jpg")
        assert get_cover_image_url("xyz", size="1080p").endswith("/t_1080p/xyz.jpg")


@pytest.mark.unit
class TestRAWG:
    """RAWG lookups."""

    def test_search(self, client: TestClient, catalog_keys, mock_response):
        upstream = mock_response({"results": [{
            "id": 3498,
            "slug": "grand-theft-auto-v",
            "name": "Grand Theft Auto V",
            "released": "2013-09-17",
            "rating": 4.47,
            "platforms": [{"platform": {"name": "PC"}}, {"platform": {}}],
            "genres": [{"name": "Action"}],
        }]})

        with patch.object(requests.Session, "request", return_value=upstream) as request:
            response = client.get("/api/catalog/rawg/search", params={"q": "gta"})

        assert response.status_code == 200
        game = response.json()[0]
        assert game["id"] == "3498"
        assert game["year"] == 2013
        assert game["platforms"] == ["PC"]
        assert request.call_args.kwargs["params"]["key"] == "rawg-key"

    def test_game_detail_by_slug(self, client: TestClient, catalog_keys, mock_response):
        upstream = mock_response({
            "id": 3498,
            "slug": "grand-theft-auto-v",
            "name": "Grand Theft Auto V",
            "description_raw": "Crime.",
            "developers": [{"name": "Rockstar North"}],
        })

        with patch.object(requests.Session, "request", return_value=upstream) as request:
            response = client.get("/api/catalog/rawg/games/grand-theft-auto-v")

        assert response.json()["description"] == "Crime."
        assert response.json()["developers"] == ["Rockstar North"]
        assert request.call_args.args[1].endswith("/games/grand-theft-auto-v")


def _omdb_page(mock_response, *titles):
    """An OMDB search page from (imdb_id, poster) pairs."""
    return mock_response({
        "Response": "True",
        "totalResults": str(len(titles)),
        "Search": [
            {"imdbID": imdb_id, "Title": imdb_id, "Year": "2024", "Type": "movie", "Poster": poster}
            for imdb_id, poster in titles
        ]
    })


@pytest.mark.unit
class TestBrowse:
    """Popular, genre and trending browsing."""

    def test_popular_movies_deduplicated_with_posters(self, client: TestClient, catalog_keys, mock_response):
        first = _omdb_page(mock_response, ("tt1", "https://img/1.jpg"), ("tt2", "N/A"), ("tt3", "https://img/3.jpg"))
        second = _omdb_page(mock_response, ("tt1", "https://img/1.jpg"), ("tt4", "https://img/4.jpg"))

        with patch.object(requests.Session, "request", side_effect=[first, second]) as request:
            response = client.get("/api/catalog/movies/popular", params={"limit": 3})

        assert response.status_code == 200
        assert [t["imdb_id"] for t in response.json()] == ["tt1", "tt3", "tt4"]
        assert request.call_count == 2
        first_params = request.call_args_list[0].kwargs["params"]
        assert first_params["s"] == "2024"
        assert first_params["type"] == "movie"

    def test_popular_tv_skips_failing_terms(self, client: TestClient, catalog_keys, mock_response):
        responses = [
            mock_response({"Response": "False", "Error": "Movie not found!"}),
            mock_response(status_code=500, text="boom"),
            _omdb_page(mock_response, ("tt10", "https://img/10.jpg")),
            _omdb_page(mock_response),
            _omdb_page(mock_response),
        ]

        with patch.object(requests.Session, "request", side_effect=responses) as request:
            response = client.get("/api/catalog/tv/popular")

        assert response.status_code == 200
        assert [t["imdb_id"] for t in response.json()] == ["tt10"]
        assert request.call_count == 5
        assert all(c.kwargs["params"]["type"] == "series" for c in request.call_args_list)

    def test_movies_by_genre_searches_genre_pages(self, client: TestClient, catalog_keys, mock_response):
        responses = [
            _omdb_page(mock_response, ("tt20", "https://img/20.jpg")),
            mock_response({"Response": "False", "Error": "Movie not found!"}),
        ]

        with patch.object(requests.Session, "request", side_effect=responses) as request:
            response = client.get("/api/catalog/movies/genre", params={"genre": "horror"})

        assert response.status_code == 200
        assert [t["imdb_id"] for t in response.json()] == ["tt20"]
        params = [c.kwargs["params"] for c in request.call_args_list]
        assert [p["s"] for p in params] == ["horror", "horror"]
        assert [p["page"] for p in params] == [1, 2]

    def test_tv_by_genre_uses_series_type(self, client: TestClient, catalog_keys, mock_response):
        with patch.object(
            requests.Session, "request",
            side_effect=[_omdb_page(mock_response), _omdb_page(mock_response), _omdb_page(mock_response)]
        ) as request:
            response = client.get("/api/catalog/tv/genre", params={"genre": "drama"})

        assert response.status_code == 200
        assert response.json() == []
        assert request.call_count == 3
        assert request.call_args.kwargs["params"]["type"] == "series"

    def test_blank_genre_rejected(self, client: TestClient, catalog_keys):
        response = client.get("/api/catalog/movies/genre", params={"genre": "   "})

        assert response.status_code == 400
        assert response.json()["detail"] == "Search query is required"

    def test_games_by_genre(self, client: TestClient, catalog_keys, mock_response):
        token = mock_response({"access_token": "app-token", "expires_in": 5000000})
        games = mock_response([
            {"id": 7, "name": "Doom", "rating": 88.0, "genres": [{"name": "Shooter"}], "cover": {"image_id": "doom"}},
        ])

        with patch.object(requests.Session, "request", side_effect=[token, games]) as request:
            response = client.get("/api/catalog/games/genre", params={"genre": 'Shoot"er', "limit": 5})

        assert response.status_code == 200
        data = response.json()
        assert data[0]["name"] == "Doom"
        assert data[0]["genres"] == ["Shooter"]
        body = request.call_args.kwargs["data"]
        assert 'where genres.name = "Shooter" & cover != null;' in body
        assert "sort rating desc;" in body
        assert body.endswith("limit 5;")

    def test_trending_assembles_all_sections(self, client: TestClient, catalog_keys, mock_response):
        movies = _omdb_page(mock_response, *[(f"tt{i}", "N/A") for i in range(15)])
        shows = _omdb_page(mock_response, ("tt99", "https://img/99.jpg"))
        games = mock_response({"results": [{"id": 3498, "slug": "gta-v", "name": "GTA V", "released": "2013-09-17"}]})

        with patch.object(catalog_service, "catalog_cache") as cache, \
                patch.object(requests.Session, "request", side_effect=[movies, shows, games]) as request:
            cache.get.return_value = None
            response = client.get("/api/catalog/trending")

        assert response.status_code == 200
        data = response.json()
        assert len(data["movies"]) == 12
        assert [t["imdb_id"] for t in data["tv_shows"]] == ["tt99"]
        assert data["games"][0]["year"] == 2013
        assert data["last_updated"]

        omdb_params = [c.kwargs["params"] for c in request.call_args_list[:2]]
        assert [(p["s"], p["type"]) for p in omdb_params] == [("avengers", "movie"), ("game", "series")]
        rawg_params = request.call_args_list[2].kwargs["params"]
        assert rawg_params["ordering"] == "-added"
        assert rawg_params["page_size"] == 12

        cache.set.assert_called_once()
        assert cache.set.call_args.kwargs["ttl"] == 2 * 24 * 60 * 60

    def test_trending_partial_result_not_cached(self, client: TestClient, catalog_keys, mock_response):
        movies = _omdb_page(mock_response, ("tt1", "https://img/1.jpg"))
        shows = _omdb_page(mock_response, ("tt2", "https://img/2.jpg"))

        with patch.object(settings, "RAWG_API_KEY", ""), \
                patch.object(catalog_service, "catalog_cache") as cache, \
                patch.object(requests.Session, "request", side_effect=[movies, shows]):
            cache.get.return_value = None
            response = client.get("/api/catalog/trending")

        assert response.status_code == 200
        data = response.json()
        assert data["games"] == []
        assert [t["imdb_id"] for t in data["movies"]] == ["tt1"]
        cache.set.assert_not_called()

    def test_trending_served_from_cache(self, client: TestClient):
        cached = {"movies": [], "tv_shows": [], "games": [], "last_updated": "2026-01-01T00:00:00"}

        with patch.object(catalog_service, "catalog_cache") as cache, \
                patch.object(requests.Session, "request") as request:
            cache.get.return_value = cached
            response = client.get("/api/catalog/trending")

        assert response.json() == cached
        request.assert_not_called()
        assert app_metrics.get_metrics()["cache"]["hits"] == 1


@pytest.mark.unit
class TestHowLongToBeat:
    """Completion times never fail the request."""

    def test_data_available(self, client: TestClient):
        hltb = MagicMock()
        hltb.get_best_match.return_value = {"game_name": "Celeste", "main": 8.0}

        with patch("reelshelf.services.catalog_service.HLTBAPI", return_value=hltb):
            response = client.get("/api/catalog/hltb", params={"game": "Celeste"})

        assert response.status_code == 200
        assert response.json() == {"data": {"game_name": "Celeste", "main": 8.0}, "message": None}

    def test_no_data(self, client: TestClient):
        hltb = MagicMock()
        hltb.get_best_match.return_value = None

        with patch("reelshelf.services.catalog_service.HLTBAPI", return_value=hltb):
            response = client.get("/api/catalog/hltb", params={"game": "Unknown"})

        assert response.status_code == 200
        assert response.json()["data"] is None
        assert response.json()["message"]

    def test_client_swallows_library_errors(self):
        library = MagicMock()
        library.search.side_effect = RuntimeError("blocked")

        assert HLTBAPI(client=library).get_best_match("Celeste") is None

    def test_client_picks_most_similar(self):
        entries = [
            SimpleNamespace(game_id=1, game_name="Celeste Classic", game_image_url=None, similarity=0.6,
                            main_story=1.25, main_extra=0, completionist=2, profile_platforms=["PC"]),
            SimpleNamespace(game_id=2, game_name="Celeste", game_image_url="img", similarity=1.0,
                            main_story=8.04, main_extra=13, completionist=37.5, profile_platforms=None),
        ]
        library = MagicMock()
        library.search.return_value = entries

        result = HLTBAPI(client=library).get_best_match("Celeste")

        assert result["game_id"] == 2
        assert result["main"] == 8.0
        assert result["completionist"] == 37.5
        assert result["platforms"] == []
