"""IGDB API client for video game data. Authenticates with Twitch OAuth."""

import threading
import time
from typing import Any, Dict, List, Optional

from reelshelf.platforms.base import BaseAPIClient
from reelshelf.services.errors import (
    NotFoundError,
    ServiceUnavailableError,
    UpstreamServiceError,
    ValidationFailedError,
)

TWITCH_TOKEN_URL = "https://id.twitch.tv/oauth2/token"
IGDB_API_URL = "https://api.igdb.com/v4"
IGDB_IMAGE_URL = "https://images.igdb.com/igdb/image/upload"

# Twitch app tokens last ~60 days; refresh 10 days early
TOKEN_EXPIRY_BUFFER_SECONDS = 10 * 24 * 60 * 60

COVER_SIZES = ("cover_small", "cover_big", "screenshot_med", "720p", "1080p")

# Process-wide app token cache keyed by client id
_token_cache: Dict[str, Dict[str, Any]] = {}
_token_lock = threading.Lock()


def clear_token_cache():
    """Drop cached Twitch app tokens."""
    with _token_lock:
        _token_cache.clear()


def get_cover_image_url(image_id: Optional[str], size: str = "cover_big") -> str:
    """
    Build an IGDB image URL.

    Args:
        image_id: IGDB image id
        size: Image size preset

    Returns:
        Image URL, or empty string when there is no image
    """
    if not image_id:
        return ""
    if size not in COVER_SIZES:
        size = "cover_big"
    return f"{IGDB_IMAGE_URL}/t_{size}/{image_id}.jpg"


class IGDBAPI(BaseAPIClient):
    """Client for the IGDB v4 API."""

    service_name = "igdb"

    def __init__(self, client_id: str, client_secret: str, **kwargs):
        """
        Initialize the IGDB client.

        Args:
            client_id: Twitch application client id
            client_secret: Twitch application client secret

        Raises:
            ServiceUnavailableError: If credentials are not configured
        """
        if not client_id or not client_secret:
            raise ServiceUnavailableError(
                "IGDB credentials not configured (TWITCH_CLIENT_ID, TWITCH_CLIENT_SECRET)"
            )
        super().__init__(**kwargs)
        self.client_id = client_id
        self.client_secret = client_secret

    def get_access_token(self) -> str:
        """
        Get a Twitch app access token, reusing the cached one while valid.

        Returns:
            Bearer token for IGDB requests
        """
        with _token_lock:
            cached = _token_cache.get(self.client_id)
            if cached and time.time() < cached["expires_at"]:
                return cached["token"]

        data = self._post_json(
            TWITCH_TOKEN_URL,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "client_credentials",
            },
        )

        token = data.get("access_token")
        if not token:
            raise UpstreamServiceError("Failed to get Twitch access token")

        expires_in = int(data.get("expires_in", 0) or 0)
        with _token_lock:
            _token_cache[self.client_id] = {
                "token": token,
                "expires_at": time.time() + max(expires_in - TOKEN_EXPIRY_BUFFER_SECONDS, 0),
            }

        return token

    def _igdb_request(self, endpoint: str, body: str) -> List[Dict[str, Any]]:
        token = self.get_access_token()
        return self._post_json(
            f"{IGDB_API_URL}{endpoint}",
            data=body,
            headers={
                "Client-ID": self.client_id,
                "Authorization": f"Bearer {token}",
                "Content-Type": "text/plain",
            },
        )

    def search_games(self, query: str, limit: int = 24) -> List[Dict[str, Any]]:
        """
        Search games by name.

        Args:
            query: Search string
            limit: Maximum number of results

        Returns:
            Normalized games sorted by rating (highest first), then by name
        """
        clean_query = query.replace('"', "").replace("'", "").strip()
        if not clean_query:
            raise ValidationFailedError("Search query cannot be empty")

        escaped = clean_query.replace("\\", "\\\\")
        body = (
            f'search "{escaped}"; '
            "fields id,name,slug,summary,genres.name,platforms.name,platforms.id,rating,"
            "cover.image_id,release_dates.date,first_release_date; "
            f"limit {int(limit)};"
        )

        results = self._igdb_request("/games", body)
        results.sort(key=lambda g: (-(g.get("rating") or 0), g.get("name") or ""))

        return [normalize_game(g) for g in results[:limit]]

    def get_game(self, game_id: int) -> Dict[str, Any]:
        """
        Get one game by IGDB id.

        Args:
            game_id: IGDB game id

        Returns:
            Normalized game
        """
        body = (
            "fields id,name,slug,summary,genres.name,platforms.name,rating,rating_count,"
            "cover.image_id,release_dates.date,first_release_date,storyline; "
            f"where id = {int(game_id)};"
        )

        games = self._igdb_request("/games", body)
        if not games:
            raise NotFoundError("Game not found")

        return normalize_game(games[0])

    def get_popular_games(self, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Get highly rated games that have cover art.

        Args:
            limit: Maximum number of results

        Returns:
            Normalized games
        """
        body = (
            "fields id,name,slug,summary,rating,cover.image_id,first_release_date; "
            "where rating > 70 & cover != null; "
            "sort rating desc; "
            f"limit {int(limit)};"
        )

        return [normalize_game(g) for g in self._igdb_request("/games", body)]

    def get_games_by_genre(self, genre: str, limit: int = 20) -> List[Dict[str, Any]]:
        """
        Get the best rated games of a genre.

        Args:
            genre: IGDB genre name, e.g. "Shooter" or "Role-playing (RPG)"
            limit: Maximum number of results

        Returns:
            Normalized games
        """
        clean_genre = genre.replace('"', "").replace("\\", "").strip()
        if not clean_genre:
            raise ValidationFailedError("Genre is required")

        body = (
            "fields id,name,slug,summary,rating,genres.name,platforms.name,"
            "cover.image_id,first_release_date; "
            f'where genres.name = "{clean_genre}" & cover != null; '
            "sort rating desc; "
            f"limit {int(limit)};"
        )

        return [normalize_game(g) for g in self._igdb_request("/games", body)]


def normalize_game(game: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten an IGDB game record into the API's game shape."""
    first_release = game.get("first_release_date")
    year = time.gmtime(first_release).tm_year if first_release else None
    cover = game.get("cover") or {}

    return {
        "id": str(game.get("id")),
        "name": game.get("name"),
        "slug": game.get("slug"),
        "summary": game.get("summary"),
        "storyline": game.get("storyline"),
        "rating": round(game["rating"], 1) if game.get("rating") is not None else None,
        "rating_count": game.get("rating_count"),
        "year": year,
        "genres": [g.get("name") for g in game.get("genres", []) if g.get("name")],
        "platforms": [p.get("name") for p in game.get("platforms", []) if p.get("name")],
        "cover_url": get_cover_image_url(cover.get("image_id")) or None,
    }
