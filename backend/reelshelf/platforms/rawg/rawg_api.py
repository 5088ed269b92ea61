"""RAWG.io API client."""

from typing import Any, Dict, List, Optional, Union

from reelshelf.platforms.base import BaseAPIClient
from reelshelf.services.errors import ServiceUnavailableError

RAWG_API_URL = "https://api.rawg.io/api"


class RAWGAPI(BaseAPIClient):
    """Client for the RAWG video game database."""

    service_name = "rawg"

    def __init__(self, api_key: str, **kwargs):
        if not api_key:
            raise ServiceUnavailableError("RAWG API key not configured (RAWG_API_KEY)")
        super().__init__(**kwargs)
        self.api_key = api_key

    def _fetch(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        query = {"key": self.api_key}
        if params:
            query.update({k: v for k, v in params.items() if v is not None})
        return self._get_json(f"{RAWG_API_URL}{endpoint}", params=query)

    def get_platforms(self) -> List[Dict[str, Any]]:
        """List RAWG platforms as {id, name, slug}."""
        data = self._fetch("/platforms")
        return [
            {"id": p.get("id"), "name": p.get("name"), "slug": p.get("slug")}
            for p in data.get("results", [])
        ]

    def search_games(self, query: str, page_size: int = 20) -> List[Dict[str, Any]]:
        """
        Search games by name.

        Args:
            query: Search string
            page_size: Results per page

        Returns:
            Normalized games
        """
        data = self._fetch("/games", {"search": query, "page_size": page_size})
        return [normalize_game(g) for g in data.get("results", [])]

    def get_games(
        self,
        dates: Optional[str] = None,
        platforms: Optional[str] = None,
        ordering: Optional[str] = None,
        page: int = 1,
        page_size: int = 20
    ) -> List[Dict[str, Any]]:
        """
        Browse games with filters.

        Args:
            dates: "YYYY-MM-DD,YYYY-MM-DD" release range
            platforms: Comma-separated RAWG platform ids
            ordering: e.g. "-rating", "-metacritic", "-released"
            page: 1-based page
            page_size: Results per page

        Returns:
            Normalized games
        """
        data = self._fetch("/games", {
            "dates": dates,
            "platforms": platforms,
            "ordering": ordering,
            "page": page,
            "page_size": page_size,
        })
        return [normalize_game(g) for g in data.get("results", [])]

    def get_game(self, id_or_slug: Union[int, str]) -> Dict[str, Any]:
        """Get one game by numeric id or slug."""
        return normalize_game(self._fetch(f"/games/{id_or_slug}"), detailed=True)


def normalize_game(game: Dict[str, Any], detailed: bool = False) -> Dict[str, Any]:
    """Flatten a RAWG game record."""
    released = game.get("released")
    result = {
        "id": str(game.get("id")),
        "slug": game.get("slug"),
        "name": game.get("name"),
        "released": released,
        "year": int(released[:4]) if released and released[:4].isdigit() else None,
        "background_image": game.get("background_image"),
        "rating": game.get("rating"),
        "metacritic": game.get("metacritic"),
        "playtime": game.get("playtime"),
        "platforms": [
            p["platform"]["name"] for p in game.get("platforms") or []
            if p.get("platform", {}).get("name")
        ],
        "genres": [g.get("name") for g in game.get("genres") or [] if g.get("name")],
    }

    if detailed:
        result["description"] = game.get("description_raw") or game.get("description")
        result["developers"] = [d.get("name") for d in game.get("developers") or [] if d.get("name")]
        result["website"] = game.get("website")

    return result
