"""OMDB API client for movie and TV show data."""

from typing import Any, Dict, Optional

from reelshelf.platforms.base import BaseAPIClient
from reelshelf.services.errors import NotFoundError, ServiceUnavailableError

OMDB_API_URL = "https://www.omdbapi.com/"


class OMDBAPI(BaseAPIClient):
    """Client for the OMDB (Open Movie Database) API."""

    service_name = "omdb"

    def __init__(self, api_key: str, **kwargs):
        """
        Initialize the OMDB client.

        Args:
            api_key: OMDB API key

        Raises:
            ServiceUnavailableError: If no API key is configured
        """
        if not api_key:
            raise ServiceUnavailableError("OMDB API key not configured (OMDB_API_KEY)")
        super().__init__(**kwargs)
        self.api_key = api_key

    def _query(self, params: Dict[str, Any], not_found_message: str) -> Dict[str, Any]:
        params = dict(params, apikey=self.api_key)
        data = self._get_json(OMDB_API_URL, params=params)

        # OMDB reports errors in-band with HTTP 200
        if data.get("Response") == "False":
            raise NotFoundError(data.get("Error") or not_found_message)

        return data

    def search(self, query: str, media_kind: Optional[str] = None, page: int = 1) -> Dict[str, Any]:
        """
        Search titles by name.

        Args:
            query: Title search string
            media_kind: "movie" or "series" to restrict the result type
            page: 1-based result page (10 results per page)

        Returns:
            Dict with "results" (list of {imdb_id, title, year, type, poster_url})
            and "total_results"
        """
        params = {"s": query, "page": page}
        if media_kind:
            params["type"] = media_kind

        data = self._query(params, "Failed to search titles")

        results = [
            {
                "imdb_id": item.get("imdbID"),
                "title": item.get("Title"),
                "year": item.get("Year"),
                "type": item.get("Type"),
                "poster_url": _poster(item.get("Poster")),
            }
            for item in data.get("Search", [])
        ]

        return {
            "results": results,
            "total_results": int(data.get("totalResults", 0) or 0),
            "page": page,
        }

    def get_by_id(self, imdb_id: str) -> Dict[str, Any]:
        """
        Get full title details by IMDb id.

        Args:
            imdb_id: IMDb id (tt...)

        Returns:
            Raw OMDB detail record with a normalized poster_url added
        """
        data = self._query({"i": imdb_id, "plot": "full"}, "Failed to get title details")
        data["poster_url"] = _poster(data.get("Poster"))
        return data


def _poster(value: Optional[str]) -> Optional[str]:
    # OMDB uses the literal "N/A" for missing posters
    if not value or value == "N/A":
        return None
    return value
