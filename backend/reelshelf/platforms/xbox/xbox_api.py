"""OpenXBL client for Xbox Live profiles, titles and achievements."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from reelshelf.platforms.base import BaseAPIClient
from reelshelf.services.errors import ConfigurationError, NotFoundError, UpstreamServiceError
from reelshelf.services.logging_service import logger

OPENXBL_API_URL = "https://xbl.io/api/v2"


class XboxAPI(BaseAPIClient):
    """Client for the OpenXBL (xbl.io) API."""

    service_name = "xbox"

    def __init__(self, api_key: str, **kwargs):
        """
        Initialize the Xbox client.

        Args:
            api_key: OpenXBL API key

        Raises:
            ConfigurationError: If no API key is configured
        """
        if not api_key:
            raise ConfigurationError("Xbox API key not configured")
        super().__init__(**kwargs)
        self.api_key = api_key

    @property
    def _headers(self) -> Dict[str, str]:
        return {"X-Authorization": self.api_key, "Accept": "application/json"}

    def resolve_xuid(self, gamertag: str) -> str:
        """
        Resolve a gamertag to an Xbox user id.

        Args:
            gamertag: Xbox gamertag

        Returns:
            XUID string

        Raises:
            NotFoundError: If the gamertag does not exist
        """
        data = self._get_json(f"{OPENXBL_API_URL}/search/{quote(gamertag, safe='')}", headers=self._headers)

        # Search returns a list of matching people
        people = data if isinstance(data, list) else data.get("people", [])
        xuid = people[0].get("xuid") if people else None
        if not xuid:
            raise NotFoundError("Gamertag not found")

        return str(xuid)

    def get_titles(self, xuid: str) -> List[Dict[str, Any]]:
        """Fetch the title history of a user."""
        data = self._get_json(f"{OPENXBL_API_URL}/accountXuid/{xuid}/games", headers=self._headers)
        return data.get("titles", []) or []

    def get_achievements(self, xuid: str) -> List[Dict[str, Any]]:
        """Fetch a user's achievement list. Returns [] when unavailable."""
        try:
            data = self._get_json(f"{OPENXBL_API_URL}/achievements/player/{xuid}", headers=self._headers)
        except UpstreamServiceError as e:
            # Achievements are optional enrichment
            logger.warning("Xbox achievements unavailable", xuid=xuid, error=e.message)
            return []
        return data.get("achievements", []) or []

    def get_library(self, gamertag: str) -> Dict[str, Any]:
        """
        Resolve a gamertag and fetch its normalized game library.

        Args:
            gamertag: Xbox gamertag

        Returns:
            Dict with xuid and games
        """
        xuid = self.resolve_xuid(gamertag)
        titles = self.get_titles(xuid)
        achievements = self.get_achievements(xuid)
        return {"xuid": xuid, "games": normalize_titles(titles, achievements)}


def _summarize_achievements(achievements: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    by_title: Dict[str, Dict[str, Any]] = {}
    for ach in achievements:
        title_id = str(ach.get("titleId") or "")
        entry = by_title.setdefault(title_id, {"total": 0, "unlocked": 0, "gamerscore": 0})
        entry["total"] += 1
        if ach.get("progressState") == "Achieved":
            entry["unlocked"] += 1
            rewards = ach.get("rewards") or []
            try:
                entry["gamerscore"] += int(rewards[0].get("value", 0)) if rewards else 0
            except (TypeError, ValueError):
                pass
    return by_title


def _played_at(value: Optional[str]) -> float:
    if not value:
        return 0.0
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0


def normalize_titles(titles: List[Dict[str, Any]], achievements: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Normalize OpenXBL titles and merge per-title achievement totals.

    Returns:
        Records sorted by last played, then by hours played
    """
    summary = _summarize_achievements(achievements)
    games = []

    for title in titles:
        title_id = str(title.get("titleId") or "")
        ach = summary.get(title_id, {"total": 0, "unlocked": 0, "gamerscore": 0})
        minutes = (title.get("stats") or {}).get("minutesPlayed") or 0
        history = title.get("titleHistory") or {}
        last_played = title.get("lastPlayed") or history.get("lastTimePlayed")

        games.append({
            "title_id": title_id,
            "name": title.get("name") or "Unknown Game",
            "platform": ", ".join(title.get("devices") or title.get("platforms") or []) or "Xbox",
            "image_url": title.get("displayImage") or title.get("imageUrl"),
            "minutes_played": minutes,
            "hours_total": round(minutes / 60, 1),
            "last_played": last_played,
            "achievements": {
                "total": ach["total"],
                "unlocked": ach["unlocked"],
                "percentage": round(ach["unlocked"] / ach["total"] * 100) if ach["total"] else 0,
            },
            "gamerscore": ach["gamerscore"],
        })

    games.sort(key=lambda g: (_played_at(g["last_played"]), g["hours_total"]), reverse=True)
    return games
