"""Steam Web API and Steam OpenID 2.0 client."""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode

from reelshelf.platforms.base import BaseAPIClient
from reelshelf.services.errors import ConfigurationError, UpstreamServiceError

STEAM_OPENID_URL = "https://steamcommunity.com/openid/login"
OPENID_NS = "http://specs.openid.net/auth/2.0"
OPENID_IDENTIFIER_SELECT = "http://specs.openid.net/auth/2.0/identifier_select"
OWNED_GAMES_URL = "https://api.steampowered.com/IPlayerService/GetOwnedGames/v1/"
STEAM_IMAGE_URL = "https://media.steampowered.com/steamcommunity/public/images/apps"

CLAIMED_ID_PATTERN = re.compile(r"/openid/id/(\d{5,})$")


def build_login_url(return_to: str, realm: str) -> str:
    """
    Build the Steam OpenID checkid_setup URL.

    Args:
        return_to: Absolute callback URL Steam redirects back to
        realm: Origin the user is asked to trust

    Returns:
        URL to send the browser to
    """
    params = {
        "openid.ns": OPENID_NS,
        "openid.mode": "checkid_setup",
        "openid.return_to": return_to,
        "openid.realm": realm,
        "openid.claimed_id": OPENID_IDENTIFIER_SELECT,
        "openid.identity": OPENID_IDENTIFIER_SELECT,
    }
    return f"{STEAM_OPENID_URL}?{urlencode(params)}"


def extract_steam_id(claimed_id: Optional[str]) -> Optional[str]:
    """
    Pull the numeric SteamID out of an OpenID claimed id.

    Args:
        claimed_id: e.g. https://steamcommunity.com/openid/id/76561198000000000

    Returns:
        SteamID string, or None if the claimed id is malformed
    """
    if not claimed_id:
        return None
    match = CLAIMED_ID_PATTERN.search(claimed_id)
    return match.group(1) if match else None


def _image_url(appid: Any, image_hash: Optional[str]) -> Optional[str]:
    if not image_hash:
        return None
    return f"{STEAM_IMAGE_URL}/{appid}/{image_hash}.jpg"


def normalize_owned_games(games: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Normalize GetOwnedGames records.

    Args:
        games: Raw "games" array from the Steam response

    Returns:
        Records sorted by last played (most recent first)
    """
    normalized = []
    for game in games:
        appid = game.get("appid")
        playtime_forever = game.get("playtime_forever", 0) or 0
        playtime_2weeks = game.get("playtime_2weeks", 0) or 0
        last_played = game.get("rtime_last_played") or 0

        normalized.append({
            "appid": appid,
            "name": game.get("name") or "Unknown Game",
            "playtime_forever": playtime_forever,
            "playtime_2weeks": playtime_2weeks,
            "img_icon_url": _image_url(appid, game.get("img_icon_url")),
            "img_logo_url": _image_url(appid, game.get("img_logo_url")),
            "has_community_visible_stats": bool(game.get("has_community_visible_stats", False)),
            "last_played_timestamp": last_played,
            "last_played": datetime.fromtimestamp(last_played, tz=timezone.utc).isoformat() if last_played else None,
            "hours_total": round(playtime_forever / 60, 1),
            "hours_recent": round(playtime_2weeks / 60, 1),
        })

    normalized.sort(key=lambda g: g["last_played_timestamp"] or 0, reverse=True)
    return normalized


class SteamAPI(BaseAPIClient):
    """Client for Steam OpenID verification and the owned-games endpoint."""

    service_name = "steam"

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        """
        Initialize the Steam client.

        Args:
            api_key: Steam Web API key. Only needed for library fetches.
        """
        super().__init__(**kwargs)
        self.api_key = api_key

    def verify_assertion(self, params: Mapping[str, str]) -> bool:
        """
        Ask Steam to confirm an OpenID positive assertion.

        Args:
            params: Query parameters Steam sent to the callback

        Returns:
            True if Steam answers is_valid:true
        """
        verify_params = {k: v for k, v in params.items() if k.startswith("openid.")}
        verify_params["openid.mode"] = "check_authentication"

        response = self._request(
            "POST",
            STEAM_OPENID_URL,
            data=verify_params,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        # Body is key:value lines, e.g. "ns:...\nis_valid:true\n"
        return "is_valid:true" in response.text

    def get_owned_games(self, steam_id: str) -> List[Dict[str, Any]]:
        """
        Fetch a user's owned games with playtime.

        Args:
            steam_id: 17-digit SteamID

        Returns:
            Normalized game records

        Raises:
            ConfigurationError: If no API key is configured
            UpstreamServiceError: If Steam fails or the profile is private
        """
        if not self.api_key:
            raise ConfigurationError("Steam API key not configured")

        data = self._get_json(OWNED_GAMES_URL, params={
            "key": self.api_key,
            "steamid": steam_id,
            "include_appinfo": "true",
            "include_played_free_games": "true",
            "format": "json",
        })

        response = data.get("response")
        if response is None:
            raise UpstreamServiceError("Invalid response from Steam API")

        # Private profiles come back as an empty response object
        return normalize_owned_games(response.get("games", []))
