"""PlayStation Network client: NPSSO token exchange and played-titles fetch."""

import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

import requests

from reelshelf.platforms.base import BaseAPIClient
from reelshelf.services.errors import (
    TokenExchangeError,
    UpstreamServiceError,
    ValidationFailedError,
)

AUTH_BASE_URL = "https://ca.account.sony.com/api/authz/v3/oauth"
GAMELIST_URL = "https://m.np.playstation.com/api/gamelist/v2/users/me/titles"
ACCOUNT_URL = "https://dms.api.playstation.com/api/v1/devices/accounts/me"

# Public client of the PlayStation mobile app
CLIENT_ID = "09515159-7237-4370-9b40-3806e67c0891"
CLIENT_BASIC_AUTH = "Basic MDk1MTUxNTktNzIzNy00MzcwLTliNDAtMzgwNmU2N2MwODkxOnVjUGprYTV0bnRCMktxc1A="
REDIRECT_URI = "com.scee.psxandroid.scecompcall://redirect"
SCOPE = "psn:mobile.v2.core psn:clientapp"

DURATION_PATTERN = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$")


def parse_duration_hours(duration: Optional[str]) -> float:
    """
    Convert an ISO 8601 duration such as PT228H56M33S to hours.

    Returns:
        Hours rounded to one decimal, 0.0 for empty or malformed input
    """
    if not duration:
        return 0.0
    match = DURATION_PATTERN.match(duration)
    if not match:
        return 0.0

    days, hours, minutes, seconds = (float(g) if g else 0.0 for g in match.groups())
    return round(days * 24 + hours + minutes / 60 + seconds / 3600, 1)


class PSNAPI(BaseAPIClient):
    """Client for PlayStation Network account and game-list endpoints."""

    service_name = "playstation"

    def exchange_npsso_for_code(self, npsso: str) -> str:
        """
        Trade an NPSSO cookie for a one-time authorization code.

        Args:
            npsso: NPSSO token from the user's PlayStation web session

        Returns:
            Authorization code

        Raises:
            ValidationFailedError: If Sony does not issue a code
        """
        params = {
            "access_type": "offline",
            "client_id": CLIENT_ID,
            "redirect_uri": REDIRECT_URI,
            "response_type": "code",
            "scope": SCOPE,
        }

        try:
            response = self.session.get(
                f"{AUTH_BASE_URL}/authorize",
                params=params,
                cookies={"npsso": npsso},
                allow_redirects=False,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ValidationFailedError(f"Invalid NPSSO token: {e}") from e

        location = response.headers.get("Location", "")
        code = parse_qs(urlparse(location).query).get("code", [None])[0]
        if not code:
            raise ValidationFailedError(
                "Invalid NPSSO token: no authorization code returned. Make sure the token is current."
            )

        return code

    def exchange_code_for_tokens(self, code: str) -> Dict[str, Any]:
        """
        Trade an authorization code for access and refresh tokens.

        Args:
            code: Code from exchange_npsso_for_code

        Returns:
            Dict with access_token, refresh_token and expires_at (naive UTC)

        Raises:
            TokenExchangeError: If the token endpoint rejects the code
        """
        return self._token_request({
            "code": code,
            "redirect_uri": REDIRECT_URI,
            "grant_type": "authorization_code",
            "token_format": "jwt",
        })

    def refresh_tokens(self, refresh_token: str) -> Dict[str, Any]:
        """Trade a refresh token for a new token pair."""
        return self._token_request({
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
            "token_format": "jwt",
            "scope": SCOPE,
        })

    def _token_request(self, form: Dict[str, str]) -> Dict[str, Any]:
        try:
            data = self._post_json(
                f"{AUTH_BASE_URL}/token",
                data=form,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Authorization": CLIENT_BASIC_AUTH,
                },
            )
        except UpstreamServiceError as e:
            raise TokenExchangeError(f"Failed to obtain authentication tokens: {e.message}") from e

        access_token = data.get("access_token")
        if not access_token:
            raise TokenExchangeError("Failed to obtain authentication tokens: no access token in response")

        return {
            "access_token": access_token,
            "refresh_token": data.get("refresh_token"),
            "expires_at": datetime.utcnow() + timedelta(seconds=int(data.get("expires_in", 3600) or 3600)),
        }

    def get_account_id(self, access_token: str) -> str:
        """
        Look up the PSN account id for a token.

        Falls back to a prefix of the token when the account endpoint is
        unavailable.
        """
        try:
            data = self._get_json(ACCOUNT_URL, headers={"Authorization": f"Bearer {access_token}"})
        except UpstreamServiceError:
            return access_token[:16]
        return str(data.get("accountId") or access_token[:16])

    def get_played_titles(self, access_token: str, limit: int = 200) -> List[Dict[str, Any]]:
        """
        Fetch and normalize the titles a user has played.

        Args:
            access_token: PSN bearer token
            limit: Page size

        Returns:
            Records sorted by last played (most recent first)
        """
        data = self._get_json(
            GAMELIST_URL,
            params={"limit": limit, "offset": 0},
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return normalize_titles(data.get("titles", []) or [])


def normalize_titles(titles: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Normalize PSN played-title records."""
    games = [
        {
            "title_id": title.get("titleId"),
            "name": title.get("name") or "Unknown Game",
            "platform": title.get("category") or "PlayStation",
            "image_url": title.get("imageUrl"),
            "play_count": title.get("playCount", 0) or 0,
            "hours_total": parse_duration_hours(title.get("playDuration")),
            "last_played": title.get("lastPlayedDateTime"),
        }
        for title in titles
    ]
    # ISO timestamps sort lexicographically
    games.sort(key=lambda g: g["last_played"] or "", reverse=True)
    return games
