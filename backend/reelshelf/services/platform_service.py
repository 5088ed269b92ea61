"""Linking Steam, Xbox and PlayStation accounts and syncing their libraries."""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode, urlsplit
from uuid import UUID

from reelshelf.config import settings
from reelshelf.models.platform import PlatformConnection, SUPPORTED_PLATFORMS
from reelshelf.models.user import User
from reelshelf.platforms.playstation.psn_api import PSNAPI
from reelshelf.platforms.steam.steam_api import SteamAPI, build_login_url, extract_steam_id
from reelshelf.platforms.xbox.xbox_api import XboxAPI
from reelshelf.services.credential_service import credential_service
from reelshelf.services.errors import (
    NotFoundError,
    ServiceError,
    UpstreamServiceError,
    ValidationFailedError,
)
from reelshelf.services.logging_service import logger, app_metrics
from reelshelf.utils.security import create_link_state, decode_link_state
from reelshelf.utils.validators import safe_redirect_path, DEFAULT_REDIRECT_PATH

STEAM_CALLBACK_PATH = "/api/platforms/steam/callback"
ACTIVITY_GAMES_PER_PLATFORM = 5


def serialize_connection(connection: PlatformConnection, include_games: bool = True) -> Dict[str, Any]:
    """Flatten a connection for API responses. Tokens are never included."""
    games = connection.games_data or []
    return {
        "id": connection.id,
        "platform_type": connection.platform_type,
        "platform_user_id": connection.platform_user_id,
        "last_synced_at": connection.last_synced_at,
        "created_at": connection.created_at,
        "games_count": len(games),
        "games": games if include_games else [],
    }


def _frontend_redirect(path: str, **params: str) -> str:
    separator = "&" if "?" in path else "?"
    return f"{settings.FRONTEND_URL.rstrip('/')}{path}{separator}{urlencode(params)}"


def _steam_callback_url() -> str:
    return f"{settings.API_BASE_URL.rstrip('/')}{STEAM_CALLBACK_PATH}"


class PlatformService:
    """Service for gaming platform connections."""

    @staticmethod
    def get_connection(db: Session, user_id: UUID, platform: str) -> Optional[PlatformConnection]:
        return db.query(PlatformConnection).filter(
            PlatformConnection.user_id == user_id,
            PlatformConnection.platform_type == platform
        ).first()

    @staticmethod
    def _upsert_connection(
        db: Session,
        user_id: UUID,
        platform: str,
        platform_user_id: Optional[str],
        games: Optional[List[Dict[str, Any]]] = None,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        expires_at: Optional[datetime] = None
    ) -> PlatformConnection:
        connection = PlatformService.get_connection(db, user_id, platform)
        if not connection:
            connection = PlatformConnection(user_id=user_id, platform_type=platform, games_data=[])
            db.add(connection)

        connection.platform_user_id = platform_user_id
        if games is not None:
            connection.games_data = games
            connection.last_synced_at = datetime.utcnow()
        if access_token is not None:
            connection.encrypted_access_token = credential_service.encrypt_token(access_token)
        if refresh_token is not None:
            connection.encrypted_refresh_token = credential_service.encrypt_token(refresh_token)
        if expires_at is not None:
            connection.expires_at = expires_at

        db.commit()
        db.refresh(connection)
        return connection

    @staticmethod
    def _store_games(db: Session, connection: PlatformConnection, games: List[Dict[str, Any]]) -> None:
        connection.games_data = games
        connection.last_synced_at = datetime.utcnow()
        db.commit()
        db.refresh(connection)

    @staticmethod
    def list_connections(db: Session, user: User) -> List[Dict[str, Any]]:
        """
        Get the caller's platform connections with their synced games.

        Returns:
            Serialized connections
        """
        connections = db.query(PlatformConnection).filter(
            PlatformConnection.user_id == user.id
        ).order_by(PlatformConnection.created_at).all()
        return [serialize_connection(c) for c in connections]

    @staticmethod
    def disconnect(db: Session, user: User, platform: str) -> int:
        """
        Remove a platform connection.

        Args:
            db: Database session
            user: Current user
            platform: steam, xbox or playstation

        Returns:
            Number of connections deleted (0 or 1)
        """
        if platform not in SUPPORTED_PLATFORMS:
            raise ValidationFailedError("Invalid platform. Must be steam, xbox, or playstation")

        connection = PlatformService.get_connection(db, user.id, platform)
        if not connection:
            return 0

        db.delete(connection)
        db.commit()
        logger.info("Platform disconnected", user_id=str(user.id), platform=platform)
        return 1

    # ============================================
    # Steam
    # ============================================

    @staticmethod
    def steam_login_url(user: User, return_path: Optional[str] = None) -> str:
        """
        Build the Steam sign-in URL for linking the caller's account.

        The callback URL carries a signed, short-lived state token that
        identifies the user.

        Args:
            user: Current user
            return_path: Frontend path to land on afterwards

        Returns:
            Steam OpenID URL
        """
        state = create_link_state(str(user.id), safe_redirect_path(return_path))
        return_to = f"{_steam_callback_url()}?{urlencode({'state': state})}"

        parts = urlsplit(settings.API_BASE_URL)
        realm = f"{parts.scheme}://{parts.netloc}"

        return build_login_url(return_to, realm)

    @staticmethod
    def steam_callback(db: Session, params: Mapping[str, str]) -> str:
        """
        Complete a Steam link after Steam redirects back.

        Args:
            db: Database session
            params: Query parameters of the callback request

        Returns:
            Frontend URL to redirect the browser to, carrying success,
            warning or error query parameters
        """
        payload = decode_link_state(params.get("state", ""))
        if not payload:
            return _frontend_redirect(DEFAULT_REDIRECT_PATH, error="steam_auth_expired")

        return_path = safe_redirect_path(payload.get("return_path"))

        if params.get("openid.mode") == "cancel":
            return _frontend_redirect(return_path, error="steam_auth_cancelled")

        if not (params.get("openid.return_to") or "").startswith(_steam_callback_url()):
            return _frontend_redirect(return_path, error="steam_auth_failed")

        steam_id = extract_steam_id(params.get("openid.claimed_id"))
        if not steam_id:
            return _frontend_redirect(return_path, error="steam_id_invalid")

        steam = SteamAPI(settings.STEAM_API_KEY)
        try:
            verified = steam.verify_assertion(params)
        except UpstreamServiceError as e:
            logger.error("Steam OpenID verification request failed", error=e.message)
            verified = False

        if not verified:
            logger.warning("Steam OpenID assertion rejected", steam_id=steam_id)
            return _frontend_redirect(return_path, error="steam_auth_failed")

        try:
            user_id = UUID(payload["sub"])
        except (KeyError, ValueError):
            return _frontend_redirect(return_path, error="steam_auth_failed")

        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            return _frontend_redirect(return_path, error="user_not_found")

        games = None
        warning = None
        if settings.STEAM_API_KEY:
            try:
                games = steam.get_owned_games(steam_id)
                app_metrics.increment_platform_sync("steam", success=True)
            except ServiceError as e:
                app_metrics.increment_platform_sync("steam", success=False)
                logger.warning("Steam games unavailable at link time", steam_id=steam_id, error=e.message)
                warning = "steam_games_unavailable"
        else:
            warning = "steam_api_key_missing"

        PlatformService._upsert_connection(db, user.id, "steam", steam_id, games=games)
        logger.info("Steam account linked", user_id=str(user.id), steam_id=steam_id)

        redirect_params = {"success": "steam_connected"}
        if warning:
            redirect_params["warning"] = warning
        return _frontend_redirect(return_path, **redirect_params)

    @staticmethod
    def steam_sync(db: Session, user: User) -> Dict[str, Any]:
        """
        Refresh the caller's Steam library.

        Raises:
            ValidationFailedError: Steam not connected
            ConfigurationError: STEAM_API_KEY missing
            UpstreamServiceError: Steam request failed
        """
        connection = PlatformService.get_connection(db, user.id, "steam")
        if not connection or not connection.platform_user_id:
            raise ValidationFailedError("Steam account not connected")

        try:
            games = SteamAPI(settings.STEAM_API_KEY).get_owned_games(connection.platform_user_id)
        except ServiceError:
            app_metrics.increment_platform_sync("steam", success=False)
            raise

        PlatformService._store_games(db, connection, games)
        app_metrics.increment_platform_sync("steam", success=True)

        return {
            "platform": "steam",
            "platform_user_id": connection.platform_user_id,
            "games_count": len(games),
            "games": games,
        }

    # ============================================
    # Xbox
    # ============================================

    @staticmethod
    def xbox_connect(db: Session, user: User, gamertag: Optional[str]) -> Dict[str, Any]:
        """
        Link an Xbox account by gamertag and import its titles.

        Raises:
            ValidationFailedError: No gamertag
            ConfigurationError: XBOX_API_KEY missing
            NotFoundError: Unknown gamertag
        """
        gamertag = (gamertag or "").strip()
        if not gamertag:
            raise ValidationFailedError("Xbox gamertag required")

        try:
            library = XboxAPI(settings.XBOX_API_KEY).get_library(gamertag)
        except ServiceError:
            app_metrics.increment_platform_sync("xbox", success=False)
            raise

        PlatformService._upsert_connection(db, user.id, "xbox", gamertag, games=library["games"])
        app_metrics.increment_platform_sync("xbox", success=True)
        logger.info("Xbox account linked", user_id=str(user.id), xuid=library["xuid"], games=len(library["games"]))

        return {
            "platform": "xbox",
            "platform_user_id": gamertag,
            "games_count": len(library["games"]),
            "games": library["games"],
        }

    @staticmethod
    def xbox_sync(db: Session, user: User) -> Dict[str, Any]:
        """
        Re-import the linked Xbox account's titles.

        Raises:
            NotFoundError: Xbox not connected
        """
        connection = PlatformService.get_connection(db, user.id, "xbox")
        if not connection or not connection.platform_user_id:
            raise NotFoundError("Xbox account not connected")

        return PlatformService.xbox_connect(db, user, connection.platform_user_id)

    # ============================================
    # PlayStation
    # ============================================

    @staticmethod
    def psn_connect(db: Session, user: User, npsso: Optional[str]) -> Dict[str, Any]:
        """
        Link a PlayStation account from an NPSSO token.

        Raises:
            ValidationFailedError: No token, already connected, or Sony rejected the NPSSO
            TokenExchangeError: Sony rejected the authorization code
        """
        npsso = (npsso or "").strip()
        if not npsso:
            raise ValidationFailedError("NPSSO token required")

        if PlatformService.get_connection(db, user.id, "playstation"):
            raise ValidationFailedError("PlayStation account already connected")

        psn = PSNAPI()
        code = psn.exchange_npsso_for_code(npsso)
        tokens = psn.exchange_code_for_tokens(code)
        account_id = psn.get_account_id(tokens["access_token"])

        connection = PlatformService._upsert_connection(
            db,
            user.id,
            "playstation",
            account_id,
            access_token=tokens["access_token"],
            refresh_token=tokens["refresh_token"],
            expires_at=tokens["expires_at"]
        )
        logger.info("PlayStation account linked", user_id=str(user.id))

        return {
            "platform": "playstation",
            "platform_user_id": connection.platform_user_id,
            "games_count": len(connection.games_data or []),
            "games": connection.games_data or [],
        }

    @staticmethod
    def _psn_access_token(db: Session, psn: PSNAPI, connection: PlatformConnection) -> str:
        access_token = credential_service.decrypt_token(connection.encrypted_access_token)
        if not connection.expires_at or connection.expires_at > datetime.utcnow():
            return access_token

        refresh_token = credential_service.decrypt_token(connection.encrypted_refresh_token)
        if not refresh_token:
            raise ValidationFailedError("PSN token expired and no refresh token available")

        tokens = psn.refresh_tokens(refresh_token)
        connection.encrypted_access_token = credential_service.encrypt_token(tokens["access_token"])
        if tokens["refresh_token"]:
            connection.encrypted_refresh_token = credential_service.encrypt_token(tokens["refresh_token"])
        connection.expires_at = tokens["expires_at"]
        db.commit()

        return tokens["access_token"]

    @staticmethod
    def psn_sync(db: Session, user: User) -> Dict[str, Any]:
        """
        Import the linked PlayStation account's played titles.

        Raises:
            ValidationFailedError: PlayStation not connected
            UpstreamServiceError: PSN request failed
        """
        connection = PlatformService.get_connection(db, user.id, "playstation")
        if not connection or not connection.encrypted_access_token:
            raise ValidationFailedError("PlayStation account not connected")

        psn = PSNAPI()
        try:
            access_token = PlatformService._psn_access_token(db, psn, connection)
            games = psn.get_played_titles(access_token)
        except ServiceError:
            app_metrics.increment_platform_sync("playstation", success=False)
            raise

        PlatformService._store_games(db, connection, games)
        app_metrics.increment_platform_sync("playstation", success=True)

        return {
            "platform": "playstation",
            "platform_user_id": connection.platform_user_id,
            "games_count": len(games),
            "games": games,
        }

    # ============================================
    # Activity
    # ============================================

    @staticmethod
    def recent_activity(db: Session, user_id: UUID, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Merge recently played games across a user's platforms.

        Takes up to five games from each connection (already stored most
        recent first), sorts them by last played and truncates to `limit`.

        Args:
            db: Database session
            user_id: User whose activity is requested
            limit: Maximum number of entries

        Returns:
            Activity entries
        """
        connections = db.query(PlatformConnection).filter(PlatformConnection.user_id == user_id).all()

        activity = []
        for connection in connections:
            for game in (connection.games_data or [])[:ACTIVITY_GAMES_PER_PLATFORM]:
                activity.append({
                    "platform": connection.platform_type,
                    "name": game.get("name") or "Unknown Game",
                    "image_url": game.get("image_url") or game.get("img_logo_url") or game.get("img_icon_url"),
                    "hours_total": game.get("hours_total") or 0,
                    "last_played": game.get("last_played"),
                })

        activity.sort(key=lambda a: _sortable_time(a["last_played"]), reverse=True)
        return activity[:limit]


def _sortable_time(value: Optional[str]) -> float:
    if not value:
        return 0.0
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    return parsed.timestamp()
