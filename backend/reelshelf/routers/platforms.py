"""Gaming platform connection endpoints."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import List, Optional

from reelshelf.database import get_db
from reelshelf.models.platform_schemas import (
    PlatformConnectionResponse,
    SteamLoginResponse,
    XboxConnectRequest,
    PSNConnectRequest,
    SyncResponse,
    DisconnectResponse
)
from reelshelf.models.user import User
from reelshelf.services.platform_service import PlatformService
from reelshelf.middleware.auth import get_current_active_user

router = APIRouter()


@router.get("/connections", response_model=List[PlatformConnectionResponse])
def list_connections(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """The caller's linked platforms with their synced games."""
    return PlatformService.list_connections(db, current_user)


@router.delete("/{platform}", response_model=DisconnectResponse)
def disconnect(
    platform: str,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Unlink a platform.

    Args:
        platform: steam, xbox or playstation
    """
    deleted = PlatformService.disconnect(db, current_user, platform)
    return DisconnectResponse(platform=platform, deleted=deleted)


# ============================================
# Steam
# ============================================

@router.get("/steam/login", response_model=SteamLoginResponse)
def steam_login(
    return_path: Optional[str] = Query(None, max_length=500),
    current_user: User = Depends(get_current_active_user)
):
    """
    Start linking a Steam account.

    The frontend sends the browser to the returned URL. Steam redirects
    back to /steam/callback.
    """
    return SteamLoginResponse(url=PlatformService.steam_login_url(current_user, return_path))


@router.get("/steam/callback")
def steam_callback(request: Request, db: Session = Depends(get_db)):
    """
    Steam OpenID return URL.

    Not bearer-authenticated; the user is identified by the signed state
    parameter. Always redirects to the frontend.
    """
    redirect_url = PlatformService.steam_callback(db, dict(request.query_params))
    return RedirectResponse(url=redirect_url, status_code=302)


@router.post("/steam/sync", response_model=SyncResponse)
def steam_sync(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Refresh the linked Steam library."""
    return PlatformService.steam_sync(db, current_user)


# ============================================
# Xbox
# ============================================

@router.post("/xbox/connect", response_model=SyncResponse)
def xbox_connect(
    data: XboxConnectRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Link an Xbox account by gamertag and import its titles."""
    return PlatformService.xbox_connect(db, current_user, data.gamertag)


@router.post("/xbox/sync", response_model=SyncResponse)
def xbox_sync(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Refresh the linked Xbox library."""
    return PlatformService.xbox_sync(db, current_user)


# ============================================
# PlayStation
# ============================================

@router.post("/playstation/connect", response_model=SyncResponse)
def psn_connect(
    data: PSNConnectRequest,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Link a PlayStation account from an NPSSO token."""
    return PlatformService.psn_connect(db, current_user, data.npsso)


@router.post("/playstation/sync", response_model=SyncResponse)
def psn_sync(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Import played titles from the linked PlayStation account."""
    return PlatformService.psn_sync(db, current_user)
