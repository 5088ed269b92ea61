"""Pydantic schemas for linked gaming platforms."""

from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID


class PlatformConnectionResponse(BaseModel):
    """Linked platform account. Tokens are never returned."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    platform_type: str
    platform_user_id: Optional[str] = None
    last_synced_at: Optional[datetime] = None
    created_at: datetime
    games_count: int = 0
    games: List[Dict[str, Any]] = []


class SteamLoginResponse(BaseModel):
    """Steam OpenID URL the browser should be sent to."""
    url: str


class XboxConnectRequest(BaseModel):
    """Xbox link request."""
    gamertag: Optional[str] = None


class PSNConnectRequest(BaseModel):
    """PlayStation link request."""
    npsso: Optional[str] = None


class SyncResponse(BaseModel):
    """Result of a connect or sync."""
    platform: str
    platform_user_id: Optional[str] = None
    games_count: int
    games: List[Dict[str, Any]] = []
    warning: Optional[str] = None


class DisconnectResponse(BaseModel):
    """Result of disconnecting a platform."""
    platform: str
    deleted: int


class ActivityEntry(BaseModel):
    """Recently played game from any platform."""
    platform: str
    name: str
    image_url: Optional[str] = None
    hours_total: float = 0
    last_played: Optional[str] = None
