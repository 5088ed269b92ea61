"""Site-wide search endpoint."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from reelshelf.database import get_db
from reelshelf.models.schemas import SiteSearchResponse
from reelshelf.services.social_service import SocialService

router = APIRouter()


@router.get("", response_model=SiteSearchResponse)
async def site_search(
    q: str = Query("", max_length=100),
    db: Session = Depends(get_db)
):
    """Users and catalogued movies matching a substring, ten of each."""
    return SocialService.site_search(db, q)
