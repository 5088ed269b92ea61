"""Profile picture and avatar upload endpoints."""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from reelshelf.database import get_db
from reelshelf.models.schemas import UploadResponse
from reelshelf.models.user import User
from reelshelf.services.upload_service import UploadService
from reelshelf.middleware.auth import get_current_active_user

router = APIRouter()


async def _store(db: Session, user: User, file: UploadFile, flow: str) -> dict:
    # Read one byte past the limit so oversized files are detected without buffering them whole
    data = await file.read(UploadService.limit_for(flow) + 1)
    return UploadService.save_profile_picture(
        db,
        user,
        filename=file.filename or "upload",
        content_type=file.content_type,
        data=data,
        flow=flow
    )


@router.post("/profile-picture", response_model=UploadResponse)
async def upload_profile_picture(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Upload a profile picture (JPG, PNG or SVG, up to 1MB).

    Returns:
        Public URL of the stored picture
    """
    return await _store(db, current_user, file, "profile_picture")


@router.post("/avatar", response_model=UploadResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Upload an avatar (JPG, PNG or SVG, up to 500KB)."""
    return await _store(db, current_user, file, "avatar")
