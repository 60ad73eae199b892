"""
User endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from skillverse.api.deps import get_media_storage
from skillverse.core.database import get_db
from skillverse.core.exceptions import ValidationException
from skillverse.core.security import get_current_user
from skillverse.models import User
from skillverse.schemas.users import PayoutDetails, ProfileUpdate, PublicUser, UserResponse
from skillverse.services.cloudinary import AVATAR_FOLDER, CloudinaryStorage
from skillverse.services.users import UserService

router = APIRouter()


@router.get("/", response_model=List[PublicUser])
async def list_users(
    q: Optional[str] = Query(None, description="Search by name, skill or achievement"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List users for teammate search"""
    return UserService.search(db, q)


@router.get("/dashboard")
async def get_dashboard(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    """Creator and learner dashboard"""
    return UserService.dashboard(db, current_user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return UserService.update_profile(db, current_user, data)


@router.put("/profile/avatar")
async def update_avatar(
    avatar: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: CloudinaryStorage = Depends(get_media_storage),
):
    """Upload a new avatar image"""
    if avatar.content_type and not avatar.content_type.startswith("image/"):
        raise ValidationException("Avatar must be an image")

    uploaded = await run_in_threadpool(
        storage.upload, avatar.file, AVATAR_FOLDER, "image", avatar.filename
    )
    user = UserService.update_avatar(db, current_user, uploaded["url"])
    return {"message": "Avatar updated successfully", "avatar_url": user.avatar_url}


@router.put("/payout-details")
async def update_payout_details(
    data: PayoutDetails,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Save UPI id or full bank details"""
    user = UserService.update_payout_details(db, current_user, data)
    return {"message": "Payout details updated", "payout_details": user.payout_details}


@router.get("/{user_id}/profile")
async def get_user_profile(user_id: int, db: Session = Depends(get_db)):
    """Public profile with created and enrolled courses"""
    return UserService.public_profile(db, user_id)
