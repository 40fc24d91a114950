"""Body metrics, settings and account routes"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_current_user, get_db
from api.responses import AUTH_ERROR_RESPONSES, success_response
from domain.models import UserProfile
from domain.schemas.user_schemas import (
    DeleteAccountRequest,
    SettingsUpdateRequest,
    UserProfileUpdateRequest,
)
from services.user_service import UserService

router = APIRouter(prefix="/user", tags=["User"], responses=AUTH_ERROR_RESPONSES)
logger = logging.getLogger("protein_tracker.api.user")


@router.put("/profile")
def update_profile(
    data: UserProfileUpdateRequest,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update body metrics; the protein target follows weight, multiplier and goal"""
    profile = UserService.update_profile(db, user, data)
    return success_response(
        data={"user": profile.model_dump(by_alias=True)},
        message="Profile updated successfully",
    )


@router.get("/settings")
def get_settings(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    user_settings = UserService.get_settings(db, user)
    return success_response(data={"settings": user_settings.model_dump(by_alias=True)})


@router.put("/settings")
def update_settings(
    data: SettingsUpdateRequest,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user_settings = UserService.update_settings(db, user, data)
    return success_response(
        data={"settings": user_settings.model_dump(by_alias=True)},
        message="Settings updated successfully",
    )


@router.get("/stats")
def get_stats(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    stats = UserService.get_stats(db, user)
    return success_response(data=stats.model_dump(by_alias=True))


@router.delete("/account")
def delete_account(
    data: Optional[DeleteAccountRequest] = Body(None),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    UserService.delete_account(db, user, data.password if data else None)
    return success_response(message="Account deleted successfully")
