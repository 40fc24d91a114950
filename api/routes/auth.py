"""Authentication and account routes"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_current_user, get_db
from api.responses import AUTH_ERROR_RESPONSES, success_response
from domain.mappers import UserMapper
from domain.models import UserProfile
from domain.schemas.auth_schemas import (
    AuthResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RefreshRequest,
    RegisterRequest,
    VerifyTokenRequest,
)
from services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger("protein_tracker.api.auth")


def _auth_payload(user: UserProfile, tokens) -> dict:
    return AuthResponse(
        user=UserMapper.to_response(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    ).model_dump(by_alias=True)


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return the user with a token pair"""
    user, tokens = AuthService.register(db, data)
    return success_response(
        data=_auth_payload(user, tokens), message="User registered successfully"
    )


@router.post("/login")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user, tokens = AuthService.login(db, data.email, data.password)
    return success_response(data=_auth_payload(user, tokens), message="Login successful")


@router.post("/refresh")
def refresh(data: RefreshRequest, db: Session = Depends(get_db)):
    """Exchange a refresh token for a new token pair"""
    user, tokens = AuthService.refresh(db, data.refresh_token)
    return success_response(
        data=_auth_payload(user, tokens), message="Token refreshed successfully"
    )


@router.post("/verify")
def verify(data: VerifyTokenRequest, db: Session = Depends(get_db)):
    """Check an access token and echo it back with the user's profile"""
    user = AuthService.authenticate_token(db, data.token)
    return success_response(
        data={"user": UserMapper.to_response(user).model_dump(), "token": data.token},
        message="Token verified successfully",
    )


@router.get("/profile", responses=AUTH_ERROR_RESPONSES)
def get_profile(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    profile = AuthService.get_profile(db, user.id)
    return success_response(data={"user": UserMapper.to_response(profile).model_dump()})


@router.put("/profile", responses=AUTH_ERROR_RESPONSES)
def update_profile(
    data: ProfileUpdateRequest,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = AuthService.update_profile(db, user, data)
    return success_response(
        data={"user": UserMapper.to_response(updated).model_dump()},
        message="Profile updated successfully",
    )


@router.delete("/account", responses=AUTH_ERROR_RESPONSES)
def delete_account(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    AuthService.delete_account(db, user)
    return success_response(message="Account deleted successfully")
