"""
API dependencies for dependency injection
"""

from typing import Generator, Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session
import logging

from app.exceptions import ForbiddenError, UnauthorizedError
from domain.models import UserProfile, get_db_session
from services.auth_service import AuthService
from services.food_recognition_service import (
    FoodRecognitionService,
    get_food_recognition_service,
)

logger = logging.getLogger("protein_tracker.api.auth")

BEARER_PREFIX = "Bearer "


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI routes.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            # Use db session here
            pass
    """
    yield from get_db_session()


def extract_token(authorization: Optional[str]) -> str:
    """Token from an Authorization header; a value without the Bearer prefix is taken as-is"""
    if not authorization:
        raise UnauthorizedError("No authorization header provided")
    token = authorization[len(BEARER_PREFIX):] if authorization.startswith(BEARER_PREFIX) else authorization
    token = token.strip()
    if not token:
        raise UnauthorizedError("No authorization header provided")
    return token


def get_current_user(request: Request, db: Session = Depends(get_db)) -> UserProfile:
    """
    Resolve the authenticated user from the access token.

    Expired or malformed tokens raise PyJWT errors, which the exception
    handlers turn into 401 responses.
    """
    token = extract_token(request.headers.get("Authorization"))
    user = AuthService.authenticate_token(db, token)
    request.state.user_id = str(user.id)
    return user


def require_premium(user: UserProfile = Depends(get_current_user)) -> UserProfile:
    """Allow only users with an active pro subscription"""
    if user.subscription is None or not user.subscription.is_premium():
        logger.info(f"premium_required user_id={user.id}")
        raise ForbiddenError("Premium subscription required for this feature")
    return user


def get_recognizer() -> FoodRecognitionService:
    return get_food_recognition_service()
