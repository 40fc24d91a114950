from typing import Optional, Tuple
from uuid import UUID
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session
import logging

import bcrypt
import jwt

from app.config import settings
from app.exceptions import ConflictError, UnauthorizedError, NotFoundError
from domain.enums import TokenType
from domain.models import UserProfile
from domain.schemas.auth_schemas import (
    RegisterRequest,
    ProfileUpdateRequest,
    AuthTokens,
)
from repositories import UserRepository

logger = logging.getLogger("protein_tracker.auth")


class AuthService:
    """Password hashing, token issuing and account lifecycle"""

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    @staticmethod
    def hash_password(password: str) -> str:
        salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: Optional[str]) -> bool:
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), password_hash.encode("utf-8")
            )
        except ValueError:
            # Malformed stored hash
            logger.warning("password_hash_malformed")
            return False

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    @staticmethod
    def _secret_for(token_type: TokenType) -> str:
        if token_type == TokenType.REFRESH:
            return settings.jwt_refresh_secret
        return settings.jwt_secret

    @staticmethod
    def create_token(user: UserProfile, token_type: TokenType) -> str:
        """
        Sign a JWT for the user.

        Claims: sub (user id), email, type, iat, exp. Access tokens live
        ``jwt_expires_days``, refresh tokens ``jwt_refresh_expires_days``.
        """
        now = datetime.now(timezone.utc)
        days = (
            settings.jwt_refresh_expires_days
            if token_type == TokenType.REFRESH
            else settings.jwt_expires_days
        )
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "type": token_type.value,
            "iat": now,
            "exp": now + timedelta(days=days),
        }
        return jwt.encode(
            payload, AuthService._secret_for(token_type), algorithm=settings.jwt_algorithm
        )

    @staticmethod
    def generate_tokens(user: UserProfile) -> AuthTokens:
        return AuthTokens(
            access_token=AuthService.create_token(user, TokenType.ACCESS),
            refresh_token=AuthService.create_token(user, TokenType.REFRESH),
        )

    @staticmethod
    def decode_token(token: str, token_type: TokenType = TokenType.ACCESS) -> dict:
        """
        Verify signature, expiry and token type.

        Raises:
            jwt.ExpiredSignatureError: token expired
            jwt.InvalidTokenError: bad signature, malformed token or wrong type
        """
        payload = jwt.decode(
            token,
            AuthService._secret_for(token_type),
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
        if payload.get("type", token_type.value) != token_type.value:
            raise jwt.InvalidTokenError("Unexpected token type")
        return payload

    @staticmethod
    def _user_id_from(payload: dict) -> UUID:
        try:
            return UUID(str(payload["sub"]))
        except (KeyError, ValueError) as e:
            raise jwt.InvalidTokenError("Invalid subject claim") from e

    @staticmethod
    def authenticate_token(db: Session, token: str) -> UserProfile:
        """Resolve an access token to an existing user"""
        payload = AuthService.decode_token(token, TokenType.ACCESS)
        user = UserRepository(db).get_by_id(AuthService._user_id_from(payload))
        if user is None:
            raise UnauthorizedError("User not found")
        return user

    # ------------------------------------------------------------------
    # Account flows
    # ------------------------------------------------------------------

    @staticmethod
    def register(db: Session, data: RegisterRequest) -> Tuple[UserProfile, AuthTokens]:
        """
        Create an account with default settings and a free subscription.

        Raises:
            ConflictError: email already registered
        """
        user_repo = UserRepository(db)
        if user_repo.get_by_email(data.email):
            logger.warning(f"register_conflict email={data.email}")
            raise ConflictError("User with this email already exists")

        display_name = data.name or data.email.split("@")[0]
        user = user_repo.create_user(
            email=data.email,
            password_hash=AuthService.hash_password(data.password),
            display_name=display_name,
        )
        logger.info(f"user_registered user_id={user.id}")
        return user, AuthService.generate_tokens(user)

    @staticmethod
    def login(db: Session, email: str, password: str) -> Tuple[UserProfile, AuthTokens]:
        user = UserRepository(db).get_by_email(email)
        if user is None or not AuthService.verify_password(password, user.password_hash):
            logger.warning(f"login_failed email={email}")
            raise UnauthorizedError("Invalid email or password")

        logger.info(f"user_logged_in user_id={user.id}")
        return user, AuthService.generate_tokens(user)

    @staticmethod
    def refresh(db: Session, refresh_token: str) -> Tuple[UserProfile, AuthTokens]:
        """Exchange a valid refresh token for a new token pair"""
        payload = AuthService.decode_token(refresh_token, TokenType.REFRESH)
        user = UserRepository(db).get_by_id(AuthService._user_id_from(payload))
        if user is None:
            raise UnauthorizedError("User not found")

        logger.info(f"tokens_refreshed user_id={user.id}")
        return user, AuthService.generate_tokens(user)

    @staticmethod
    def get_profile(db: Session, user_id: UUID) -> UserProfile:
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise NotFoundError("User profile not found")
        return user

    @staticmethod
    def update_profile(
        db: Session, user: UserProfile, data: ProfileUpdateRequest
    ) -> UserProfile:
        """Apply a partial profile update; only fields sent by the client change"""
        changes = data.model_dump(exclude_unset=True)
        for key, value in changes.items():
            setattr(user, key, value)

        user = UserRepository(db).update_user(user)
        logger.info(
            f"profile_updated user_id={user.id} fields={','.join(sorted(changes))}"
        )
        return user

    @staticmethod
    def delete_account(db: Session, user: UserProfile) -> None:
        user_id = user.id
        UserRepository(db).delete_user(user_id)
        logger.info(f"account_deleted user_id={user_id}")
