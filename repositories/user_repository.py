"""
User Repository - Data access layer for accounts, settings and subscriptions
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from repositories.base import BaseRepository
from domain.models import UserProfile, UserSettings, Subscription
from domain.enums import PlanType, SubscriptionStatus
from app.exceptions import ConflictError


class UserRepository(BaseRepository[UserProfile]):
    """Repository for user data access"""

    def __init__(self, db: Session):
        super().__init__(db, UserProfile)

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        """Get user by (normalized) email"""
        return (
            self.db.query(UserProfile)
            .filter(UserProfile.email == email.strip().lower())
            .first()
        )

    def create_user(
        self, email: str, password_hash: str, display_name: str = None
    ) -> UserProfile:
        """Create a user together with default settings and a free plan"""
        user = UserProfile(
            email=email.strip().lower(),
            password_hash=password_hash,
            display_name=display_name,
        )
        user.settings = UserSettings()
        user.subscription = Subscription(
            plan_type=PlanType.FREE, status=SubscriptionStatus.ACTIVE
        )
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            return user
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(f"User with email {email} already exists") from e

    def update_user(self, user: UserProfile) -> UserProfile:
        """Update user information"""
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_user(self, user_id: UUID) -> bool:
        """Delete user and all related data (cascade)"""
        return self.delete(user_id)


class SettingsRepository(BaseRepository[UserSettings]):
    """Repository for notification settings"""

    def __init__(self, db: Session):
        super().__init__(db, UserSettings)

    def get_by_user_id(self, user_id: UUID) -> Optional[UserSettings]:
        return self.db.get(UserSettings, user_id)

    def get_or_create(self, user_id: UUID) -> UserSettings:
        """Return the user's settings, inserting defaults when missing"""
        settings = self.get_by_user_id(user_id)
        if settings is None:
            settings = self.create(UserSettings(user_id=user_id))
        return settings
