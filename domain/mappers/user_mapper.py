"""
User domain mappers.
Handles transformation between ORM models and DTOs for user-related entities.
"""

from typing import Optional
from domain.models import UserProfile, UserSettings
from domain.models.user import DEFAULT_MEAL_REMINDER_TIMES
from domain.schemas.auth_schemas import UserProfileResponse
from domain.schemas.user_schemas import (
    AccountProfileResponse,
    SettingsResponse,
    SubscriptionSummary,
)


class UserMapper:
    """Mapper for user-related transformations."""

    @staticmethod
    def to_response(user: UserProfile) -> UserProfileResponse:
        """
        Convert UserProfile ORM model to UserProfileResponse DTO.

        Args:
            user: UserProfile ORM instance

        Returns:
            UserProfileResponse DTO with the full profile
        """
        notifications = user.settings.notifications_enabled if user.settings else True
        return UserProfileResponse(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            age=user.age,
            weight=user.weight,
            height=user.height,
            daily_protein_goal=user.daily_protein_goal,
            activity_level=user.activity_level,
            dietary_restrictions=user.dietary_restrictions or [],
            units=user.units,
            notifications_enabled=notifications,
            privacy_level=user.privacy_level,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    @staticmethod
    def to_account_response(user: UserProfile) -> AccountProfileResponse:
        """Profile shape returned by the body-metrics endpoints."""
        subscription: Optional[SubscriptionSummary] = None
        if user.subscription:
            subscription = SubscriptionSummary(
                plan_type=user.subscription.plan_type,
                status=user.subscription.status,
            )

        return AccountProfileResponse(
            id=user.id,
            email=user.email,
            name=user.display_name,
            profile_image_url=user.profile_image_url,
            height=user.height,
            weight=user.weight,
            training_multiplier=user.training_multiplier,
            goal=user.goal,
            daily_protein_target=user.daily_protein_goal,
            settings=(
                UserMapper.settings_to_response(user.settings)
                if user.settings
                else None
            ),
            subscription=subscription,
            updated_at=user.updated_at,
        )

    @staticmethod
    def settings_to_response(settings: UserSettings) -> SettingsResponse:
        times = dict(DEFAULT_MEAL_REMINDER_TIMES)
        times.update(settings.meal_reminder_times or {})
        return SettingsResponse(
            user_id=settings.user_id,
            notifications_enabled=settings.notifications_enabled,
            meal_reminder_times=times,
            do_not_disturb_start=settings.do_not_disturb_start,
            do_not_disturb_end=settings.do_not_disturb_end,
            nightly_summary_enabled=settings.nightly_summary_enabled,
            updated_at=settings.updated_at,
        )
