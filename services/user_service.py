from typing import Optional
from datetime import timedelta
from sqlalchemy.orm import Session
import logging

from app.exceptions import ServiceValidationError, UnauthorizedError
from core.utils.helpers import today
from domain.enums import Goal
from domain.mappers import UserMapper
from domain.models import UserProfile
from domain.schemas.user_schemas import (
    AccountProfileResponse,
    SettingsResponse,
    SettingsUpdateRequest,
    UserProfileUpdateRequest,
    UserStatsResponse,
)
from repositories import (
    MealFoodRepository,
    ProgressRepository,
    SettingsRepository,
    UserRepository,
)
from services.auth_service import AuthService

logger = logging.getLogger("protein_tracker.user")

DEFAULT_WEIGHT_KG = 70.0
DEFAULT_TRAINING_MULTIPLIER = 1.8
GOAL_MODIFIERS = {Goal.BULK: 1.1, Goal.CUT: 0.9, Goal.MAINTAIN: 1.0}


class UserService:
    """Body metrics, settings and account management"""

    @staticmethod
    def compute_protein_target(
        weight: Optional[float], multiplier: Optional[float], goal: Optional[Goal]
    ) -> float:
        """weight x multiplier, +10% when bulking, -10% when cutting, 2 dp"""
        weight = weight or DEFAULT_WEIGHT_KG
        multiplier = multiplier or DEFAULT_TRAINING_MULTIPLIER
        modifier = GOAL_MODIFIERS.get(Goal(goal) if goal else Goal.MAINTAIN, 1.0)
        return round(weight * multiplier * modifier, 2)

    @staticmethod
    def update_profile(
        db: Session, user: UserProfile, data: UserProfileUpdateRequest
    ) -> AccountProfileResponse:
        """
        Apply body-metric changes.

        When weight, training multiplier or goal change the daily protein
        target is recomputed and any target sent alongside is ignored.
        """
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "name" in changes:
            user.display_name = changes["name"]
        for key in ("height", "weight", "training_multiplier", "goal"):
            if key in changes:
                setattr(user, key, changes[key])
        if "daily_protein_target" in changes:
            user.daily_protein_goal = changes["daily_protein_target"]

        if any(key in changes for key in ("weight", "training_multiplier", "goal")):
            user.daily_protein_goal = UserService.compute_protein_target(
                user.weight, user.training_multiplier, user.goal
            )

        user = UserRepository(db).update_user(user)
        logger.info(
            f"body_metrics_updated user_id={user.id} "
            f"daily_protein_goal={user.daily_protein_goal}"
        )
        return UserMapper.to_account_response(user)

    @staticmethod
    def get_settings(db: Session, user: UserProfile) -> SettingsResponse:
        """Settings for the user, creating defaults when missing"""
        settings = SettingsRepository(db).get_or_create(user.id)
        return UserMapper.settings_to_response(settings)

    @staticmethod
    def update_settings(
        db: Session, user: UserProfile, data: SettingsUpdateRequest
    ) -> SettingsResponse:
        repo = SettingsRepository(db)
        settings = repo.get_or_create(user.id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        reminder_times = changes.pop("meal_reminder_times", None)
        if reminder_times:
            merged = dict(settings.meal_reminder_times or {})
            merged.update(reminder_times)
            settings.meal_reminder_times = merged
        for key, value in changes.items():
            setattr(settings, key, value)

        settings = repo.update(settings)
        logger.info(f"settings_updated user_id={user.id}")
        return UserMapper.settings_to_response(settings)

    @staticmethod
    def get_stats(db: Session, user: UserProfile) -> UserStatsResponse:
        """Totals plus goal-met days within the last 7 days as the current streak"""
        progress_repo = ProgressRepository(db)
        return UserStatsResponse(
            total_food_items=MealFoodRepository(db).count_for_user(user.id),
            total_days_tracked=progress_repo.count_history(user.id),
            current_streak=progress_repo.count_goal_met_since(
                user.id, today() - timedelta(days=6)
            ),
            longest_streak=progress_repo.get_longest_streak(user.id),
        )

    @staticmethod
    def delete_account(db: Session, user: UserProfile, password: Optional[str]) -> None:
        """
        Delete the account after re-checking the password.

        Raises:
            ServiceValidationError: password missing or account has none
            UnauthorizedError: password does not match
        """
        if not password:
            raise ServiceValidationError("Password is required to delete account")
        if not user.password_hash:
            raise ServiceValidationError("Unable to verify account")
        if not AuthService.verify_password(password, user.password_hash):
            logger.warning(f"account_delete_denied user_id={user.id}")
            raise UnauthorizedError("Invalid password")

        AuthService.delete_account(db, user)
