from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict
from datetime import datetime
from uuid import UUID

from domain.enums import Goal, PlanType, SubscriptionStatus
from domain.schemas.common import CamelModel

TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"


class UserProfileUpdateRequest(CamelModel):
    """Body-metrics update; the protein target is recomputed from them"""

    name: Optional[str] = None
    height: Optional[float] = Field(None, ge=100, le=250, description="cm")
    weight: Optional[float] = Field(None, ge=30, le=300, description="kg")
    training_multiplier: Optional[float] = Field(None, ge=1.0, le=3.0)
    goal: Optional[Goal] = None
    daily_protein_target: Optional[float] = Field(None, ge=50, le=400)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not 2 <= len(v) <= 100:
            raise ValueError("Name must be between 2 and 100 characters")
        return v

    @field_validator("goal", mode="before")
    @classmethod
    def lowercase_goal(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class MealReminderTimes(BaseModel):
    breakfast: Optional[str] = Field(None, pattern=TIME_PATTERN)
    lunch: Optional[str] = Field(None, pattern=TIME_PATTERN)
    snack: Optional[str] = Field(None, pattern=TIME_PATTERN)
    dinner: Optional[str] = Field(None, pattern=TIME_PATTERN)


class SettingsUpdateRequest(CamelModel):
    notifications_enabled: Optional[bool] = None
    meal_reminder_times: Optional[MealReminderTimes] = None
    do_not_disturb_start: Optional[str] = Field(None, pattern=TIME_PATTERN)
    do_not_disturb_end: Optional[str] = Field(None, pattern=TIME_PATTERN)
    nightly_summary_enabled: Optional[bool] = None


class SettingsResponse(CamelModel):
    user_id: UUID
    notifications_enabled: bool
    meal_reminder_times: Dict[str, str]
    do_not_disturb_start: str
    do_not_disturb_end: str
    nightly_summary_enabled: bool
    updated_at: datetime


class SubscriptionSummary(CamelModel):
    plan_type: PlanType
    status: SubscriptionStatus


class AccountProfileResponse(CamelModel):
    id: UUID
    email: str
    name: Optional[str] = None
    profile_image_url: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    training_multiplier: Optional[float] = None
    goal: Goal = Goal.MAINTAIN
    daily_protein_target: Optional[float] = None
    settings: Optional[SettingsResponse] = None
    subscription: Optional[SubscriptionSummary] = None
    updated_at: datetime


class UserStatsResponse(CamelModel):
    total_food_items: int
    total_days_tracked: int
    current_streak: int
    longest_streak: int


class DeleteAccountRequest(BaseModel):
    password: Optional[str] = None
