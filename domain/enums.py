"""
Domain enums for the protein tracker.
Contains all enumeration types used across the domain models.
"""

import enum


class MealType(str, enum.Enum):
    """Meal slots a logged meal belongs to"""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


# Canonical ordering for per-meal breakdowns
MEAL_TYPES = [m.value for m in MealType]


class Goal(str, enum.Enum):
    """Body composition goal used to scale the protein target"""

    MAINTAIN = "maintain"
    BULK = "bulk"
    CUT = "cut"


class ActivityLevel(str, enum.Enum):
    """Physical activity levels"""

    SEDENTARY = "sedentary"
    LIGHTLY_ACTIVE = "lightly_active"
    MODERATELY_ACTIVE = "moderately_active"
    VERY_ACTIVE = "very_active"
    EXTRA_ACTIVE = "extra_active"


class Units(str, enum.Enum):
    """Preferred measurement system"""

    METRIC = "metric"
    IMPERIAL = "imperial"


class PrivacyLevel(str, enum.Enum):
    """Profile visibility"""

    PUBLIC = "public"
    FRIENDS = "friends"
    PRIVATE = "private"


class DetectionStatus(str, enum.Enum):
    """Processing state of a food detection"""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PlanType(str, enum.Enum):
    """Subscription plans"""

    FREE = "free"
    PRO = "pro"


class BillingPeriod(str, enum.Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    TRIALING = "trialing"


class TokenType(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"
