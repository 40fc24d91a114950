"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
)
from domain.models.user import UserProfile, UserSettings, Subscription
from domain.models.food import Food, FoodDetection
from domain.models.meal import Meal, MealFood
from domain.models.progress import DailyProgress, MealProgress

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    # User models
    "UserProfile",
    "UserSettings",
    "Subscription",
    # Food models
    "Food",
    "FoodDetection",
    # Meal models
    "Meal",
    "MealFood",
    # Progress models
    "DailyProgress",
    "MealProgress",
]
