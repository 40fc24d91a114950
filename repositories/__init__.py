"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.user_repository import (
    UserRepository,
    SettingsRepository,
)
from repositories.food_repository import FoodRepository, DetectionRepository
from repositories.meal_repository import MealRepository, MealFoodRepository
from repositories.progress_repository import ProgressRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "SettingsRepository",
    "FoodRepository",
    "DetectionRepository",
    "MealRepository",
    "MealFoodRepository",
    "ProgressRepository",
]
