"""Services package - Business logic layer"""

from services.auth_service import AuthService
from services.progress_service import ProgressService
from services.meal_service import MealService
from services.food_recognition_service import (
    FoodRecognitionService,
    get_food_recognition_service,
)
from services.food_service import FoodService
from services.user_service import UserService
from services.analytics_service import AnalyticsService

__all__ = [
    "AuthService",
    "ProgressService",
    "MealService",
    "FoodRecognitionService",
    "get_food_recognition_service",
    "FoodService",
    "UserService",
    "AnalyticsService",
]
