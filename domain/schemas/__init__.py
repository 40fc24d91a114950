"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.common import CamelModel, NutritionData
from domain.schemas.auth_schemas import (
    RegisterRequest,
    LoginRequest,
    RefreshRequest,
    VerifyTokenRequest,
    ProfileUpdateRequest,
    UserProfileResponse,
    AuthTokens,
    AuthResponse,
)
from domain.schemas.food_schemas import (
    FoodLogRequest,
    LoggedMeal,
    FoodItemUpdateRequest,
    FoodItemResponse,
    RecentMeal,
    RecentMealFood,
    FoodSearchResult,
    DetectedFood,
    EstimatedPortion,
    FoodDetectionResponse,
)
from domain.schemas.meal_schemas import (
    MealFoodCreate,
    MealCreate,
    MealUpdate,
    MealFoodResponse,
    MealResponse,
    DayMealsResponse,
    MealTypeSummary,
    TodaySummaryResponse,
)
from domain.schemas.progress_schemas import (
    MealBreakdownEntry,
    DailyProgressResponse,
    HistoryPagination,
    ProgressHistoryResponse,
    StreakInfoResponse,
    WeeklySummaryResponse,
)
from domain.schemas.user_schemas import (
    UserProfileUpdateRequest,
    MealReminderTimes,
    SettingsUpdateRequest,
    SettingsResponse,
    SubscriptionSummary,
    AccountProfileResponse,
    UserStatsResponse,
    DeleteAccountRequest,
)
from domain.schemas.analytics_schemas import (
    MealTypeStats,
    DailyStats,
    AverageDaily,
    WeeklyStats,
    StreakRun,
    StreakData,
    TimingSuggestion,
    MealTimingAnalysis,
    NutritionInsight,
    Achievement,
    AnalyticsOverview,
    PeriodSummary,
    PeriodChanges,
    ComparativeAnalysis,
)

__all__ = [
    # Common
    "CamelModel",
    "NutritionData",
    # Auth schemas
    "RegisterRequest",
    "LoginRequest",
    "RefreshRequest",
    "VerifyTokenRequest",
    "ProfileUpdateRequest",
    "UserProfileResponse",
    "AuthTokens",
    "AuthResponse",
    # Food schemas
    "FoodLogRequest",
    "LoggedMeal",
    "FoodItemUpdateRequest",
    "FoodItemResponse",
    "RecentMeal",
    "RecentMealFood",
    "FoodSearchResult",
    "DetectedFood",
    "EstimatedPortion",
    "FoodDetectionResponse",
    # Meal schemas
    "MealFoodCreate",
    "MealCreate",
    "MealUpdate",
    "MealFoodResponse",
    "MealResponse",
    "DayMealsResponse",
    "MealTypeSummary",
    "TodaySummaryResponse",
    # Progress schemas
    "MealBreakdownEntry",
    "DailyProgressResponse",
    "HistoryPagination",
    "ProgressHistoryResponse",
    "StreakInfoResponse",
    "WeeklySummaryResponse",
    # User schemas
    "UserProfileUpdateRequest",
    "MealReminderTimes",
    "SettingsUpdateRequest",
    "SettingsResponse",
    "SubscriptionSummary",
    "AccountProfileResponse",
    "UserStatsResponse",
    "DeleteAccountRequest",
    # Analytics schemas
    "MealTypeStats",
    "DailyStats",
    "AverageDaily",
    "WeeklyStats",
    "StreakRun",
    "StreakData",
    "TimingSuggestion",
    "MealTimingAnalysis",
    "NutritionInsight",
    "Achievement",
    "AnalyticsOverview",
    "PeriodSummary",
    "PeriodChanges",
    "ComparativeAnalysis",
]
