from pydantic import BaseModel
from typing import Optional, List, Dict
from datetime import date

from domain.schemas.common import CamelModel


class MealBreakdownEntry(BaseModel):
    target: float = 0.0
    actual: float = 0.0
    items: int = 0


class DailyProgressResponse(CamelModel):
    """Protein progress for one day, broken down by meal type"""

    date: date
    total_protein: float = 0.0
    total_calories: float = 0.0
    daily_target: float
    goal_met: bool = False
    streak_count: int = 0
    achievement_percentage: float = 0.0
    meal_breakdown: Dict[str, MealBreakdownEntry]


class HistoryPagination(BaseModel):
    limit: int
    offset: int
    total: int


class ProgressHistoryResponse(BaseModel):
    history: List[DailyProgressResponse]
    pagination: HistoryPagination


class StreakInfoResponse(CamelModel):
    current_streak: int = 0
    longest_streak: int = 0
    last_progress_date: Optional[date] = None


class WeeklySummaryResponse(CamelModel):
    weekly_average: float
    goal_hit_percentage: float
    total_days_tracked: int
    daily_values: List[float]
    start_date: date
    end_date: date
