from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import date, datetime

from domain.schemas.common import CamelModel


class MealTypeStats(BaseModel):
    protein: float = 0.0
    calories: float = 0.0
    count: int = 0


def _empty_breakdown() -> Dict[str, MealTypeStats]:
    return {
        meal: MealTypeStats() for meal in ("breakfast", "lunch", "dinner", "snack")
    }


class DailyStats(CamelModel):
    date: date
    total_calories: float = 0.0
    total_protein: float = 0.0
    total_carbs: float = 0.0
    total_fat: float = 0.0
    total_fiber: float = 0.0
    goal_met: bool = False
    meals_count: int = 0
    meal_breakdown: Dict[str, MealTypeStats] = Field(default_factory=_empty_breakdown)


class AverageDaily(BaseModel):
    calories: float
    protein: float
    carbs: float
    fat: float


class WeeklyStats(CamelModel):
    week_start: date
    week_end: date
    average_daily: AverageDaily
    days_with_goal_met: int
    total_days_tracked: int
    goal_hit_percentage: int
    trend: str  # improving | declining | stable


class StreakRun(CamelModel):
    start_date: date
    end_date: date
    length: int


class StreakData(CamelModel):
    current_streak: int = 0
    longest_streak: int = 0
    last_streak_date: Optional[date] = None
    streak_history: List[StreakRun] = Field(default_factory=list)


class TimingSuggestion(CamelModel):
    meal: str
    suggested_time: str
    reason: str


class MealTimingAnalysis(CamelModel):
    average_meal_times: Dict[str, Optional[str]]
    meal_consistency: Dict[str, int]
    optimal_timing_suggestions: List[TimingSuggestion] = Field(default_factory=list)


class NutritionInsight(BaseModel):
    type: str  # achievement | recommendation | pattern | warning
    title: str
    description: str
    data: Optional[Dict[str, Any]] = None
    priority: str  # high | medium | low
    actionable: bool


class Achievement(CamelModel):
    id: str
    name: str
    description: str
    date_earned: datetime
    category: str  # streak | goal | consistency | milestone


class AnalyticsOverview(CamelModel):
    """Everything the analytics dashboard renders for a date range"""

    period: str
    daily_stats: List[DailyStats]
    weekly_stats: List[WeeklyStats]
    streak_data: StreakData
    meal_timing_analysis: MealTimingAnalysis
    insights: List[NutritionInsight]
    achievements: List[Achievement]


class PeriodSummary(CamelModel):
    period: str
    average_protein: float
    days_with_goal_met: int
    total_days: int
    streak: Optional[int] = None


class PeriodChanges(CamelModel):
    protein_change: float
    goal_met_change: float
    trend: str


class ComparativeAnalysis(BaseModel):
    current: PeriodSummary
    previous: PeriodSummary
    changes: PeriodChanges
