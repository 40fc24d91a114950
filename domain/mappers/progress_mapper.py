"""
Progress domain mappers.
"""

from datetime import date
from typing import Dict

from domain.enums import MEAL_TYPES
from domain.models import DailyProgress
from domain.schemas.progress_schemas import DailyProgressResponse, MealBreakdownEntry


class ProgressMapper:
    """Mapper for daily progress rows."""

    @staticmethod
    def to_response(progress: DailyProgress) -> DailyProgressResponse:
        breakdown: Dict[str, MealBreakdownEntry] = {
            meal: MealBreakdownEntry() for meal in MEAL_TYPES
        }
        for meal_progress in progress.meal_progress:
            breakdown[meal_progress.meal_type.value] = MealBreakdownEntry(
                target=meal_progress.target_protein,
                actual=meal_progress.actual_protein,
                items=meal_progress.items_count,
            )

        return DailyProgressResponse(
            date=progress.date,
            total_protein=progress.total_protein,
            total_calories=progress.total_calories,
            daily_target=progress.daily_target,
            goal_met=progress.goal_met,
            streak_count=progress.streak_count,
            achievement_percentage=progress.achievement_percentage,
            meal_breakdown=breakdown,
        )

    @staticmethod
    def default_response(day: date, daily_target: float) -> DailyProgressResponse:
        """Zeroed progress for a day that has no stored row."""
        meal_target = daily_target / 4
        return DailyProgressResponse(
            date=day,
            daily_target=daily_target,
            meal_breakdown={
                meal: MealBreakdownEntry(target=meal_target) for meal in MEAL_TYPES
            },
        )
