from typing import Dict, List, Optional, Tuple
from datetime import date, timedelta
from sqlalchemy.orm import Session
import logging

from app.config import settings
from core.utils.helpers import day_bounds, today
from domain.enums import MealType
from domain.mappers import ProgressMapper
from domain.models import DailyProgress, MealProgress, UserProfile
from domain.schemas.progress_schemas import (
    DailyProgressResponse,
    HistoryPagination,
    ProgressHistoryResponse,
    StreakInfoResponse,
    WeeklySummaryResponse,
)
from repositories import MealRepository, ProgressRepository

logger = logging.getLogger("protein_tracker.progress")


class ProgressService:
    """Daily progress derived from logged meals, plus the read endpoints"""

    @staticmethod
    def daily_target_for(user: UserProfile) -> float:
        return user.daily_protein_goal or settings.default_progress_target

    @staticmethod
    def _meal_totals(
        db: Session, user: UserProfile, day: date
    ) -> Tuple[float, float, Dict[MealType, Tuple[float, int]], int]:
        """Protein, calories, per-meal (protein, items) and meal count for one day"""
        start, end = day_bounds(day)
        meals = MealRepository(db).list_in_range(user.id, start, end)

        total_protein = 0.0
        total_calories = 0.0
        per_meal: Dict[MealType, Tuple[float, int]] = {m: (0.0, 0) for m in MealType}
        for meal in meals:
            meal_protein = 0.0
            for meal_food in meal.meal_foods:
                data = meal_food.nutrition_data or {}
                meal_protein += float(data.get("protein") or 0)
                total_calories += float(data.get("calories") or 0)
            total_protein += meal_protein
            protein, items = per_meal[meal.meal_type]
            per_meal[meal.meal_type] = (
                protein + meal_protein,
                items + len(meal.meal_foods),
            )
        return total_protein, total_calories, per_meal, len(meals)

    @staticmethod
    def refresh_day(
        db: Session, user: UserProfile, day: date
    ) -> Optional[DailyProgress]:
        """
        Recompute the stored progress for ``day`` from the user's meals.

        Totals, per-meal-type targets (daily target / 4), goal_met,
        achievement percentage and streak are rebuilt, then the streak of
        every later stored day is re-chained. A day left without meals has
        its row removed. Flushes only; the caller commits.

        Returns:
            The refreshed DailyProgress, or None when the day has no meals
        """
        repo = ProgressRepository(db)
        progress = repo.get_by_date(user.id, day)
        total_protein, total_calories, per_meal, meal_count = (
            ProgressService._meal_totals(db, user, day)
        )

        if meal_count == 0:
            if progress is not None:
                db.delete(progress)
                db.flush()
                logger.info(f"progress_cleared user_id={user.id} date={day}")
            ProgressService._rechain_streaks(db, user, day)
            return None

        target = ProgressService.daily_target_for(user)
        if progress is None:
            progress = DailyProgress(user_id=user.id, date=day, daily_target=target)
            db.add(progress)

        goal_met = total_protein >= target
        previous = repo.get_by_date(user.id, day - timedelta(days=1))
        previous_streak = previous.streak_count if previous else 0

        progress.daily_target = target
        progress.total_protein = round(total_protein, 2)
        progress.total_calories = round(total_calories, 2)
        progress.goal_met = goal_met
        progress.achievement_percentage = (
            round(total_protein / target * 100, 2) if target else 0.0
        )
        progress.streak_count = previous_streak + 1 if goal_met else 0

        existing = {mp.meal_type: mp for mp in progress.meal_progress}
        for meal_type in MealType:
            protein, items = per_meal[meal_type]
            meal_progress = existing.get(meal_type)
            if meal_progress is None:
                meal_progress = MealProgress(meal_type=meal_type)
                progress.meal_progress.append(meal_progress)
            meal_progress.target_protein = round(target / 4, 2)
            meal_progress.actual_protein = round(protein, 2)
            meal_progress.items_count = items

        db.flush()
        ProgressService._rechain_streaks(db, user, day)
        logger.info(
            f"progress_refreshed user_id={user.id} date={day} "
            f"protein={progress.total_protein} goal_met={goal_met} "
            f"streak={progress.streak_count}"
        )
        return progress

    @staticmethod
    def _rechain_streaks(db: Session, user: UserProfile, day: date) -> None:
        """Recompute streak_count for stored days after ``day``"""
        repo = ProgressRepository(db)
        anchor = repo.get_by_date(user.id, day)
        streaks: Dict[date, int] = {day: anchor.streak_count if anchor else 0}

        for later in repo.list_after(user.id, day):
            previous_streak = streaks.get(later.date - timedelta(days=1), 0)
            later.streak_count = previous_streak + 1 if later.goal_met else 0
            streaks[later.date] = later.streak_count
        db.flush()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    def get_daily(db: Session, user: UserProfile, day: date) -> DailyProgressResponse:
        progress = ProgressRepository(db).get_by_date(user.id, day)
        if progress is None:
            return ProgressMapper.default_response(
                day, ProgressService.daily_target_for(user)
            )
        return ProgressMapper.to_response(progress)

    @staticmethod
    def get_history(
        db: Session,
        user: UserProfile,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 30,
        offset: int = 0,
    ) -> ProgressHistoryResponse:
        repo = ProgressRepository(db)
        rows = repo.list_history(user.id, start, end, limit=limit, offset=offset)
        total = repo.count_history(user.id, start, end)
        return ProgressHistoryResponse(
            history=[ProgressMapper.to_response(r) for r in rows],
            pagination=HistoryPagination(limit=limit, offset=offset, total=total),
        )

    @staticmethod
    def get_streak_info(db: Session, user: UserProfile) -> StreakInfoResponse:
        """
        Current streak counts only when the latest stored day is today or
        yesterday and met the goal.
        """
        repo = ProgressRepository(db)
        latest = repo.get_latest(user.id)

        current = 0
        if latest is not None:
            days_since = (today() - latest.date).days
            if days_since <= 1 and latest.goal_met:
                current = latest.streak_count

        return StreakInfoResponse(
            current_streak=current,
            longest_streak=repo.get_longest_streak(user.id),
            last_progress_date=latest.date if latest else None,
        )

    @staticmethod
    def get_weekly_summary(db: Session, user: UserProfile) -> WeeklySummaryResponse:
        """Stored days in the last 7 days including today"""
        end = today()
        start = end - timedelta(days=6)
        rows: List[DailyProgress] = ProgressRepository(db).list_range(
            user.id, start, end
        )

        values = [r.total_protein for r in rows]
        met = sum(1 for r in rows if r.goal_met)
        average = sum(values) / len(rows) if rows else 0.0
        hit_pct = met / len(rows) * 100 if rows else 0.0

        return WeeklySummaryResponse(
            weekly_average=round(average, 2),
            goal_hit_percentage=round(hit_pct, 2),
            total_days_tracked=len(rows),
            daily_values=values,
            start_date=start,
            end_date=end,
        )
