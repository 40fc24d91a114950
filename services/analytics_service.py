"""Analytics over a user's logged meals.

The aggregation functions are pure: they take meals (anything with
``timestamp``, ``meal_type`` and ``meal_foods[].nutrition_data``) and plain
dates, so they can be exercised without a database. ``AnalyticsService``
wires them to the repositories for the API.
"""

import csv
import io
import json
import logging
import math
from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ServiceValidationError
from core.utils.helpers import (
    add_nutrition,
    day_bounds,
    empty_nutrition,
    iter_days,
    parse_date,
    today,
    utcnow,
)
from domain.enums import MEAL_TYPES
from domain.models import UserProfile
from domain.schemas.analytics_schemas import (
    Achievement,
    AnalyticsOverview,
    AverageDaily,
    ComparativeAnalysis,
    DailyStats,
    MealTimingAnalysis,
    NutritionInsight,
    PeriodChanges,
    PeriodSummary,
    StreakData,
    StreakRun,
    TimingSuggestion,
    WeeklyStats,
)
from repositories import MealRepository

logger = logging.getLogger("protein_tracker.analytics")

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90}
COMPARATIVE_PERIODS = ("7d", "30d", "90d")
MAX_BREAKDOWN_DAYS = 90
TREND_THRESHOLD = 0.05
PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

CSV_HEADER = [
    "Date",
    "Total Protein",
    "Total Calories",
    "Goal Met",
    "Meals Count",
    "Breakfast Protein",
    "Lunch Protein",
    "Dinner Protein",
    "Snack Protein",
]


def round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def _meal_type(meal: Any) -> str:
    value = meal.meal_type
    return getattr(value, "value", value).lower()


def _meal_nutrition(meal: Any) -> Dict[str, float]:
    total = empty_nutrition()
    for meal_food in meal.meal_foods or []:
        add_nutrition(total, meal_food.nutrition_data)
    return total


# ============================================================================
# Aggregations
# ============================================================================


def calculate_daily_stats(
    meals: Iterable[Any], protein_goal: float, start: date, end: date
) -> List[DailyStats]:
    """One entry per calendar day in [start, end], zero-filled"""
    stats: "OrderedDict[date, DailyStats]" = OrderedDict(
        (day, DailyStats(date=day)) for day in iter_days(start, end)
    )

    for meal in meals:
        day_stat = stats.get(meal.timestamp.date())
        if day_stat is None:
            continue
        nutrition = _meal_nutrition(meal)
        day_stat.total_calories += nutrition["calories"]
        day_stat.total_protein += nutrition["protein"]
        day_stat.total_carbs += nutrition["carbs"]
        day_stat.total_fat += nutrition["fat"]
        day_stat.total_fiber += nutrition["fiber"]
        day_stat.meals_count += 1

        breakdown = day_stat.meal_breakdown.get(_meal_type(meal))
        if breakdown is not None:
            breakdown.protein += nutrition["protein"]
            breakdown.calories += nutrition["calories"]
            breakdown.count += 1

    for day_stat in stats.values():
        day_stat.goal_met = day_stat.total_protein >= protein_goal
    return list(stats.values())


def week_start(day: date) -> date:
    """Sunday on or before ``day``"""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def calculate_weekly_stats(daily_stats: Sequence[DailyStats]) -> List[WeeklyStats]:
    """Bucket days into Sunday-start weeks and compare each to the previous one"""
    grouped: "OrderedDict[date, List[DailyStats]]" = OrderedDict()
    for day in daily_stats:
        grouped.setdefault(week_start(day.date), []).append(day)

    weeks: List[WeeklyStats] = []
    for start, days in sorted(grouped.items()):
        count = len(days)
        met = sum(1 for d in days if d.goal_met)
        avg_protein = sum(d.total_protein for d in days) / count

        trend = "stable"
        if weeks:
            previous = weeks[-1].average_daily.protein
            if avg_protein > previous * (1 + TREND_THRESHOLD):
                trend = "improving"
            elif avg_protein < previous * (1 - TREND_THRESHOLD):
                trend = "declining"

        weeks.append(
            WeeklyStats(
                week_start=start,
                week_end=start + timedelta(days=6),
                average_daily=AverageDaily(
                    calories=round_half_up(sum(d.total_calories for d in days) / count),
                    protein=round_half_up(avg_protein, 1),
                    carbs=round_half_up(sum(d.total_carbs for d in days) / count),
                    fat=round_half_up(sum(d.total_fat for d in days) / count),
                ),
                days_with_goal_met=met,
                total_days_tracked=count,
                goal_hit_percentage=int(round_half_up(met / count * 100)),
                trend=trend,
            )
        )
    return weeks


def calculate_streak_data(daily_stats: Sequence[DailyStats]) -> StreakData:
    """
    Runs of consecutive goal-met days.

    The current streak is the run ending on the last day of the range (0 if
    that day missed). History keeps the 10 most recent runs, oldest first.
    """
    runs: List[StreakRun] = []
    run_start: Optional[date] = None
    length = 0
    for index, day in enumerate(daily_stats):
        if day.goal_met:
            if length == 0:
                run_start = day.date
            length += 1
        elif length:
            runs.append(
                StreakRun(
                    start_date=run_start,
                    end_date=daily_stats[index - 1].date,
                    length=length,
                )
            )
            length = 0
    if length:
        runs.append(
            StreakRun(start_date=run_start, end_date=daily_stats[-1].date, length=length)
        )

    last_day_met = bool(daily_stats) and daily_stats[-1].goal_met
    return StreakData(
        current_streak=runs[-1].length if last_day_met else 0,
        longest_streak=max((r.length for r in runs), default=0),
        last_streak_date=daily_stats[-1].date if last_day_met else None,
        streak_history=runs[-10:],
    )


def _format_time(hours: float) -> str:
    total_minutes = int(round_half_up(hours * 60)) % (24 * 60)
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def analyze_meal_timing(meals: Sequence[Any]) -> MealTimingAnalysis:
    """Average time of day and consistency per meal type"""
    times: Dict[str, List[float]] = {meal: [] for meal in MEAL_TYPES}
    logged_days = {meal.timestamp.date() for meal in meals}
    total_days = len(logged_days) or 1

    for meal in meals:
        meal_type = _meal_type(meal)
        if meal_type in times:
            ts = meal.timestamp
            times[meal_type].append(ts.hour + ts.minute / 60)

    averages: Dict[str, Optional[float]] = {
        meal: (sum(values) / len(values) if values else None)
        for meal, values in times.items()
    }
    consistency = {
        meal: int(round_half_up(len(values) / total_days * 100))
        for meal, values in times.items()
    }

    suggestions: List[TimingSuggestion] = []
    if consistency["breakfast"] < 70:
        suggestions.append(
            TimingSuggestion(
                meal="breakfast",
                suggested_time="07:30",
                reason="Eating breakfast more consistently can help meet daily protein goals",
            )
        )
    if averages["dinner"] is not None and averages["dinner"] > 20:
        suggestions.append(
            TimingSuggestion(
                meal="dinner",
                suggested_time="18:30",
                reason="Earlier dinner timing may improve protein absorption and sleep quality",
            )
        )

    return MealTimingAnalysis(
        average_meal_times={
            meal: _format_time(avg) if avg is not None else None
            for meal, avg in averages.items()
        },
        meal_consistency=consistency,
        optimal_timing_suggestions=suggestions,
    )


def generate_insights(
    daily_stats: Sequence[DailyStats],
    weekly_stats: Sequence[WeeklyStats],
    streak: StreakData,
    timing: MealTimingAnalysis,
) -> List[NutritionInsight]:
    """Personalised insights, high priority first"""
    insights: List[NutritionInsight] = []

    recent = list(daily_stats[-7:])
    if recent:
        met = sum(1 for d in recent if d.goal_met)
        rate = met / len(recent) * 100
        if rate >= 80:
            insights.append(
                NutritionInsight(
                    type="achievement",
                    title="Excellent Progress!",
                    description=f"You've hit your protein goal {met} out of the last {len(recent)} days. Keep it up!",
                    priority="high",
                    actionable=False,
                )
            )
        elif rate >= 50:
            insights.append(
                NutritionInsight(
                    type="recommendation",
                    title="You're Getting There",
                    description=f"You've met your goal {met} out of {len(recent)} days. Try adding a protein-rich snack to improve consistency.",
                    priority="medium",
                    actionable=True,
                )
            )
        else:
            insights.append(
                NutritionInsight(
                    type="warning",
                    title="Need More Consistency",
                    description=f"Only {met} out of {len(recent)} days met your protein goal. Consider increasing portion sizes or adding more meals.",
                    priority="high",
                    actionable=True,
                )
            )

    if streak.current_streak >= 7:
        insights.append(
            NutritionInsight(
                type="achievement",
                title="Weekly Streak!",
                description=f"Amazing! You're on a {streak.current_streak}-day streak of hitting your protein goals.",
                priority="high",
                actionable=False,
            )
        )
    elif streak.current_streak == 0 and streak.longest_streak >= 3:
        insights.append(
            NutritionInsight(
                type="recommendation",
                title="Get Back on Track",
                description=f"Your longest streak was {streak.longest_streak} days. You can do it again!",
                priority="medium",
                actionable=True,
            )
        )

    breakfast = timing.meal_consistency.get("breakfast", 0)
    if breakfast < 60:
        insights.append(
            NutritionInsight(
                type="recommendation",
                title="Breakfast Opportunity",
                description=f"You're missing breakfast {100 - breakfast}% of the time. Starting your day with protein can help reach daily goals.",
                priority="medium",
                actionable=True,
            )
        )

    if len(weekly_stats) >= 2:
        latest = weekly_stats[-1]
        if latest.trend == "improving":
            insights.append(
                NutritionInsight(
                    type="achievement",
                    title="Upward Trend!",
                    description="Your weekly average protein intake is improving. Great progress!",
                    priority="medium",
                    actionable=False,
                )
            )
        elif latest.trend == "declining":
            insights.append(
                NutritionInsight(
                    type="warning",
                    title="Declining Trend",
                    description="Your protein intake has decreased this week. Consider reviewing your meal planning.",
                    priority="medium",
                    actionable=True,
                )
            )

    by_meal = {meal: 0.0 for meal in MEAL_TYPES}
    for day in daily_stats:
        for meal, entry in day.meal_breakdown.items():
            by_meal[meal] = by_meal.get(meal, 0.0) + entry.protein
    total_protein = sum(by_meal.values())
    if total_protein > 0 and by_meal["dinner"] / total_protein * 100 > 50:
        insights.append(
            NutritionInsight(
                type="recommendation",
                title="Balance Your Protein",
                description="You're getting most of your protein at dinner. Try spreading it more evenly throughout the day for better absorption.",
                priority="medium",
                actionable=True,
            )
        )

    return sorted(insights, key=lambda i: PRIORITY_ORDER[i.priority])


def calculate_achievements(
    daily_stats: Sequence[DailyStats],
    streak: StreakData,
    earned_at: Optional[datetime] = None,
) -> List[Achievement]:
    earned_at = earned_at or utcnow()
    achievements: List[Achievement] = []

    def earn(id_: str, name: str, description: str, category: str) -> None:
        achievements.append(
            Achievement(
                id=id_,
                name=name,
                description=description,
                date_earned=earned_at,
                category=category,
            )
        )

    if streak.current_streak >= 7:
        earn("week_streak", "Week Warrior", "Hit your protein goal 7 days in a row", "streak")
    if streak.longest_streak >= 30:
        earn("month_streak", "Monthly Master", "Hit your protein goal 30 days in a row", "streak")

    total_days = len(daily_stats)
    if total_days:
        met = sum(1 for d in daily_stats if d.goal_met)
        if met / total_days >= 0.9:
            earn(
                "consistent_achiever",
                "Consistent Achiever",
                "Hit your protein goal 90% of the time",
                "goal",
            )
        breakfast_days = sum(
            1 for d in daily_stats if d.meal_breakdown["breakfast"].count > 0
        )
        if breakfast_days / total_days >= 0.8:
            earn(
                "breakfast_champion",
                "Breakfast Champion",
                "Ate breakfast 80% of tracked days",
                "consistency",
            )

    if sum(d.meals_count for d in daily_stats) >= 100:
        earn("meal_milestone_100", "Century Club", "Logged 100 meals", "milestone")

    return achievements


def build_overview(
    meals: Sequence[Any],
    protein_goal: float,
    start: date,
    end: date,
    earned_at: Optional[datetime] = None,
) -> AnalyticsOverview:
    daily = calculate_daily_stats(meals, protein_goal, start, end)
    weekly = calculate_weekly_stats(daily)
    streak = calculate_streak_data(daily)
    timing = analyze_meal_timing([m for m in meals if start <= m.timestamp.date() <= end])
    return AnalyticsOverview(
        period=f"{start.isoformat()} to {end.isoformat()}",
        daily_stats=daily,
        weekly_stats=weekly,
        streak_data=streak,
        meal_timing_analysis=timing,
        insights=generate_insights(daily, weekly, streak, timing),
        achievements=calculate_achievements(daily, streak, earned_at),
    )


def render_csv(overview: AnalyticsOverview) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for day in overview.daily_stats:
        breakdown = day.meal_breakdown
        writer.writerow(
            [
                day.date.isoformat(),
                f"{day.total_protein:.1f}",
                f"{day.total_calories:.0f}",
                "Yes" if day.goal_met else "No",
                day.meals_count,
                f"{breakdown['breakfast'].protein:.1f}",
                f"{breakdown['lunch'].protein:.1f}",
                f"{breakdown['dinner'].protein:.1f}",
                f"{breakdown['snack'].protein:.1f}",
            ]
        )
    return buffer.getvalue().rstrip("\n")


# ============================================================================
# Service
# ============================================================================


class AnalyticsService:
    """Loads meals for a window and hands them to the aggregations above"""

    @staticmethod
    def last_days(days: int, end: Optional[date] = None) -> Tuple[date, date]:
        end = end or today()
        return end - timedelta(days=days - 1), end

    @staticmethod
    def resolve_period(period: str) -> Tuple[date, date]:
        """7d / 30d / 90d windows end today; 1y starts on the same day last year"""
        if period in PERIOD_DAYS:
            return AnalyticsService.last_days(PERIOD_DAYS[period])
        if period == "1y":
            end = today()
            try:
                start = end.replace(year=end.year - 1)
            except ValueError:
                start = end.replace(year=end.year - 1, day=28)
            return start, end
        raise ServiceValidationError("Invalid period. Use 7d, 30d, 90d, or 1y")

    @staticmethod
    def parse_optional_date(value: Optional[str], label: str) -> Optional[date]:
        try:
            return parse_date(value)
        except ValueError as e:
            raise ServiceValidationError(f"Invalid {label} date format") from e

    @staticmethod
    def get_overview(
        db: Session,
        user: UserProfile,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> AnalyticsOverview:
        """Overview for [start, end]; defaults to the last 30 days"""
        end = end or today()
        start = start or end - timedelta(days=29)
        if start > end:
            raise ServiceValidationError("Start date must not be after end date")

        goal = user.daily_protein_goal or settings.default_daily_protein_goal
        range_start, _ = day_bounds(start)
        _, range_end = day_bounds(end)
        meals = MealRepository(db).list_in_range(user.id, range_start, range_end)

        overview = build_overview(meals, goal, start, end)
        logger.info(
            f"analytics_built user_id={user.id} period={overview.period} "
            f"meals={len(meals)}"
        )
        return overview

    @staticmethod
    def get_window(db: Session, user: UserProfile, days: int) -> AnalyticsOverview:
        start, end = AnalyticsService.last_days(days)
        return AnalyticsService.get_overview(db, user, start, end)

    @staticmethod
    def get_daily_breakdown(
        db: Session, user: UserProfile, start_date: Optional[str], end_date: Optional[str]
    ) -> List[DailyStats]:
        if not start_date or not end_date:
            raise ServiceValidationError("Start date and end date are required")
        try:
            start = parse_date(start_date)
            end = parse_date(end_date)
        except ValueError as e:
            raise ServiceValidationError("Invalid date format") from e
        if abs((end - start).days) > MAX_BREAKDOWN_DAYS:
            raise ServiceValidationError("Date range cannot exceed 90 days")
        return AnalyticsService.get_overview(db, user, start, end).daily_stats

    @staticmethod
    def get_recommendations(db: Session, user: UserProfile) -> List[NutritionInsight]:
        """Actionable recommendations and warnings from the last 14 days"""
        overview = AnalyticsService.get_window(db, user, 14)
        return [
            i
            for i in overview.insights
            if i.actionable and i.type in ("recommendation", "warning")
        ]

    @staticmethod
    def get_comparative(
        db: Session, user: UserProfile, period: str = "30d"
    ) -> ComparativeAnalysis:
        """Current window against the equally long window right before it"""
        if period not in COMPARATIVE_PERIODS:
            raise ServiceValidationError("Invalid period. Use 7d, 30d, or 90d")
        days = PERIOD_DAYS[period]

        current_start, current_end = AnalyticsService.last_days(days)
        previous_start, previous_end = AnalyticsService.last_days(
            days, end=current_start - timedelta(days=1)
        )
        current = AnalyticsService.get_overview(db, user, current_start, current_end)
        previous = AnalyticsService.get_overview(db, user, previous_start, previous_end)

        def summarize(overview: AnalyticsOverview) -> Tuple[float, int, int]:
            stats = overview.daily_stats
            average = sum(d.total_protein for d in stats) / len(stats) if stats else 0.0
            return average, sum(1 for d in stats if d.goal_met), len(stats)

        cur_avg, cur_met, cur_days = summarize(current)
        prev_avg, prev_met, prev_days = summarize(previous)
        protein_change = (cur_avg - prev_avg) / prev_avg * 100 if prev_avg > 0 else 0.0
        goal_met_change = (cur_met - prev_met) / prev_met * 100 if prev_met > 0 else 0.0

        if protein_change > 5:
            trend = "improving"
        elif protein_change < -5:
            trend = "declining"
        else:
            trend = "stable"

        return ComparativeAnalysis(
            current=PeriodSummary(
                period=current.period,
                average_protein=round_half_up(cur_avg, 1),
                days_with_goal_met=cur_met,
                total_days=cur_days,
                streak=current.streak_data.current_streak,
            ),
            previous=PeriodSummary(
                period=previous.period,
                average_protein=round_half_up(prev_avg, 1),
                days_with_goal_met=prev_met,
                total_days=prev_days,
            ),
            changes=PeriodChanges(
                protein_change=round_half_up(protein_change, 1),
                goal_met_change=round_half_up(goal_met_change, 1),
                trend=trend,
            ),
        )

    @staticmethod
    def export_user_data(
        db: Session,
        user: UserProfile,
        export_format: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Tuple[str, str, str]:
        """
        Render the overview for download.

        Returns:
            (content, filename, media type)
        """
        if export_format not in ("json", "csv"):
            raise ServiceValidationError("Invalid format. Use json or csv")

        overview = AnalyticsService.get_overview(db, user, start, end)
        stamp = today().isoformat()
        logger.info(f"analytics_exported user_id={user.id} format={export_format}")

        if export_format == "json":
            content = json.dumps(
                overview.model_dump(mode="json", by_alias=True), indent=2
            )
            return content, f"protein-tracker-data-{stamp}.json", "application/json"
        return render_csv(overview), f"protein-tracker-data-{stamp}.csv", "text/csv"
