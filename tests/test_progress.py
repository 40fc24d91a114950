"""
Daily progress derivation, streak chaining and the progress routes.
"""

import pytest
from sqlalchemy.orm import Session

from test_fixtures import (
    api_db,
    at,
    auth_headers,
    client,
    create_meal,
    create_user,
    days_ago,
    db_session,
)
from core.utils.helpers import today
from domain.enums import MealType
from domain.models import DailyProgress, MealProgress
from repositories import ProgressRepository
from services.meal_service import MealService
from services.progress_service import ProgressService


def log(db, user, day, protein, meal_type=MealType.LUNCH, hour=12):
    """Persist a meal on ``day`` and refresh that day's progress"""
    meal = create_meal(db, user, meal_type, at(day, hour), protein=protein)
    ProgressService.refresh_day(db, user, day)
    db.commit()
    return meal


# =============================================================================
# REFRESH
# =============================================================================


def test_refresh_day_without_goal_uses_default_target(db_session: Session):
    """
    Verifies:
    - A user without a goal gets the default target of 126 g
    - Per-meal targets are a quarter of the daily target
    - Achievement percentage is relative to the target
    """
    user = create_user(db_session)
    day = days_ago(1)
    log(db_session, user, day, 63, MealType.BREAKFAST, hour=8)

    progress = ProgressRepository(db_session).get_by_date(user.id, day)
    assert progress.daily_target == 126
    assert progress.achievement_percentage == 50.0
    assert progress.goal_met is False
    assert progress.streak_count == 0
    assert len(progress.meal_progress) == 4
    assert {mp.target_protein for mp in progress.meal_progress} == {31.5}


def test_refresh_day_sums_meal_slots(db_session: Session):
    user = create_user(db_session, daily_protein_goal=120)
    day = days_ago(1)
    log(db_session, user, day, 30, MealType.BREAKFAST, hour=8)
    log(db_session, user, day, 50, MealType.LUNCH, hour=13)
    log(db_session, user, day, 45, MealType.LUNCH, hour=14)

    progress = ProgressRepository(db_session).get_by_date(user.id, day)
    assert progress.total_protein == 125
    assert progress.goal_met is True
    lunch = next(mp for mp in progress.meal_progress if mp.meal_type == MealType.LUNCH)
    assert lunch.actual_protein == 95
    assert lunch.items_count == 2


def test_refresh_day_without_meals_removes_row(db_session: Session):
    user = create_user(db_session)
    day = days_ago(2)
    meal = log(db_session, user, day, 40)
    assert db_session.query(DailyProgress).count() == 1

    db_session.delete(meal)
    db_session.flush()
    assert ProgressService.refresh_day(db_session, user, day) is None
    db_session.commit()

    assert db_session.query(DailyProgress).count() == 0
    assert db_session.query(MealProgress).count() == 0


# =============================================================================
# STREAKS
# =============================================================================


def test_streak_chains_consecutive_goal_days(db_session: Session):
    user = create_user(db_session, daily_protein_goal=100)
    for n in (3, 2, 1):
        log(db_session, user, days_ago(n), 110)

    repo = ProgressRepository(db_session)
    assert [repo.get_by_date(user.id, days_ago(n)).streak_count for n in (3, 2, 1)] == [1, 2, 3]


def test_backfilled_day_rechains_later_streaks(db_session: Session):
    """
    Verifies:
    - A missed day breaks the chain
    - Backfilling that day re-chains every later stored day
    """
    user = create_user(db_session, daily_protein_goal=100)
    log(db_session, user, days_ago(4), 110)
    log(db_session, user, days_ago(3), 20)
    log(db_session, user, days_ago(2), 105)
    log(db_session, user, days_ago(1), 130)

    repo = ProgressRepository(db_session)
    assert repo.get_by_date(user.id, days_ago(1)).streak_count == 2

    log(db_session, user, days_ago(3), 90, MealType.DINNER, hour=19)

    assert [repo.get_by_date(user.id, days_ago(n)).streak_count for n in (4, 3, 2, 1)] == [
        1,
        2,
        3,
        4,
    ]


def test_deleting_meal_breaks_streak(db_session: Session):
    user = create_user(db_session, daily_protein_goal=100)
    log(db_session, user, days_ago(3), 120)
    middle = log(db_session, user, days_ago(2), 120)
    log(db_session, user, days_ago(1), 120)

    MealService.delete_meal(db_session, user, middle.id)

    repo = ProgressRepository(db_session)
    assert repo.get_by_date(user.id, days_ago(2)) is None
    assert repo.get_by_date(user.id, days_ago(1)).streak_count == 1


def test_streak_info_current_and_longest(db_session: Session):
    user = create_user(db_session, daily_protein_goal=100)
    for n in (9, 8, 7, 6):
        log(db_session, user, days_ago(n), 110)
    log(db_session, user, days_ago(2), 110)
    log(db_session, user, days_ago(1), 110)

    info = ProgressService.get_streak_info(db_session, user)
    assert info.current_streak == 2
    assert info.longest_streak == 4
    assert info.last_progress_date == days_ago(1)


def test_streak_info_stale_latest_day(db_session: Session):
    user = create_user(db_session, daily_protein_goal=100)
    log(db_session, user, days_ago(3), 110)

    info = ProgressService.get_streak_info(db_session, user)
    assert info.current_streak == 0
    assert info.longest_streak == 1


# =============================================================================
# READS
# =============================================================================


def test_daily_without_row_is_zeroed(db_session: Session):
    user = create_user(db_session)
    response = ProgressService.get_daily(db_session, user, today())
    assert response.total_protein == 0
    assert response.daily_target == 126
    assert response.meal_breakdown["snack"].target == 31.5


def test_weekly_summary(db_session: Session):
    user = create_user(db_session, daily_protein_goal=100)
    log(db_session, user, days_ago(6), 120)
    log(db_session, user, days_ago(3), 60)
    log(db_session, user, days_ago(10), 200)

    summary = ProgressService.get_weekly_summary(db_session, user)
    assert summary.total_days_tracked == 2
    assert summary.daily_values == [120, 60]
    assert summary.weekly_average == 90
    assert summary.goal_hit_percentage == 50
    assert summary.start_date == days_ago(6)
    assert summary.end_date == today()


def test_history_route_paginates(api_db: Session):
    user = create_user(api_db, daily_protein_goal=100)
    for n in range(1, 6):
        log(api_db, user, days_ago(n), 50 + n)

    r = client.get(
        "/api/progress/history",
        params={"limit": 2, "offset": 1},
        headers=auth_headers(user),
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["pagination"] == {"limit": 2, "offset": 1, "total": 5}
    assert [h["date"] for h in data["history"]] == [
        days_ago(2).isoformat(),
        days_ago(3).isoformat(),
    ]


def test_daily_route_for_today(api_db: Session):
    user = create_user(api_db, daily_protein_goal=80)
    log(api_db, user, today(), 40, MealType.BREAKFAST, hour=0)

    data = client.get("/api/progress/daily", headers=auth_headers(user)).json()["data"]
    assert data["totalProtein"] == 40
    assert data["achievementPercentage"] == 50
    assert data["mealBreakdown"]["breakfast"] == {"target": 20, "actual": 40, "items": 1}
