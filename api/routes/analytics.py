"""Analytics routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_current_user, get_db, require_premium
from api.responses import AUTH_ERROR_RESPONSES, success_response
from domain.models import UserProfile
from services.analytics_service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"], responses=AUTH_ERROR_RESPONSES)
logger = logging.getLogger("protein_tracker.api.analytics")


def _dump_list(items) -> list:
    return [item.model_dump(by_alias=True) for item in items]


@router.get("/stats")
def get_stats_overview(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    period: Optional[str] = Query(None, description="7d, 30d, 90d or 1y"),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Full overview; a period overrides explicit dates"""
    start = AnalyticsService.parse_optional_date(start_date, "start")
    end = AnalyticsService.parse_optional_date(end_date, "end")
    if period:
        start, end = AnalyticsService.resolve_period(period)

    overview = AnalyticsService.get_overview(db, user, start, end)
    return success_response(
        data=overview.model_dump(by_alias=True),
        message="Analytics overview retrieved successfully",
    )


@router.get("/meal-consistency")
def get_meal_consistency(
    days: int = Query(30, ge=1, le=365),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    overview = AnalyticsService.get_window(db, user, days)
    return success_response(
        data=overview.meal_timing_analysis.model_dump(by_alias=True),
        message="Meal consistency analysis retrieved successfully",
    )


@router.get("/weekly-trend")
def get_weekly_trend(
    weeks: int = Query(8, ge=1, le=52),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    overview = AnalyticsService.get_window(db, user, weeks * 7)
    return success_response(
        data=_dump_list(overview.weekly_stats),
        message="Weekly trend analysis retrieved successfully",
    )


@router.get("/streaks")
def get_streaks(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    overview = AnalyticsService.get_window(db, user, 90)
    return success_response(
        data=overview.streak_data.model_dump(by_alias=True),
        message="Streak information retrieved successfully",
    )


@router.get("/insights")
def get_insights(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    overview = AnalyticsService.get_window(db, user, 30)
    return success_response(
        data=_dump_list(overview.insights),
        message="Personalized insights retrieved successfully",
    )


@router.get("/achievements")
def get_achievements(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    overview = AnalyticsService.get_window(db, user, 90)
    return success_response(
        data=_dump_list(overview.achievements),
        message="User achievements retrieved successfully",
    )


@router.get("/daily-breakdown")
def get_daily_breakdown(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    daily = AnalyticsService.get_daily_breakdown(db, user, start_date, end_date)
    return success_response(
        data=_dump_list(daily), message="Daily breakdown retrieved successfully"
    )


@router.get("/recommendations")
def get_recommendations(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    recommendations = AnalyticsService.get_recommendations(db, user)
    return success_response(
        data=_dump_list(recommendations),
        message="Nutrition recommendations retrieved successfully",
    )


@router.get("/comparative")
def get_comparative(
    period: str = Query("30d"),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current window against the previous window of the same length"""
    comparison = AnalyticsService.get_comparative(db, user, period)
    return success_response(
        data=comparison.model_dump(by_alias=True),
        message="Comparative analysis retrieved successfully",
    )


@router.get("/export")
def export_data(
    export_format: str = Query("json", alias="format"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user: UserProfile = Depends(require_premium),
    db: Session = Depends(get_db),
):
    """Download the overview as JSON or CSV (premium)"""
    start = AnalyticsService.parse_optional_date(start_date, "start")
    end = AnalyticsService.parse_optional_date(end_date, "end")
    content, filename, media_type = AnalyticsService.export_user_data(
        db, user, export_format, start, end
    )
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
