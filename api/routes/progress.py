"""Daily progress, history and streak routes"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_current_user, get_db
from api.responses import AUTH_ERROR_RESPONSES, success_response
from app.exceptions import ServiceValidationError
from core.utils.helpers import parse_date, today
from domain.models import UserProfile
from services.progress_service import ProgressService

router = APIRouter(prefix="/progress", tags=["Progress"], responses=AUTH_ERROR_RESPONSES)
logger = logging.getLogger("protein_tracker.api.progress")


def _parse_day(value: Optional[str]):
    try:
        return parse_date(value)
    except ValueError as e:
        raise ServiceValidationError("Invalid date format. Use YYYY-MM-DD") from e


@router.get("/daily")
def get_today_progress(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    progress = ProgressService.get_daily(db, user, today())
    return success_response(data=progress.model_dump(by_alias=True))


@router.get("/daily/{day}")
def get_daily_progress(
    day: str,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    progress = ProgressService.get_daily(db, user, _parse_day(day))
    return success_response(data=progress.model_dump(by_alias=True))


@router.get("/history")
def get_history(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    limit: int = Query(30, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Stored days, newest first"""
    start = _parse_day(start_date)
    end = _parse_day(end_date)
    if start and end and start > end:
        raise ServiceValidationError("startDate must not be after endDate")
    history = ProgressService.get_history(db, user, start, end, limit=limit, offset=offset)
    return success_response(data=history.model_dump(by_alias=True))


@router.get("/streak")
def get_streak(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    streak = ProgressService.get_streak_info(db, user)
    return success_response(data=streak.model_dump(by_alias=True))


@router.get("/weekly")
def get_weekly(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    summary = ProgressService.get_weekly_summary(db, user)
    return success_response(data=summary.model_dump(by_alias=True))
