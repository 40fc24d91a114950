"""Meal composition routes"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_current_user, get_db
from api.responses import AUTH_ERROR_RESPONSES, success_response
from app.exceptions import ServiceValidationError
from core.utils.helpers import day_bounds, parse_date
from domain.enums import MealType
from domain.models import UserProfile
from domain.schemas.meal_schemas import MealCreate, MealUpdate
from services.meal_service import MealService

router = APIRouter(prefix="/meals", tags=["Meals"], responses=AUTH_ERROR_RESPONSES)
logger = logging.getLogger("protein_tracker.api.meals")


def _parse_day(value: Optional[str], label: str):
    try:
        return parse_date(value)
    except ValueError as e:
        raise ServiceValidationError(f"Invalid {label} format, expected YYYY-MM-DD") from e


@router.get("")
def list_meals(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    meal_type: Optional[MealType] = Query(None, alias="mealType"),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Meals with foods and nutrition totals, newest first"""
    start_day = _parse_day(start_date, "startDate")
    end_day = _parse_day(end_date, "endDate")
    meals = MealService.list_meals(
        db,
        user,
        start=day_bounds(start_day)[0] if start_day else None,
        end=day_bounds(end_day)[1] if end_day else None,
        meal_type=meal_type,
    )
    return success_response(
        data=[m.model_dump() for m in meals], message="Meals retrieved successfully"
    )


@router.post("", status_code=status.HTTP_201_CREATED)
def create_meal(
    data: MealCreate,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    meal = MealService.create_meal(db, user, data)
    return success_response(data=meal.model_dump(), message="Meal created successfully")


@router.get("/today/summary")
def today_summary(
    user: UserProfile = Depends(get_current_user), db: Session = Depends(get_db)
):
    summary = MealService.get_today_summary(db, user)
    return success_response(
        data=summary.model_dump(by_alias=True),
        message="Today's meal summary retrieved successfully",
    )


@router.get("/date/{day}")
def meals_by_date(
    day: str,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    parsed = _parse_day(day, "date")
    result = MealService.get_meals_by_date(db, user, parsed)
    return success_response(
        data=result.model_dump(by_alias=True),
        message=f"Meals for {parsed.isoformat()} retrieved successfully",
    )


@router.get("/{meal_id}")
def get_meal(
    meal_id: UUID,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    meal = MealService.get_meal(db, user, meal_id)
    return success_response(data=meal.model_dump(), message="Meal retrieved successfully")


@router.put("/{meal_id}")
def update_meal(
    meal_id: UUID,
    data: MealUpdate,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    meal = MealService.update_meal(db, user, meal_id, data)
    return success_response(data=meal.model_dump(), message="Meal updated successfully")


@router.delete("/{meal_id}")
def delete_meal(
    meal_id: UUID,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    MealService.delete_meal(db, user, meal_id)
    return success_response(
        data={"id": str(meal_id)}, message="Meal deleted successfully"
    )
