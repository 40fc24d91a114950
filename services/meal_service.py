from typing import Dict, List, Optional
from uuid import UUID
from datetime import date, datetime
from sqlalchemy.orm import Session
import logging

from app.config import settings
from app.exceptions import NotFoundError, ServiceValidationError
from core.utils.helpers import (
    add_nutrition,
    day_bounds,
    empty_nutrition,
    round_nutrition,
    to_naive_utc,
    today,
    utcnow,
    NUTRIENT_KEYS,
)
from domain.enums import MealType, MEAL_TYPES
from domain.mappers import MealMapper
from domain.models import Food, Meal, MealFood, UserProfile
from domain.schemas.common import NutritionData
from domain.schemas.meal_schemas import (
    MealCreate,
    MealUpdate,
    MealResponse,
    DayMealsResponse,
    MealTypeSummary,
    TodaySummaryResponse,
)
from repositories import FoodRepository, MealRepository
from services.progress_service import ProgressService

logger = logging.getLogger("protein_tracker.meals")

MEAL_NOT_FOUND = "Meal not found or you do not have access to this meal"
GRAM_UNITS = {"g", "gram", "grams"}


class MealService:
    """Business logic for composing and querying meals"""

    @staticmethod
    def portion_nutrition(food: Food, quantity: float, unit: str) -> Optional[Dict[str, float]]:
        """Scale a food's per-100 g nutrition to a gram portion; None for other units"""
        if (unit or "").lower() not in GRAM_UNITS or not food.nutrition_per_100g:
            return None
        scaled = {}
        for key in NUTRIENT_KEYS:
            value = food.nutrition_per_100g.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                scaled[key] = round(value * quantity / 100, 2)
        return scaled

    @staticmethod
    def get_owned_meal(db: Session, user: UserProfile, meal_id: UUID) -> Meal:
        meal = MealRepository(db).get_for_user(meal_id, user.id)
        if meal is None:
            raise NotFoundError(MEAL_NOT_FOUND)
        return meal

    @staticmethod
    def list_meals(
        db: Session,
        user: UserProfile,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        meal_type: Optional[MealType] = None,
    ) -> List[MealResponse]:
        """Meals with foods and per-meal totals, newest first"""
        meals = MealRepository(db).list_for_user(user.id, start, end, meal_type)
        logger.info(f"meals_listed user_id={user.id} count={len(meals)}")
        return MealMapper.to_response_list(meals)

    @staticmethod
    def get_meal(db: Session, user: UserProfile, meal_id: UUID) -> MealResponse:
        return MealMapper.to_response(MealService.get_owned_meal(db, user, meal_id))

    @staticmethod
    def create_meal(db: Session, user: UserProfile, data: MealCreate) -> MealResponse:
        """
        Create a meal and its food portions, then refresh the day's progress.

        Portions without explicit nutrition get it scaled from the food's
        per-100 g values when the unit is grams.

        Raises:
            ServiceValidationError: a referenced food does not exist
        """
        food_ids = [item.food_id for item in data.foods]
        foods = {f.id: f for f in FoodRepository(db).get_many(food_ids)}
        missing = [str(fid) for fid in food_ids if fid not in foods]
        if missing:
            raise ServiceValidationError(
                f"Food not found: {', '.join(missing)}", details={"food_ids": missing}
            )

        timestamp = to_naive_utc(data.timestamp) if data.timestamp else utcnow()
        meal = Meal(
            user_id=user.id,
            meal_type=data.meal_type,
            timestamp=timestamp,
            photo_url=data.photo_url,
            notes=data.notes,
        )
        for item in data.foods:
            if item.nutrition_data is not None:
                nutrition = item.nutrition_data.model_dump()
            else:
                nutrition = MealService.portion_nutrition(
                    foods[item.food_id], item.quantity, item.unit
                )
            meal.meal_foods.append(
                MealFood(
                    food_id=item.food_id,
                    quantity=item.quantity,
                    unit=item.unit,
                    nutrition_data=nutrition,
                )
            )
        meal.total_nutrition = MealMapper.nutrition_totals(meal.meal_foods)

        MealRepository(db).add(meal)
        ProgressService.refresh_day(db, user, meal.timestamp.date())
        db.commit()
        db.refresh(meal)

        logger.info(
            f"meal_created user_id={user.id} meal_id={meal.id} "
            f"foods={len(meal.meal_foods)}"
        )
        return MealMapper.to_response(meal)

    @staticmethod
    def update_meal(
        db: Session, user: UserProfile, meal_id: UUID, data: MealUpdate
    ) -> MealResponse:
        meal = MealService.get_owned_meal(db, user, meal_id)
        previous_day = meal.timestamp.date()

        changes = data.model_dump(exclude_unset=True)
        if "timestamp" in changes and changes["timestamp"] is not None:
            changes["timestamp"] = to_naive_utc(changes["timestamp"])
        for key, value in changes.items():
            if key in ("meal_type", "timestamp") and value is None:
                continue
            setattr(meal, key, value)
        db.flush()

        ProgressService.refresh_day(db, user, meal.timestamp.date())
        if meal.timestamp.date() != previous_day:
            ProgressService.refresh_day(db, user, previous_day)
        db.commit()
        db.refresh(meal)

        logger.info(f"meal_updated user_id={user.id} meal_id={meal.id}")
        return MealMapper.to_response(meal)

    @staticmethod
    def delete_meal(db: Session, user: UserProfile, meal_id: UUID) -> Meal:
        """Delete an owned meal (portions cascade) and refresh its day"""
        meal = MealService.get_owned_meal(db, user, meal_id)
        day = meal.timestamp.date()

        db.delete(meal)
        db.flush()
        ProgressService.refresh_day(db, user, day)
        db.commit()

        logger.info(f"meal_deleted user_id={user.id} meal_id={meal_id}")
        return meal

    @staticmethod
    def get_meals_by_date(db: Session, user: UserProfile, day: date) -> DayMealsResponse:
        """Meals of one calendar day grouped by meal type, with the day's totals"""
        start, end = day_bounds(day)
        meals = MealRepository(db).list_for_user(user.id, start, end)

        total = empty_nutrition()
        by_type: Dict[str, List[MealResponse]] = {}
        for meal in meals:
            response = MealMapper.to_response(meal)
            add_nutrition(total, response.nutrition.model_dump())
            by_type.setdefault(meal.meal_type.value, []).append(response)

        return DayMealsResponse(
            date=day,
            total_nutrition=NutritionData(**round_nutrition(total)),
            meals_by_type=by_type,
        )

    @staticmethod
    def get_today_summary(db: Session, user: UserProfile) -> TodaySummaryResponse:
        """Per-meal-type counts and protein for today against goal / 4"""
        day = today()
        daily_goal = user.daily_protein_goal or settings.default_daily_protein_goal
        summary = {
            meal: MealTypeSummary(target=daily_goal / 4) for meal in MEAL_TYPES
        }

        start, end = day_bounds(day)
        total_protein = 0.0
        total_calories = 0.0
        for meal in MealRepository(db).list_for_user(user.id, start, end):
            nutrition = MealMapper.nutrition_totals(meal.meal_foods)
            total_protein += nutrition["protein"]
            total_calories += nutrition["calories"]
            entry = summary[meal.meal_type.value]
            entry.count += 1
            entry.protein = round(entry.protein + nutrition["protein"], 2)

        return TodaySummaryResponse(
            date=day,
            total_protein=round(total_protein, 2),
            total_calories=round(total_calories, 2),
            daily_goal=daily_goal,
            progress=round(total_protein / daily_goal * 100),
            meal_summary=summary,
        )
