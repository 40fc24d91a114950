"""
Meal domain mappers.
"""

from typing import Dict, Iterable, List
from domain.models import Meal, MealFood
from domain.schemas.common import NutritionData
from domain.schemas.meal_schemas import MealFoodResponse, MealResponse
from domain.schemas.food_schemas import RecentMeal, RecentMealFood
from core.utils.helpers import add_nutrition, empty_nutrition, round_nutrition


class MealMapper:
    """Mapper for meals and their food portions."""

    @staticmethod
    def nutrition_totals(meal_foods: Iterable[MealFood]) -> Dict[str, float]:
        """Sum the portion nutrition of every food, rounded to 2 dp."""
        total = empty_nutrition()
        for meal_food in meal_foods:
            add_nutrition(total, meal_food.nutrition_data)
        return round_nutrition(total)

    @staticmethod
    def food_to_response(meal_food: MealFood) -> MealFoodResponse:
        return MealFoodResponse(
            id=meal_food.id,
            meal_id=meal_food.meal_id,
            food_id=meal_food.food_id,
            food_name=meal_food.food.name if meal_food.food else None,
            quantity=meal_food.quantity,
            unit=meal_food.unit,
            nutrition_data=meal_food.nutrition_data,
            created_at=meal_food.created_at,
        )

    @staticmethod
    def to_response(meal: Meal) -> MealResponse:
        """
        Convert a Meal ORM instance (with meal_foods loaded) to MealResponse.

        Nutrition is always recomputed from the portions rather than read
        from the stored total.
        """
        return MealResponse(
            id=meal.id,
            user_id=meal.user_id,
            meal_type=meal.meal_type,
            timestamp=meal.timestamp,
            photo_url=meal.photo_url,
            notes=meal.notes,
            created_at=meal.created_at,
            updated_at=meal.updated_at,
            foods=[MealMapper.food_to_response(mf) for mf in meal.meal_foods],
            nutrition=NutritionData(**MealMapper.nutrition_totals(meal.meal_foods)),
        )

    @staticmethod
    def to_recent(meal: Meal) -> RecentMeal:
        meal_type = meal.meal_type.value
        return RecentMeal(
            id=meal.id,
            name=f"{meal_type} meal",
            meal_type=meal.meal_type,
            image_path=meal.photo_url,
            timestamp=meal.timestamp,
            notes=meal.notes,
            total_nutrition=NutritionData(
                **MealMapper.nutrition_totals(meal.meal_foods)
            ),
            foods=[
                RecentMealFood(
                    id=mf.id,
                    food_id=mf.food_id,
                    food_name=mf.food.name if mf.food else None,
                    quantity=mf.quantity,
                    unit=mf.unit,
                    nutrition_data=mf.nutrition_data,
                )
                for mf in meal.meal_foods
            ],
        )

    @staticmethod
    def to_response_list(meals: Iterable[Meal]) -> List[MealResponse]:
        return [MealMapper.to_response(m) for m in meals]
