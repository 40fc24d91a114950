"""
Meal composition tests against a real SQLite session.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from test_fixtures import (
    api_db,
    at,
    auth_headers,
    client,
    create_food,
    create_meal,
    create_user,
    db_session,
    days_ago,
)
from app.exceptions import NotFoundError, ServiceValidationError
from core.utils.helpers import today
from domain.enums import MealType
from domain.models import DailyProgress, Food, Meal, MealFood
from domain.schemas.meal_schemas import MealCreate, MealFoodCreate, MealUpdate
from repositories import ProgressRepository
from services.meal_service import MealService


# =============================================================================
# NUTRITION SCALING
# =============================================================================


def test_portion_nutrition_scales_grams():
    food = Food(name="Tofu", nutrition_per_100g={"protein": 8, "calories": 76, "fat": 4.8})
    scaled = MealService.portion_nutrition(food, 250, "g")
    assert scaled == {"calories": 190.0, "protein": 20.0, "fat": 12.0}


def test_portion_nutrition_other_units():
    food = Food(name="Egg", nutrition_per_100g={"protein": 13})
    assert MealService.portion_nutrition(food, 2, "piece") is None


# =============================================================================
# CREATE
# =============================================================================


def test_create_meal_scales_food_nutrition(db_session: Session):
    """
    Verifies:
    - Gram portions without nutrition are scaled from per-100 g values
    - Explicit portion nutrition is kept as given
    - The day's progress includes the new meal
    """
    user = create_user(db_session, daily_protein_goal=100)
    chicken = create_food(db_session, name="Chicken Breast", protein=31, calories=165)
    rice = create_food(db_session, name="White Rice", protein=2.7, calories=130)

    response = MealService.create_meal(
        db_session,
        user,
        MealCreate(
            meal_type="Lunch",
            foods=[
                MealFoodCreate(food_id=chicken.id, quantity=150),
                MealFoodCreate(
                    food_id=rice.id,
                    quantity=1,
                    unit="cup",
                    nutrition_data={"protein": 4.3, "calories": 205},
                ),
            ],
        ),
    )

    assert response.meal_type == MealType.LUNCH
    assert len(response.foods) == 2
    assert response.foods[0].food_name == "Chicken Breast"
    assert response.nutrition.protein == pytest.approx(50.8)
    assert response.nutrition.calories == pytest.approx(452.5)

    progress = ProgressRepository(db_session).get_by_date(user.id, today())
    assert progress.total_protein == pytest.approx(50.8)


def test_create_meal_unknown_food(db_session: Session):
    user = create_user(db_session)
    with pytest.raises(ServiceValidationError, match="Food not found"):
        MealService.create_meal(
            db_session,
            user,
            MealCreate(
                meal_type="dinner",
                foods=[MealFoodCreate(food_id="00000000-0000-0000-0000-000000000001", quantity=100)],
            ),
        )
    assert db_session.query(Meal).count() == 0


def test_create_meal_route(api_db: Session):
    user = create_user(api_db)
    food = create_food(api_db)
    r = client.post(
        "/api/meals",
        json={
            "meal_type": "breakfast",
            "timestamp": "2024-04-10T08:30:00Z",
            "foods": [{"food_id": str(food.id), "quantity": 100}],
        },
        headers=auth_headers(user),
    )
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["meal_type"] == "breakfast"
    assert data["timestamp"].startswith("2024-04-10T08:30:00")
    assert data["nutrition"]["protein"] == 31.0

    stored = ProgressRepository(api_db).get_by_date(user.id, datetime(2024, 4, 10).date())
    assert stored is not None


# =============================================================================
# UPDATE / DELETE
# =============================================================================


def test_update_meal_moves_progress_between_days(db_session: Session):
    user = create_user(db_session)
    food = create_food(db_session)
    yesterday = days_ago(1)
    created = MealService.create_meal(
        db_session,
        user,
        MealCreate(
            meal_type="dinner",
            timestamp=at(yesterday, 19),
            foods=[MealFoodCreate(food_id=food.id, quantity=100)],
        ),
    )
    repo = ProgressRepository(db_session)
    assert repo.get_by_date(user.id, yesterday) is not None

    MealService.update_meal(
        db_session, user, created.id, MealUpdate(timestamp=at(today(), 9), meal_type="breakfast")
    )

    assert repo.get_by_date(user.id, yesterday) is None
    moved = repo.get_by_date(user.id, today())
    assert moved.total_protein == 31.0


def test_update_meal_ignores_null_meal_type(db_session: Session):
    user = create_user(db_session)
    meal = create_meal(db_session, user, MealType.SNACK)
    response = MealService.update_meal(
        db_session, user, meal.id, MealUpdate(meal_type=None, notes="after gym")
    )
    assert response.meal_type == MealType.SNACK
    assert response.notes == "after gym"


def test_delete_meal_cascades_portions(db_session: Session):
    user = create_user(db_session)
    meal = create_meal(db_session, user)
    MealService.delete_meal(db_session, user, meal.id)

    assert db_session.query(Meal).count() == 0
    assert db_session.query(MealFood).count() == 0
    assert db_session.query(DailyProgress).count() == 0


def test_meal_of_other_user_is_hidden(db_session: Session):
    owner = create_user(db_session)
    other = create_user(db_session)
    meal = create_meal(db_session, owner)

    with pytest.raises(NotFoundError):
        MealService.get_meal(db_session, other, meal.id)
    with pytest.raises(NotFoundError):
        MealService.delete_meal(db_session, other, meal.id)


# =============================================================================
# QUERIES
# =============================================================================


def test_list_meals_filters_by_type_and_range(db_session: Session):
    user = create_user(db_session)
    day = days_ago(3)
    create_meal(db_session, user, MealType.BREAKFAST, at(day, 8))
    create_meal(db_session, user, MealType.LUNCH, at(day, 13))
    create_meal(db_session, user, MealType.LUNCH, at(days_ago(10), 13))

    start = at(day, 0)
    meals = MealService.list_meals(
        db_session, user, start=start, end=start + timedelta(days=1), meal_type=MealType.LUNCH
    )
    assert len(meals) == 1
    assert meals[0].timestamp == at(day, 13)

    all_meals = MealService.list_meals(db_session, user)
    assert [m.timestamp for m in all_meals] == sorted(
        [m.timestamp for m in all_meals], reverse=True
    )


def test_meals_by_date_groups_by_type(db_session: Session):
    user = create_user(db_session)
    day = days_ago(2)
    create_meal(db_session, user, MealType.BREAKFAST, at(day, 8), protein=20, calories=300)
    create_meal(db_session, user, MealType.SNACK, at(day, 16), protein=10, calories=150)
    create_meal(db_session, user, MealType.SNACK, at(day, 21), protein=5, calories=100)
    create_meal(db_session, user, MealType.DINNER, at(days_ago(1), 19))

    result = MealService.get_meals_by_date(db_session, user, day)
    assert set(result.meals_by_type) == {"breakfast", "snack"}
    assert len(result.meals_by_type["snack"]) == 2
    assert result.total_nutrition.protein == 35
    assert result.total_nutrition.calories == 550


def test_today_summary_uses_default_goal(db_session: Session):
    user = create_user(db_session)
    create_meal(db_session, user, MealType.LUNCH, protein=45, calories=600)

    summary = MealService.get_today_summary(db_session, user)
    assert summary.daily_goal == 100
    assert summary.progress == 45
    assert summary.meal_summary["lunch"].count == 1
    assert summary.meal_summary["lunch"].protein == 45
    assert summary.meal_summary["breakfast"].target == 25


def test_meals_by_date_route(api_db: Session):
    user = create_user(api_db)
    create_meal(api_db, user, MealType.DINNER, at(days_ago(1), 19), protein=40)
    day = days_ago(1).isoformat()

    r = client.get(f"/api/meals/date/{day}", headers=auth_headers(user))
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == f"Meals for {day} retrieved successfully"
    assert body["data"]["totalNutrition"]["protein"] == 40
    assert len(body["data"]["mealsByType"]["dinner"]) == 1
