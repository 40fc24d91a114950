"""
Route-level tests with the service layer monkeypatched.

These verify request parsing, status codes and the response envelope
without touching the database.
"""

import uuid
from datetime import date, datetime

from test_fixtures import client, auth_user, premium_user, make_user
from app.exceptions import NotFoundError, ServiceValidationError
from core.utils.helpers import today, utcnow
from domain.enums import MealType
from domain.schemas.common import NutritionData
from domain.schemas.food_schemas import FoodSearchResult, LoggedMeal
from domain.schemas.meal_schemas import MealResponse, TodaySummaryResponse, MealTypeSummary
from domain.schemas.progress_schemas import (
    DailyProgressResponse,
    HistoryPagination,
    MealBreakdownEntry,
    ProgressHistoryResponse,
    StreakInfoResponse,
)
from domain.schemas.user_schemas import UserStatsResponse
from services.analytics_service import AnalyticsService
from services.food_service import FoodService
from services.meal_service import MealService
from services.progress_service import ProgressService
from services.user_service import UserService


def make_meal_response(user_id, meal_type=MealType.LUNCH, protein=30.0):
    now = utcnow()
    return MealResponse(
        id=uuid.uuid4(),
        user_id=user_id,
        meal_type=meal_type,
        timestamp=now,
        created_at=now,
        updated_at=now,
        foods=[],
        nutrition=NutritionData(protein=protein, calories=400),
    )


def make_daily(day: date, protein=0.0, target=120.0):
    return DailyProgressResponse(
        date=day,
        total_protein=protein,
        daily_target=target,
        goal_met=protein >= target,
        meal_breakdown={
            m.value: MealBreakdownEntry(target=target / 4) for m in MealType
        },
    )


# =============================================================================
# HEALTH
# =============================================================================


def test_health_check():
    r = client.get("/health-check")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["service"] == "Protein Tracker"
    assert body["environment"] == "testing"


def test_request_id_headers_are_set():
    r = client.get("/health-check")
    assert "X-Request-ID" in r.headers
    assert "X-Process-Time" in r.headers


# =============================================================================
# AUTHENTICATION GUARD
# =============================================================================


def test_missing_authorization_header_returns_401():
    """
    Verifies:
    - Protected routes reject requests without a token
    - The error envelope carries the message
    """
    r = client.get("/api/meals")
    assert r.status_code == 401
    body = r.json()
    assert body["success"] is False
    assert body["error"]["message"] == "No authorization header provided"


def test_garbage_token_returns_invalid_token():
    r = client.get("/api/progress/daily", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["error"]["message"] == "Invalid token"


# =============================================================================
# MEALS
# =============================================================================


def test_list_meals_passes_filters(monkeypatch, auth_user):
    captured = {}

    def fake_list(db, user, start=None, end=None, meal_type=None):
        captured.update(start=start, end=end, meal_type=meal_type)
        return [make_meal_response(user.id)]

    monkeypatch.setattr(MealService, "list_meals", fake_list)
    r = client.get(
        "/api/meals",
        params={"startDate": "2024-03-01", "endDate": "2024-03-02", "mealType": "lunch"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Meals retrieved successfully"
    assert len(body["data"]) == 1
    assert captured["start"] == datetime(2024, 3, 1)
    assert captured["end"] == datetime(2024, 3, 3)
    assert captured["meal_type"] == MealType.LUNCH


def test_list_meals_rejects_bad_date(auth_user):
    r = client.get("/api/meals", params={"startDate": "not-a-date"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "SERVICE_VALIDATION_ERROR"


def test_get_meal_not_found(monkeypatch, auth_user):
    def fake_get(db, user, meal_id):
        raise NotFoundError("Meal not found or you do not have access to this meal")

    monkeypatch.setattr(MealService, "get_meal", fake_get)
    r = client.get(f"/api/meals/{uuid.uuid4()}")
    assert r.status_code == 404
    assert "do not have access" in r.json()["error"]["message"]


def test_today_summary_route_is_not_shadowed_by_meal_id(monkeypatch, auth_user):
    summary = TodaySummaryResponse(
        date=today(),
        total_protein=45.0,
        total_calories=600.0,
        daily_goal=120.0,
        progress=38,
        meal_summary={m.value: MealTypeSummary(target=30.0) for m in MealType},
    )
    monkeypatch.setattr(MealService, "get_today_summary", lambda db, user: summary)
    r = client.get("/api/meals/today/summary")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["dailyGoal"] == 120.0
    assert data["progress"] == 38
    assert set(data["mealSummary"]) == {"breakfast", "lunch", "dinner", "snack"}


def test_create_meal_requires_foods_shape(auth_user):
    r = client.post(
        "/api/meals",
        json={"meal_type": "lunch", "foods": [{"food_id": "nope", "quantity": 100}]},
    )
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


# =============================================================================
# FOOD
# =============================================================================


def test_log_food_returns_201(monkeypatch, auth_user):
    def fake_log(db, user, data):
        return LoggedMeal(
            id=uuid.uuid4(),
            name=data.food_name,
            portion_size=data.portion_size,
            protein_content=data.protein_content,
            calories=data.calories,
            meal_type=data.meal_type,
            timestamp=utcnow(),
        )

    monkeypatch.setattr(FoodService, "log_food", fake_log)
    r = client.post(
        "/api/food/log",
        json={
            "foodName": "Greek Yogurt",
            "portionSize": 170,
            "proteinContent": 17,
            "mealType": "Breakfast",
        },
    )
    assert r.status_code == 201
    meal = r.json()["data"]["meal"]
    assert meal["name"] == "Greek Yogurt"
    assert meal["mealType"] == "breakfast"
    assert meal["portionSize"] == 170


def test_log_food_validates_ranges(auth_user):
    r = client.post(
        "/api/food/log",
        json={"portionSize": 5000, "proteinContent": 17, "mealType": "lunch"},
    )
    assert r.status_code == 422


def test_search_foods_uses_camel_case(monkeypatch, auth_user):
    result = FoodSearchResult(
        id=uuid.uuid4(),
        name="Cottage Cheese",
        category="dairy",
        nutrition_per_100g={"protein": 11, "calories": 98},
        is_verified=True,
    )
    monkeypatch.setattr(FoodService, "search_foods", lambda db, q, limit=10: [result])
    r = client.get("/api/food/search", params={"q": "cottage"})
    assert r.status_code == 200
    food = r.json()["data"]["foods"][0]
    assert food["isVerified"] is True
    assert food["nutritionPer100g"]["protein"] == 11


def test_search_short_query_is_rejected(monkeypatch, auth_user):
    def fake_search(db, q, limit=10):
        raise ServiceValidationError("Search query must be at least 2 characters long")

    monkeypatch.setattr(FoodService, "search_foods", fake_search)
    r = client.get("/api/food/search", params={"q": "a"})
    assert r.status_code == 400


def test_detect_rejects_non_image(auth_user):
    r = client.post(
        "/api/food/detect",
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )
    assert r.status_code == 400
    assert "Only image files" in r.json()["error"]["message"]


def test_detect_without_file_is_rejected(auth_user):
    r = client.post("/api/food/detect")
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "No image file provided"


# =============================================================================
# PROGRESS
# =============================================================================


def test_daily_progress_by_date(monkeypatch, auth_user):
    monkeypatch.setattr(
        ProgressService, "get_daily", lambda db, user, day: make_daily(day, 80.0)
    )
    r = client.get("/api/progress/daily/2024-05-04")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["date"] == "2024-05-04"
    assert data["totalProtein"] == 80.0
    assert data["mealBreakdown"]["lunch"]["target"] == 30.0


def test_daily_progress_bad_date(auth_user):
    r = client.get("/api/progress/daily/04-05-2024")
    assert r.status_code == 400


def test_history_limit_bounds(auth_user):
    assert client.get("/api/progress/history", params={"limit": 0}).status_code == 422
    assert client.get("/api/progress/history", params={"limit": 101}).status_code == 422
    assert client.get("/api/progress/history", params={"offset": -1}).status_code == 422


def test_history_returns_pagination(monkeypatch, auth_user):
    def fake_history(db, user, start, end, limit=30, offset=0):
        return ProgressHistoryResponse(
            history=[make_daily(today(), 130.0)],
            pagination=HistoryPagination(limit=limit, offset=offset, total=1),
        )

    monkeypatch.setattr(ProgressService, "get_history", fake_history)
    r = client.get("/api/progress/history", params={"limit": 5, "offset": 0})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["pagination"] == {"limit": 5, "offset": 0, "total": 1}
    assert data["history"][0]["goalMet"] is True


def test_streak_route(monkeypatch, auth_user):
    monkeypatch.setattr(
        ProgressService,
        "get_streak_info",
        lambda db, user: StreakInfoResponse(current_streak=3, longest_streak=9),
    )
    data = client.get("/api/progress/streak").json()["data"]
    assert data == {"currentStreak": 3, "longestStreak": 9, "lastProgressDate": None}


# =============================================================================
# USER
# =============================================================================


def test_user_stats(monkeypatch, auth_user):
    monkeypatch.setattr(
        UserService,
        "get_stats",
        lambda db, user: UserStatsResponse(
            total_food_items=12, total_days_tracked=5, current_streak=2, longest_streak=4
        ),
    )
    data = client.get("/api/user/stats").json()["data"]
    assert data["totalFoodItems"] == 12
    assert data["longestStreak"] == 4


def test_user_profile_validation(auth_user):
    r = client.put("/api/user/profile", json={"weight": 10})
    assert r.status_code == 422
    r = client.put("/api/user/profile", json={"name": "A"})
    assert r.status_code == 422


def test_settings_time_validation(auth_user):
    r = client.put("/api/user/settings", json={"doNotDisturbStart": "25:00"})
    assert r.status_code == 422


# =============================================================================
# ANALYTICS
# =============================================================================


def test_export_requires_premium(auth_user):
    r = client.get("/api/analytics/export")
    assert r.status_code == 403
    assert r.json()["error"]["message"] == "Premium subscription required for this feature"


def test_export_csv_attachment(monkeypatch, premium_user):
    def fake_export(db, user, export_format, start=None, end=None):
        return "Date,Total Protein\n2024-01-01,10.0", "protein-tracker-data-2024-01-02.csv", "text/csv"

    monkeypatch.setattr(AnalyticsService, "export_user_data", fake_export)
    r = client.get("/api/analytics/export", params={"format": "csv"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert (
        r.headers["content-disposition"]
        == 'attachment; filename="protein-tracker-data-2024-01-02.csv"'
    )
    assert r.text.startswith("Date,Total Protein")


def test_stats_invalid_period(auth_user):
    r = client.get("/api/analytics/stats", params={"period": "2w"})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Invalid period. Use 7d, 30d, 90d, or 1y"


def test_daily_breakdown_requires_dates(auth_user):
    r = client.get("/api/analytics/daily-breakdown", params={"startDate": "2024-01-01"})
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Start date and end date are required"
