from typing import List, Optional, Tuple
from uuid import UUID
from pathlib import Path
from sqlalchemy.orm import Session
import logging

from app.exceptions import NotFoundError, ServiceValidationError
from core.utils import storage
from core.utils.helpers import utcnow
from domain.enums import DetectionStatus
from domain.mappers import MealMapper
from domain.models import Food, FoodDetection, Meal, MealFood, UserProfile
from domain.schemas.food_schemas import (
    DetectedFood,
    FoodDetectionResponse,
    FoodItemResponse,
    FoodItemUpdateRequest,
    FoodLogRequest,
    FoodSearchResult,
    LoggedMeal,
    RecentMeal,
)
from repositories import (
    DetectionRepository,
    FoodRepository,
    MealRepository,
)
from services.food_recognition_service import FoodRecognitionService
from services.progress_service import ProgressService

logger = logging.getLogger("protein_tracker.food")

MIN_SEARCH_LENGTH = 2


class FoodService:
    """Business logic behind the food endpoints"""

    @staticmethod
    def detect_food(
        db: Session,
        user: UserProfile,
        image_path: Path,
        image_url: str,
        recognizer: FoodRecognitionService,
    ) -> FoodDetectionResponse:
        """
        Recognise foods in a stored upload and persist the detection.

        The stored image is removed when recognition or persistence fails.
        """
        try:
            detected = recognizer.recognize_food_items(image_path)
            detection = DetectionRepository(db).create(
                FoodDetection(
                    user_id=user.id,
                    image_url=image_url,
                    detected_foods=[d.model_dump(mode="json", by_alias=True) for d in detected],
                    confidence_scores=[
                        {"name": d.name, "confidence": d.confidence} for d in detected
                    ],
                    status=DetectionStatus.COMPLETED,
                    processed_at=utcnow(),
                )
            )
        except Exception:
            db.rollback()
            storage.delete_file(image_path)
            logger.warning(f"food_detection_failed user_id={user.id} image={image_url}")
            raise

        logger.info(
            f"food_detected user_id={user.id} detection_id={detection.id} "
            f"items={len(detected)}"
        )
        return FoodDetectionResponse(
            id=detection.id,
            image_path=image_url,
            detected_foods=detected,
            status=detection.status.value,
            processed_at=detection.processed_at,
        )

    @staticmethod
    def get_detection(
        db: Session, user: UserProfile, detection_id: UUID
    ) -> FoodDetectionResponse:
        detection = DetectionRepository(db).get_for_user(detection_id, user.id)
        if detection is None:
            raise NotFoundError("Food detection not found")
        return FoodDetectionResponse(
            id=detection.id,
            image_path=detection.image_url,
            detected_foods=[
                DetectedFood.model_validate(d) for d in detection.detected_foods or []
            ],
            status=detection.status.value,
            processed_at=detection.processed_at,
        )

    @staticmethod
    def _resolve_food(db: Session, user: UserProfile, data: FoodLogRequest) -> Optional[Food]:
        """Best catalogue match for the logged name, created unverified if absent"""
        if not data.food_name or data.is_quick_add:
            return None

        food_repo = FoodRepository(db)
        food = food_repo.find_best_match(data.food_name)
        if food is None:
            food = food_repo.add(
                Food(
                    name=data.food_name,
                    category="other",
                    nutrition_per_100g={
                        "calories": data.calories or 0,
                        "protein": data.protein_content / data.portion_size * 100,
                        "carbs": 0,
                        "fat": 0,
                    },
                    verified=False,
                    user_id=user.id,
                )
            )
            logger.info(f"food_created user_id={user.id} food_id={food.id}")
        return food

    @staticmethod
    def log_food(db: Session, user: UserProfile, data: FoodLogRequest) -> LoggedMeal:
        """
        Log a single food as a new meal and refresh today's progress.

        Quick-add entries skip the catalogue; their portion is stored without
        a food reference but still counts towards progress.
        """
        food = FoodService._resolve_food(db, user, data)

        meal = Meal(
            user_id=user.id,
            meal_type=data.meal_type,
            timestamp=utcnow(),
            photo_url=data.image_path,
        )
        meal.meal_foods.append(
            MealFood(
                food_id=food.id if food else None,
                quantity=data.portion_size,
                unit="grams",
                nutrition_data={
                    "calories": data.calories or 0,
                    "protein": data.protein_content,
                    "carbs": 0,
                    "fat": 0,
                },
            )
        )
        meal.total_nutrition = MealMapper.nutrition_totals(meal.meal_foods)

        MealRepository(db).add(meal)
        ProgressService.refresh_day(db, user, meal.timestamp.date())
        db.commit()

        logger.info(
            f"food_logged user_id={user.id} meal_id={meal.id} "
            f"protein={data.protein_content} meal_type={data.meal_type.value}"
        )
        return LoggedMeal(
            id=meal.id,
            name=data.custom_name or data.food_name,
            portion_size=data.portion_size,
            protein_content=data.protein_content,
            calories=data.calories,
            meal_type=data.meal_type,
            image_path=data.image_path,
            timestamp=meal.timestamp,
        )

    @staticmethod
    def get_recent(db: Session, user: UserProfile, limit: int = 20) -> Tuple[List[RecentMeal], int]:
        """Most recent meals and the user's total meal count"""
        meal_repo = MealRepository(db)
        meals = meal_repo.list_for_user(user.id, limit=limit)
        return [MealMapper.to_recent(m) for m in meals], meal_repo.count_for_user(user.id)

    @staticmethod
    def search_foods(db: Session, query: Optional[str], limit: int = 10) -> List[FoodSearchResult]:
        if not query or len(query.strip()) < MIN_SEARCH_LENGTH:
            raise ServiceValidationError(
                "Search query must be at least 2 characters long"
            )
        foods = FoodRepository(db).search(query, limit=limit)
        return [
            FoodSearchResult(
                id=f.id,
                name=f.name,
                category=f.category,
                nutrition_per_100g=f.nutrition_per_100g or {},
                is_verified=f.verified,
            )
            for f in foods
        ]

    @staticmethod
    def _owned_meal(db: Session, user: UserProfile, meal_id: UUID) -> Meal:
        meal = MealRepository(db).get_for_user(meal_id, user.id)
        if meal is None:
            raise NotFoundError("Meal not found")
        return meal

    @staticmethod
    def update_item(
        db: Session, user: UserProfile, meal_id: UUID, data: FoodItemUpdateRequest
    ) -> FoodItemResponse:
        meal = FoodService._owned_meal(db, user, meal_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("meal_type") is not None:
            meal.meal_type = changes["meal_type"]
        if "notes" in changes:
            meal.notes = changes["notes"]
        if "image_path" in changes:
            meal.photo_url = changes["image_path"]
        db.flush()

        # Meal type moves protein between meal slots of the same day
        ProgressService.refresh_day(db, user, meal.timestamp.date())
        db.commit()

        logger.info(f"food_item_updated user_id={user.id} meal_id={meal.id}")
        return FoodItemResponse(
            id=meal.id,
            meal_type=meal.meal_type,
            notes=meal.notes,
            image_path=meal.photo_url,
            timestamp=meal.timestamp,
        )

    @staticmethod
    def delete_item(db: Session, user: UserProfile, meal_id: UUID) -> None:
        """Delete an owned meal, refresh its day and remove its stored photo"""
        meal = FoodService._owned_meal(db, user, meal_id)
        day = meal.timestamp.date()
        photo_url = meal.photo_url

        db.delete(meal)
        db.flush()
        ProgressService.refresh_day(db, user, day)
        db.commit()

        if photo_url:
            storage.delete_file(storage.path_for_url(photo_url))
        logger.info(f"food_item_deleted user_id={user.id} meal_id={meal_id}")
