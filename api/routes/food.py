"""Food detection, logging and search routes"""

from functools import partial
from typing import Optional
from uuid import UUID

import anyio
from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session
import logging

from api.dependencies import get_current_user, get_db, get_recognizer
from api.responses import AUTH_ERROR_RESPONSES, success_response
from api.upload import store_food_image
from domain.models import UserProfile
from domain.schemas.food_schemas import FoodItemUpdateRequest, FoodLogRequest
from services.food_recognition_service import FoodRecognitionService
from services.food_service import FoodService

router = APIRouter(prefix="/food", tags=["Food"], responses=AUTH_ERROR_RESPONSES)
logger = logging.getLogger("protein_tracker.api.food")


@router.post("/detect")
async def detect_food(
    image: Optional[UploadFile] = File(None),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
    recognizer: FoodRecognitionService = Depends(get_recognizer),
):
    """Upload a meal photo and identify the foods in it"""
    image_path, image_url = await store_food_image(image, user.id)
    # Recognition blocks on the vision API
    detection = await anyio.to_thread.run_sync(
        partial(FoodService.detect_food, db, user, image_path, image_url, recognizer)
    )
    return success_response(
        data=detection.model_dump(by_alias=True),
        message="Food detection completed successfully",
    )


@router.get("/detect/{detection_id}")
def get_detection(
    detection_id: UUID,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    detection = FoodService.get_detection(db, user, detection_id)
    return success_response(data=detection.model_dump(by_alias=True))


@router.post("/log", status_code=status.HTTP_201_CREATED)
def log_food(
    data: FoodLogRequest,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    meal = FoodService.log_food(db, user, data)
    return success_response(
        data={"meal": meal.model_dump(by_alias=True)},
        message="Food logged successfully",
    )


@router.get("/recent")
def get_recent(
    limit: int = Query(20, ge=1, le=100),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    meals, total = FoodService.get_recent(db, user, limit=limit)
    return success_response(
        data={
            "meals": [m.model_dump(by_alias=True) for m in meals],
            "pagination": {"limit": limit, "total": total},
        }
    )


@router.get("/search")
def search_foods(
    q: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=50),
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    foods = FoodService.search_foods(db, q, limit=limit)
    return success_response(data={"foods": [f.model_dump(by_alias=True) for f in foods]})


@router.put("/item/{meal_id}")
def update_item(
    meal_id: UUID,
    data: FoodItemUpdateRequest,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = FoodService.update_item(db, user, meal_id, data)
    return success_response(
        data={"meal": item.model_dump(by_alias=True)}, message="Meal updated successfully"
    )


@router.delete("/item/{meal_id}")
def delete_item(
    meal_id: UUID,
    user: UserProfile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    FoodService.delete_item(db, user, meal_id)
    return success_response(message="Meal deleted successfully")
