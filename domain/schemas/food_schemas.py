from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID

from domain.enums import MealType
from domain.schemas.common import CamelModel, NutritionData


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


class FoodLogRequest(CamelModel):
    """Schema for quickly logging a single food as a meal"""

    food_name: Optional[str] = Field(None, min_length=1, max_length=200)
    custom_name: Optional[str] = Field(None, min_length=1, max_length=200)
    portion_size: float = Field(..., ge=1, le=2000, description="Portion in grams")
    protein_content: float = Field(
        ..., ge=0, le=200, description="Protein in the portion (grams)"
    )
    meal_type: MealType
    calories: Optional[float] = Field(None, ge=0, le=2000)
    image_path: Optional[str] = None
    is_quick_add: bool = False

    @field_validator("meal_type", mode="before")
    @classmethod
    def lowercase_meal_type(cls, v):
        return _lower(v)

    @field_validator("food_name", "custom_name")
    @classmethod
    def strip_names(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class LoggedMeal(CamelModel):
    id: UUID
    name: Optional[str] = None
    portion_size: float
    protein_content: float
    calories: Optional[float] = None
    meal_type: MealType
    image_path: Optional[str] = None
    timestamp: datetime


class FoodItemUpdateRequest(CamelModel):
    """Update of a logged meal through the food item endpoints"""

    meal_type: Optional[MealType] = None
    notes: Optional[str] = None
    image_path: Optional[str] = None

    @field_validator("meal_type", mode="before")
    @classmethod
    def lowercase_meal_type(cls, v):
        return _lower(v)


class FoodItemResponse(CamelModel):
    id: UUID
    meal_type: MealType
    notes: Optional[str] = None
    image_path: Optional[str] = None
    timestamp: datetime


class RecentMealFood(BaseModel):
    id: UUID
    food_id: Optional[UUID] = None
    food_name: Optional[str] = None
    quantity: float
    unit: str
    nutrition_data: Optional[Dict[str, Any]] = None


class RecentMeal(CamelModel):
    id: UUID
    name: str
    meal_type: MealType
    image_path: Optional[str] = None
    timestamp: datetime
    notes: Optional[str] = None
    total_nutrition: NutritionData
    foods: List[RecentMealFood] = []


class FoodSearchResult(CamelModel):
    id: UUID
    name: str
    category: Optional[str] = None
    nutrition_per_100g: Dict[str, Any] = Field(
        default_factory=dict, alias="nutritionPer100g"
    )
    is_verified: bool = False


class EstimatedPortion(BaseModel):
    grams: float
    description: str


class DetectedFood(CamelModel):
    """One food item recognised in an image"""

    name: str
    confidence: float = Field(..., ge=0, le=1)
    category: str = "other"
    nutrition_per_100g: NutritionData = Field(..., alias="nutritionPer100g")
    estimated_portion: Optional[EstimatedPortion] = None
    bounding_box: Optional[Dict[str, float]] = None


class FoodDetectionResponse(CamelModel):
    id: UUID
    image_path: str
    detected_foods: List[DetectedFood]
    status: Optional[str] = None
    processed_at: Optional[datetime] = None