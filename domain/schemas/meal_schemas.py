from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict
from datetime import datetime, date
from uuid import UUID

from domain.enums import MealType
from domain.schemas.common import CamelModel, NutritionData


class MealFoodCreate(BaseModel):
    """A food portion to attach to a new meal"""

    food_id: UUID
    quantity: float = Field(..., gt=0)
    unit: str = Field("grams", min_length=1, max_length=32)
    nutrition_data: Optional[NutritionData] = Field(
        None, description="Nutrition of this portion (not per 100 g)"
    )


class MealCreate(BaseModel):
    """Schema for creating a meal with its foods"""

    meal_type: MealType
    timestamp: Optional[datetime] = Field(None, description="Defaults to now")
    photo_url: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)
    foods: List[MealFoodCreate] = Field(default_factory=list)

    @field_validator("meal_type", mode="before")
    @classmethod
    def lowercase_meal_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class MealUpdate(BaseModel):
    """Partial meal update; foods are not replaced here"""

    meal_type: Optional[MealType] = None
    timestamp: Optional[datetime] = None
    photo_url: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("meal_type", mode="before")
    @classmethod
    def lowercase_meal_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class MealFoodResponse(BaseModel):
    id: UUID
    meal_id: UUID
    food_id: Optional[UUID] = None
    food_name: Optional[str] = None
    quantity: float
    unit: str
    nutrition_data: Optional[NutritionData] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MealResponse(BaseModel):
    """Meal with its foods and rounded nutrition totals"""

    id: UUID
    user_id: UUID
    meal_type: MealType
    timestamp: datetime
    photo_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    foods: List[MealFoodResponse] = Field(default_factory=list)
    nutrition: NutritionData

    model_config = ConfigDict(from_attributes=True)


class DayMealsResponse(CamelModel):
    date: date
    total_nutrition: NutritionData
    meals_by_type: Dict[str, List[MealResponse]]


class MealTypeSummary(BaseModel):
    count: int = 0
    protein: float = 0.0
    target: float = 0.0


class TodaySummaryResponse(CamelModel):
    date: date
    total_protein: float
    total_calories: float
    daily_goal: float
    progress: int
    meal_summary: Dict[str, MealTypeSummary]
