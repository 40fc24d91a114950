"""
Shared schema building blocks.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for payloads exchanged with camelCase keys.

    Accepts both camelCase and snake_case on input; routes dump with
    ``by_alias=True`` so clients always receive camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class NutritionData(BaseModel):
    """Nutrient amounts in grams (calories in kcal). Missing keys count as 0."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0

    model_config = ConfigDict(extra="ignore")
