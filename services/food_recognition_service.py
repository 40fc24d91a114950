"""Food recognition through a vision-language chat model.

Images are downscaled to fit 1024x1024, re-encoded as JPEG and sent inline
as base64. The model is asked for a bare JSON array which is then validated
and clamped before anything reaches the API layer.
"""

import base64
import io
import json
import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Union

from openai import OpenAI, OpenAIError
from PIL import Image, ImageOps

from app.config import settings
from app.exceptions import FoodRecognitionError
from domain.schemas.common import NutritionData
from domain.schemas.food_schemas import DetectedFood, EstimatedPortion

logger = logging.getLogger("protein_tracker.food_recognition")

MAX_IMAGE_SIDE = 1024
JPEG_QUALITY = 85
MAX_ITEMS = 10

FOOD_RECOGNITION_PROMPT = """
Analyze this food image and identify all visible food items. For each food item, provide:

1. Food name (be specific, e.g., "Grilled Chicken Breast" not just "Chicken")
2. Confidence level (0.0 to 1.0)
3. Food category (protein, vegetable, grain, fruit, dairy, snack, beverage, etc.)
4. Estimated portion size in grams
5. Nutritional information per 100g (calories, protein, carbs, fat, fiber, sugar, sodium)

Return ONLY a valid JSON array with this exact structure:
[
  {
    "name": "Food Name",
    "confidence": 0.95,
    "category": "protein",
    "estimatedPortion": {"grams": 150, "description": "1 medium chicken breast"},
    "nutritionPer100g": {
      "calories": 165, "protein": 31, "carbs": 0, "fat": 3.6,
      "fiber": 0, "sugar": 0, "sodium": 74
    }
  }
]

Important:
- Focus on protein-rich foods but identify all visible food items
- Be conservative with confidence scores - only use >0.9 for very clear items
- Provide realistic portion estimates
- Use standard USDA nutritional values
- If you see multiple items of the same food, list them separately with individual portions
- Return empty array [] if no food is clearly visible
""".strip()

NUTRITION_INFO_PROMPT = """
Provide accurate nutritional information per 100g for: {food_name}

Return ONLY a valid JSON object with this exact structure:
{{"calories": 165, "protein": 31, "carbs": 0, "fat": 3.6, "fiber": 0, "sugar": 0}}

Use standard USDA nutritional database values.
""".strip()

_FENCE = re.compile(r"```(?:json)?\s*")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _non_negative(value: Any) -> float:
    return max(0.0, float(value)) if _is_number(value) else 0.0


def _bounding_box(value: Any) -> Optional[dict]:
    if not isinstance(value, dict) or not value:
        return None
    if not all(isinstance(k, str) and _is_number(v) for k, v in value.items()):
        return None
    return {k: float(v) for k, v in value.items()}


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences the model sometimes wraps JSON in"""
    return _FENCE.sub("", text).strip()


class FoodRecognitionService:
    """
    Identify foods in a photo and estimate nutrition per 100 g.

    Without an API key (or injected client) the service answers with a single
    generic fallback item so the rest of the flow keeps working.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        self.model = model or settings.openai_model
        api_key = api_key if api_key is not None else settings.openai_api_key
        if client is not None:
            self._client = client
        elif api_key:
            self._client = OpenAI(api_key=api_key, timeout=settings.openai_timeout_sec)
        else:
            self._client = None
            logger.warning("vision_api_key_missing fallback_detection=enabled")

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    # ------------------------------------------------------------------
    # Image preparation
    # ------------------------------------------------------------------

    @staticmethod
    def process_image(image: Union[str, Path, bytes]) -> bytes:
        """Fit inside 1024x1024 without enlarging and re-encode as JPEG q85"""
        source = io.BytesIO(image) if isinstance(image, bytes) else image
        with Image.open(source) as img:
            img = ImageOps.exif_transpose(img)
            if img.mode in ("RGBA", "LA", "P"):
                if img.mode == "P":
                    img = img.convert("RGBA")
                background = Image.new("RGB", img.size, (255, 255, 255))
                background.paste(img, mask=img.split()[-1])
                img = background
            elif img.mode != "RGB":
                img = img.convert("RGB")

            img.thumbnail((MAX_IMAGE_SIDE, MAX_IMAGE_SIDE))
            output = io.BytesIO()
            img.save(
                output,
                format="JPEG",
                quality=JPEG_QUALITY,
                progressive=True,
                optimize=True,
            )
        return output.getvalue()

    @staticmethod
    def image_to_base64(image_bytes: bytes) -> str:
        return base64.b64encode(image_bytes).decode("ascii")

    # ------------------------------------------------------------------
    # Recognition
    # ------------------------------------------------------------------

    def recognize_food_items(self, image: Union[str, Path, bytes]) -> List[DetectedFood]:
        """
        Run recognition on an image file or raw bytes.

        Raises:
            FoodRecognitionError: image unreadable, API failure or unparseable output
        """
        if not self.is_configured:
            logger.info("food_detection_fallback")
            return self.fallback_results()

        try:
            encoded = self.image_to_base64(self.process_image(image))
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": FOOD_RECOGNITION_PROMPT},
                            {
                                "type": "image_url",
                                "image_url": {
                                    "url": f"data:image/jpeg;base64,{encoded}"
                                },
                            },
                        ],
                    }
                ],
                max_tokens=2000,
                temperature=0.1,
            )
        except OpenAIError as e:
            logger.error(f"food_detection_api_error error={e}")
            raise FoodRecognitionError(f"Food recognition failed: {e}") from e
        except OSError as e:
            logger.warning(f"food_detection_bad_image error={e}")
            raise FoodRecognitionError(
                "Failed to process image for analysis"
            ) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise FoodRecognitionError("Food recognition failed: empty model response")

        results = self.validate_results(self.parse_response(content))
        logger.info(f"food_detection_completed items={len(results)}")
        return results

    @staticmethod
    def parse_response(content: str) -> Any:
        try:
            return json.loads(strip_code_fences(content))
        except json.JSONDecodeError as e:
            logger.error(f"food_detection_unparseable response={content[:200]!r}")
            raise FoodRecognitionError("Invalid response format from AI") from e

    @staticmethod
    def validate_results(results: Any) -> List[DetectedFood]:
        """
        Keep well-formed items and clamp their values.

        An item needs a string name, a numeric confidence in [0, 1] and
        numeric calories and protein per 100 g. Negative nutrients become 0,
        portions are at least 1 g, and at most 10 items are returned.
        """
        if not isinstance(results, list):
            logger.warning("food_detection_not_a_list")
            return []

        validated: List[DetectedFood] = []
        for item in results:
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            confidence = item.get("confidence")
            nutrition = item.get("nutritionPer100g")
            if not isinstance(name, str) or not name.strip():
                continue
            if not _is_number(confidence) or not 0 <= confidence <= 1:
                continue
            if not isinstance(nutrition, dict):
                continue
            if not (_is_number(nutrition.get("calories")) and _is_number(nutrition.get("protein"))):
                continue

            portion = None
            raw_portion = item.get("estimatedPortion")
            if isinstance(raw_portion, dict) and _is_number(raw_portion.get("grams")):
                grams = max(1.0, float(raw_portion["grams"]))
                description = raw_portion.get("description")
                if not isinstance(description, str) or not description:
                    description = f"{grams:g}g serving"
                portion = EstimatedPortion(grams=grams, description=description)

            category = item.get("category")
            if not isinstance(category, str) or not category.strip():
                category = "other"

            validated.append(
                DetectedFood(
                    name=name.strip(),
                    confidence=float(confidence),
                    category=category,
                    nutrition_per_100g=NutritionData(
                        calories=_non_negative(nutrition.get("calories")),
                        protein=_non_negative(nutrition.get("protein")),
                        carbs=_non_negative(nutrition.get("carbs")),
                        fat=_non_negative(nutrition.get("fat")),
                        fiber=_non_negative(nutrition.get("fiber")),
                        sugar=_non_negative(nutrition.get("sugar")),
                        sodium=_non_negative(nutrition.get("sodium")),
                    ),
                    estimated_portion=portion,
                    bounding_box=_bounding_box(item.get("boundingBox")),
                )
            )
            if len(validated) == MAX_ITEMS:
                break
        return validated

    @staticmethod
    def fallback_results() -> List[DetectedFood]:
        return [
            DetectedFood(
                name="Mixed Food Item",
                confidence=0.6,
                category="mixed",
                nutrition_per_100g=NutritionData(
                    calories=200, protein=15, carbs=20, fat=8, fiber=3, sugar=5
                ),
                estimated_portion=EstimatedPortion(
                    grams=150, description="Medium serving"
                ),
            )
        ]

    def get_nutrition_info(self, food_name: str) -> Optional[NutritionData]:
        """Per-100 g nutrition for a named food, or None when unavailable"""
        if not self.is_configured:
            return None
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": NUTRITION_INFO_PROMPT.format(food_name=food_name),
                    }
                ],
                max_tokens=200,
                temperature=0.1,
            )
            content = response.choices[0].message.content if response.choices else None
            if not content:
                return None
            data = json.loads(strip_code_fences(content))
        except (OpenAIError, json.JSONDecodeError) as e:
            logger.warning(f"nutrition_lookup_failed food={food_name!r} error={e}")
            return None

        if not isinstance(data, dict) or not _is_number(data.get("protein")):
            return None
        return NutritionData(
            **{key: _non_negative(data.get(key)) for key in NutritionData.model_fields}
        )


_service: Optional[FoodRecognitionService] = None


def get_food_recognition_service() -> FoodRecognitionService:
    """Process-wide service instance built from settings"""
    global _service
    if _service is None:
        _service = FoodRecognitionService()
    return _service
