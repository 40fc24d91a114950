"""
Food recognition service tests.

The OpenAI client is replaced by a small fake so prompts, parsing and
validation can be checked without network access.
"""

import io
import json
from types import SimpleNamespace

import httpx
import pytest
from openai import APIConnectionError
from PIL import Image

from app.exceptions import FoodRecognitionError
from services.food_recognition_service import (
    MAX_IMAGE_SIDE,
    FoodRecognitionService,
    strip_code_fences,
)


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(content=None, error=None):
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(content, error)))


def image_bytes(size=(64, 48), mode="RGB", fmt="PNG") -> bytes:
    buffer = io.BytesIO()
    color = (10, 200, 30, 128) if mode == "RGBA" else (10, 200, 30)
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


CHICKEN = {
    "name": "Grilled Chicken Breast",
    "confidence": 0.93,
    "category": "protein",
    "estimatedPortion": {"grams": 150, "description": "1 medium breast"},
    "nutritionPer100g": {"calories": 165, "protein": 31, "carbs": 0, "fat": 3.6},
}


# =============================================================================
# IMAGE PREPARATION
# =============================================================================


def test_process_image_downscales_and_reencodes():
    processed = FoodRecognitionService.process_image(image_bytes((3000, 1500)))
    with Image.open(io.BytesIO(processed)) as img:
        assert img.format == "JPEG"
        assert img.size == (MAX_IMAGE_SIDE, MAX_IMAGE_SIDE // 2)


def test_process_image_keeps_small_images_and_flattens_alpha():
    processed = FoodRecognitionService.process_image(image_bytes((40, 30), mode="RGBA"))
    with Image.open(io.BytesIO(processed)) as img:
        assert img.size == (40, 30)
        assert img.mode == "RGB"


def test_process_image_from_path(tmp_path):
    path = tmp_path / "meal.webp"
    path.write_bytes(image_bytes(fmt="WEBP"))
    assert FoodRecognitionService.process_image(path)[:2] == b"\xff\xd8"


# =============================================================================
# PARSING AND VALIDATION
# =============================================================================


def test_strip_code_fences():
    assert strip_code_fences('```json\n[{"a": 1}]\n```') == '[{"a": 1}]'
    assert strip_code_fences("  []  ") == "[]"


def test_validate_results_filters_and_clamps():
    """
    Verifies:
    - Items without a name, a valid confidence or numeric nutrition are dropped
    - Negative nutrients become 0 and portions are at least 1 g
    """
    raw = [
        CHICKEN,
        {"name": "", "confidence": 0.5, "nutritionPer100g": {"calories": 1, "protein": 1}},
        {"name": "Rice", "confidence": 1.4, "nutritionPer100g": {"calories": 130, "protein": 2.7}},
        {"name": "Mystery", "confidence": 0.4, "nutritionPer100g": {"calories": "lots", "protein": 1}},
        "not a dict",
        {
            "name": "  Broccoli ",
            "confidence": 0.7,
            "estimatedPortion": {"grams": 0.2},
            "nutritionPer100g": {"calories": 34, "protein": 2.8, "fat": -1},
        },
    ]
    results = FoodRecognitionService.validate_results(raw)

    assert [r.name for r in results] == ["Grilled Chicken Breast", "Broccoli"]
    broccoli = results[1]
    assert broccoli.category == "other"
    assert broccoli.nutrition_per_100g.fat == 0
    assert broccoli.estimated_portion.grams == 1
    assert broccoli.estimated_portion.description == "1g serving"


def test_validate_results_caps_item_count():
    results = FoodRecognitionService.validate_results([CHICKEN] * 15)
    assert len(results) == 10


def test_validate_results_defaults_malformed_category_and_box():
    """
    Verifies:
    - A non-string or blank category falls back to "other"
    - A bounding box with non-numeric values is dropped, numeric ones are kept
    """
    base = {"name": "Chicken", "confidence": 0.9, "nutritionPer100g": {"calories": 165, "protein": 31}}
    raw = [
        {**base, "category": 5},
        {**base, "category": "  ", "boundingBox": {"x": "left", "y": 0.2}},
        {**base, "boundingBox": {"x": 0.1, "y": 0.2, "width": 0.5, "height": True}},
        {**base, "category": "protein", "boundingBox": {"x": 0.1, "y": 0.2, "width": 0.5, "height": 0.4}},
    ]
    results = FoodRecognitionService.validate_results(raw)

    assert len(results) == 4
    assert [r.category for r in results] == ["other", "other", "other", "protein"]
    assert [r.bounding_box for r in results[:3]] == [None, None, None]
    assert results[3].bounding_box == {"x": 0.1, "y": 0.2, "width": 0.5, "height": 0.4}


def test_recognize_survives_odd_model_fields():
    item = {**CHICKEN, "category": ["meat"], "boundingBox": "top-left"}
    service = FoodRecognitionService(client=fake_client(json.dumps([item])))

    results = service.recognize_food_items(image_bytes())

    assert results[0].category == "other"
    assert results[0].bounding_box is None


def test_validate_results_non_list():
    assert FoodRecognitionService.validate_results({"items": [CHICKEN]}) == []


def test_parse_response_rejects_prose():
    with pytest.raises(FoodRecognitionError, match="Invalid response format from AI"):
        FoodRecognitionService.parse_response("I see a sandwich.")


# =============================================================================
# RECOGNITION
# =============================================================================


def test_fallback_without_api_key():
    service = FoodRecognitionService(api_key="")
    assert service.is_configured is False
    results = service.recognize_food_items(b"not even an image")
    assert len(results) == 1
    assert results[0].name == "Mixed Food Item"
    assert results[0].nutrition_per_100g.protein == 15


def test_recognize_sends_inline_jpeg():
    client = fake_client("```json\n" + json.dumps([CHICKEN]) + "\n```")
    service = FoodRecognitionService(client=client, model="vision-test")

    results = service.recognize_food_items(image_bytes())

    assert results[0].name == "Grilled Chicken Breast"
    assert results[0].estimated_portion.grams == 150
    request = client.chat.completions.requests[0]
    assert request["model"] == "vision-test"
    assert request["temperature"] == 0.1
    content = request["messages"][0]["content"]
    assert content[0]["type"] == "text"
    assert content[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")


def test_recognize_wraps_api_errors():
    error = APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    service = FoodRecognitionService(client=fake_client(error=error))
    with pytest.raises(FoodRecognitionError, match="Food recognition failed"):
        service.recognize_food_items(image_bytes())


def test_recognize_unreadable_image():
    service = FoodRecognitionService(client=fake_client("[]"))
    with pytest.raises(FoodRecognitionError, match="Failed to process image"):
        service.recognize_food_items(b"plain text, not pixels")


def test_recognize_empty_content():
    service = FoodRecognitionService(client=fake_client(""))
    with pytest.raises(FoodRecognitionError, match="empty model response"):
        service.recognize_food_items(image_bytes())


def test_nutrition_info_lookup():
    service = FoodRecognitionService(
        client=fake_client('{"calories": 52, "protein": 0.3, "carbs": 14, "fat": 0.2}')
    )
    nutrition = service.get_nutrition_info("Apple")
    assert nutrition.calories == 52
    assert nutrition.fiber == 0
    assert "Apple" in service._client.chat.completions.requests[0]["messages"][0]["content"]


def test_nutrition_info_unavailable():
    assert FoodRecognitionService(api_key="").get_nutrition_info("Apple") is None
    assert FoodRecognitionService(client=fake_client("no idea")).get_nutrition_info("Apple") is None
