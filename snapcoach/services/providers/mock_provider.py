"""
Mock vision provider.

Returns canned model replies so the whole pipeline can run without an API
key. The same image always maps to the same canned meal.
"""

import asyncio
import hashlib
import json
import logging

from snapcoach.config import settings
from snapcoach.services.prompts import is_identify_prompt
from snapcoach.services.providers.base import VisionImage, VisionProvider

logger = logging.getLogger(__name__)

MOCK_MEALS = [
    {
        "identification": {
            "detected_ingredients": ["grilled chicken breast", "mixed greens", "cherry tomatoes", "olive oil"],
            "missing_info_question": None,
            "confidence_level": "high",
        },
        "analysis": {
            "food_name": "Grilled Chicken Salad",
            "calories_approx": 350,
            "macros": {"protein": 35, "carbs": 12, "fat": 15},
            "health_score_1_to_10": 9,
            "coach_tip": "Great protein hit! Perfect for recovery.",
        },
    },
    {
        "identification": {
            "detected_ingredients": ["pizza dough", "tomato sauce", "mozzarella", "pepperoni"],
            "missing_info_question": "How many slices did you eat?",
            "confidence_level": "medium",
        },
        "analysis": {
            "food_name": "Pepperoni Pizza (2 slices)",
            "calories_approx": 600,
            "macros": {"protein": 20, "carbs": 60, "fat": 30},
            "health_score_1_to_10": 3,
            "coach_tip": "High fat/carb combo. Try a side salad next time to fill up.",
        },
    },
    {
        "identification": {
            "detected_ingredients": ["rolled oats", "blueberries", "strawberries"],
            "missing_info_question": "Was it made with milk or water?",
            "confidence_level": "high",
        },
        "analysis": {
            "food_name": "Oatmeal with Berries",
            "calories_approx": 300,
            "macros": {"protein": 8, "carbs": 50, "fat": 6},
            "health_score_1_to_10": 8,
            "coach_tip": "Solid fuel. Consider adding protein powder or eggs on the side.",
        },
    },
]

class MockVisionProvider(VisionProvider):
    """Deterministic stand-in for a hosted vision model."""

    name = "mock"

    def __init__(self, latency_seconds: float | None = None):
        self.latency_seconds = (
            settings.mock_latency_seconds if latency_seconds is None else latency_seconds
        )

    async def generate(self, prompt: str, image: VisionImage) -> str:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

        meal = MOCK_MEALS[self._pick(image)]
        stage = "identification" if is_identify_prompt(prompt) else "analysis"
        logger.debug("Mock provider answering %s with %s", stage, meal["analysis"]["food_name"])
        return json.dumps(meal[stage])

    def _pick(self, image: VisionImage) -> int:
        digest = hashlib.sha256(image.data.encode("utf-8")).hexdigest()
        return int(digest, 16) % len(MOCK_MEALS)
