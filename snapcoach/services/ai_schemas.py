"""
Pydantic models for validating structured JSON responses from the vision model.

Each schema corresponds to one pipeline stage's expected response format.
Used by parse_response() in response_parser.py.

Validation here is structural only: required fields and primitive types.
Value ranges (calories, health score) are trusted as returned by the model.
"""

import enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

# JSON numbers: keep ints as ints so scores render as "3", not "3.0"
Number = Union[int, float]


class ConfidenceLevel(str, enum.Enum):
    """How sure the model is about the detected ingredients."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# --- Identification (identify) ---


class IdentificationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    detected_ingredients: list[str]
    missing_info_question: Optional[str] = None
    confidence_level: ConfidenceLevel


# --- Analysis (analyze / analyze_direct) ---


class Macros(BaseModel):
    model_config = ConfigDict(frozen=True)

    protein: Number
    carbs: Number
    fat: Number


class FoodAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    food_name: str
    calories_approx: Number
    macros: Macros
    health_score_1_to_10: Number
    coach_tip: str
