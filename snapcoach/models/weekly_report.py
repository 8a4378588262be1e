from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from snapcoach.services.ai_schemas import Number


class SwapSuggestion(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    original_food: str
    better_option: str
    reason: str


class WeeklyReport(BaseModel):
    """Derived weekly summary. Serialized with camelCase keys (totalCalories, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_calories: Number
    average_protein: Number
    missed_goals: list[str]
    swaps: list[SwapSuggestion]
    total_protein: Number = 0
    gym_days: int = 0
