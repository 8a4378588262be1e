from pydantic import BaseModel, ConfigDict

from snapcoach.services.ai_schemas import FoodAnalysis


class MealEntry(BaseModel):
    """A logged, completed analysis together with its source image."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: int  # epoch milliseconds
    image: str  # base64 data URI snapshot
    analysis: FoodAnalysis
