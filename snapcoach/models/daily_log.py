import enum

from pydantic import BaseModel

from snapcoach.services.ai_schemas import FoodAnalysis


class Activity(str, enum.Enum):
    """Training load for a day."""
    REST = "Rest"
    GYM = "Gym"
    FOOTBALL = "Football"


class DailyLog(BaseModel):
    """One day's record, supplied wholesale to the weekly aggregator."""

    date: str
    activity: Activity
    meals: list[FoodAnalysis] = []
