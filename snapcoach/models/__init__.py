"""
Domain models for SnapCoach.

Wire schemas exchanged with the vision model live in
snapcoach.services.ai_schemas and are re-exported here for convenience.
"""

from snapcoach.models.analysis_goal import AnalysisGoal
from snapcoach.models.daily_log import Activity, DailyLog
from snapcoach.models.meal_entry import MealEntry
from snapcoach.models.weekly_report import SwapSuggestion, WeeklyReport
from snapcoach.services.ai_schemas import (
    ConfidenceLevel,
    FoodAnalysis,
    IdentificationResult,
    Macros,
)

__all__ = [
    "Activity",
    "AnalysisGoal",
    "ConfidenceLevel",
    "DailyLog",
    "FoodAnalysis",
    "IdentificationResult",
    "Macros",
    "MealEntry",
    "SwapSuggestion",
    "WeeklyReport",
]
