"""
Weekly trend report over a week of daily meal logs.

Pure and deterministic: no I/O, no error path. Input is assumed to be
already-validated FoodAnalysis records, one DailyLog per calendar day.
"""

from typing import Iterable

from snapcoach.models.daily_log import Activity, DailyLog
from snapcoach.models.weekly_report import SwapSuggestion, WeeklyReport
from snapcoach.services.ai_schemas import Number

# Fixed divisor: the report always describes one calendar week, even when
# fewer (or more) than 7 logs are supplied.
DAYS_PER_WEEK = 7

PROTEIN_TARGET_G = 120
GYM_DAYS_THRESHOLD = 2  # more than this many gym days triggers the protein rule
LOW_PROTEIN_WARNING = "Protein too low for gym frequency"

SWAP_SCORE_THRESHOLD = 5  # meals scoring below this get a swap suggestion
MAX_SWAPS = 3

# Keyword (matched case-insensitively in the food name) -> healthier swap
HEALTHIER_ALTERNATIVES = [
    ("pizza", "Whole Wheat Pita Pizza with Arugula"),
    ("burger", "Turkey Burger on Lettuce Wrap"),
    ("pasta", "Zucchini Noodles or Quinoa Pasta"),
]
DEFAULT_ALTERNATIVE = "Grilled Chicken & Veggies"


def analyze_week(logs: Iterable[DailyLog]) -> WeeklyReport:
    """
    Fold a week of daily logs into totals, alerts and swap suggestions.

    Args:
        logs: Daily logs in day order

    Returns:
        WeeklyReport with at most MAX_SWAPS swaps
    """
    logs = list(logs)

    total_calories = 0
    total_protein = 0
    gym_days = 0
    swaps: list[SwapSuggestion] = []

    for day in logs:
        if day.activity == Activity.GYM:
            gym_days += 1
        for meal in day.meals:
            total_calories += meal.calories_approx
            total_protein += meal.macros.protein
            if meal.health_score_1_to_10 < SWAP_SCORE_THRESHOLD:
                swaps.append(
                    SwapSuggestion(
                        original_food=meal.food_name,
                        better_option="Try: " + healthier_alternative(meal.food_name),
                        reason=(
                            f"Low health score ({_format_number(meal.health_score_1_to_10)})"
                            " - spikes insulin."
                        ),
                    )
                )

    average_protein = _whole(total_protein / DAYS_PER_WEEK)

    missed_goals = []
    if average_protein < PROTEIN_TARGET_G and gym_days > GYM_DAYS_THRESHOLD:
        missed_goals.append(LOW_PROTEIN_WARNING)

    return WeeklyReport(
        total_calories=_whole(total_calories),
        average_protein=average_protein,
        missed_goals=missed_goals,
        swaps=swaps[:MAX_SWAPS],
        total_protein=_whole(total_protein),
        gym_days=gym_days,
    )


def healthier_alternative(food_name: str) -> str:
    """First keyword match wins; otherwise the generic fallback."""
    name = food_name.lower()
    for keyword, alternative in HEALTHIER_ALTERNATIVES:
        if keyword in name:
            return alternative
    return DEFAULT_ALTERNATIVE


def _whole(value: Number) -> Number:
    """Integral floats become ints so they serialize as 100, not 100.0."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _format_number(value: Number) -> str:
    """Render a score the way the model sent it: 3 stays "3", 4.9999999 is not rounded."""
    return str(_whole(value))
