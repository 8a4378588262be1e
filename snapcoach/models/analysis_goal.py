import enum


class AnalysisGoal(str, enum.Enum):
    """Tone selector for the coaching remark."""
    HEALTH = "health"
    COOKING = "cooking"
    ROAST = "roast"
