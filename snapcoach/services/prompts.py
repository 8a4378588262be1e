"""
AI prompt templates for the two-step meal pipeline.

1. Identification: list visible ingredients, ask at most one clarifying question
2. Analysis: nutrition estimate plus a coaching tip in the tone of the chosen goal

Both prompts ask for a single strict JSON object and nothing else. The
response parser still tolerates code fences because models add them anyway.
"""

from snapcoach.models.analysis_goal import AnalysisGoal

DEFAULT_LANGUAGE = "English"

# =============================================================================
# IDENTIFICATION
# =============================================================================

# First line of every identification prompt; analysis prompts open with a goal tone
IDENTIFY_PROMPT_HEADER = "You are a food ingredient detector for a meal coaching application."

IDENTIFY_PROMPT_TEMPLATE = IDENTIFY_PROMPT_HEADER + """

TASK: Look at the meal photo and list the ingredients you can actually see.

GUIDELINES:
- List visible ingredients only, most prominent first
- Use short, plain names ("grilled chicken", "white rice", "broccoli")
- If something important cannot be judged from the photo (portion size,
  cooking fat, hidden fillings, sauce), ask ONE short question about it
- If nothing is unclear, missing_info_question must be null
- confidence_level reflects how sure you are about the ingredient list

Write all free text in {language}.

OUTPUT FORMAT (STRICT JSON only, no markdown code blocks, no prose before or after):
{{
  "detected_ingredients": ["grilled chicken", "white rice", "broccoli"],
  "missing_info_question": "Was the chicken cooked in oil or butter?",
  "confidence_level": "high"
}}

confidence_level must be one of: "high", "medium", "low"."""


# =============================================================================
# ANALYSIS
# =============================================================================

GOAL_TONES = {
    AnalysisGoal.HEALTH: (
        "You are a supportive nutrition coach. Frame the tip around balance and "
        "sustainable habits: what this meal does well and one small, realistic "
        "improvement for next time."
    ),
    AnalysisGoal.COOKING: (
        "You are a professional chef. Frame the tip around cooking technique and "
        "flavor: how to prepare this dish better, lighter, or tastier at home."
    ),
    AnalysisGoal.ROAST: (
        "You are a sarcastic comedian roasting the user's meal. Be witty and "
        "brutally honest about the food choice, but keep it playful, never cruel "
        "about the person."
    ),
}

ANALYZE_PROMPT_TEMPLATE = """{tone}

TASK: Estimate the nutrition of the meal in the photo and give one coaching tip.

CONTEXT FROM THE USER (treat as ground truth where it conflicts with the photo):
{user_context}

GUIDELINES:
- food_name: short descriptive name of the whole meal
- calories_approx: total kcal for the portion shown
- macros: grams of protein, carbs and fat for the portion shown
- health_score_1_to_10: integer, 1 = very unhealthy, 10 = very healthy
- coach_tip: one or two sentences in the tone described above

Write all free text in {language}.

OUTPUT FORMAT (STRICT JSON only, no markdown code blocks, no prose before or after):
{{
  "food_name": "Grilled Chicken Salad",
  "calories_approx": 350,
  "macros": {{"protein": 35, "carbs": 12, "fat": 15}},
  "health_score_1_to_10": 9,
  "coach_tip": "Great protein hit! Perfect for recovery."
}}"""


def goal_tone(goal: AnalysisGoal | str) -> str:
    """
    Look up the tone instructions for a goal.

    Raises:
        ValueError: If goal is not a known AnalysisGoal
    """
    return GOAL_TONES[AnalysisGoal(goal)]


def build_identify_prompt(language: str = DEFAULT_LANGUAGE) -> str:
    """Build the identification-stage prompt."""
    return IDENTIFY_PROMPT_TEMPLATE.format(language=language)


def build_analyze_prompt(
    user_context: str,
    goal: AnalysisGoal | str,
    language: str = DEFAULT_LANGUAGE,
) -> str:
    """
    Build the analysis-stage prompt.

    Args:
        user_context: Flattened context string (detected ingredients + user notes)
        goal: Tone selector
        language: Language for the free-text fields

    Raises:
        ValueError: If goal is not a known AnalysisGoal
    """
    return ANALYZE_PROMPT_TEMPLATE.format(
        tone=goal_tone(goal),
        user_context=user_context if user_context.strip() else "(none provided)",
        language=language,
    )


def is_identify_prompt(prompt: str) -> bool:
    """True for prompts built by build_identify_prompt()."""
    return prompt.startswith(IDENTIFY_PROMPT_HEADER)
