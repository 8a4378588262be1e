"""
Vision pipeline stages: ingredient identification and nutrition analysis.

Each stage makes exactly one provider call and parses the reply:
1. identify(): image -> IdentificationResult
2. analyze(): image + flattened context + goal -> FoodAnalysis

The stages do not know about each other. analyze() takes a plain context
string, so identification can be skipped entirely (see analyze_direct()).
"""

import logging

from snapcoach.config import settings
from snapcoach.models.analysis_goal import AnalysisGoal
from snapcoach.services.ai_schemas import FoodAnalysis, IdentificationResult
from snapcoach.services.errors import ProviderError, ServiceUnavailableError
from snapcoach.services.prompts import build_analyze_prompt, build_identify_prompt
from snapcoach.services.providers.base import VisionImage, VisionProvider
from snapcoach.services.response_parser import parse_response

logger = logging.getLogger(__name__)

# Context used by the one-shot entry point, which has no identification step
DEFAULT_DIRECT_CONTEXT = "No additional context provided. Identify the meal from the photo."


class VisionService:
    """Runs the identification and analysis stages against a vision provider."""

    def __init__(self, provider: VisionProvider, language: str | None = None):
        self.provider = provider
        self.language = language or settings.prompt_language

    async def identify(self, image: bytes | str) -> IdentificationResult:
        """
        Detect the visible ingredients of a meal photo.

        Args:
            image: Raw bytes, base64 string, or data URI

        Returns:
            IdentificationResult with ingredients, optional question, confidence

        Raises:
            InputError: No image supplied
            ProviderError: Provider/transport failure
            MalformedResponse: Reply did not match the identification schema
        """
        payload = VisionImage.from_payload(image)
        prompt = build_identify_prompt(self.language)

        raw_text = await self._generate("identify", prompt, payload)
        result = parse_response(raw_text, IdentificationResult)

        logger.info(
            "Identified %d ingredients (confidence=%s)",
            len(result.detected_ingredients),
            result.confidence_level.value,
        )
        return result

    async def analyze(
        self, image: bytes | str, context: str, goal: AnalysisGoal | str
    ) -> FoodAnalysis:
        """
        Estimate nutrition and produce a goal-toned coaching tip.

        Args:
            image: Raw bytes, base64 string, or data URI
            context: Caller-assembled context string, passed verbatim into the prompt
            goal: Tone selector (health, cooking, roast)

        Returns:
            FoodAnalysis

        Raises:
            ValueError: Unknown goal (raised before any provider call)
            InputError: No image supplied
            ProviderError: Provider/transport failure
            MalformedResponse: Reply did not match the analysis schema
        """
        prompt = build_analyze_prompt(context, goal, self.language)
        payload = VisionImage.from_payload(image)

        raw_text = await self._generate("analyze", prompt, payload)
        analysis = parse_response(raw_text, FoodAnalysis)

        logger.info(
            "Analyzed meal %r: ~%s kcal, score %s",
            analysis.food_name,
            analysis.calories_approx,
            analysis.health_score_1_to_10,
        )
        return analysis

    async def analyze_direct(self, image: bytes | str) -> FoodAnalysis:
        """One-shot analysis without identification: health goal, placeholder context."""
        return await self.analyze(image, DEFAULT_DIRECT_CONTEXT, AnalysisGoal.HEALTH)

    async def _generate(self, stage: str, prompt: str, image: VisionImage) -> str:
        try:
            raw_text = await self.provider.generate(prompt, image)
        except ProviderError as e:
            logger.error("%s stage failed via %s: %s", stage, self.provider.name, e.message)
            raise

        if not raw_text or not raw_text.strip():
            logger.error("%s stage got an empty reply from %s", stage, self.provider.name)
            raise ServiceUnavailableError("Empty response from AI service")
        return raw_text
