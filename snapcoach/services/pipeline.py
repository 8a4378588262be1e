"""
Interactive identify -> confirm -> analyze pipeline.

MealSession is an explicit finite state machine:

    IDLE --identify()--> IDENTIFYING --ok--> CONFIRMATION --confirm()--> ANALYZING --ok--> RESULT
                              |                   ^                          |               |
                              +--error--> IDLE    +---------error------------+     log_meal()--> IDLE

clear() returns to IDLE from any state. A failed analysis keeps the image,
the identification, the notes and the goal so the user can retry without
re-scanning. While a stage is in flight, identify() and confirm() are no-ops.
"""

import enum
import logging
import uuid
from typing import Optional

from snapcoach.models.analysis_goal import AnalysisGoal
from snapcoach.models.meal_entry import MealEntry
from snapcoach.services.ai_schemas import FoodAnalysis, IdentificationResult
from snapcoach.services.errors import InputError, MalformedResponse, ProviderError
from snapcoach.services.history_store import HistoryStore
from snapcoach.services.image_service import to_data_uri
from snapcoach.services.providers.base import VisionImage
from snapcoach.services.vision_service import VisionService

logger = logging.getLogger(__name__)

RECOVERABLE_ERRORS = (InputError, ProviderError, MalformedResponse)


class PipelineState(str, enum.Enum):
    """States of the meal pipeline."""
    IDLE = "idle"
    IDENTIFYING = "identifying"
    CONFIRMATION = "confirmation"
    ANALYZING = "analyzing"
    RESULT = "result"


BUSY_STATES = {PipelineState.IDENTIFYING, PipelineState.ANALYZING}


def build_context(detected_ingredients: list[str], user_notes: str) -> str:
    """Flatten identification + notes into the analysis context string."""
    return "Detected: " + ", ".join(detected_ingredients) + ". User Notes: " + user_notes


def _error_message(error: Exception) -> str:
    return getattr(error, "message", None) or str(error) or error.__class__.__name__


class MealSession:
    """One user's pass through the pipeline, from photo to logged meal."""

    def __init__(
        self,
        vision_service: VisionService,
        history: Optional[HistoryStore] = None,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or uuid.uuid4().hex
        self.vision_service = vision_service
        self.history = history
        self._generation = 0
        self._reset()

    def _reset(self) -> None:
        # Bumped on every reset so a stage finishing after clear() is dropped
        self._generation = self._generation + 1
        self.state = PipelineState.IDLE
        self.image: Optional[bytes | str] = None
        self.identification: Optional[IdentificationResult] = None
        self.user_notes = ""
        self.goal = AnalysisGoal.HEALTH
        self.analysis: Optional[FoodAnalysis] = None
        self.error: Optional[str] = None

    @property
    def is_busy(self) -> bool:
        return self.state in BUSY_STATES

    @property
    def context(self) -> Optional[str]:
        """Context string the analysis stage will receive, once identified."""
        if self.identification is None:
            return None
        return build_context(self.identification.detected_ingredients, self.user_notes)

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def select_image(self, image: bytes | str) -> bool:
        """Attach a (pre-compressed) image. Only allowed while idle."""
        if self.state != PipelineState.IDLE:
            logger.debug("Session %s: select_image ignored in %s", self.id, self.state.value)
            return False
        self.image = image
        self.error = None
        return True

    async def identify(self) -> bool:
        """
        IDLE -> IDENTIFYING -> CONFIRMATION (or back to IDLE on error).

        Returns:
            False if the transition is not allowed in the current state
        """
        if self.state != PipelineState.IDLE:
            logger.debug("Session %s: identify ignored in %s", self.id, self.state.value)
            return False

        self.error = None
        if not self.image:
            self.error = "No image provided"
            return True

        self.state = PipelineState.IDENTIFYING
        generation = self._generation
        try:
            result = await self.vision_service.identify(self.image)
        except RECOVERABLE_ERRORS as e:
            if generation != self._generation:
                return True
            logger.warning("Session %s: identification failed: %s", self.id, e)
            self.state = PipelineState.IDLE
            self.error = _error_message(e)
            return True
        except Exception:
            if generation == self._generation:
                self.state = PipelineState.IDLE
            raise

        if generation != self._generation:
            logger.debug("Session %s: identification result dropped after clear", self.id)
            return True
        self.identification = result
        self.state = PipelineState.CONFIRMATION
        return True

    async def submit_image(self, image: bytes | str) -> bool:
        """Select an image and immediately run identification."""
        if not self.select_image(image):
            return False
        return await self.identify()

    def set_notes(self, notes: str) -> bool:
        """Edit free-text notes while confirming."""
        if self.state != PipelineState.CONFIRMATION:
            return False
        self.user_notes = notes or ""
        return True

    def set_goal(self, goal: AnalysisGoal | str) -> bool:
        """
        Pick the coaching goal while confirming.

        Raises:
            ValueError: If goal is not a known AnalysisGoal
        """
        goal = AnalysisGoal(goal)
        if self.state != PipelineState.CONFIRMATION:
            return False
        self.goal = goal
        return True

    async def confirm(self) -> bool:
        """
        CONFIRMATION -> ANALYZING -> RESULT (or back to CONFIRMATION on error).

        Returns:
            False if the transition is not allowed in the current state,
            including while an analysis is already running
        """
        if self.state != PipelineState.CONFIRMATION:
            logger.debug("Session %s: confirm ignored in %s", self.id, self.state.value)
            return False

        self.error = None
        self.state = PipelineState.ANALYZING
        generation = self._generation
        try:
            analysis = await self.vision_service.analyze(self.image, self.context, self.goal)
        except RECOVERABLE_ERRORS as e:
            if generation != self._generation:
                return True
            logger.warning("Session %s: analysis failed: %s", self.id, e)
            self.state = PipelineState.CONFIRMATION
            self.error = _error_message(e)
            return True
        except Exception:
            if generation == self._generation:
                self.state = PipelineState.CONFIRMATION
            raise

        if generation != self._generation:
            logger.debug("Session %s: analysis result dropped after clear", self.id)
            return True
        self.analysis = analysis
        self.state = PipelineState.RESULT
        return True

    def log_meal(self) -> Optional[MealEntry]:
        """
        RESULT -> IDLE, persisting the analysis to history.

        Returns:
            The stored MealEntry, or None if not in RESULT
        """
        if self.state != PipelineState.RESULT:
            return None

        entry = None
        if self.history is not None:
            entry = self.history.log_meal(self.analysis, self._image_snapshot())
        self._reset()
        return entry

    def clear(self) -> None:
        """Unconditional reset to IDLE."""
        logger.debug("Session %s: cleared from %s", self.id, self.state.value)
        self._reset()

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _image_snapshot(self) -> str:
        image = VisionImage.from_payload(self.image)
        if isinstance(self.image, (bytes, bytearray)):
            return to_data_uri(bytes(self.image), image.media_type)
        return f"data:{image.media_type};base64,{image.data}"

    def to_dict(self) -> dict:
        """Serializable view of the session for API responses."""
        return {
            "id": self.id,
            "state": self.state.value,
            "has_image": bool(self.image),
            "identification": (
                self.identification.model_dump(mode="json")
                if self.identification
                else None
            ),
            "user_notes": self.user_notes,
            "goal": self.goal.value,
            "analysis": self.analysis.model_dump(mode="json") if self.analysis else None,
            "error": self.error,
        }


class SessionRegistry:
    """In-memory MealSession lookup for the HTTP API (single process)."""

    def __init__(self, vision_service: VisionService, history: Optional[HistoryStore] = None):
        self.vision_service = vision_service
        self.history = history
        self._sessions: dict[str, MealSession] = {}

    def create(self) -> MealSession:
        session = MealSession(self.vision_service, history=self.history)
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[MealSession]:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
