"""
Unit tests for the MealSession state machine.

Tests transitions, guards and error recovery:
- IDLE -> IDENTIFYING -> CONFIRMATION -> ANALYZING -> RESULT -> IDLE
- Failed stages return to an actionable state with progress kept
- Transitions requested in the wrong state are no-ops
"""
import asyncio
import json

import pytest

from snapcoach.models.analysis_goal import AnalysisGoal
from snapcoach.services.errors import MalformedResponse, ServiceUnavailableError
from snapcoach.services.pipeline import (
    MealSession,
    PipelineState,
    SessionRegistry,
    build_context,
)
from snapcoach.services.prompts import GOAL_TONES
from tests.fixtures.mocks import SAMPLE_ANALYSIS, SAMPLE_IDENTIFICATION


async def _to_confirmation(session: MealSession, image: bytes) -> None:
    await session.submit_image(image)
    assert session.state == PipelineState.CONFIRMATION


async def _to_result(session: MealSession, image: bytes) -> None:
    await _to_confirmation(session, image)
    await session.confirm()
    assert session.state == PipelineState.RESULT


class TestBuildContext:

    def test_format(self):
        context = build_context(["rice", "beans"], "cooked in lard")

        assert context == "Detected: rice, beans. User Notes: cooked in lard"

    def test_empty_notes(self):
        assert build_context(["toast"], "") == "Detected: toast. User Notes: "


# =============================================================================
# Identification
# =============================================================================


class TestIdentification:

    def test_initial_state(self, meal_session):
        data = meal_session.to_dict()

        assert data["state"] == "idle"
        assert data["has_image"] is False
        assert data["goal"] == "health"
        assert data["identification"] is None
        assert data["error"] is None

    @pytest.mark.asyncio
    async def test_identify_without_image(self, meal_session, fake_provider):
        assert await meal_session.identify() is True

        assert meal_session.state == PipelineState.IDLE
        assert meal_session.error == "No image provided"
        assert fake_provider.calls == []

    @pytest.mark.asyncio
    async def test_submit_image_reaches_confirmation(self, meal_session, sample_jpeg):
        await meal_session.submit_image(sample_jpeg)

        assert meal_session.state == PipelineState.CONFIRMATION
        assert meal_session.identification.detected_ingredients == (
            SAMPLE_IDENTIFICATION["detected_ingredients"]
        )
        assert meal_session.context == (
            "Detected: grilled chicken, white rice, broccoli. User Notes: "
        )

    @pytest.mark.asyncio
    async def test_identify_failure_keeps_image(self, meal_session, fake_provider, sample_jpeg):
        fake_provider.set_error(ServiceUnavailableError("AI service temporarily unavailable"))

        await meal_session.submit_image(sample_jpeg)

        assert meal_session.state == PipelineState.IDLE
        assert meal_session.error == "AI service temporarily unavailable"
        assert meal_session.image == sample_jpeg
        assert meal_session.identification is None

    @pytest.mark.asyncio
    async def test_retry_after_identify_failure(self, meal_session, fake_provider, sample_jpeg):
        fake_provider.queue_response("not json")
        await meal_session.submit_image(sample_jpeg)
        assert meal_session.error is not None

        await meal_session.identify()

        assert meal_session.state == PipelineState.CONFIRMATION
        assert meal_session.error is None
        assert len(fake_provider.calls) == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_restores_state(self, meal_session, fake_provider, sample_jpeg):
        fake_provider.queue_response(RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await meal_session.submit_image(sample_jpeg)

        assert meal_session.state == PipelineState.IDLE

    @pytest.mark.asyncio
    async def test_select_image_rejected_outside_idle(self, meal_session, sample_jpeg):
        await _to_confirmation(meal_session, sample_jpeg)

        assert meal_session.select_image(b"other") is False
        assert meal_session.image == sample_jpeg

    @pytest.mark.asyncio
    async def test_identify_ignored_in_confirmation(
        self, meal_session, fake_provider, sample_jpeg
    ):
        await _to_confirmation(meal_session, sample_jpeg)

        assert await meal_session.identify() is False
        assert len(fake_provider.calls) == 1


# =============================================================================
# Confirmation Edits
# =============================================================================


class TestConfirmationEdits:

    def test_edits_rejected_while_idle(self, meal_session):
        assert meal_session.set_notes("extra cheese") is False
        assert meal_session.set_goal("roast") is False
        assert meal_session.user_notes == ""
        assert meal_session.goal == AnalysisGoal.HEALTH

    @pytest.mark.asyncio
    async def test_notes_flow_into_context(self, meal_session, sample_jpeg):
        await _to_confirmation(meal_session, sample_jpeg)

        assert meal_session.set_notes("cooked in butter") is True

        assert meal_session.context.endswith("User Notes: cooked in butter")

    @pytest.mark.asyncio
    async def test_set_goal_validates(self, meal_session, sample_jpeg):
        await _to_confirmation(meal_session, sample_jpeg)

        with pytest.raises(ValueError):
            meal_session.set_goal("bulking")

        assert meal_session.set_goal("cooking") is True
        assert meal_session.goal == AnalysisGoal.COOKING


# =============================================================================
# Analysis
# =============================================================================


class TestAnalysis:

    @pytest.mark.asyncio
    async def test_confirm_reaches_result(self, meal_session, fake_provider, sample_jpeg):
        await _to_confirmation(meal_session, sample_jpeg)
        meal_session.set_notes("large portion")
        meal_session.set_goal(AnalysisGoal.ROAST)

        assert await meal_session.confirm() is True

        assert meal_session.state == PipelineState.RESULT
        assert meal_session.analysis.food_name == SAMPLE_ANALYSIS["food_name"]
        prompt = fake_provider.prompts[1]
        assert "User Notes: large portion" in prompt
        assert GOAL_TONES[AnalysisGoal.ROAST] in prompt

    @pytest.mark.asyncio
    async def test_confirm_ignored_while_idle(self, meal_session, fake_provider):
        assert await meal_session.confirm() is False
        assert fake_provider.calls == []

    @pytest.mark.asyncio
    async def test_analysis_failure_preserves_progress(
        self, meal_session, fake_provider, sample_jpeg
    ):
        await _to_confirmation(meal_session, sample_jpeg)
        meal_session.set_notes("no dressing")
        meal_session.set_goal("cooking")
        identification = meal_session.identification
        fake_provider.set_error(ServiceUnavailableError("AI service error"))

        await meal_session.confirm()

        assert meal_session.state == PipelineState.CONFIRMATION
        assert meal_session.error == "AI service error"
        assert meal_session.identification == identification
        assert meal_session.user_notes == "no dressing"
        assert meal_session.goal == AnalysisGoal.COOKING
        assert meal_session.image == sample_jpeg

    @pytest.mark.asyncio
    async def test_retry_after_malformed_analysis(self, meal_session, fake_provider, sample_jpeg):
        await _to_confirmation(meal_session, sample_jpeg)
        fake_provider.queue_response(json.dumps({"food_name": "Soup"}))

        await meal_session.confirm()
        assert meal_session.state == PipelineState.CONFIRMATION
        assert meal_session.error

        await meal_session.confirm()

        assert meal_session.state == PipelineState.RESULT
        assert meal_session.error is None

    @pytest.mark.asyncio
    async def test_confirm_while_analyzing_is_noop(
        self, meal_session, fake_provider, sample_jpeg
    ):
        await _to_confirmation(meal_session, sample_jpeg)
        fake_provider.gate = asyncio.Event()

        task = asyncio.create_task(meal_session.confirm())
        await asyncio.sleep(0)
        assert meal_session.state == PipelineState.ANALYZING
        assert meal_session.is_busy

        assert await meal_session.confirm() is False
        assert meal_session.set_notes("too late") is False

        fake_provider.gate.set()
        await task

        assert meal_session.state == PipelineState.RESULT
        assert len(fake_provider.calls) == 2

    @pytest.mark.asyncio
    async def test_clear_during_analysis_drops_result(
        self, meal_session, fake_provider, sample_jpeg
    ):
        await _to_confirmation(meal_session, sample_jpeg)
        fake_provider.gate = asyncio.Event()

        task = asyncio.create_task(meal_session.confirm())
        await asyncio.sleep(0)
        meal_session.clear()
        fake_provider.gate.set()
        await task

        assert meal_session.state == PipelineState.IDLE
        assert meal_session.analysis is None
        assert meal_session.image is None

    @pytest.mark.asyncio
    async def test_clear_during_failed_identification(
        self, meal_session, fake_provider, sample_jpeg
    ):
        fake_provider.gate = asyncio.Event()
        fake_provider.set_error(MalformedResponse("bad"))

        task = asyncio.create_task(meal_session.submit_image(sample_jpeg))
        await asyncio.sleep(0)
        meal_session.clear()
        fake_provider.gate.set()
        await task

        assert meal_session.state == PipelineState.IDLE
        assert meal_session.error is None


# =============================================================================
# Logging and Reset
# =============================================================================


class TestLogAndClear:

    @pytest.mark.asyncio
    async def test_log_meal(self, meal_session, history_store, sample_jpeg):
        await _to_result(meal_session, sample_jpeg)

        entry = meal_session.log_meal()

        assert entry.analysis.food_name == SAMPLE_ANALYSIS["food_name"]
        assert entry.image.startswith("data:image/jpeg;base64,")
        assert meal_session.state == PipelineState.IDLE
        assert meal_session.analysis is None
        assert [e.id for e in history_store.load()] == [entry.id]

    def test_log_meal_outside_result(self, meal_session, history_store):
        assert meal_session.log_meal() is None
        assert history_store.load() == []

    @pytest.mark.asyncio
    async def test_log_meal_without_history(self, vision_service, sample_jpeg):
        session = MealSession(vision_service)
        await _to_result(session, sample_jpeg)

        assert session.log_meal() is None
        assert session.state == PipelineState.IDLE

    @pytest.mark.asyncio
    async def test_clear_resets_everything(self, meal_session, sample_jpeg):
        await _to_result(meal_session, sample_jpeg)

        meal_session.clear()

        data = meal_session.to_dict()
        assert data["state"] == "idle"
        assert data["has_image"] is False
        assert data["identification"] is None
        assert data["analysis"] is None
        assert data["user_notes"] == ""
        assert data["goal"] == "health"


class TestSessionRegistry:

    def test_create_get_discard(self, vision_service, history_store):
        registry = SessionRegistry(vision_service, history=history_store)

        session = registry.create()

        assert registry.get(session.id) is session
        assert len(registry) == 1
        assert session.history is history_store
        assert registry.discard(session.id) is True
        assert registry.get(session.id) is None
        assert registry.discard(session.id) is False
        assert len(registry) == 0
