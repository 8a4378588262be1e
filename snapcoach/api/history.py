"""API endpoints for logged meal history."""

from fastapi import APIRouter, Depends, status

from snapcoach.api.dependencies import get_history_store
from snapcoach.models.meal_entry import MealEntry
from snapcoach.services.history_store import HistoryStore

router = APIRouter(prefix="/history", tags=["history"])


@router.get("", response_model=list[MealEntry])
async def list_history(history: HistoryStore = Depends(get_history_store)):
    """All logged meals, newest first."""
    return history.load()


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(history: HistoryStore = Depends(get_history_store)):
    history.clear()
