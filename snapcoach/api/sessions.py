"""API endpoints for the interactive identify -> confirm -> analyze pipeline."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from snapcoach.api.dependencies import get_session_registry
from snapcoach.models.analysis_goal import AnalysisGoal
from snapcoach.services.errors import InputError
from snapcoach.services.image_service import compress_image
from snapcoach.services.pipeline import MealSession, PipelineState, SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SessionUpdate(BaseModel):
    notes: Optional[str] = None
    goal: Optional[AnalysisGoal] = None


def _get_session(session_id: str, registry: SessionRegistry) -> MealSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _conflict(session: MealSession, action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "error": f"Cannot {action} while {session.state.value}",
            "state": session.state.value,
        },
    )


async def _read_compressed(image: UploadFile) -> bytes:
    """Read an upload and compress it off the event loop."""
    data = await image.read()
    try:
        return await run_in_threadpool(compress_image, data)
    except InputError as e:
        logger.warning("Rejected upload %s: %s", image.filename, e)
        raise HTTPException(status_code=400, detail=str(e))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    image: UploadFile = File(...),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """
    Start a session from a meal photo and run identification.

    Identification errors do not fail the request: the session comes back
    idle with `error` set and the image kept for retry.
    """
    compressed = await _read_compressed(image)
    session = registry.create()
    await session.submit_image(compressed)
    return session.to_dict()


@router.get("/{session_id}")
async def get_session(
    session_id: str, registry: SessionRegistry = Depends(get_session_registry)
):
    return _get_session(session_id, registry).to_dict()


@router.post("/{session_id}/image")
async def replace_image(
    session_id: str,
    image: UploadFile = File(...),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Attach a new photo to an idle session and run identification."""
    session = _get_session(session_id, registry)
    compressed = await _read_compressed(image)
    if not await session.submit_image(compressed):
        raise _conflict(session, "select an image")
    return session.to_dict()


@router.post("/{session_id}/identify")
async def retry_identification(
    session_id: str, registry: SessionRegistry = Depends(get_session_registry)
):
    """Re-run identification on the image already attached to an idle session."""
    session = _get_session(session_id, registry)
    if not await session.identify():
        raise _conflict(session, "identify")
    return session.to_dict()


@router.patch("/{session_id}")
async def update_session(
    session_id: str,
    update: SessionUpdate,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Edit notes and/or goal during confirmation."""
    session = _get_session(session_id, registry)
    if update.notes is not None and not session.set_notes(update.notes):
        raise _conflict(session, "edit notes")
    if update.goal is not None and not session.set_goal(update.goal):
        raise _conflict(session, "change goal")
    return session.to_dict()


@router.post("/{session_id}/confirm")
async def confirm_session(
    session_id: str, registry: SessionRegistry = Depends(get_session_registry)
):
    """
    Confirm the identification and run analysis.

    On analysis failure the session returns to confirmation with `error` set.
    """
    session = _get_session(session_id, registry)
    if not await session.confirm():
        raise _conflict(session, "confirm")
    return session.to_dict()


@router.post("/{session_id}/log")
async def log_session_meal(
    session_id: str, registry: SessionRegistry = Depends(get_session_registry)
):
    """Store the result in meal history and end the session."""
    session = _get_session(session_id, registry)
    if session.state != PipelineState.RESULT:
        raise _conflict(session, "log meal")
    entry = session.log_meal()
    registry.discard(session_id)
    return {
        "entry": entry.model_dump(mode="json") if entry else None,
        "session": session.to_dict(),
    }


@router.delete("/{session_id}/image")
async def clear_session(
    session_id: str, registry: SessionRegistry = Depends(get_session_registry)
):
    """Drop the photo and all progress; the session goes back to idle."""
    session = _get_session(session_id, registry)
    session.clear()
    return session.to_dict()


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str, registry: SessionRegistry = Depends(get_session_registry)
):
    """Abandon a session and release its image."""
    session = _get_session(session_id, registry)
    session.clear()
    registry.discard(session_id)
