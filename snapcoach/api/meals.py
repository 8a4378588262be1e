"""API endpoints for one-shot meal analysis."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from snapcoach.api.dependencies import get_vision_service
from snapcoach.services.ai_schemas import FoodAnalysis
from snapcoach.services.errors import (
    InputError,
    MalformedResponse,
    ProviderError,
    RateLimitError,
    ServiceUnavailableError,
)
from snapcoach.services.image_service import compress_image
from snapcoach.services.vision_service import VisionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/meals", tags=["meals"])


@router.post("/analyze-direct", response_model=FoodAnalysis)
async def analyze_direct(
    image: UploadFile = File(...),
    vision_service: VisionService = Depends(get_vision_service),
):
    """
    Analyze a meal photo in one step, skipping identification.

    Uses the health goal and a fixed placeholder context. Kept for clients
    that predate the interactive session flow.
    """
    data = await image.read()

    try:
        compressed = await run_in_threadpool(compress_image, data)
        return await vision_service.analyze_direct(compressed)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RateLimitError:
        raise HTTPException(
            status_code=429, detail="Too many requests. Please wait a minute and try again."
        )
    except ServiceUnavailableError:
        raise HTTPException(
            status_code=503,
            detail="AI service is temporarily unavailable. Please try again in a moment.",
        )
    except ProviderError as e:
        raise HTTPException(status_code=503, detail=f"Analysis failed: {e.message}")
    except MalformedResponse as e:
        logger.error("Unparseable analysis response: %r", e.raw_text)
        raise HTTPException(
            status_code=502, detail="Failed to analyze image. Please try again."
        )
