"""
FastAPI dependencies for the pipeline services.

Services are built once per process from settings. Tests replace them via
app.dependency_overrides, so nothing here reads global state at import time.
"""
from functools import lru_cache

from snapcoach.services.history_store import HistoryStore
from snapcoach.services.pipeline import SessionRegistry
from snapcoach.services.providers import get_vision_provider
from snapcoach.services.vision_service import VisionService


@lru_cache
def get_vision_service() -> VisionService:
    return VisionService(get_vision_provider())


@lru_cache
def get_history_store() -> HistoryStore:
    return HistoryStore()


@lru_cache
def get_session_registry() -> SessionRegistry:
    return SessionRegistry(get_vision_service(), history=get_history_store())
