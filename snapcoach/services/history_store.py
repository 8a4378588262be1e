"""
Local meal history storage.

History lives in a small JSON document on disk under one fixed, namespaced
key, newest entry first:

    {
        "snapcoach_history": {
            "version": 2,
            "entries": [ {MealEntry}, ... ]
        }
    }

Older formats are migrated on load instead of being discarded. Version 1
stored a bare list of entries under "snapcoach_history_v1".
"""

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from snapcoach.config import settings
from snapcoach.models.meal_entry import MealEntry
from snapcoach.services.ai_schemas import FoodAnalysis

logger = logging.getLogger(__name__)

STORAGE_KEY = "snapcoach_history"
LEGACY_STORAGE_KEY = "snapcoach_history_v1"
SCHEMA_VERSION = 2

_entries_adapter = TypeAdapter(list[MealEntry])


class HistoryStore:
    """
    Append-only list of logged meals.

    Every operation is a synchronous read-modify-write of the whole file.
    There is no protection against concurrent writers; one process owns the file.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or settings.history_path)

    def load(self) -> list[MealEntry]:
        """Return all entries, newest first. Unreadable data yields an empty list."""
        document = self._read_document()
        payload = document.get(STORAGE_KEY)
        migrated = False

        if payload is None and LEGACY_STORAGE_KEY in document:
            payload = self._migrate_v1(document[LEGACY_STORAGE_KEY])
            migrated = payload is not None

        if payload is None:
            return []

        try:
            entries = _entries_adapter.validate_python(payload.get("entries", []))
        except (AttributeError, ValidationError) as e:
            logger.error("Failed to parse history at %s: %s", self.path, e)
            return []

        if migrated:
            self._write_entries(entries)
        return entries

    def append(self, entry: MealEntry) -> MealEntry:
        """Store entry at the front of the history."""
        entries = [entry, *self.load()]
        self._write_entries(entries)
        return entry

    def log_meal(self, analysis: FoodAnalysis, image: str) -> MealEntry:
        """Create a MealEntry for a completed analysis and append it."""
        entry = MealEntry(
            id=uuid.uuid4().hex,
            timestamp=int(time.time() * 1000),
            image=image,
            analysis=analysis,
        )
        logger.info("Logging meal %s (%s)", entry.id, analysis.food_name)
        return self.append(entry)

    def clear(self) -> None:
        """Remove all entries."""
        if self.path.exists():
            self.path.unlink()
        logger.info("Cleared meal history at %s", self.path)

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _read_document(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read history at %s: %s", self.path, e)
            return {}
        if not isinstance(document, dict):
            logger.error("Unexpected history format at %s, ignoring", self.path)
            return {}
        return document

    def _write_entries(self, entries: list[MealEntry]) -> None:
        document = {
            STORAGE_KEY: {
                "version": SCHEMA_VERSION,
                "entries": [entry.model_dump(mode="json") for entry in entries],
            }
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(document), encoding="utf-8")

    def _migrate_v1(self, legacy) -> Optional[dict]:
        """Version 1 was a bare list of entries."""
        if not isinstance(legacy, list):
            logger.error("Legacy history at %s is not a list, ignoring", self.path)
            return None
        logger.info("Migrating %d legacy history entries at %s", len(legacy), self.path)
        return {"version": SCHEMA_VERSION, "entries": legacy}
