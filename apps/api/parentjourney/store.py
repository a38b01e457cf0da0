"""Durable onboarding record, one per browser profile."""
from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Protocol, Union

from pydantic import ValidationError

from .db import delete_profile_value, read_profile_value, write_profile_value
from .schemas import OnboardingPatch, OnboardingRecord, utc_now

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "parent-journey-onboarding"

# Flags that only reset() may clear.
MONOTONIC_FIELDS = ("has_visited", "has_signed_up", "has_completed_tour", "skip_tour_requested")


class OnboardingStoreError(RuntimeError):
    """Raised when the persistence layer cannot be written."""


class KeyValueBackend(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryBackend:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


class SqliteProfileBackend:
    """Key-value space of one browser profile in the profile_storage table."""

    def __init__(self, profile_id: str) -> None:
        self.profile_id = profile_id

    def get(self, key: str) -> Optional[str]:
        return read_profile_value(self.profile_id, key)

    def set(self, key: str, value: str) -> None:
        write_profile_value(self.profile_id, key, value)

    def delete(self, key: str) -> None:
        delete_profile_value(self.profile_id, key)


class OnboardingStore:
    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._backend = backend
        self._storage_key = storage_key
        self._clock = clock
        self._lock = threading.RLock()

    def _default_record(self) -> OnboardingRecord:
        return OnboardingRecord(last_visit_date=self._clock())

    def load(self) -> OnboardingRecord:
        """Return the stored record, or the all-false default when absent or unreadable."""
        with self._lock:
            try:
                raw = self._backend.get(self._storage_key)
            except (sqlite3.Error, OSError) as exc:
                logger.warning(
                    "onboarding record unreadable, using defaults",
                    extra={"storage_key": self._storage_key, "error": str(exc)},
                )
                return self._default_record()
            if raw is None:
                return self._default_record()
            try:
                return OnboardingRecord.model_validate_json(raw)
            except ValidationError:
                logger.warning(
                    "onboarding record corrupt, using defaults",
                    extra={"storage_key": self._storage_key},
                )
                return self._default_record()

    def save(self, patch: Union[OnboardingPatch, Dict[str, Any]]) -> OnboardingRecord:
        """Merge ``patch`` into the stored record, stamp lastVisitDate and persist it."""
        if not isinstance(patch, OnboardingPatch):
            patch = OnboardingPatch.model_validate(patch)
        updates = patch.model_dump(exclude_none=True)
        with self._lock:
            current = self.load()
            for field in MONOTONIC_FIELDS:
                if getattr(current, field) and updates.get(field) is False:
                    logger.debug("ignoring attempt to clear %s", field)
                    updates.pop(field)
            updates["last_visit_date"] = self._clock()
            merged = current.model_copy(update=updates)
            try:
                self._backend.set(self._storage_key, merged.model_dump_json(by_alias=True))
            except (sqlite3.Error, OSError) as exc:
                raise OnboardingStoreError(f"Could not save onboarding record: {exc}") from exc
            return merged

    def reset(self) -> None:
        with self._lock:
            try:
                self._backend.delete(self._storage_key)
            except (sqlite3.Error, OSError) as exc:
                raise OnboardingStoreError(f"Could not reset onboarding record: {exc}") from exc
