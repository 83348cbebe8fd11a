"""Freshness-window cache for live model listings."""

from __future__ import annotations

import time
from typing import Callable, List, Optional

MODEL_CACHE_TTL = 60 * 60  # one hour


class ModelCache:
    """Holds one provider's most recent live model list.

    An entry older than ``ttl`` seconds reads as absent. Storing replaces
    the entry; nothing else clears it, so a failed refresh leaves the old
    entry untouched.
    """

    def __init__(self, ttl: float = MODEL_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._models: Optional[List[str]] = None
        self._fetched_at: Optional[float] = None

    @property
    def fetched_at(self) -> Optional[float]:
        return self._fetched_at

    def is_fresh(self) -> bool:
        if self._models is None or self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self.ttl

    def get(self) -> Optional[List[str]]:
        """Return a copy of the cached list if still fresh, else None."""
        if not self.is_fresh():
            return None
        return list(self._models or [])

    def store(self, models: List[str]) -> None:
        self._models = list(models)
        self._fetched_at = self._clock()

    def __repr__(self) -> str:
        count = len(self._models) if self._models is not None else 0
        return f"ModelCache(models={count}, fresh={self.is_fresh()})"


__all__ = ["ModelCache", "MODEL_CACHE_TTL"]
