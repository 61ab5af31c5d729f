"""Trust windows for local cache entries."""

import threading
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Union


def cache_key(path: Union[str, Path]) -> str:
    """Normalize a full local path into a freshness key.

    Keys are lower-cased so case-varying request paths and case-insensitive
    filesystems collapse onto one entry, independent of the host platform.
    """
    return str(path).lower()


class FreshnessTracker:
    """Maps cache keys to the instant their local copy stops being trusted.

    Thread Safety:
        Reads and writes go through one lock. Concurrent refreshes of the
        same key are last-writer-wins.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """Initialize tracker.

        Args:
            clock: Returns the current time in epoch seconds
        """
        self._clock = clock
        self._expires: Dict[str, float] = {}
        self._lock = threading.Lock()

    def is_fresh(self, key: str) -> bool:
        """True iff key has a recorded expiry strictly in the future."""
        with self._lock:
            expires_at = self._expires.get(key)
        return expires_at is not None and self._clock() < expires_at

    def mark_fresh(self, key: str, ttl_seconds: float) -> float:
        """Start a new trust window for key, replacing any previous one.

        Returns:
            The new expiry time in epoch seconds
        """
        expires_at = self._clock() + ttl_seconds
        with self._lock:
            self._expires[key] = expires_at
        return expires_at

    def expires_at(self, key: str) -> Optional[float]:
        with self._lock:
            return self._expires.get(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._expires)
