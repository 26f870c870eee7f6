"""
Read-through cache for fetched prayer ranges.
Purely an optimization: a cache miss always falls back to the storage collaborator.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Protocol, Tuple

logger = logging.getLogger("prayer_tracker.cache")


class StatsCache(Protocol):
    """Capability passed explicitly to the stats service"""

    def get(self, key: Hashable) -> Optional[Any]:
        ...

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        ...


class NullCache:
    """Cache that never stores anything"""

    def get(self, key: Hashable) -> Optional[Any]:
        return None

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        return None


class TTLCache:
    """In-memory cache with per-entry expiry, safe to share across request threads"""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            expires_at, value = entry
            if self._clock() >= expires_at:
                self._entries.pop(key, None)
                return None
            return value

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        if ttl <= 0:
            return
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._entries[key] = (now + ttl, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def invalidate_user(self, user_id: str) -> None:
        """Drop every cached range for a user (keys start with the user id)"""
        with self._lock:
            stale = [k for k in self._entries if isinstance(k, tuple) and k and k[0] == user_id]
            for key in stale:
                self._entries.pop(key, None)
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached ranges for user {user_id}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
