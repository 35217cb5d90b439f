"""
Permission Cache - per-user resolved permissions with bounded staleness

Entries expire at read time once they are TTL seconds old; there is no
background sweep. The lock only guards the dictionary operation itself, so
lookups for different users never wait on a store query.

A resolution that was loaded while an invalidation happened must not be
stored: callers take a token() before reading the store and hand it to put(),
which drops the value if the user (or the whole cache) was invalidated since.
"""

import threading
import time
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple


DEFAULT_TTL_SECONDS = 300  # 5 minutes

Token = Tuple[int, int]


class CacheEntry(NamedTuple):
    """A resolved value and the clock reading when it was stored"""
    resolution: Any
    timestamp: float


class PermissionCache:
    """Thread-safe, TTL-bounded cache keyed by user id"""

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._generation = 0
        self._user_generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    def _token(self, user_id: str) -> Token:
        return (self._generation, self._user_generations.get(user_id, 0))

    def _is_valid(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp < self.ttl

    def get(self, user_id: str) -> Optional[Any]:
        """Get the cached resolution for a user, or None if missing or expired"""
        with self._lock:
            entry = self._entries.get(user_id)
        if entry is None or not self._is_valid(entry, self._clock()):
            return None
        return entry.resolution

    def token(self, user_id: str) -> Token:
        """Snapshot of the invalidation state for a user, taken before a store read"""
        with self._lock:
            return self._token(user_id)

    def put(self, user_id: str, resolution: Any, token: Optional[Token] = None) -> bool:
        """
        Store a resolution for a user, replacing any previous entry.

        Returns False without storing when token is given and the user was
        invalidated after it was taken.
        """
        entry = CacheEntry(resolution, self._clock())
        with self._lock:
            if token is not None and token != self._token(user_id):
                return False
            self._entries[user_id] = entry
        return True

    def invalidate(self, user_id: str):
        """Drop one user's entry (call on role or custom role change)"""
        with self._lock:
            self._entries.pop(user_id, None)
            self._user_generations[user_id] = self._user_generations.get(user_id, 0) + 1

    def invalidate_all(self):
        """Drop every entry (call on custom role permission edits)"""
        with self._lock:
            self._entries.clear()
            self._user_generations.clear()
            self._generation += 1

    def __contains__(self, user_id: str) -> bool:
        return self.get(user_id) is not None

    def __len__(self) -> int:
        """Number of entries that are still valid"""
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
        return sum(1 for entry in entries if self._is_valid(entry, now))
