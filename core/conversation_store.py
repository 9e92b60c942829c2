"""
core/conversation_store.py
--------------------------
Time-indexed cache for chat conversation state.

Each entry carries an idle deadline. `put` restarts the deadline, `get` drops
entries that are past it, and `sweep` removes every expired entry at once; the
backend runs `sweep` on a timer so idle conversations do not accumulate.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple


class ConversationStore:
    """Thread-safe key/value store with per-entry idle expiry."""

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
        name: str = "conversations",
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return the live value for `key`, or None if missing/expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: Any) -> None:
        """Store `value` and restart its idle window."""
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def evict(self, key: str) -> bool:
        """Drop `key`; True if something was removed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def sweep(self) -> int:
        """Remove all expired entries and return how many were dropped."""
        now = self._clock()
        with self._lock:
            expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
