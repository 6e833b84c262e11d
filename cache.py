"""
In-memory caching layer

Purpose: avoid repeated calls to the remote suggestion API while the user is typing.

Input: (kind, query) keys and the remote terms fetched for them.

Output: cached terms or None when missing/expired.

Example: get_cached_suggestions("medication", "warf") -> ["Warfarin (Oral Pill)", ...]
"""
import threading
import time
from typing import Any, Dict, Hashable, List, Optional, Tuple

import config


class TTLCache:
    """Thread-safe dict with per-entry expiry."""

    def __init__(self, ttl_seconds: float, max_entries: int = 512):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._data: Dict[Hashable, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if time.monotonic() >= expires_at:
                del self._data[key]
                return None
            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            if len(self._data) >= self.max_entries and key not in self._data:
                # drop the entry closest to expiry
                oldest = min(self._data, key=lambda k: self._data[k][0])
                del self._data[oldest]
            self._data[key] = (time.monotonic() + self.ttl_seconds, value)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


_suggestions = TTLCache(config.SUGGEST_CACHE_TTL)


def _key(kind: str, query: str) -> Tuple[str, str]:
    return kind, query.strip().lower()


def get_cached_suggestions(kind: str, query: str) -> Optional[List[str]]:
    return _suggestions.get(_key(kind, query))


def save_cached_suggestions(kind: str, query: str, terms: List[str]) -> None:
    _suggestions.set(_key(kind, query), list(terms))


def clear_suggestions() -> None:
    _suggestions.clear()
