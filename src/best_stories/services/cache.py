"""Simple cache abstractions."""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: float) -> None:
        """Store a cached value with a TTL in seconds."""

    def try_get(self, key: str) -> tuple[bool, object | None]:
        """Return whether a live value exists, along with the value."""

    def delete(self, key: str) -> None:
        """Drop a cached value if present."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


class InMemoryCache(Cache):
    """Thread-safe in-memory cache with absolute per-entry expiry.

    Expired entries are treated exactly like missing ones and are dropped
    lazily on read. There is no size bound.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        _, value = self.try_get(key)
        return value

    def try_get(self, key: str) -> tuple[bool, object | None]:
        """Return ``(True, value)`` for a live entry, else ``(False, None)``."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False, None
            if self._clock() >= entry.expires_at:
                self._entries.pop(key, None)
                return False, None
            return True, entry.value

    def set(self, key: str, value: object, ttl_seconds: float) -> None:
        """Store a cached value with a TTL, replacing any previous entry."""
        expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        with self._lock:
            self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> None:
        """Remove a cached value."""
        with self._lock:
            self._entries.pop(key, None)
