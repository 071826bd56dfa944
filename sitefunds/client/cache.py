from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Iterable


@dataclass
class CacheEntry:
    data: Any
    fetched_at: float


class QueryCache:
    """Key-addressed response cache.

    Keys are request paths (``/api/projects``). Entries older than their stale
    time are refetched on the next read; mutations drop entries through
    ``invalidate`` using path prefixes.
    """

    def __init__(self, *, default_stale_seconds: float = 0.0, clock: Callable[[], float] = time.monotonic):
        self._entries: dict[str, CacheEntry] = {}
        self._lock = Lock()
        self._clock = clock
        self.default_stale_seconds = default_stale_seconds

    def get(self, key: str, *, stale_seconds: float | None = None) -> CacheEntry | None:
        max_age = self.default_stale_seconds if stale_seconds is None else stale_seconds
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.fetched_at >= max_age:
            return None
        return entry

    def set(self, key: str, data: Any) -> CacheEntry:
        entry = CacheEntry(data=data, fetched_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        return entry

    def invalidate(self, prefixes: Iterable[str]) -> list[str]:
        """Drop every key equal to or nested under one of ``prefixes``."""
        prefixes = tuple(prefixes)
        dropped: list[str] = []
        with self._lock:
            for key in list(self._entries):
                if any(key == p or key.startswith(p.rstrip("/") + "/") or key.startswith(p + "?") for p in prefixes):
                    del self._entries[key]
                    dropped.append(key)
        return dropped

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)
