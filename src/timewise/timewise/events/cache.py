from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from .model import EventRecord


@dataclass(frozen=True)
class _Entry:
    events: tuple[EventRecord, ...]
    stored_at: float


class ListingCache:
    """Per-user cache of the last event listing.

    Writes only mark an entry stale (``invalidate``); the next read goes back
    to the store. ``ttl_seconds=0`` disables caching.

    Every ``invalidate`` bumps the user's generation. A reader takes
    ``generation(user_id)`` before querying and hands it to ``put``; a listing
    read across a write is then dropped instead of cached.
    """

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic):
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._generations: dict[str, int] = {}

    def generation(self, user_id: str) -> int:
        return self._generations.get(user_id, 0)

    def get(self, user_id: str) -> Optional[list[EventRecord]]:
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self._ttl:
            self._entries.pop(user_id, None)
            return None
        return list(entry.events)

    def put(self, user_id: str, events: list[EventRecord], *, generation: Optional[int] = None) -> bool:
        """Cache ``events``; returns False when skipped (disabled, or written since ``generation``)."""
        if self._ttl <= 0:
            return False
        if generation is not None and generation != self.generation(user_id):
            return False
        self._entries[user_id] = _Entry(events=tuple(events), stored_at=self._clock())
        return True

    def invalidate(self, user_id: str) -> None:
        self._generations[user_id] = self.generation(user_id) + 1
        self._entries.pop(user_id, None)
