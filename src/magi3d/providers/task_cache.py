"""Time-bounded per-task metadata store used by provider adapters."""

from __future__ import annotations

import time
from typing import Callable, Generic, TypeVar

V = TypeVar("V")

DEFAULT_TTL_SECONDS = 24 * 60 * 60


class TaskMetadataCache(Generic[V]):
    """Map task ids to adapter metadata, forgetting entries after ``ttl_seconds``.

    All operations are synchronous, so interleaved coroutines on one event loop
    never observe a partially applied update.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, V]] = {}

    def set(self, task_id: str, value: V) -> None:
        now = self._clock()
        self._evict(now)
        self._entries[task_id] = (now + self._ttl, value)

    def get(self, task_id: str) -> V | None:
        entry = self._entries.get(task_id)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[task_id]
            return None
        return value

    def pop(self, task_id: str) -> V | None:
        value = self.get(task_id)
        self._entries.pop(task_id, None)
        return value

    def _evict(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    def __contains__(self, task_id: object) -> bool:
        return isinstance(task_id, str) and self.get(task_id) is not None

    def __len__(self) -> int:
        self._evict(self._clock())
        return len(self._entries)


__all__ = ["TaskMetadataCache", "DEFAULT_TTL_SECONDS"]
