"""In-memory response cache with time-based expiry.

Eviction is lazy: nothing sweeps the map in the background. A read that finds
an entry older than the timeout deletes it and reports a miss.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class CacheEntry(BaseModel):
    """A cached API response."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: Any
    stored_at: float  # clock reading in seconds


@runtime_checkable
class CacheBackend(Protocol):
    """Storage for decoded API responses keyed by request."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def clear(self) -> None: ...

    def __len__(self) -> int: ...


class ResponseCache:
    """Maps request keys to :class:`CacheEntry` objects.

    An entry is stale once ``now - stored_at > timeout_ms``.
    """

    def __init__(
        self,
        timeout_ms: int = 300_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout_ms = timeout_ms
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        age_ms = (self._clock() - entry.stored_at) * 1000
        if age_ms > self.timeout_ms:
            del self._entries[key]
            logger.debug("cache entry expired: %s (age %.0f ms)", key, age_ms)
            return None
        return entry.value

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class NullCache:
    """A cache that never stores anything."""

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any) -> None:
        pass

    def clear(self) -> None:
        pass

    def __len__(self) -> int:
        return 0
