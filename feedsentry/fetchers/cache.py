from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..models import FeedScope, NewsItem
from ..models.feed import DEFAULT_LANG
from ..storage import DurableCache
from ..utils.logging import get_logger

logger = get_logger("fs.fetchers.cache")

CACHE_TTL_SECONDS = 10 * 60
MAX_CACHE_ENTRIES = 100


@dataclass(frozen=True, slots=True)
class CacheEntry:
    items: Sequence[NewsItem]
    timestamp: float


def _to_serializable(items: Sequence[NewsItem]) -> List[Dict[str, Any]]:
    return [item.to_dict() for item in items]


def _from_serializable(rows: Any) -> List[NewsItem]:
    if not isinstance(rows, list):
        raise ValueError(f"Expected a list of items, got {type(rows).__name__}")
    return [NewsItem.from_dict(row) for row in rows]


class FeedCache:
    """Two-tier feed cache: a bounded in-memory table over a durable store.

    In-memory entries are keyed per scope and replaced wholesale on every
    successful fetch. The durable tier is written through on a best-effort
    basis and only consulted as a fallback.
    """

    def __init__(
        self,
        durable: Optional[DurableCache] = None,
        *,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        max_entries: int = MAX_CACHE_ENTRIES,
        durable_ttl_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.durable = durable
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.durable_ttl_seconds = durable_ttl_seconds
        self._clock = clock
        self._entries: Dict[FeedScope, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, scope: FeedScope) -> Optional[CacheEntry]:
        return self._entries.get(scope)

    def get_fresh(self, scope: FeedScope) -> Optional[CacheEntry]:
        entry = self._entries.get(scope)
        if entry is not None and self._clock() - entry.timestamp < self.ttl_seconds:
            return entry
        return None

    def put(self, scope: FeedScope, items: Sequence[NewsItem]) -> CacheEntry:
        entry = CacheEntry(items=list(items), timestamp=self._clock())
        self._entries[scope] = entry
        return entry

    def needs_sweep(self) -> bool:
        return len(self._entries) > self.max_entries / 2

    def sweep(self) -> int:
        """Drop stale entries, then the globally oldest ones until within budget."""
        now = self._clock()
        before = len(self._entries)
        for scope in [s for s, e in self._entries.items() if now - e.timestamp > self.ttl_seconds * 2]:
            del self._entries[scope]

        overflow = len(self._entries) - self.max_entries
        if overflow > 0:
            oldest = sorted(self._entries.items(), key=lambda kv: kv[1].timestamp)[:overflow]
            for scope, _ in oldest:
                del self._entries[scope]

        removed = before - len(self._entries)
        if removed:
            logger.debug("Cache sweep removed %d entries (%d remain)", removed, len(self._entries))
        return removed

    async def _read_durable(self, key: str) -> Optional[List[NewsItem]]:
        try:
            raw = await self.durable.get(key)
        except Exception as exc:  # noqa: BLE001 - storage errors count as a miss
            logger.warning("Durable cache read failed for %s: %s", key, exc)
            return None
        if not raw:
            return None
        try:
            items = _from_serializable(raw)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Discarding malformed durable cache entry %s: %s", key, exc)
            return None
        return items or None

    async def load_durable(self, scope: FeedScope) -> Optional[List[NewsItem]]:
        if self.durable is None:
            return None
        items = await self._read_durable(scope.durable_key)
        if items:
            return items
        # Installs that predate per-language scoping wrote English feeds unscoped
        if scope.lang != DEFAULT_LANG:
            return None
        return await self._read_durable(scope.legacy_durable_key)

    async def store_durable(self, scope: FeedScope, items: Sequence[NewsItem]) -> None:
        if self.durable is None:
            return
        try:
            await self.durable.set(scope.durable_key, _to_serializable(items), self.durable_ttl_seconds)
        except Exception as exc:  # noqa: BLE001 - write-through is best effort
            logger.warning("Durable cache write failed for %s: %s", scope, exc)
