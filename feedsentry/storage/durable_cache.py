from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

from ..utils.logging import get_logger

logger = get_logger("fs.storage.durable_cache")


class DurableCache(Protocol):
    """Opaque key/value store; values must be JSON serializable."""

    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ...


class MemoryCache:
    """Process-local store with the ``DurableCache`` interface.

    Used when no cache file is configured and in tests.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._data: Dict[str, tuple] = {}

    async def get(self, key: str) -> Optional[Any]:
        record = self._data.get(key)
        if record is None:
            return None
        value, expires_at = record
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds else None
        self._data[key] = (value, expires_at)


class JsonFileCache:
    """File-backed key/value store.

    The whole table lives in one JSON document of
    ``{key: {"value": ..., "expires_at": float | null}}`` records. Reads and
    writes happen on a worker thread; writes replace the file atomically.
    """

    def __init__(
        self,
        path: Path | str = ".cache/feeds.json",
        *,
        default_ttl_seconds: Optional[int] = 86400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = Path(path)
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._records: Optional[Dict[str, Dict[str, Any]]] = None
        self._lock = asyncio.Lock()

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            # Corrupt or unreadable file; start fresh
            logger.warning("Ignoring unreadable cache file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _persist(self, records: Dict[str, Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(records), encoding="utf-8")
        tmp.replace(self.path)

    async def _ensure_loaded(self) -> Dict[str, Dict[str, Any]]:
        if self._records is None:
            self._records = await asyncio.to_thread(self._load)
        return self._records

    def _purge_expired(self, records: Dict[str, Dict[str, Any]]) -> None:
        now = self._clock()
        for key in [k for k, r in records.items() if r.get("expires_at") and r["expires_at"] <= now]:
            del records[key]

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            records = await self._ensure_loaded()
            record = records.get(key)
            if record is None:
                return None
            expires_at = record.get("expires_at")
            if expires_at and expires_at <= self._clock():
                del records[key]
                return None
            return record.get("value")

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        async with self._lock:
            records = await self._ensure_loaded()
            self._purge_expired(records)
            records[key] = {"value": value, "expires_at": self._clock() + ttl if ttl else None}
            snapshot = dict(records)
            await asyncio.to_thread(self._persist, snapshot)
