from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


_AI_MAX_PER_WINDOW: Dict[str, int] = {"finance": 40, "tech": 60}
_AI_MAX_PER_FEED: Dict[str, int] = {"finance": 2, "tech": 2}


@dataclass(slots=True)
class PipelineConfig:
    """Tunables for the fetch/classify pipeline, overridable from the environment."""

    cache_ttl_seconds: float = field(default_factory=lambda: _env_float("FEED_CACHE_TTL_SECONDS", 600))
    cooldown_seconds: float = field(default_factory=lambda: _env_float("FEED_COOLDOWN_SECONDS", 300))
    max_failures: int = field(default_factory=lambda: _env_int("FEED_MAX_FAILURES", 2))
    max_cache_entries: int = field(default_factory=lambda: _env_int("FEED_MAX_CACHE_ENTRIES", 100))
    durable_ttl_seconds: int = field(default_factory=lambda: _env_int("DURABLE_CACHE_TTL_SECONDS", 86400))
    feed_batch_size: int = field(default_factory=lambda: _env_int("FEED_BATCH_SIZE", 5))
    top_items: int = field(default_factory=lambda: _env_int("FEED_TOP_ITEMS", 20))
    http_timeout: float = field(default_factory=lambda: _env_float("FEED_HTTP_TIMEOUT", 15))

    ai_batch_size: int = field(default_factory=lambda: _env_int("AI_BATCH_SIZE", 20))
    ai_batch_delay: float = field(default_factory=lambda: _env_int("AI_BATCH_DELAY_MS", 500) / 1000.0)
    ai_dedup_seconds: float = field(default_factory=lambda: _env_float("AI_DEDUP_SECONDS", 1800))
    ai_window_seconds: float = field(default_factory=lambda: _env_float("AI_WINDOW_SECONDS", 60))
    ai_rate_limit_pause: float = field(default_factory=lambda: _env_float("AI_RATE_LIMIT_PAUSE_SECONDS", 60))
    ai_server_error_pause: float = field(default_factory=lambda: _env_float("AI_SERVER_ERROR_PAUSE_SECONDS", 30))

    @staticmethod
    def ai_max_per_window(variant: str) -> int:
        return _AI_MAX_PER_WINDOW.get(variant, 80)

    @staticmethod
    def ai_max_per_feed(variant: str) -> int:
        return _AI_MAX_PER_FEED.get(variant, 3)
