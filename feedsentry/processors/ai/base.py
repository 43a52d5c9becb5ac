from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict


class ClassificationApiError(Exception):
    """Non-2xx answer from the classification service."""

    def __init__(self, status_code: int, message: str = "") -> None:
        super().__init__(f"HTTP {status_code}: {message}" if message else f"HTTP {status_code}")
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500

    @property
    def trips_backpressure(self) -> bool:
        return self.is_rate_limited or self.is_server_error


class ClassificationClient(ABC):
    """Abstract client for the remote event classification RPC."""

    @abstractmethod
    def classify_event(
        self,
        title: str,
        *,
        description: str = "",
        source: str = "",
        country: str = "",
    ) -> Dict[str, Any]:
        """Return the raw response mapping; raise ``ClassificationApiError`` on HTTP errors."""

    async def classify_event_async(
        self,
        title: str,
        *,
        description: str = "",
        source: str = "",
        country: str = "",
    ) -> Dict[str, Any]:
        # Blocking clients run on a worker thread so the event loop stays free
        return await asyncio.to_thread(
            self.classify_event, title, description=description, source=source, country=country
        )

    def close(self) -> None:
        """Release network resources; no-op by default."""
