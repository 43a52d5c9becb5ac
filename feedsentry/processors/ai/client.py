from __future__ import annotations

import os
from typing import Any, Dict, Optional

import requests

from ...utils.logging import get_logger
from .base import ClassificationApiError, ClassificationClient

logger = get_logger("fs.ai.client")

CLASSIFY_EVENT_PATH = "/api/intelligence/v1/classify-event"


class HttpClassificationClient(ClassificationClient):
    """JSON-over-HTTP client for the intelligence service's ClassifyEvent RPC.

    Environment:
      - CLASSIFY_API_BASE (default: http://localhost:3000)
      - CLASSIFY_API_TIMEOUT seconds (default: 20)
      - CLASSIFY_API_KEY (optional, sent as a bearer token)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or os.environ.get("CLASSIFY_API_BASE", "http://localhost:3000")).rstrip("/")
        self.timeout = timeout if timeout is not None else float(os.environ.get("CLASSIFY_API_TIMEOUT", "20"))
        self.api_key = api_key if api_key is not None else os.environ.get("CLASSIFY_API_KEY")
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{CLASSIFY_EVENT_PATH}"

    def classify_event(
        self,
        title: str,
        *,
        description: str = "",
        source: str = "",
        country: str = "",
    ) -> Dict[str, Any]:
        payload = {"title": title, "description": description, "source": source, "country": country}
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        resp = self.session.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
        if resp.status_code >= 400:
            logger.debug("ClassifyEvent failed (%s) for '%s'", resp.status_code, title)
            raise ClassificationApiError(resp.status_code, resp.text[:200])
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("ClassifyEvent response is not a JSON object")
        return data

    def close(self) -> None:
        self.session.close()
