from __future__ import annotations

import os
from typing import Optional

from .base import ClassificationClient


def create_classification_client(*, base_url: Optional[str] = None) -> Optional[ClassificationClient]:
    """Create the remote classification client from the environment.

    Returns ``None`` when ``CLASSIFY_BACKEND`` is ``none`` (keyword-only
    operation). Supported values: "http" (default) or "none".
    """
    selected = os.environ.get("CLASSIFY_BACKEND", "http").lower()

    if selected == "none":
        return None
    if selected == "http":
        from .client import HttpClassificationClient  # lazy import

        return HttpClassificationClient(base_url=base_url)

    raise ValueError(f"Unsupported CLASSIFY_BACKEND '{selected}'. Use 'http' or 'none'.")
