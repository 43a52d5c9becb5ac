from __future__ import annotations

from typing import Any, Mapping, Optional

from ...models.threat import ClassificationSource, EventCategory, ThreatClassification, ThreatLevel

_VALID_LEVELS = {level.value: level for level in ThreatLevel}
_VALID_CATEGORIES = {category.value: category for category in EventCategory}

DEFAULT_LLM_CONFIDENCE = 0.9


def _level_of(value: Any) -> Optional[ThreatLevel]:
    if not isinstance(value, str):
        return None
    return _VALID_LEVELS.get(value.strip().lower())


def to_threat(response: Mapping[str, Any] | None) -> Optional[ThreatClassification]:
    """Map a ClassifyEvent response to a classification, or ``None``.

    The service keeps the model's raw level in ``subcategory``; older
    handlers put it in ``category``. A response whose level cannot be mapped
    to one of the five known levels is treated as "no classification".
    """
    if not response:
        return None
    raw = response.get("classification")
    if not isinstance(raw, Mapping):
        return None

    level = _level_of(raw.get("subcategory")) or _level_of(raw.get("category"))
    if level is None:
        return None

    category_raw = raw.get("category")
    category = _VALID_CATEGORIES.get(str(category_raw).strip().lower(), EventCategory.GENERAL)

    try:
        confidence = float(raw.get("confidence") or 0.0)
    except (TypeError, ValueError):
        confidence = 0.0
    if confidence <= 0.0:
        confidence = DEFAULT_LLM_CONFIDENCE
    confidence = min(1.0, confidence)

    return ThreatClassification(
        level=level,
        category=category,
        confidence=confidence,
        source=ClassificationSource.LLM,
    )
