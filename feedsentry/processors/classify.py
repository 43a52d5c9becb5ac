from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Pattern, Tuple

from ..models.threat import (
    ClassificationSource,
    EventCategory,
    ThreatClassification,
    ThreatLevel,
    default_classification,
)
from ..utils.logging import get_logger
from .keywords import (
    CARE_HIGH_KEYWORDS,
    CARE_LOW_KEYWORDS,
    CARE_MEDIUM_KEYWORDS,
    CRITICAL_KEYWORDS,
    EXCLUSIONS,
    HIGH_KEYWORDS,
    LOW_KEYWORDS,
    MEDIUM_KEYWORDS,
    SHORT_KEYWORDS,
    TECH_HIGH_KEYWORDS,
    TECH_LOW_KEYWORDS,
    TECH_MEDIUM_KEYWORDS,
    KeywordTable,
)

logger = get_logger("fs.processors.classify")


@dataclass(frozen=True, slots=True)
class KeywordTier:
    table: KeywordTable
    level: ThreatLevel
    confidence: float
    variant: Optional[str] = None

    def applies_to(self, variant: str) -> bool:
        return self.variant is None or self.variant == variant


# Checked strictly in this order; the first tier with a hit decides.
TIERS: Tuple[KeywordTier, ...] = (
    KeywordTier(CRITICAL_KEYWORDS, ThreatLevel.CRITICAL, 0.9),
    KeywordTier(HIGH_KEYWORDS, ThreatLevel.HIGH, 0.8),
    KeywordTier(TECH_HIGH_KEYWORDS, ThreatLevel.HIGH, 0.75, variant="tech"),
    KeywordTier(CARE_HIGH_KEYWORDS, ThreatLevel.HIGH, 0.75, variant="care"),
    KeywordTier(MEDIUM_KEYWORDS, ThreatLevel.MEDIUM, 0.7),
    KeywordTier(TECH_MEDIUM_KEYWORDS, ThreatLevel.MEDIUM, 0.65, variant="tech"),
    KeywordTier(CARE_MEDIUM_KEYWORDS, ThreatLevel.MEDIUM, 0.65, variant="care"),
    KeywordTier(LOW_KEYWORDS, ThreatLevel.LOW, 0.6),
    KeywordTier(TECH_LOW_KEYWORDS, ThreatLevel.LOW, 0.55, variant="tech"),
    KeywordTier(CARE_LOW_KEYWORDS, ThreatLevel.LOW, 0.55, variant="care"),
)


@lru_cache(maxsize=None)
def _keyword_pattern(keyword: str) -> Pattern[str]:
    escaped = re.escape(keyword)
    if keyword in SHORT_KEYWORDS:
        return re.compile(rf"\b{escaped}\b")
    return re.compile(escaped)


def match_keywords(title_lower: str, table: KeywordTable) -> Optional[Tuple[str, EventCategory]]:
    """Return the first (keyword, category) of ``table`` found in the title."""
    for keyword, category in table.items():
        if _keyword_pattern(keyword).search(title_lower):
            return keyword, category
    return None


def is_excluded(title_lower: str) -> bool:
    return any(phrase in title_lower for phrase in EXCLUSIONS)


def classify_by_keyword(title: str, variant: str = "full") -> ThreatClassification:
    """Classify a headline with the keyword cascade.

    Pure and deterministic: exclusions win outright, then tiers are tried
    critical -> high -> medium -> low, each followed by the variant-specific
    tier of the same level when ``variant`` matches. No hit yields info.
    """
    lower = title.lower()
    if is_excluded(lower):
        return default_classification()

    for tier in TIERS:
        if not tier.applies_to(variant):
            continue
        hit = match_keywords(lower, tier.table)
        if hit:
            keyword, category = hit
            logger.debug("Keyword '%s' -> %s/%s for '%s'", keyword, tier.level.value, category.value, title)
            return ThreatClassification(
                level=tier.level,
                category=category,
                confidence=tier.confidence,
                source=ClassificationSource.KEYWORD,
            )

    return default_classification()
