from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping


class ThreatLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class EventCategory(str, Enum):
    CONFLICT = "conflict"
    PROTEST = "protest"
    DISASTER = "disaster"
    DIPLOMATIC = "diplomatic"
    ECONOMIC = "economic"
    TERRORISM = "terrorism"
    CYBER = "cyber"
    HEALTH = "health"
    ENVIRONMENTAL = "environmental"
    MILITARY = "military"
    CRIME = "crime"
    INFRASTRUCTURE = "infrastructure"
    TECH = "tech"
    POLITICAL = "political"
    GENERAL = "general"


class ClassificationSource(str, Enum):
    KEYWORD = "keyword"
    ML = "ml"
    LLM = "llm"


THREAT_PRIORITY: Dict[ThreatLevel, int] = {
    ThreatLevel.CRITICAL: 5,
    ThreatLevel.HIGH: 4,
    ThreatLevel.MEDIUM: 3,
    ThreatLevel.LOW: 2,
    ThreatLevel.INFO: 1,
}

THREAT_LABELS: Dict[ThreatLevel, str] = {
    ThreatLevel.CRITICAL: "CRIT",
    ThreatLevel.HIGH: "HIGH",
    ThreatLevel.MEDIUM: "MED",
    ThreatLevel.LOW: "LOW",
    ThreatLevel.INFO: "INFO",
}

ALERT_LEVELS = frozenset({ThreatLevel.CRITICAL, ThreatLevel.HIGH})


@dataclass(frozen=True, slots=True)
class ThreatClassification:
    """Severity judgment for a single headline. Replaced, never merged."""

    level: ThreatLevel
    category: EventCategory
    confidence: float
    source: ClassificationSource = ClassificationSource.KEYWORD

    @property
    def is_alert(self) -> bool:
        return self.level in ALERT_LEVELS

    @property
    def priority(self) -> int:
        return THREAT_PRIORITY[self.level]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "category": self.category.value,
            "confidence": self.confidence,
            "source": self.source.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ThreatClassification":
        return cls(
            level=ThreatLevel(data["level"]),
            category=EventCategory(data.get("category", EventCategory.GENERAL.value)),
            confidence=float(data.get("confidence", 0.0)),
            source=ClassificationSource(data.get("source", ClassificationSource.KEYWORD.value)),
        )


def default_classification() -> ThreatClassification:
    """The classification used when nothing more specific is known."""
    return ThreatClassification(
        level=ThreatLevel.INFO,
        category=EventCategory.GENERAL,
        confidence=0.3,
        source=ClassificationSource.KEYWORD,
    )
