"""Typed models used across the application."""

from .feed import FeedDescriptor, FeedScope
from .threat import (
    THREAT_LABELS,
    THREAT_PRIORITY,
    ClassificationSource,
    EventCategory,
    ThreatClassification,
    ThreatLevel,
    default_classification,
)
from .news_item import NewsItem

__all__ = [
    "FeedDescriptor",
    "FeedScope",
    "NewsItem",
    "ThreatClassification",
    "ThreatLevel",
    "EventCategory",
    "ClassificationSource",
    "THREAT_PRIORITY",
    "THREAT_LABELS",
    "default_classification",
]
