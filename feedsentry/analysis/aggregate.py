from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

from ..models.threat import (
    ClassificationSource,
    ThreatClassification,
    default_classification,
)

DEFAULT_TIER = 4
MAX_TIER_WEIGHT = 5


@dataclass(frozen=True, slots=True)
class ClusterMember:
    threat: Optional[ThreatClassification]
    tier: Optional[int] = None


MemberLike = Union[ClusterMember, Mapping[str, Any]]


def source_tier(source: str, tiers: Mapping[str, int]) -> int:
    """Authority tier of a source; unknown sources count as tier 4."""
    return tiers.get(source, DEFAULT_TIER)


def tier_weight(tier: Optional[int]) -> int:
    # Tier 1 weighs 5x, tier 5 and beyond 1x; no tier (or 0) weighs 1
    if not tier:
        return 1
    return (MAX_TIER_WEIGHT + 1) - min(tier, MAX_TIER_WEIGHT)


def _coerce(member: MemberLike) -> ClusterMember:
    if isinstance(member, ClusterMember):
        return member
    return ClusterMember(threat=member.get("threat"), tier=member.get("tier"))


def aggregate_threats(members: Iterable[MemberLike]) -> ThreatClassification:
    """Combine the classifications of one story cluster.

    - level: highest severity among members
    - category: most frequent, ties to the first seen
    - confidence: tier-weighted mean
    Members without a classification are ignored; an empty cluster yields
    the default info/general classification.
    """
    with_threat: List[ClusterMember] = [m for m in map(_coerce, members) if m.threat is not None]
    if not with_threat:
        return default_classification()

    level = max((m.threat for m in with_threat), key=lambda t: t.priority).level

    # Counter preserves insertion order, and most_common() is stable on ties
    category = Counter(m.threat.category for m in with_threat).most_common(1)[0][0]

    weighted_sum = 0.0
    weight_total = 0
    for member in with_threat:
        weight = tier_weight(member.tier)
        weighted_sum += member.threat.confidence * weight
        weight_total += weight
    confidence = weighted_sum / weight_total if weight_total > 0 else 0.5

    return ThreatClassification(
        level=level,
        category=category,
        confidence=confidence,
        source=ClassificationSource.KEYWORD,
    )
