"""Cluster-level analysis of classified items."""

from .aggregate import ClusterMember, aggregate_threats, source_tier, tier_weight

__all__ = ["ClusterMember", "aggregate_threats", "source_tier", "tier_weight"]
