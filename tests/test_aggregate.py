import unittest

from feedsentry.analysis import ClusterMember, aggregate_threats, source_tier, tier_weight
from feedsentry.models import ClassificationSource, EventCategory, ThreatClassification, ThreatLevel


def threat(level, category, confidence):
    return ThreatClassification(level, category, confidence, ClassificationSource.KEYWORD)


class TestAggregateThreats(unittest.TestCase):
    def test_tier_weighted_confidence_and_max_level(self):
        result = aggregate_threats(
            [
                ClusterMember(threat(ThreatLevel.CRITICAL, EventCategory.MILITARY, 0.9), tier=1),
                ClusterMember(threat(ThreatLevel.LOW, EventCategory.MILITARY, 0.5), tier=5),
            ]
        )
        self.assertEqual(result.level, ThreatLevel.CRITICAL)
        self.assertEqual(result.category, EventCategory.MILITARY)
        self.assertAlmostEqual(result.confidence, (0.9 * 5 + 0.5 * 1) / 6)

    def test_empty_cluster_is_default(self):
        result = aggregate_threats([])
        self.assertEqual(result.level, ThreatLevel.INFO)
        self.assertEqual(result.category, EventCategory.GENERAL)
        self.assertAlmostEqual(result.confidence, 0.3)

    def test_members_without_threat_are_ignored(self):
        result = aggregate_threats([ClusterMember(None, tier=1), ClusterMember(threat(ThreatLevel.MEDIUM, EventCategory.PROTEST, 0.7))])
        self.assertEqual(result.level, ThreatLevel.MEDIUM)
        self.assertAlmostEqual(result.confidence, 0.7)

    def test_category_tie_goes_to_first_seen(self):
        result = aggregate_threats(
            [
                ClusterMember(threat(ThreatLevel.LOW, EventCategory.CYBER, 0.6)),
                ClusterMember(threat(ThreatLevel.LOW, EventCategory.ECONOMIC, 0.6)),
                ClusterMember(threat(ThreatLevel.HIGH, EventCategory.ECONOMIC, 0.8)),
                ClusterMember(threat(ThreatLevel.LOW, EventCategory.CYBER, 0.6)),
            ]
        )
        self.assertEqual(result.category, EventCategory.CYBER)
        self.assertEqual(result.level, ThreatLevel.HIGH)

    def test_accepts_mappings(self):
        result = aggregate_threats([{"threat": threat(ThreatLevel.HIGH, EventCategory.DISASTER, 0.8), "tier": 2}])
        self.assertEqual(result.level, ThreatLevel.HIGH)
        self.assertAlmostEqual(result.confidence, 0.8)

    def test_tiers(self):
        self.assertEqual(source_tier("Reuters", {"Reuters": 1}), 1)
        self.assertEqual(source_tier("Blog", {"Reuters": 1}), 4)
        self.assertEqual([tier_weight(t) for t in (None, 0, 1, 2, 5, 9)], [1, 1, 5, 4, 1, 1])


if __name__ == "__main__":
    unittest.main()
