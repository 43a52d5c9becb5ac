import unittest

from feedsentry.fetchers import FeedCircuitBreaker
from feedsentry.models import FeedScope

from tests.fakes import FakeClock


class TestFeedCircuitBreaker(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.breaker = FeedCircuitBreaker(threshold=2, cooldown_seconds=300, clock=self.clock)
        self.scope = FeedScope("Reuters", "en")

    def test_single_failure_does_not_open(self):
        state = self.breaker.record_failure(self.scope)
        self.assertEqual(state.count, 1)
        self.assertEqual(state.cooldown_until, 0)
        self.assertFalse(self.breaker.is_on_cooldown(self.scope))

    def test_threshold_opens_cooldown(self):
        self.breaker.record_failure(self.scope)
        state = self.breaker.record_failure(self.scope)
        self.assertEqual(state.cooldown_until, self.clock.now + 300)
        self.assertTrue(self.breaker.is_on_cooldown(self.scope))

    def test_cooldown_is_per_scope(self):
        self.breaker.record_failure(self.scope)
        self.breaker.record_failure(self.scope)
        self.assertFalse(self.breaker.is_on_cooldown(FeedScope("Reuters", "fr")))

    def test_lapsed_cooldown_clears_lazily(self):
        self.breaker.record_failure(self.scope)
        self.breaker.record_failure(self.scope)
        self.clock.advance(301)
        self.assertFalse(self.breaker.is_on_cooldown(self.scope))
        self.assertIsNone(self.breaker.state(self.scope))

    def test_success_resets_counter(self):
        self.breaker.record_failure(self.scope)
        self.breaker.record_success(self.scope)
        self.breaker.record_failure(self.scope)
        self.assertFalse(self.breaker.is_on_cooldown(self.scope))

    def test_failures_for_language(self):
        self.breaker.record_failure(FeedScope("Reuters", "en"))
        self.breaker.record_failure(FeedScope("Le Monde", "fr"))
        self.assertEqual(list(self.breaker.failures_for_language("en")), ["Reuters"])
        self.assertEqual(list(self.breaker.failures_for_language("fr")), ["Le Monde"])

    def test_sweep_drops_only_lapsed_cooldowns(self):
        counting = FeedScope("Counting", "en")
        self.breaker.record_failure(counting)
        self.breaker.record_failure(self.scope)
        self.breaker.record_failure(self.scope)
        self.clock.advance(301)
        self.assertEqual(self.breaker.sweep(), 1)
        self.assertIsNotNone(self.breaker.state(counting))
        self.assertIsNone(self.breaker.state(self.scope))


if __name__ == "__main__":
    unittest.main()
