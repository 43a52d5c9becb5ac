import unittest
from unittest.mock import patch

from feedsentry.fetchers import FeedCache, FeedCircuitBreaker, FeedFetchError, ResilientFeedFetcher
from feedsentry.models import ClassificationSource, ThreatLevel
from feedsentry.orchestrator import FeedOrchestrator, chunked
from feedsentry.processors.ai import AIDispatchQueue

from tests.fakes import FakeClassificationClient, FakeClock, llm_response, make_feed, rss_document


class FakeNetwork:
    """Stands in for the HTTP download, keyed by URL."""

    def __init__(self, documents):
        self.documents = documents
        self.urls = []

    async def __call__(self, url, *, timeout=None, session=None):
        self.urls.append(url)
        answer = self.documents.get(url)
        if answer is None:
            raise FeedFetchError(f"HTTP 404 for {url}", status_code=404)
        return answer


class TestFeedOrchestrator(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.fetcher = ResilientFeedFetcher(
            FeedCache(clock=self.clock), FeedCircuitBreaker(clock=self.clock)
        )

    def patch_network(self, documents):
        network = FakeNetwork(documents)
        patcher = patch("feedsentry.orchestrator.fetch_feed_document_async", new=network)
        patcher.start()
        self.addCleanup(patcher.stop)
        return network

    async def test_feeds_for_other_languages_are_skipped(self):
        feeds = [
            make_feed("Wire"),
            make_feed("Le Monde", lang="fr"),
            make_feed("Multi", url={"en": "https://example.com/multi-en.xml", "fr": "https://example.com/multi-fr.xml"}),
        ]
        network = self.patch_network(
            {
                "https://example.com/wire.xml": rss_document("Parliament debates budget"),
                "https://example.com/multi-en.xml": rss_document("Storm season begins"),
            }
        )
        orchestrator = FeedOrchestrator(self.fetcher, lang="en")
        items = await orchestrator.fetch_category_feeds(feeds)

        self.assertEqual(sorted(network.urls), ["https://example.com/multi-en.xml", "https://example.com/wire.xml"])
        self.assertEqual(len(items), 2)

    async def test_partial_results_after_each_chunk(self):
        feeds = [make_feed(f"Feed {n}") for n in range(7)]
        self.patch_network({feed.url: rss_document(f"Story from {feed.name}") for feed in feeds})
        batches = []
        orchestrator = FeedOrchestrator(self.fetcher)

        items = await orchestrator.fetch_category_feeds(feeds, batch_size=5, on_batch=batches.append, top_limit=3)

        self.assertEqual([len(b) for b in batches], [3, 3])
        self.assertEqual(len(items), 3)

    async def test_failed_feed_counts_against_breaker(self):
        feeds = [make_feed("Good"), make_feed("Broken"), make_feed("Missing")]
        self.patch_network(
            {
                "https://example.com/good.xml": rss_document("Earthquake strikes coastal town"),
                "https://example.com/broken.xml": b"<html><body>maintenance<<</body>",
            }
        )
        orchestrator = FeedOrchestrator(self.fetcher)
        items = await orchestrator.fetch_category_feeds(feeds)

        self.assertEqual([i.source for i in items], ["Good"])
        failures = orchestrator.feed_failures()
        self.assertEqual(sorted(failures), ["Broken", "Missing"])
        self.assertEqual(failures["Broken"].count, 1)

    async def test_cached_feed_is_not_downloaded_twice(self):
        feed = make_feed("Wire")
        network = self.patch_network({feed.url: rss_document("Storm season begins")})
        orchestrator = FeedOrchestrator(self.fetcher)
        first = await orchestrator.fetch_feed(feed)
        second = await orchestrator.fetch_feed(feed)
        self.assertEqual(len(network.urls), 1)
        self.assertEqual(first, second)

    async def test_remote_classification_updates_items(self):
        feed = make_feed("Wire")
        self.patch_network({feed.url: rss_document("Earthquake strikes coastal town", "City council meets")})
        client = FakeClassificationClient(
            responses={"City council meets": llm_response("info", category="general", confidence=0.2)},
            default=llm_response("critical", category="disaster", confidence=0.95),
        )
        reclassified = []
        orchestrator = FeedOrchestrator(
            self.fetcher,
            AIDispatchQueue(client, batch_delay=0),
            on_reclassified=reclassified.append,
        )

        items = await orchestrator.fetch_feed(feed)
        self.assertEqual(items[0].threat.level, ThreatLevel.HIGH)
        await orchestrator.drain_escalations()

        self.assertEqual(sorted(client.calls), ["City council meets", "Earthquake strikes coastal town"])
        self.assertEqual(reclassified, [items[0]])
        self.assertEqual(items[0].threat.level, ThreatLevel.CRITICAL)
        self.assertEqual(items[0].threat.source, ClassificationSource.LLM)
        self.assertTrue(items[0].is_alert)
        # 0.2 does not beat the keyword default of 0.3
        self.assertEqual(items[1].threat.source, ClassificationSource.KEYWORD)
        await orchestrator.aclose()

    async def test_escalation_respects_per_feed_cap(self):
        feed = make_feed("Wire")
        self.patch_network({feed.url: rss_document("One", "Two", "Three", "Four")})
        client = FakeClassificationClient(default=llm_response("low", confidence=0.95))
        orchestrator = FeedOrchestrator(self.fetcher, AIDispatchQueue(client, batch_delay=0), max_ai_per_feed=2)

        await orchestrator.fetch_feed(feed)
        await orchestrator.drain_escalations()
        # Newest first: "One" is dated 11:59, "Two" 11:58
        self.assertEqual(sorted(client.calls), ["One", "Two"])
        await orchestrator.aclose()


class TestChunked(unittest.TestCase):
    def test_chunks(self):
        self.assertEqual(chunked([1, 2, 3, 4, 5, 6, 7], 5), [[1, 2, 3, 4, 5], [6, 7]])
        self.assertEqual(chunked([], 5), [])


if __name__ == "__main__":
    unittest.main()
