import unittest
from datetime import datetime, timezone

from feedsentry.models import ThreatLevel
from feedsentry.processors import FeedParseError, GeoHub, GeoHubIndex, normalize_feed
from feedsentry.processors.normalize import clean_html_to_text, normalize_plain_text

from tests.fakes import make_feed, rss_document

NOW = datetime(2026, 3, 1, 12, 30, tzinfo=timezone.utc)

ATOM = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Test</title>
  <id>urn:test</id>
  <updated>2026-03-01T10:00:00Z</updated>
  <entry>
    <title>Missile launch reported near Taiwan</title>
    <id>urn:1</id>
    <link rel="alternate" href="https://example.com/atom/1"/>
    <published>2026-03-01T09:30:00Z</published>
    <updated>2026-03-01T09:45:00Z</updated>
  </entry>
  <entry>
    <title>Summit talks resume</title>
    <id>urn:2</id>
    <link href="https://example.com/atom/2"/>
    <updated>2026-03-01T08:15:00Z</updated>
  </entry>
</feed>
"""


class TestNormalizeFeed(unittest.TestCase):
    def test_rss_items_are_classified(self):
        doc = rss_document("Earthquake strikes coastal town", "Parliament debates budget")
        items = normalize_feed(doc, make_feed("Wire"), now=NOW)

        self.assertEqual([i.title for i in items], ["Earthquake strikes coastal town", "Parliament debates budget"])
        first = items[0]
        self.assertEqual(first.source, "Wire")
        self.assertEqual(first.link, "https://example.com/0")
        self.assertEqual(first.pub_date, datetime(2026, 3, 1, 11, 59, tzinfo=timezone.utc))
        self.assertEqual(first.threat.level, ThreatLevel.HIGH)
        self.assertTrue(first.is_alert)
        self.assertFalse(items[1].is_alert)

    def test_at_most_five_entries(self):
        doc = rss_document(*[f"Headline {n}" for n in range(8)])
        items = normalize_feed(doc, make_feed(), now=NOW)
        self.assertEqual([i.title for i in items], [f"Headline {n}" for n in range(5)])

    def test_bad_or_missing_date_becomes_now(self):
        doc = rss_document("Storm season begins", dates=["not a date"])
        items = normalize_feed(doc, make_feed(), now=NOW)
        self.assertEqual(items[0].pub_date, NOW)

    def test_atom_links_and_dates(self):
        items = normalize_feed(ATOM, make_feed("Atom"), now=NOW)
        self.assertEqual([i.link for i in items], ["https://example.com/atom/1", "https://example.com/atom/2"])
        # published wins; updated is the fallback
        self.assertEqual(items[0].pub_date, datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc))
        self.assertEqual(items[1].pub_date, datetime(2026, 3, 1, 8, 15, tzinfo=timezone.utc))

    def test_geo_hint_and_language_are_attached(self):
        geo = GeoHubIndex([GeoHub("Taipei", 25.03, 121.57, ("taiwan",)), GeoHub("Kyiv", 50.45, 30.52, ("ukraine",))])
        items = normalize_feed(ATOM, make_feed("Atom", lang="en"), geo_lookup=geo, now=NOW)
        self.assertEqual((items[0].lat, items[0].lon, items[0].location_name), (25.03, 121.57, "Taipei"))
        self.assertIsNone(items[1].location_name)
        self.assertEqual({i.lang for i in items}, {"en"})

    def test_title_text_is_cleaned(self):
        self.assertEqual(clean_html_to_text("Ceasefire &amp; aid <b>talks</b>\n begin"), "Ceasefire & aid talks begin")
        self.assertEqual(normalize_plain_text("\u201cTruce\u201d holds\u00a0\u2013 for now"), "\"Truce\" holds - for now")

    def test_unparsable_document_raises(self):
        with self.assertRaises(FeedParseError):
            normalize_feed(b"this is not xml at all <<<", make_feed(), now=NOW)

    def test_truncated_document_raises_even_with_recoverable_entries(self):
        doc = rss_document("Missile strike hits port", "Second story", "Third story")
        truncated = doc[: doc.index(b"Third story")]
        with self.assertRaises(FeedParseError):
            normalize_feed(truncated, make_feed(), now=NOW)

    def test_malformed_markup_raises(self):
        doc = (
            b'<?xml version="1.0" encoding="UTF-8"?><rss version="2.0"><channel><title>Broken</title>'
            b"<item><title>Markets & <b>ports</title><link>https://example.com/1</link></item>"
            b"<item><title>Second story</title><link>https://example.com/2</link></item>"
            b"</channel></rss>"
        )
        with self.assertRaises(FeedParseError):
            normalize_feed(doc, make_feed(), now=NOW)

    def test_empty_but_valid_feed_is_success(self):
        doc = b'<?xml version="1.0"?><rss version="2.0"><channel><title>Quiet</title></channel></rss>'
        self.assertEqual(normalize_feed(doc, make_feed(), now=NOW), [])


if __name__ == "__main__":
    unittest.main()
