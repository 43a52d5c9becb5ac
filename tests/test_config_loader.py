import tempfile
import textwrap
import unittest
from pathlib import Path

from feedsentry.utils.config_loader import ConfigError, load_feeds_config

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config" / "feeds.yaml"


class TestLoadFeedsConfig(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, body):
        path = Path(self.tmp.name) / "feeds.yaml"
        path.write_text(textwrap.dedent(body), encoding="utf-8")
        return path

    def test_bundled_config_loads(self):
        config = load_feeds_config(REPO_CONFIG)
        names = [feed.name for feed in config.feeds]
        self.assertIn("Le Monde", names)
        self.assertEqual(config.tiers["Reuters"], 1)
        self.assertEqual(config.tiers["BBC World"], 2)
        self.assertEqual([hub.name for hub in config.locations], ["Kyiv", "Taipei", "Tehran"])

    def test_language_mapping_and_pinned_lang(self):
        config = load_feeds_config(
            self.write(
                """
                feeds:
                  - name: Multi
                    url:
                      EN: https://example.com/en.xml
                      fr: https://example.com/fr.xml
                  - name: Local
                    url: https://example.com/local.xml
                    lang: FR
                """
            )
        )
        multi, local = config.feeds
        self.assertEqual(multi.resolve_url("fr"), "https://example.com/fr.xml")
        self.assertEqual(multi.resolve_url("de"), "https://example.com/en.xml")
        self.assertEqual(local.lang, "fr")

    def test_inline_tier_overrides_table(self):
        config = load_feeds_config(
            self.write(
                """
                tiers:
                  Wire: 3
                feeds:
                  - name: Wire
                    url: https://example.com/wire.xml
                    tier: 1
                """
            )
        )
        self.assertEqual(config.tiers, {"Wire": 1})

    def test_invalid_entries_raise(self):
        cases = [
            "feeds:\n  - name: NoUrl\n",
            "feeds:\n  - name: Bad\n    url: ftp://example.com/feed\n",
            "feeds:\n  - name: Bad\n    url: https://example.com/a\n    lang: french\n",
            "feeds:\n  - name: Bad\n    url: https://example.com/a\n    tier: zero\n",
            "feeds:\n  - name: Dup\n    url: https://example.com/a\n  - name: Dup\n    url: https://example.com/b\n",
            "feeds: not-a-list\n",
            "tiers:\n  Reuters: wire\n",
            "tiers:\n  Reuters: [1]\n",
            "- just\n- a list\n",
            "feeds: [\n",
        ]
        for body in cases:
            with self.subTest(body=body):
                with self.assertRaises(ConfigError):
                    load_feeds_config(self.write(body))

    def test_missing_file(self):
        with self.assertRaises(ConfigError):
            load_feeds_config(Path(self.tmp.name) / "absent.yaml")


if __name__ == "__main__":
    unittest.main()
