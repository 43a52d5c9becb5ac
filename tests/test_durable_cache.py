import json
import tempfile
import unittest
from pathlib import Path

from feedsentry.storage import JsonFileCache, MemoryCache

from tests.fakes import FakeClock


class TestJsonFileCache(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = Path(self.tmp.name) / "nested" / "feeds.json"
        self.clock = FakeClock()

    async def test_values_survive_a_new_instance(self):
        cache = JsonFileCache(self.path, clock=self.clock)
        await cache.set("feed:Wire::en", [{"title": "Storm season begins"}])

        reopened = JsonFileCache(self.path, clock=self.clock)
        self.assertEqual(await reopened.get("feed:Wire::en"), [{"title": "Storm season begins"}])
        self.assertIsNone(await reopened.get("feed:Other::en"))

    async def test_records_expire(self):
        cache = JsonFileCache(self.path, default_ttl_seconds=60, clock=self.clock)
        await cache.set("short", 1)
        await cache.set("long", 2, ttl_seconds=3600)
        self.clock.advance(61)
        self.assertIsNone(await cache.get("short"))
        self.assertEqual(await cache.get("long"), 2)

    async def test_expired_records_are_purged_on_write(self):
        cache = JsonFileCache(self.path, default_ttl_seconds=60, clock=self.clock)
        await cache.set("old", 1)
        self.clock.advance(61)
        await cache.set("new", 2)
        stored = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(sorted(stored), ["new"])

    async def test_corrupt_file_starts_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")
        cache = JsonFileCache(self.path, clock=self.clock)
        self.assertIsNone(await cache.get("anything"))
        await cache.set("anything", "ok")
        self.assertEqual(await cache.get("anything"), "ok")


class TestMemoryCache(unittest.IsolatedAsyncioTestCase):
    async def test_ttl(self):
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        await cache.set("a", 1, ttl_seconds=10)
        await cache.set("b", 2)
        clock.advance(11)
        self.assertIsNone(await cache.get("a"))
        self.assertEqual(await cache.get("b"), 2)


if __name__ == "__main__":
    unittest.main()
