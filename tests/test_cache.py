"""Tests for link cache."""

import pytest

from aion_notifier.cache import LinkCache


@pytest.fixture
def cache(tmp_path):
    """Create a cache with a temp DB."""
    c = LinkCache(db_path=tmp_path / "test_links.db")
    yield c
    c.close()


class TestCacheBasic:
    """Test basic cache operations."""

    def test_miss_returns_none(self, cache):
        assert cache.get("item", "1") is None

    def test_put_and_get(self, cache):
        cache.put("item", "1", "Sword")
        assert cache.get("item", "1") == "Sword"

    def test_kind_is_part_of_key(self, cache):
        cache.put("item", "1", "Sword")
        assert cache.get("charname", "1") is None

    def test_overwrite(self, cache):
        cache.put("item", "1", "Sword")
        cache.put("item", "1", "Greatsword")
        assert cache.get("item", "1") == "Greatsword"

    def test_memory_only(self):
        c = LinkCache()
        c.put("item", "1", "Sword")
        assert c.get("item", "1") == "Sword"
        assert c.stats() == {"memory_entries": 1, "db_entries": 0}
        c.close()


class TestCacheStats:
    """Test cache statistics."""

    def test_empty_stats(self, cache):
        assert cache.stats() == {"memory_entries": 0, "db_entries": 0}

    def test_stats_after_put(self, cache):
        cache.put("item", "1", "Sword")
        assert cache.stats() == {"memory_entries": 1, "db_entries": 1}


class TestCachePersistence:
    """Test that cache survives DB close/reopen."""

    def test_persistence(self, tmp_path):
        db_path = tmp_path / "persist.db"

        c1 = LinkCache(db_path=db_path)
        c1.put("item", "1", "Sword")
        c1.close()

        c2 = LinkCache(db_path=db_path)
        assert c2.get("item", "1") == "Sword"
        assert c2.stats()["memory_entries"] == 1
        c2.close()

    def test_close_twice(self, tmp_path):
        c = LinkCache(db_path=tmp_path / "x.db")
        c.close()
        c.close()
