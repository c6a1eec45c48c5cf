"""Unit tests for CollectionCache."""

import pytest

from taskvault.core.storage import CollectionCache, empty_collection


@pytest.fixture
def cache(clock):
    return CollectionCache(ttl_seconds=300, capacity=2, clock=clock)


@pytest.fixture
def collection():
    return empty_collection("Cached Project")


class TestGet:
    """Tests for freshness and checksum gating."""

    def test_miss_on_empty_cache(self, cache, tmp_path):
        assert cache.get(tmp_path / "a.json", "abc") is None
        assert cache.stats().misses == 1

    def test_hit_returns_equal_copy(self, cache, collection, tmp_path):
        cache.put(tmp_path / "a.json", collection, "abc")

        cached = cache.get(tmp_path / "a.json", "abc")

        assert cached == collection
        assert cached is not collection
        assert cache.stats().hits == 1

    def test_callers_cannot_alias_cached_value(self, cache, collection, tmp_path):
        path = tmp_path / "a.json"
        cache.put(path, collection, "abc")
        collection.metadata.project_name = "changed after put"

        first = cache.get(path, "abc")
        first.metadata.project_name = "changed by caller"

        assert cache.get(path, "abc").metadata.project_name == "Cached Project"

    def test_checksum_mismatch_misses_but_keeps_entry(self, cache, collection, tmp_path):
        path = tmp_path / "a.json"
        cache.put(path, collection, "abc")

        assert cache.get(path, "different") is None
        assert path in cache
        assert cache.get(path, "abc") is not None

    def test_entry_expires_after_ttl(self, cache, collection, clock, tmp_path):
        path = tmp_path / "a.json"
        cache.put(path, collection, "abc")

        clock.advance(299)
        assert cache.get(path, "abc") is not None
        clock.advance(1)
        assert cache.get(path, "abc") is None

    def test_relative_and_absolute_paths_share_entry(self, cache, collection, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        cache.put("a.json", collection, "abc")
        assert cache.get(tmp_path / "a.json", "abc") is not None


class TestEviction:
    """Tests for the capacity bound."""

    def test_oldest_entry_is_evicted(self, cache, collection, tmp_path):
        for name in ("a", "b", "c"):
            cache.put(tmp_path / f"{name}.json", collection, name)

        assert len(cache) == 2
        assert tmp_path / "a.json" not in cache
        assert cache.stats().evictions == 1

    def test_reput_refreshes_position(self, cache, collection, tmp_path):
        cache.put(tmp_path / "a.json", collection, "a")
        cache.put(tmp_path / "b.json", collection, "b")
        cache.put(tmp_path / "a.json", collection, "a2")
        cache.put(tmp_path / "c.json", collection, "c")

        assert tmp_path / "a.json" in cache
        assert tmp_path / "b.json" not in cache

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            CollectionCache(capacity=0)


class TestMaintenance:
    def test_invalidate(self, cache, collection, tmp_path):
        cache.put(tmp_path / "a.json", collection, "a")
        assert cache.invalidate(tmp_path / "a.json") is True
        assert cache.invalidate(tmp_path / "a.json") is False

    def test_clear(self, cache, collection, tmp_path):
        cache.put(tmp_path / "a.json", collection, "a")
        cache.clear()
        assert len(cache) == 0

    def test_stats(self, cache, collection, tmp_path):
        path = tmp_path / "a.json"
        cache.put(path, collection, "a")
        cache.get(path, "a")
        cache.get(path, "a")
        cache.get(path, "b")
        cache.get(tmp_path / "missing.json", "a")

        stats = cache.stats().to_dict()

        assert stats == {
            "entries": 1,
            "capacity": 2,
            "hits": 2,
            "misses": 2,
            "evictions": 0,
            "hit_rate": 0.5,
        }
