"""
Unit Tests for Cache Stores
"""
import pytest
from unittest.mock import patch
from datetime import datetime, timedelta
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from dbschemas.cache import MemoryCache, get_default_cache, reset_default_cache


class TestMemoryCache:
    """Tests for MemoryCache"""

    def test_set_and_get(self):
        cache = MemoryCache()
        assert cache.set("key", {"tables": ["users"]}) is True
        assert cache.get("key") == {"tables": ["users"]}
        assert "key" in cache
        assert len(cache) == 1

    def test_missing(self):
        assert MemoryCache().get("missing") is None

    def test_values_are_copied(self):
        cache = MemoryCache()
        value = {"tables": ["users"]}

        cache.set("key", value)
        value["tables"].append("groups")
        cache.get("key")["tables"].append("roles")

        assert cache.get("key") == {"tables": ["users"]}

    def test_expiry(self):
        cache = MemoryCache()
        cache.set("key", 1, ttl=60)
        later = datetime.utcnow() + timedelta(seconds=61)

        with patch("dbschemas.cache.datetime") as mock_datetime:
            mock_datetime.utcnow.return_value = later
            assert cache.get("key") is None

        assert len(cache) == 0

    def test_zero_ttl_never_expires(self):
        cache = MemoryCache()
        cache.set("key", 1, ttl=0)
        later = datetime.utcnow() + timedelta(days=365)

        with patch("dbschemas.cache.datetime") as mock_datetime:
            mock_datetime.utcnow.return_value = later
            assert cache.get("key") == 1

    def test_delete_and_clear(self):
        cache = MemoryCache()
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.delete("a") is True
        assert cache.delete("a") is False

        cache.clear()
        assert len(cache) == 0


class TestDefaultCache:
    """Tests for the process-wide store"""

    def test_shared_until_reset(self):
        reset_default_cache()
        first = get_default_cache()

        assert get_default_cache() is first

        reset_default_cache()
        assert get_default_cache() is not first
