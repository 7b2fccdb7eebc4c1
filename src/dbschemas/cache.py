"""
Cache Stores

Key/value stores that cache handlers archive into. Values are plain
dictionaries (the ``to_dict()`` form of schema entities).
"""
from __future__ import annotations

import copy
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Tuple


class CacheStore(ABC):
    """Abstract key/value store"""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the value for key, or None when missing or expired"""
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int = 0) -> bool:
        """Store value under key; ttl of 0 means no expiry"""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key; returns whether it existed"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every key"""
        pass


class MemoryCache(CacheStore):
    """
    Process-local cache with per-key expiry

    Values are deep-copied on the way in and out, so callers never share
    mutable state with the store.
    """

    def __init__(self):
        self._items: Dict[str, Tuple[Any, Optional[datetime]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None

            value, expires_at = item
            if expires_at is not None and datetime.utcnow() >= expires_at:
                del self._items[key]
                return None

            return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl: int = 0) -> bool:
        expires_at = None
        if ttl > 0:
            expires_at = datetime.utcnow() + timedelta(seconds=ttl)

        with self._lock:
            self._items[key] = (copy.deepcopy(value), expires_at)
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._items.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


# Store shared by cache handlers created from configuration
_default_cache: Optional[MemoryCache] = None


def get_default_cache() -> MemoryCache:
    """Get the process-wide cache store"""
    global _default_cache
    if _default_cache is None:
        _default_cache = MemoryCache()
    return _default_cache


def reset_default_cache() -> None:
    """Drop the process-wide cache store"""
    global _default_cache
    _default_cache = None
