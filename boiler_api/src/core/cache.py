"""
Key-value cache clients used to persist sessions between requests.

Values are JSON-compatible dicts. The memory client is the default; a Redis
client is used when REDIS_URL is configured.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import redis

from src.core.settings import get_app_settings

logger = logging.getLogger(__name__)


class CacheClient(ABC):
    """Minimal cache contract shared by all clients."""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored value, or None when missing or expired."""

    @abstractmethod
    def set(self, key: str, value: Dict[str, Any], expires_in: Optional[int] = None) -> None:
        """Store value, optionally expiring after expires_in seconds."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Drop key; a missing key is not an error."""


class MemoryCacheClient(CacheClient):
    """
    In-process cache.

    Expired entries are dropped when read, and every sweep_interval seconds a
    write also purges whatever else has expired, so keys that are never read
    again do not pile up.
    """

    def __init__(self, sweep_interval: float = 60.0) -> None:
        self._entries: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = threading.Lock()
        self.sweep_interval = sweep_interval
        self._next_sweep = time.monotonic() + sweep_interval

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            raw, expires_at = entry
            if expires_at is not None and expires_at <= time.monotonic():
                del self._entries[key]
                return None
        # stored serialized so callers never share a mutable value
        return json.loads(raw)

    def set(self, key: str, value: Dict[str, Any], expires_in: Optional[int] = None) -> None:
        now = time.monotonic()
        expires_at = now + expires_in if expires_in else None
        raw = json.dumps(value)
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            self._entries[key] = (raw, expires_at)

    def _sweep(self, now: float) -> None:
        # caller holds the lock
        expired = [k for k, (_, at) in self._entries.items() if at is not None and at <= now]
        for k in expired:
            del self._entries[k]
        self._next_sweep = now + self.sweep_interval
        if expired:
            logger.debug("Purged %d expired cache entries", len(expired))

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def flush(self) -> None:
        with self._lock:
            self._entries.clear()


class RedisCacheClient(CacheClient):
    """Cache backed by a Redis connection."""

    def __init__(self, connection: redis.Redis) -> None:
        self.connection = connection

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.connection.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Dict[str, Any], expires_in: Optional[int] = None) -> None:
        self.connection.set(key, json.dumps(value), ex=expires_in)

    def remove(self, key: str) -> None:
        self.connection.delete(key)


_CACHE_CLIENT: CacheClient | None = None


# PUBLIC_INTERFACE
def get_cache_client() -> CacheClient:
    """Return the process-wide cache client, creating it on first use."""
    global _CACHE_CLIENT
    if _CACHE_CLIENT is None:
        settings = get_app_settings()
        if settings.REDIS_URL:
            logger.info("Using Redis session cache")
            _CACHE_CLIENT = RedisCacheClient(redis.from_url(settings.REDIS_URL))
        else:
            _CACHE_CLIENT = MemoryCacheClient()
    return _CACHE_CLIENT
