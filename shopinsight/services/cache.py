import logging
import re
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from urllib.parse import urlparse

from shopinsight.utils.helpers import ensure_scheme

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    url: str


@dataclass
class CacheHit:
    data: Any
    age_seconds: float
    created_at: datetime
    url: str


class AnalysisCache:
    """
    In-memory TTL + LRU cache of finished analyses, keyed by store hostname.

    Entries older than the TTL are dropped when read. When the cache is full,
    inserting a new store evicts the least recently used one.
    """

    def __init__(self, ttl_seconds: float = 86400, max_entries: int = 50,
                 clock: Callable[[], float] = time.time):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def normalize_url(url: str) -> str:
        """
        Reduce a store URL to its cache key

        Args:
            url: Store URL in any form ("Shop.com", "https://www.shop.com/x")

        Returns:
            str: Lowercase hostname without a leading "www."
        """
        raw = (url or "").strip().lower()
        try:
            hostname = urlparse(ensure_scheme(raw)).hostname if raw else None
        except ValueError:
            hostname = None

        if not hostname:
            stripped = re.sub(r'^https?://', '', raw)
            stripped = re.sub(r'^www\.', '', stripped)
            return stripped.split('/')[0]

        return re.sub(r'^www\.', '', hostname)

    def get(self, url: str) -> Optional[CacheHit]:
        key = self.normalize_url(url)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            age = self._clock() - entry.timestamp
            if age > self.ttl_seconds:
                del self._entries[key]
                logger.info(f"Cache entry expired for {key}")
                return None

            self._entries.move_to_end(key)

        logger.info(f"Cache hit for {key} ({self.format_age(age)})")
        return CacheHit(
            data=entry.data,
            age_seconds=age,
            created_at=datetime.fromtimestamp(entry.timestamp, tz=timezone.utc),
            url=entry.url
        )

    def set(self, url: str, data: Any) -> None:
        key = self.normalize_url(url)
        with self._lock:
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.info(f"Cache full, evicted {evicted}")
            self._entries[key] = CacheEntry(data=data, timestamp=self._clock(), url=url)

    def delete(self, url: str) -> bool:
        key = self.normalize_url(url)
        with self._lock:
            return self._entries.pop(key, None) is not None

    def has(self, url: str) -> bool:
        return self.get(url) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @staticmethod
    def format_age(seconds: float) -> str:
        """Human readable age of a cache entry"""
        minutes = int(seconds // 60)
        hours = int(seconds // 3600)
        days = int(seconds // 86400)

        if days > 0:
            return f"{days} day{'s' if days > 1 else ''} ago"
        if hours > 0:
            return f"{hours} hour{'s' if hours > 1 else ''} ago"
        if minutes > 0:
            return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
        return "just now"
