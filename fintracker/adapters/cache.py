"""
Bounded expiring cache for fetched data and fallback payloads.
"""

import asyncio
import contextlib
import json
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from fintracker.core.logging import logger


@dataclass
class CacheEntry:
    """
    Cache entry with an absolute expiry time.
    """

    key: str
    value: Any
    expires_at: float
    created_at: float = field(default=0.0)

    def is_expired(self, now: float) -> bool:
        """An entry is dead from its expiry instant onwards."""
        return now >= self.expires_at

    def remaining_ttl(self, now: float) -> float:
        """Get remaining TTL in seconds."""
        return max(0.0, self.expires_at - now)


class ExpiringCache:
    """
    Size-bounded key/value cache with per-entry expiry.

    Eviction is by insertion order: when a new key arrives at capacity the
    oldest inserted entry goes, regardless of how recently it was read.
    Hit/miss counters are scoped to this cache and reset by ``clear()``.
    """

    def __init__(
        self,
        max_size: int = 100,
        default_ttl: float = 60.0,
        cleanup_interval: float = 600.0,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize expiring cache.

        Args:
            max_size: Maximum number of live entries
            default_ttl: Lifetime in seconds used when ``set`` gets no ttl
            cleanup_interval: Seconds between background expiry sweeps
            clock: Time source returning epoch seconds
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.max_size = max_size
        self.default_ttl = default_ttl
        self.cleanup_interval = cleanup_interval
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hit_count = 0
        self._miss_count = 0
        self._stats = {"evictions": 0, "expirations": 0, "cleanups": 0}
        self._cleanup_task: asyncio.Task[None] | None = None

        logger.debug(f"ExpiringCache initialized with max size: {self.max_size}")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def set(self, key: str, value: Any, ttl: float | None = None) -> bool:
        """
        Store value in cache with expiry.

        Args:
            key: Cache key
            value: Value to cache, ``None`` is rejected
            ttl: Lifetime in seconds, uses default if None

        Returns:
            True if the value was stored
        """
        if ttl is None:
            ttl = self.default_ttl

        if not key or not isinstance(key, str) or value is None:
            logger.warning(f"ExpiringCache.set: invalid key or value for {key!r}")
            return False
        if (
            isinstance(ttl, bool)
            or not isinstance(ttl, int | float)
            or not math.isfinite(ttl)
            or ttl <= 0
        ):
            logger.warning(
                f"ExpiringCache.set: ttl must be finite and positive, got {ttl!r} for {key}"
            )
            return False

        try:
            now = self._clock()
            existing = self._entries.get(key)
            if existing is not None:
                # Overwrite keeps the existing insertion slot.
                existing.value = value
                existing.expires_at = now + ttl
            else:
                if len(self._entries) >= self.max_size:
                    self._evict_oldest()
                self._entries[key] = CacheEntry(
                    key=key, value=value, expires_at=now + ttl, created_at=now
                )
            logger.debug(f"Cached: {key} (expires in {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"ExpiringCache.set error for {key}: {e}")
            return False

    def get(self, key: str) -> Any | None:
        """
        Get value from cache if it exists and hasn't expired.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        try:
            entry = self._entries.get(key) if key else None

            if entry is None:
                self._miss_count += 1
                return None

            if entry.is_expired(self._clock()):
                self._remove(key)
                self._stats["expirations"] += 1
                self._miss_count += 1
                logger.debug(f"Cache expired: {key}")
                return None

            self._hit_count += 1
            return entry.value
        except Exception as e:
            logger.error(f"ExpiringCache.get error for {key}: {e}")
            self._miss_count += 1
            return None

    def has(self, key: str) -> bool:
        """Check for a live entry; counts as exactly one hit or miss."""
        return self.get(key) is not None

    def delete(self, key: str) -> bool:
        """
        Delete a specific key from cache.

        Returns:
            True if key was found and deleted
        """
        removed = self._remove(key)
        if removed:
            logger.debug(f"Removed from cache: {key}")
        return removed

    def clear(self) -> None:
        """Clear all entries and reset hit/miss counters."""
        size = len(self._entries)
        self._entries.clear()
        self._hit_count = 0
        self._miss_count = 0
        logger.info(f"Cache cleared: {size} items removed")

    def cleanup(self) -> int:
        """
        Remove expired entries from cache.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired_keys = [
            key for key, entry in self._entries.items() if entry.is_expired(now)
        ]

        for key in expired_keys:
            self._remove(key)

        self._stats["expirations"] += len(expired_keys)
        self._stats["cleanups"] += 1

        if expired_keys:
            logger.info(f"Cache cleanup: {len(expired_keys)} expired items removed")
        return len(expired_keys)

    def _remove(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def _evict_oldest(self) -> None:
        oldest_key = next(iter(self._entries), None)
        if oldest_key is not None:
            self._remove(oldest_key)
            self._stats["evictions"] += 1
            logger.debug(f"Evicted oldest cache entry: {oldest_key}")

    async def start_cleanup(self) -> None:
        """Start the periodic expiry sweep on the running event loop."""
        if self.cleanup_running:
            return

        async def cleanup_loop() -> None:
            while True:
                try:
                    await asyncio.sleep(self.cleanup_interval)
                    self.cleanup()
                except asyncio.CancelledError:
                    logger.info("Cache cleanup task cancelled")
                    break
                except Exception as e:
                    logger.error(f"Error during periodic cache cleanup: {e}")

        self._cleanup_task = asyncio.create_task(cleanup_loop())
        logger.info(
            f"Started cache cleanup task with {self.cleanup_interval}s interval"
        )

    async def stop_cleanup(self) -> None:
        """Stop the periodic expiry sweep."""
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._cleanup_task
            logger.info("Cache cleanup task stopped")
        self._cleanup_task = None

    @property
    def cleanup_running(self) -> bool:
        return self._cleanup_task is not None and not self._cleanup_task.done()

    def get_memory_usage(self) -> str:
        """Rough size of cached values as JSON, in KB."""
        total_size = 0
        for entry in self._entries.values():
            value = entry.value
            if hasattr(value, "model_dump_json"):
                total_size += len(value.model_dump_json())
            else:
                total_size += len(json.dumps(value, default=str))
        return f"{round(total_size / 1024)}KB"

    def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        total_requests = self._hit_count + self._miss_count
        hit_rate = (
            (self._hit_count / total_requests) * 100 if total_requests > 0 else 0.0
        )

        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "hit_count": self._hit_count,
            "miss_count": self._miss_count,
            "hit_rate": round(hit_rate, 2),
            "evictions": self._stats["evictions"],
            "expirations": self._stats["expirations"],
            "cleanups": self._stats["cleanups"],
            "memory_usage": self.get_memory_usage(),
            "items": list(self._entries.keys()),
        }

    def get_entries_info(self) -> list[dict[str, Any]]:
        """
        Get information about current cache entries.

        Returns:
            List of entry information dictionaries, newest first
        """
        now = self._clock()
        entries = [
            {
                "key": key,
                "age_seconds": now - entry.created_at,
                "remaining_ttl": entry.remaining_ttl(now),
                "is_expired": entry.is_expired(now),
                "value_type": type(entry.value).__name__,
            }
            for key, entry in self._entries.items()
        ]
        entries.reverse()
        return entries
