"""Holiday lookup cache.

Memoizes resolution verdicts per ``(region code, date)`` for a fixed TTL
(30 s by default). Verdicts that depend on region or custom-holiday records
are also filed in two secondary indices so that a mutation can drop exactly
the entries it may have changed:

- region index: region code -> keys resolved for that code
- state index:  state code  -> region-dependent keys of the state's
  municipalities

Fixed and national movable verdicts carry no index entries; no mutation can
change them, so they only leave the cache by expiring.

The primary map and both indices are only touched while holding one
``asyncio.Lock``, so a key is never present in the map without its index
entries or the other way round. Expiry is checked on every ``get`` and a
background task calls :meth:`HolidayCache.sweep` periodically.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from feriados.config import settings
from feriados.models.region import parent_state_code
from feriados.services.verdict import ResolutionVerdict, VerdictSource

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30.0


@dataclass(frozen=True)
class CacheKey:
    region_code: str
    day: date


@dataclass(frozen=True)
class CacheEntry:
    verdict: ResolutionVerdict
    expires_at: float
    region_bucket: str | None = None
    state_bucket: str | None = None


def index_buckets(region_code: str, verdict: ResolutionVerdict) -> tuple[str | None, str | None]:
    """Return the (region, state) buckets a verdict must be filed under.

    Every region-dependent verdict of a municipality goes under its parent
    state too. Even a municipal custom record, which wins over the state's
    records, hides behind the region's Carnaval/Corpus Christi toggle, and a
    state-wide toggle change only invalidates the state bucket. A state
    resolving its own code has no distinct parent, so only the region
    bucket applies.
    """
    if not verdict.source.depends_on_region_data:
        return None, None
    state_code = parent_state_code(region_code)
    if state_code == region_code:
        return region_code, None
    return region_code, state_code


class HolidayCache:
    """In-process read-through cache with region/state invalidation indices."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        enabled: bool = True,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.enabled = enabled
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._region_index: dict[str, set[CacheKey]] = {}
        self._state_index: dict[str, set[CacheKey]] = {}
        self._epoch = 0
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def ticket(self) -> int:
        """Snapshot of the invalidation counter, taken before reading the data source.

        Pass it back to :meth:`put`; if any invalidation ran in between, a
        region-dependent verdict is discarded instead of cached.
        """
        return self._epoch

    async def get(self, region_code: str, day: date) -> ResolutionVerdict | None:
        """Return the cached verdict, or None on a miss or an expired entry."""
        if not self.enabled:
            return None
        key = CacheKey(region_code, day)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                self._evict(key)
                return None
            return entry.verdict

    async def put(
        self,
        region_code: str,
        day: date,
        verdict: ResolutionVerdict,
        ticket: int | None = None,
    ) -> bool:
        """Store a verdict. Returns False when it was not cached."""
        if not self.enabled or verdict.source is VerdictSource.UNKNOWN_REGION:
            return False
        key = CacheKey(region_code, day)
        region_bucket, state_bucket = index_buckets(region_code, verdict)
        async with self._lock:
            if region_bucket is not None and ticket is not None and ticket != self._epoch:
                logger.debug("Dropping stale verdict for %s/%s", region_code, day)
                return False
            self._evict(key)
            self._entries[key] = CacheEntry(
                verdict=verdict,
                expires_at=self._clock() + self.ttl_seconds,
                region_bucket=region_bucket,
                state_bucket=state_bucket,
            )
            if region_bucket is not None:
                self._region_index.setdefault(region_bucket, set()).add(key)
            if state_bucket is not None:
                self._state_index.setdefault(state_bucket, set()).add(key)
        return True

    async def invalidate_region(self, region_code: str) -> int:
        """Drop every entry filed under ``region_code``. Returns the count removed."""
        async with self._lock:
            self._epoch += 1
            removed = self._drop_bucket(self._region_index, region_code)
        if removed:
            logger.info("Holiday cache: %d entries invalidated for region %s", removed, region_code)
        return removed

    async def invalidate_state(self, state_code: str) -> int:
        """Drop every municipal entry that consulted ``state_code``'s records."""
        async with self._lock:
            self._epoch += 1
            removed = self._drop_bucket(self._state_index, state_code)
        if removed:
            logger.info("Holiday cache: %d entries invalidated for state %s", removed, state_code)
        return removed

    async def invalidate_code(self, region_code: str) -> int:
        """Invalidate a region and its parent state (the state itself for a state code)."""
        removed = await self.invalidate_region(region_code)
        removed += await self.invalidate_state(parent_state_code(region_code))
        return removed

    async def sweep(self) -> int:
        """Remove all expired entries together with their index references."""
        async with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                self._evict(key)
        return len(expired)

    async def clear(self) -> None:
        async with self._lock:
            self._epoch += 1
            self._entries.clear()
            self._region_index.clear()
            self._state_index.clear()

    # -- internals (caller holds the lock) -----------------------------------

    def _drop_bucket(self, index: dict[str, set[CacheKey]], bucket: str) -> int:
        keys = index.pop(bucket, None)
        if not keys:
            return 0
        removed = 0
        for key in keys:
            if self._evict(key):
                removed += 1
        return removed

    def _evict(self, key: CacheKey) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        if entry.region_bucket is not None:
            self._discard(self._region_index, entry.region_bucket, key)
        if entry.state_bucket is not None:
            self._discard(self._state_index, entry.state_bucket, key)
        return True

    @staticmethod
    def _discard(index: dict[str, set[CacheKey]], bucket: str, key: CacheKey) -> None:
        keys = index.get(bucket)
        if keys is None:
            return
        keys.discard(key)
        if not keys:
            del index[bucket]


# Singleton instance
holiday_cache = HolidayCache(
    ttl_seconds=settings.HOLIDAY_CACHE_TTL_SECONDS,
    enabled=settings.HOLIDAY_CACHE_ENABLED,
)
