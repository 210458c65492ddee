"""
In-process cache of effective permission sets.

Entries are keyed by (user_id, org_id, location_id or "global") and expire after
a fixed TTL. Write paths call invalidate/invalidate_user/invalidate_all after a
successful change so the next check recomputes. Concurrent misses for one key
share a single resolver call.

One instance is created per application (see main.py) and handed to routes
through get_permission_cache; tests build their own.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, Optional, Tuple

from staffdesk.modules.permissions.codes import PermissionSet, has_permission
from staffdesk.modules.permissions.resolver import PermissionResolver
from staffdesk.modules.permissions.schemas import GLOBAL_LOCATION, PermissionContext

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str, str]

EMPTY: FrozenSet[str] = PermissionSet()


@dataclass
class CacheEntry:
    permissions: FrozenSet[str]
    computed_at: float
    expires_at: float


def cache_key(user_id: str, org_id: str, location_id: Optional[str] = None) -> CacheKey:
    return (user_id, org_id, location_id or GLOBAL_LOCATION)


class PermissionCache:
    def __init__(
        self,
        resolver: PermissionResolver,
        ttl_seconds: float = 30.0,
        failure_ttl_seconds: float = 0.0,
        max_entries: int = 10000,
        sweep_interval_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            resolver: Computes the permission set on a miss.
            ttl_seconds: Lifetime of a successfully computed entry.
            failure_ttl_seconds: Lifetime of the empty set stored after a failed
                resolution. 0 means failures are not cached.
            max_entries: Upper bound on stored entries; oldest are evicted first.
            sweep_interval_seconds: Minimum time between expired-entry sweeps,
                defaults to ttl_seconds.
            clock: Monotonic time source.
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if failure_ttl_seconds < 0:
            raise ValueError("failure_ttl_seconds must not be negative")
        self.resolver = resolver
        self.ttl_seconds = ttl_seconds
        self.failure_ttl_seconds = min(failure_ttl_seconds, ttl_seconds)
        self.max_entries = max_entries
        self.sweep_interval_seconds = sweep_interval_seconds if sweep_interval_seconds is not None else ttl_seconds
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._inflight: Dict[CacheKey, asyncio.Task] = {}
        self._last_sweep = clock()
        self.hits = 0
        self.misses = 0
        self.failures = 0

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self._entries),
            "inflight": len(self._inflight),
            "hits": self.hits,
            "misses": self.misses,
            "failures": self.failures,
        }

    # Lookups

    async def get_permissions(self, user_id: str, context: PermissionContext) -> FrozenSet[str]:
        """Effective permission set for user in context, from cache or freshly resolved.

        Without an organization the set is empty and the store is not queried.
        Never raises for data-access problems: a failed resolution yields an
        empty set.
        """
        if not context.org_id:
            return EMPTY
        key = cache_key(user_id, context.org_id, context.location_id)
        now = self._clock()
        self._sweep_if_due(now)

        entry = self._entries.get(key)
        if entry is not None:
            if now < entry.expires_at:
                self.hits += 1
                logger.debug("Permission cache HIT: %s", key)
                return entry.permissions
            del self._entries[key]

        self.misses += 1
        logger.debug("Permission cache MISS: %s", key)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, user_id, context))
            self._inflight[key] = task
        # A cancelled caller must not cancel the fetch other callers share.
        return await asyncio.shield(task)

    async def check(self, user_id: str, code: str, context: PermissionContext) -> bool:
        if not isinstance(code, str):
            raise TypeError(f"permission code must be a string, got {type(code).__name__}")
        permissions = await self.get_permissions(user_id, context)
        return has_permission(permissions, code)

    async def check_many(
        self, user_id: str, codes: Iterable[str], context: PermissionContext
    ) -> Dict[str, bool]:
        """Evaluate every code against one lookup. Unmatched codes map to False."""
        codes = list(codes)
        for code in codes:
            if not isinstance(code, str):
                raise TypeError(f"permission codes must be strings, got {type(code).__name__}")
        permissions = await self.get_permissions(user_id, context)
        return {code: has_permission(permissions, code) for code in codes}

    # Invalidation

    def invalidate(self, user_id: str, org_id: str, location_id: Optional[str] = None) -> None:
        """Drop the single entry for (user, org, location or global)."""
        key = cache_key(user_id, org_id, location_id)
        self._entries.pop(key, None)
        # An in-flight fetch may have read the old rows; keep it from storing them.
        self._inflight.pop(key, None)
        logger.info("Permission cache INVALIDATE: %s", key)

    def invalidate_user(self, user_id: str, org_id: str) -> int:
        """Drop every entry of user in org, whatever the location. Returns the count."""
        keys = [k for k in self._entries if k[0] == user_id and k[1] == org_id]
        for key in keys:
            del self._entries[key]
        for key in [k for k in self._inflight if k[0] == user_id and k[1] == org_id]:
            del self._inflight[key]
        logger.info("Permission cache INVALIDATE user %s in org %s (%s entries)", user_id, org_id, len(keys))
        return len(keys)

    def invalidate_all(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        self._inflight.clear()
        logger.info("Permission cache CLEARED (%s entries)", count)

    # Internals

    async def _load(self, key: CacheKey, user_id: str, context: PermissionContext) -> FrozenSet[str]:
        task = asyncio.current_task()
        try:
            try:
                permissions = await self.resolver.resolve(user_id, context.org_id, context.location_id)
                ttl = self.ttl_seconds
            except Exception:
                self.failures += 1
                logger.exception(
                    "Permission resolution failed for user %s in org %s; denying all",
                    user_id, context.org_id,
                )
                permissions = EMPTY
                ttl = self.failure_ttl_seconds

            # Only the fetch still registered for this key may populate it; an
            # invalidation during the fetch unregisters it.
            if ttl > 0 and self._inflight.get(key) is task:
                self._store(key, permissions, ttl)
            return permissions
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

    def _store(self, key: CacheKey, permissions: FrozenSet[str], ttl: float) -> None:
        now = self._clock()
        self._entries.pop(key, None)
        while self._entries and len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[key] = CacheEntry(permissions=permissions, computed_at=now, expires_at=now + ttl)

    def _sweep_if_due(self, now: float) -> None:
        if now - self._last_sweep < self.sweep_interval_seconds:
            return
        self._last_sweep = now
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Permission cache swept %s expired entries", len(expired))
