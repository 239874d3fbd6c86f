from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import httpx

from career_pages.core.config import get_settings

logger = logging.getLogger(__name__)

STALE_VIEWS = ("edit", "preview", "careers")


@dataclass(slots=True)
class _CacheEntry:
    value: Any
    expires_at: float


class ViewCache:
    """Process-local cache of rendered public views, keyed by path and query.

    Holds at most ``max_entries``; expired entries are swept on write and the
    least recently used entry is evicted when the cache is full.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 256,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[tuple[str, str], _CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: str, variant: str = "") -> Any | None:
        entry = self._entries.get((path, variant))
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[(path, variant)]
            return None
        self._entries.move_to_end((path, variant))
        return entry.value

    def set(self, path: str, value: Any, variant: str = "") -> None:
        if self.ttl_seconds <= 0 or self.max_entries <= 0:
            return
        now = self._clock()
        self._sweep(now)
        key = (path, variant)
        self._entries[key] = _CacheEntry(value=value, expires_at=now + self.ttl_seconds)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def _sweep(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]

    def invalidate(self, path: str) -> int:
        keys = [key for key in self._entries if key[0] == path]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        self._entries.clear()


def stale_paths(slug: str) -> list[str]:
    return [f"/{slug}/{view}" for view in STALE_VIEWS]


class RevalidationHub:
    """Tells cached views of a company's page that they are stale."""

    def __init__(
        self,
        cache: ViewCache,
        webhook_url: str | None = None,
        timeout_seconds: float = 5.0,
    ) -> None:
        self.cache = cache
        self.webhook_url = webhook_url
        self.timeout_seconds = timeout_seconds

    async def revalidate_company(self, slug: str) -> list[str]:
        paths = stale_paths(slug)
        dropped = sum(self.cache.invalidate(path) for path in paths)
        logger.info("revalidated company views slug=%s cached_entries_dropped=%s", slug, dropped)
        if self.webhook_url:
            await self._notify(paths)
        return paths

    async def _notify(self, paths: list[str]) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(self.webhook_url, json={"paths": paths})
        except httpx.HTTPError as exc:
            # Cached copies still expire on their TTL.
            logger.warning("revalidation webhook unavailable url=%s error=%s", self.webhook_url, exc)
            return
        if response.status_code >= 400:
            logger.warning(
                "revalidation webhook rejected url=%s status=%s",
                self.webhook_url,
                response.status_code,
            )


@lru_cache
def get_revalidation_hub() -> RevalidationHub:
    settings = get_settings()
    return RevalidationHub(
        cache=ViewCache(
            ttl_seconds=settings.public_cache_ttl_seconds,
            max_entries=settings.public_cache_max_entries,
        ),
        webhook_url=settings.revalidate_webhook_url,
        timeout_seconds=settings.revalidate_timeout_seconds,
    )
