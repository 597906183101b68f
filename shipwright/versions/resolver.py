"""Dependency version resolution.

Answers "which range should this manifest declare for package X?" from, in
order: a fresh cache entry, a live registry lookup (async paths only), the
last known cached value regardless of age, and the bundled static table.
Resolution never raises.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Iterable, Mapping, Optional

from shipwright.config import Settings
from shipwright.registry_client import RegistryClient, RegistryLookup
from shipwright.versions.cache import CACHE_KEY, JsonFileStore, KeyValueStore, MemoryStore, VersionCache
from shipwright.versions.fallback import FALLBACK_VERSIONS, UNKNOWN_VERSION

DEFAULT_REFRESH_WINDOW = 6 * 60 * 60


class VersionResolver:
    """Resolve npm package names to installable version ranges.

    The resolver owns no global state: the store, the registry client and
    the clock are injected, and one instance is created per invocation.

    Args:
        store: Persistent key/value store holding the version cache.
        client: Registry client for live lookups.  ``None`` disables the
            live tier, as does ``offline=True``.
        fallback: Static table consulted last.
        refresh_window: Cache entries younger than this many seconds are
            used without contacting the registry.
        clock: Returns the current time in epoch seconds.
    """

    def __init__(
        self,
        store: KeyValueStore,
        client: Optional[RegistryClient] = None,
        *,
        fallback: Mapping[str, str] = FALLBACK_VERSIONS,
        refresh_window: float = DEFAULT_REFRESH_WINDOW,
        clock: Callable[[], float] = time.time,
        offline: bool = False,
    ) -> None:
        self.store = store
        self.client = client
        self.fallback = dict(fallback)
        self.refresh_window = refresh_window
        self.clock = clock
        self.offline = offline or client is None

    @classmethod
    def from_settings(cls, settings: Settings) -> "VersionResolver":
        """Resolver wired to the on-disk cache and the configured registry."""
        client = None
        if not settings.offline:
            client = RegistryClient(settings.registry_url, timeout=settings.fetch_timeout)
        return cls(
            JsonFileStore(settings.version_cache_path),
            client,
            refresh_window=settings.refresh_window_seconds,
            offline=settings.offline,
        )

    @classmethod
    def offline_only(cls, fallback: Mapping[str, str] = FALLBACK_VERSIONS) -> "VersionResolver":
        """Resolver that only ever answers from the static table."""
        return cls(MemoryStore(), None, fallback=fallback, offline=True)

    # ------------------------------------------------------------------
    # Cache access
    # ------------------------------------------------------------------

    def snapshot(self) -> VersionCache:
        """Current contents of the persistent cache."""
        return VersionCache.load(self.store)

    def clear(self) -> None:
        """Drop every cached version; the next lookup goes to the registry."""
        self.store.delete(CACHE_KEY)

    def _static(self, name: str) -> str:
        return self.fallback.get(name, UNKNOWN_VERSION)

    # ------------------------------------------------------------------
    # Synchronous path
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> str:
        """Cached value of any age, else the static table.  No network."""
        cached = self.snapshot().versions.get(name)
        return cached or self._static(name)

    def resolve_all(self, names: Iterable[str]) -> dict[str, str]:
        """Synchronous batch variant reading the cache once."""
        versions = self.snapshot().versions
        return {name: versions.get(name) or self._static(name) for name in names}

    # ------------------------------------------------------------------
    # Asynchronous path
    # ------------------------------------------------------------------

    async def resolve_async(self, name: str) -> str:
        """Resolve one package, trying the registry when the cache is stale."""
        result = await self.resolve_many([name])
        return result[name]

    async def resolve_many(self, names: Iterable[str], *, force: bool = False) -> dict[str, str]:
        """Resolve many packages, fetching the stale ones concurrently.

        One failing or slow lookup never affects its siblings.  Successful
        lookups are merged into the cache in a single write; failures are
        never written.  With ``force`` every name goes to the registry even
        when the cache is fresh.
        """
        wanted = list(dict.fromkeys(names))
        cache = self.snapshot()
        now = self.clock()
        fresh = not force and cache.is_fresh(self.refresh_window, now)

        resolved: dict[str, str] = {}
        pending: list[str] = []
        for name in wanted:
            if fresh and name in cache.versions:
                resolved[name] = cache.versions[name]
            else:
                pending.append(name)

        fetched: dict[str, str] = {}
        if pending and not self.offline:
            fetched = await self._fetch_all(pending)
            if fetched:
                VersionCache.load(self.store).merged(fetched, now).save(self.store)

        for name in pending:
            resolved[name] = fetched.get(name) or cache.versions.get(name) or self._static(name)

        return {name: resolved[name] for name in wanted}

    async def prefetch_common(self, *, force: bool = False) -> dict[str, str]:
        """Refresh the cache for every package in the static table."""
        return await self.resolve_many(sorted(self.fallback), force=force)

    async def _fetch_all(self, names: list[str]) -> dict[str, str]:
        assert self.client is not None
        async with self.client:
            outcomes = await asyncio.gather(
                *(self.client.latest_version(name) for name in names),
                return_exceptions=True,
            )
        fetched: dict[str, str] = {}
        for outcome in outcomes:
            if isinstance(outcome, RegistryLookup) and outcome.success and outcome.version_range:
                fetched[outcome.package] = outcome.version_range
        return fetched
