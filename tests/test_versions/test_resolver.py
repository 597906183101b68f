"""Unit tests for VersionResolver (shipwright.versions.resolver).

Tests cover:
- The synchronous path (cache of any age, then the static table)
- The asynchronous path (fresh cache, registry, stale cache, static table)
- Failure isolation between concurrent lookups
- Cache writes (successes only, one merged write)
- Construction from Settings
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from shipwright.config import Settings
from shipwright.versions import JsonFileStore, MemoryStore, VersionCache, VersionResolver
from shipwright.versions.fallback import FALLBACK_VERSIONS

NOW = 1_700_000_000.0
HOUR = 3600.0


def _resolver(store, client=None, **kwargs) -> VersionResolver:
    return VersionResolver(store, client, refresh_window=6 * HOUR, clock=lambda: NOW, **kwargs)


def _seed(store, versions: dict[str, str], age_hours: float) -> None:
    VersionCache(versions=versions, last_fetch=NOW - age_hours * HOUR).save(store)


# ---------------------------------------------------------------------------
# Synchronous resolution
# ---------------------------------------------------------------------------


class TestSynchronousResolve:
    @pytest.mark.unit
    def test_static_table_when_cache_empty(self, memory_store):
        resolver = _resolver(memory_store)
        assert resolver.resolve("express") == FALLBACK_VERSIONS["express"]

    @pytest.mark.unit
    def test_unknown_package_resolves_to_latest(self, memory_store):
        assert _resolver(memory_store).resolve("never-heard-of-it") == "latest"

    @pytest.mark.unit
    def test_cached_value_of_any_age_wins(self, memory_store):
        _seed(memory_store, {"express": "^5.0.1"}, age_hours=24 * 30)
        assert _resolver(memory_store).resolve("express") == "^5.0.1"

    @pytest.mark.unit
    def test_resolve_all_preserves_order(self, memory_store):
        _seed(memory_store, {"zod": "^3.25.0"}, age_hours=1)
        resolved = _resolver(memory_store).resolve_all(["zod", "express", "zod"])
        assert list(resolved) == ["zod", "express"]
        assert resolved["zod"] == "^3.25.0"
        assert resolved["express"] == FALLBACK_VERSIONS["express"]

    @pytest.mark.unit
    def test_sync_path_never_contacts_registry(self, memory_store, registry_client, registry):
        _resolver(memory_store, registry_client).resolve_all(["express", "zod"])
        assert registry.requests == []


# ---------------------------------------------------------------------------
# Asynchronous resolution
# ---------------------------------------------------------------------------


class TestAsyncResolve:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fresh_cache_skips_registry(self, memory_store, registry_client, registry):
        _seed(memory_store, {"express": "^4.19.0"}, age_hours=1)
        resolver = _resolver(memory_store, registry_client)
        assert await resolver.resolve_async("express") == "^4.19.0"
        assert registry.requests == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stale_cache_refetches(self, memory_store, registry_client, registry):
        _seed(memory_store, {"express": "^4.19.0"}, age_hours=7)
        resolver = _resolver(memory_store, registry_client)
        assert await resolver.resolve_async("express") == "^4.21.2"
        assert registry.requests == ["/express/latest"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fresh_cache_miss_is_fetched(self, memory_store, registry_client, registry):
        _seed(memory_store, {"express": "^4.19.0"}, age_hours=1)
        resolved = await _resolver(memory_store, registry_client).resolve_many(["express", "zod"])
        assert resolved == {"express": "^4.19.0", "zod": "^3.24.1"}
        assert registry.requests == ["/zod/latest"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_falls_back_to_stale_cache(self, memory_store, registry_client, registry):
        _seed(memory_store, {"express": "^4.19.0"}, age_hours=48)
        registry.failures["express"] = httpx.ConnectError("offline")
        assert await _resolver(memory_store, registry_client).resolve_async("express") == "^4.19.0"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_without_cache_uses_static_table(self, memory_store, registry_client):
        resolved = await _resolver(memory_store, registry_client).resolve_async("helmet")
        assert resolved == FALLBACK_VERSIONS["helmet"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_one_failure_does_not_affect_siblings(self, memory_store, registry_client, registry):
        registry.failures["zod"] = httpx.ReadTimeout("slow")
        resolved = await _resolver(memory_store, registry_client).resolve_many(
            ["express", "zod", "typescript"]
        )
        assert resolved == {
            "express": "^4.21.2",
            "zod": FALLBACK_VERSIONS["zod"],
            "typescript": "^5.7.3",
        }

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_duplicate_names_fetched_once(self, memory_store, registry_client, registry):
        resolved = await _resolver(memory_store, registry_client).resolve_many(["zod", "zod"])
        assert resolved == {"zod": "^3.24.1"}
        assert registry.requests == ["/zod/latest"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_force_bypasses_fresh_cache(self, memory_store, registry_client, registry):
        _seed(memory_store, {"express": "^4.0.0"}, age_hours=60 / HOUR)
        resolver = _resolver(memory_store, registry_client)
        resolved = await resolver.resolve_many(["express"], force=True)
        assert resolved == {"express": "^4.21.2"}
        assert registry.requests == ["/express/latest"]
        assert resolver.snapshot().versions["express"] == "^4.21.2"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_forced_failure_keeps_cached_value(self, memory_store, registry_client, registry):
        _seed(memory_store, {"express": "^4.0.0"}, age_hours=1)
        registry.failures["express"] = httpx.ConnectError("offline")
        resolved = await _resolver(memory_store, registry_client).resolve_many(["express"], force=True)
        assert resolved == {"express": "^4.0.0"}


# ---------------------------------------------------------------------------
# Cache writes
# ---------------------------------------------------------------------------


class TestCacheWrites:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_successes_are_cached_with_timestamp(self, memory_store, registry_client):
        resolver = _resolver(memory_store, registry_client)
        await resolver.resolve_many(["express", "zod"])
        cache = resolver.snapshot()
        assert cache.versions == {"express": "^4.21.2", "zod": "^3.24.1"}
        assert cache.last_fetch == NOW

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failures_are_never_cached(self, memory_store, registry_client):
        resolver = _resolver(memory_store, registry_client)
        await resolver.resolve_many(["express", "not-on-the-registry"])
        assert "not-on-the-registry" not in resolver.snapshot().versions

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_all_failures_leave_cache_untouched(self, memory_store, registry_client, registry):
        _seed(memory_store, {"express": "^4.0.0"}, age_hours=10)
        registry.failures["express"] = httpx.ConnectError("down")
        resolver = _resolver(memory_store, registry_client)
        await resolver.resolve_many(["express"])
        cache = resolver.snapshot()
        assert cache.versions == {"express": "^4.0.0"}
        assert cache.last_fetch == NOW - 10 * HOUR

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fetch_keeps_unrelated_entries(self, memory_store, registry_client):
        _seed(memory_store, {"react": "^18.3.1"}, age_hours=10)
        resolver = _resolver(memory_store, registry_client)
        await resolver.resolve_many(["zod"])
        assert resolver.snapshot().versions == {"react": "^18.3.1", "zod": "^3.24.1"}

    @pytest.mark.unit
    def test_clear(self, memory_store):
        _seed(memory_store, {"express": "^4.0.0"}, age_hours=1)
        resolver = _resolver(memory_store)
        resolver.clear()
        assert resolver.snapshot() == VersionCache()
        assert resolver.resolve("express") == FALLBACK_VERSIONS["express"]


# ---------------------------------------------------------------------------
# Offline behaviour
# ---------------------------------------------------------------------------


class TestOffline:
    @pytest.mark.unit
    def test_no_client_means_offline(self, memory_store):
        assert _resolver(memory_store).offline is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_offline_flag_blocks_registry(self, memory_store, registry_client, registry):
        resolver = _resolver(memory_store, registry_client, offline=True)
        resolved = await resolver.resolve_many(["express"])
        assert resolved == {"express": FALLBACK_VERSIONS["express"]}
        assert registry.requests == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_offline_only_uses_given_table(self):
        resolver = VersionResolver.offline_only({"express": "^9.9.9"})
        assert await resolver.resolve_async("express") == "^9.9.9"
        assert await resolver.resolve_async("zod") == "latest"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_prefetch_common_covers_static_table(self, memory_store, registry_client, registry):
        resolver = _resolver(memory_store, registry_client)
        resolved = await resolver.prefetch_common()
        assert set(resolved) == set(FALLBACK_VERSIONS)
        assert len(registry.requests) == len(FALLBACK_VERSIONS)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_forced_prefetch_ignores_fresh_cache(self, memory_store, registry_client, registry):
        _seed(memory_store, dict(FALLBACK_VERSIONS), age_hours=1)
        await _resolver(memory_store, registry_client).prefetch_common(force=True)
        assert len(registry.requests) == len(FALLBACK_VERSIONS)


# ---------------------------------------------------------------------------
# Settings wiring
# ---------------------------------------------------------------------------


class TestFromSettings:
    @pytest.mark.unit
    def test_online_settings(self, tmp_path: Path):
        settings = Settings(cache_dir=tmp_path, registry_url="https://registry.test", fetch_timeout=2)
        resolver = VersionResolver.from_settings(settings)
        assert resolver.offline is False
        assert resolver.client is not None
        assert resolver.client.base_url == "https://registry.test"
        assert resolver.refresh_window == settings.refresh_window_seconds
        assert isinstance(resolver.store, JsonFileStore)
        assert resolver.store.path == settings.version_cache_path

    @pytest.mark.unit
    def test_offline_settings(self, tmp_path: Path):
        resolver = VersionResolver.from_settings(Settings(cache_dir=tmp_path, offline=True))
        assert resolver.offline is True
        assert resolver.client is None

    @pytest.mark.unit
    def test_memory_store_accepted(self):
        resolver = VersionResolver(MemoryStore())
        assert resolver.resolve("typescript") == FALLBACK_VERSIONS["typescript"]
