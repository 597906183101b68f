"""Package version resolution backed by a persistent cache and a static table."""

from shipwright.versions.cache import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    VersionCache,
)
from shipwright.versions.fallback import FALLBACK_VERSIONS
from shipwright.versions.resolver import VersionResolver

__all__ = [
    "FALLBACK_VERSIONS",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "VersionCache",
    "VersionResolver",
]
