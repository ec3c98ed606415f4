"""Caching and persistence of resolved family networks."""

from kalvian_roots.storage.base import CachedFamily, InMemoryNetworkStore, NetworkStore
from kalvian_roots.storage.cache import CacheStatus, FamilyNetworkCache
from kalvian_roots.storage.sqlite import CachedNetworkRecord, SQLiteNetworkStore

__all__ = [
    "CachedFamily",
    "CacheStatus",
    "FamilyNetworkCache",
    "InMemoryNetworkStore",
    "NetworkStore",
    "CachedNetworkRecord",
    "SQLiteNetworkStore",
]
