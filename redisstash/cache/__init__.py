"""
redisstash - Cache Module

Redis cache adapter with lazy connection handling, key namespacing,
TTL resolution and a tracking set for enumeration and bulk invalidation.

Usage:
    from redisstash.cache import create_cache

    cache = create_cache()
    cache.save("key", "value", lifetime=3600)
    value = cache.get("key")
"""

from .backends.redis import RedisCacheBackend
from .codec import ContentCodec, JsonCodec, OutputCodec
from .connection import ConnectionManager, ConnectionState
from .factory import (
    close_all_caches,
    create_cache,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from .interface import CacheInterface
from .namespace import KeyNamespace, is_store_native, parse_store_native, resolve_ttl
from .stats import ShadowIndex, StatsSetMaintainer

__all__ = [
    # Factory functions
    "create_cache",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Interface and backend
    "CacheInterface",
    "RedisCacheBackend",
    # Collaborators
    "ConnectionManager",
    "ConnectionState",
    "KeyNamespace",
    "ShadowIndex",
    "StatsSetMaintainer",
    "ContentCodec",
    "JsonCodec",
    "OutputCodec",
    # Helpers
    "resolve_ttl",
    "is_store_native",
    "parse_store_native",
]
