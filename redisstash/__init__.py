"""
redisstash - Redis Cache Adapter

Stores serialized application data in Redis on behalf of a caching
framework, with enumerable and flushable keys via a tracking set.
"""

__version__ = "1.0.0"

from .cache import CacheInterface, RedisCacheBackend, create_cache, get_cache
from .config import AdapterConfig

__all__ = [
    "AdapterConfig",
    "CacheInterface",
    "RedisCacheBackend",
    "create_cache",
    "get_cache",
]
