"""
redisstash - Cache Factory

Creates cache backends from configuration and keeps a registry of named
instances, so independent parts of an application can share one backend
(and therefore one Redis connection and one active key).

Examples:
    from redisstash.cache import create_cache, get_cache

    # Uses env-configured settings
    cache = create_cache()

    # Or explicitly supply an AdapterConfig (e.g., for tests)
    from redisstash.config import AdapterConfig
    cfg = AdapterConfig(prefix="test:", stats_key="")
    cache = create_cache(cfg, name="test")
"""

from __future__ import annotations

import logging

from ..config import AdapterConfig, get_config
from ..errors import CacheError, ConfigurationError
from .backends.redis import RedisCacheBackend
from .codec import ContentCodec
from .interface import CacheInterface

logger = logging.getLogger(__name__)

# Global cache instances registry
_cache_instances: dict[str, CacheInterface] = {}


def create_cache(
    config: AdapterConfig | None = None,
    name: str = "default",
    codec: ContentCodec | None = None,
) -> CacheInterface:
    """
    Create a cache backend instance, or return the one registered under ``name``.

    Construction never touches the network; the connection is opened on
    the first operation.

    Args:
        config: Adapter configuration (uses global config if not provided)
        name: Cache instance name (for multiple cache instances)
        codec: Content codec (JsonCodec with the configured lifetime if not provided)

    Returns:
        Configured cache backend instance

    Raises:
        ConfigurationError: If the backend cannot be built from the configuration
    """
    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    if config is None:
        config = get_config().cache

    try:
        cache = RedisCacheBackend(config=config, codec=codec)
    except Exception as e:
        logger.error(
            "Unexpected error creating cache instance '%s': %s",
            name,
            e,
            extra={"cache_name": name, "error": str(e)},
            exc_info=True,
        )
        raise ConfigurationError(
            f"Failed to create cache instance '{name}': {e}",
            details={"cache_name": name, "error": str(e)},
        ) from e

    _cache_instances[name] = cache
    logger.info(
        "Cache instance '%s' created",
        name,
        extra={"cache_name": name, "redis_host": config.host, "redis_port": config.port},
    )
    return cache


def get_cache(name: str = "default") -> CacheInterface:
    """
    Get an existing cache instance by name.

    If the instance doesn't exist, it will be created automatically
    using the global configuration.
    """
    if name not in _cache_instances:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(name=name)

    return _cache_instances[name]


def close_all_caches() -> None:
    """
    Close all cache instances and release their connections.

    Errors closing one instance are logged and do not stop the others.
    """
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        try:
            cache.close()
        except CacheError as e:
            logger.error(
                "Error closing cache instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e)},
            )

    _cache_instances.clear()
    logger.info("All cache instances closed")


def reset_cache_factory() -> None:
    """
    Clear all instance references without closing them.

    Warning: Only use this in testing contexts.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())
