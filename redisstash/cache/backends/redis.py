"""
redisstash - Redis Cache Backend

Synchronous Redis cache adapter with:
- Lazy connect, AUTH and SELECT on first use (see ConnectionManager)
- Prefix namespacing and an "active key" for parameterless calls
- Codec-encoded values, with finite numbers stored unencoded so that
  INCRBY/DECRBY counters and saved numbers share one representation
- A tracking set (stats key) that makes query_keys() and flush() possible

Consistency is best-effort: no locking is done, so a save() racing a
flush() on the same instance (or across processes) may leave either
outcome. Each individual Redis command is atomic.

Example:
    cache = RedisCacheBackend(AdapterConfig(prefix="app:", lifetime=600))
    cache.save("greeting", {"msg": "hello"}, lifetime=60)
    val = cache.get("greeting")
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, TextIO

from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ...config import AdapterConfig
from ...errors import CacheConnectionError, CacheOperationError, StorageError
from ..codec import ContentCodec, JsonCodec
from ..connection import ClientFactory, ConnectionManager
from ..interface import CacheInterface
from ..namespace import KeyNamespace, as_text, is_store_native, parse_store_native, resolve_ttl
from ..stats import ShadowIndex, StatsSetMaintainer

logger = logging.getLogger(__name__)


class RedisCacheBackend(CacheInterface):
    """
    Redis cache backend.

    Notes:
    - Keys are ``config.prefix + key_name``.
    - TTL precedence is explicit lifetime > last lifetime > codec lifetime;
      a TTL <= 0 stores without expiry.
    - Every successful save() adds the key to the tracking set; delete()
      and flush() remove it. Entries Redis expired on its own may linger
      in the set and are tolerated.
    - Only save(), start() and the counters record the active key.
    """

    def __init__(
        self,
        config: AdapterConfig | None = None,
        codec: ContentCodec | None = None,
        client_factory: ClientFactory = Redis,
        output: TextIO | None = None,
        index: ShadowIndex | None = None,
    ) -> None:
        """
        Initialize Redis cache backend.

        Args:
            config: Adapter configuration (defaults when omitted)
            codec: Content codec (JsonCodec with the configured lifetime when omitted)
            client_factory: Builds the Redis client on first use
            output: Sink for buffered content emitted by save() (sys.stdout when omitted)
            index: Shadow index replacing the stats-set maintainer
        """
        self.config = config if config is not None else AdapterConfig()
        self.codec = codec if codec is not None else JsonCodec(lifetime=self.config.lifetime)
        self._connection = ConnectionManager(self.config, client_factory)
        self._keys = KeyNamespace(self.config.prefix)
        if index is None:
            index = StatsSetMaintainer(self.config.stats_key, self._connection.acquire)
        self._index = index
        self._output = output

        self.last_lifetime: int | None = None
        self.started = False

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    # ------------ Helpers ------------

    @contextmanager
    def _redis_errors(self, operation: str, key: str | None = None) -> Generator[None, None, None]:
        """Translate redis-py errors raised inside the block into adapter errors."""
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            self._connection.invalidate()
            logger.error(
                f"Lost connection to Redis during {operation}: {e}",
                extra={"operation": operation, "key": key, "error": str(e)},
            )
            raise CacheConnectionError(self.config.host, self.config.port, {"operation": operation}) from e
        except RedisError as e:
            logger.error(
                f"Redis {operation} failed for key '{key}': {e}",
                extra={"operation": operation, "key": key, "error": str(e)},
            )
            raise CacheOperationError(
                f"Redis {operation} failed: {e}",
                details={"operation": operation, "key": key, "error": str(e)},
            ) from e

    def _emit(self, content: Any) -> None:
        sink = self._output if self._output is not None else sys.stdout
        sink.write(content if isinstance(content, str) else str(content))

    # ------------ Core Interface ------------

    def get(self, key_name: str, lifetime: int | None = None) -> Any | None:
        """Retrieve a value by key; numbers come back unencoded."""
        client = self._connection.acquire()
        key = self._keys.qualify(key_name)

        with self._redis_errors("get", key):
            raw = as_text(client.get(key))

        if raw is None or raw == "":
            self._misses += 1
            return None

        self._hits += 1
        number = parse_store_native(raw)
        if number is not None:
            return number
        return self.codec.decode(raw)

    def save(
        self,
        key_name: str | None = None,
        content: Any = None,
        lifetime: int | None = None,
        stop_buffer: bool = True,
    ) -> bool:
        """Store content (or the codec's buffered output) under a key."""
        client = self._connection.acquire()
        key = self._keys.resolve(key_name, "save")

        cached = content if content is not None else self.codec.get_content()
        prepared = cached if is_store_native(cached) else self.codec.encode(cached)
        ttl = resolve_ttl(lifetime, self.last_lifetime, self.codec.get_lifetime())

        try:
            stored = client.set(key, prepared, ex=ttl)
        except RedisError as e:
            if isinstance(e, (RedisConnectionError, RedisTimeoutError)):
                self._connection.invalidate()
            logger.error(
                f"Failed to set key '{key}' in Redis: {e}",
                extra={"key": key, "ttl": ttl, "error": str(e)},
            )
            raise StorageError(key, {"ttl": ttl, "error": str(e)}) from e
        if not stored:
            raise StorageError(key, {"ttl": ttl})

        if lifetime is not None:
            self.last_lifetime = lifetime
        self._sets += 1

        with self._redis_errors("track", key):
            self._index.track(key)

        if stop_buffer:
            was_buffering = self.codec.is_buffering()
            self.codec.stop()
            if was_buffering and cached is not None:
                self._emit(cached)

        self.started = False
        logger.debug("Saved cache entry", extra={"key": key, "ttl": ttl})
        return True

    def delete(self, key_name: str) -> bool:
        """Delete a single key and drop it from the tracking set."""
        client = self._connection.acquire()
        key = self._keys.qualify(key_name)

        with self._redis_errors("delete", key):
            self._index.untrack(key)
            deleted = client.delete(key)

        if deleted:
            self._deletes += 1
        return bool(deleted)

    def exists(self, key_name: str | None = None, lifetime: int | None = None) -> bool:
        """Check if a key exists; False when no key resolves."""
        key = self._keys.peek(key_name)
        if key is None:
            return False

        client = self._connection.acquire()
        with self._redis_errors("exists", key):
            return bool(client.exists(key))

    def increment(self, key_name: str | None = None, value: int = 1) -> int:
        client = self._connection.acquire()
        key = self._keys.resolve(key_name, "increment")

        with self._redis_errors("increment", key):
            return int(client.incrby(key, value))

    def decrement(self, key_name: str | None = None, value: int = 1) -> int:
        client = self._connection.acquire()
        key = self._keys.resolve(key_name, "decrement")

        with self._redis_errors("decrement", key):
            return int(client.decrby(key, value))

    def query_keys(self, prefix: str | None = None) -> list[str]:
        """List tracked keys, optionally only those starting with ``prefix``."""
        with self._redis_errors("query_keys"):
            return self._index.list_tracked(prefix)

    def flush(self) -> bool:
        """
        Delete every tracked key.

        Per-key failures during the sweep are logged and skipped; only a
        failure to read the tracking set itself is raised.
        """
        with self._redis_errors("flush"):
            swept = self._index.clear_all()

        self._deletes += swept
        return True

    # ------------ Buffering workflow ------------

    def start(self, key_name: str, lifetime: int | None = None) -> Any | None:
        """
        Begin a cache entry.

        Returns the cached value when the key is present. Otherwise the
        codec starts buffering and the next parameterless save() stores
        whatever it captured under ``key_name``.
        """
        self._keys.resolve(key_name, "start")
        existing = self.get(key_name)

        if existing is None:
            self.started = True
            self.codec.start()
        else:
            self.started = False

        if lifetime is not None:
            self.last_lifetime = lifetime
        return existing

    def stop(self, stop_buffer: bool = True) -> None:
        """Abandon the current entry without storing it."""
        if stop_buffer:
            self.codec.stop()
        self.started = False

    def is_started(self) -> bool:
        return self.started

    def get_last_key(self) -> str | None:
        """Fully-qualified active key, if any."""
        return self._keys.last_key

    def set_last_key(self, last_key: str | None) -> None:
        """Set the fully-qualified active key used by parameterless calls."""
        self._keys.last_key = last_key

    # ------------ Lifecycle ------------

    def get_stats(self) -> dict[str, Any]:
        """Return adapter counters; no round-trip to Redis is made."""
        total_requests = self._hits + self._misses
        return {
            "backend": "redis",
            "host": self.config.host,
            "port": self.config.port,
            "db": self.config.index,
            "prefix": self.config.prefix,
            "stats_key": self.config.stats_key,
            "tracking_enabled": self._index.enabled,
            "default_ttl": self.codec.get_lifetime(),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
            "connected": self._connection.is_connected,
        }

    def close(self) -> None:
        """Close the Redis connection (a caller-supplied client stays open)."""
        with self._redis_errors("close"):
            self._connection.release()
