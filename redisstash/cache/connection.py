"""
redisstash - Connection Manager

Owns the single Redis connection of a cache backend:
- Lazy connect on first use, never re-created while alive
- AUTH (when a credential is configured) strictly before SELECT
- A handle that fails any step is discarded and the failure surfaces
- No retries or health checks; callers retry by calling again

The credential and database index are handed to redis-py, which sends
AUTH then SELECT on every socket it opens. A handle whose transport
failed is dropped through invalidate(), so the next acquire() performs
the whole handshake again instead of reusing a half-dead client.

A pre-built client supplied through ``AdapterConfig.client`` is returned
untouched, and is never closed by the manager.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from redis import Redis
from redis.backoff import NoBackoff
from redis.exceptions import AuthenticationError, RedisError, ResponseError
from redis.retry import Retry

from ..config import AdapterConfig
from ..errors import AuthError, CacheConnectionError, ConfigInconsistencyError, SelectDbError

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


class ConnectionState(str, Enum):
    """Handshake progress of the managed handle."""

    DISCONNECTED = "disconnected"
    DB_SELECTED = "db_selected"


class ConnectionManager:
    """Lazily connects, authenticates and selects the logical database."""

    def __init__(self, config: AdapterConfig, client_factory: ClientFactory = Redis) -> None:
        self._config = config
        self._client_factory = client_factory
        self._client: Any | None = config.client
        self._owned = config.client is None
        self.state = ConnectionState.DISCONNECTED if self._owned else ConnectionState.DB_SELECTED

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def acquire(self) -> Any:
        """
        Return the live client, performing the handshake on first use.

        Raises:
            ConfigInconsistencyError: host or port missing from the config
            CacheConnectionError: transport-level connect failed
            AuthError: credential rejected
            SelectDbError: database selection rejected
        """
        if self._client is not None:
            return self._client

        self._client = self._connect()
        self.state = ConnectionState.DB_SELECTED
        logger.info(
            "Connected to Redis",
            extra={"host": self._config.host, "port": self._config.port, "db": self._config.index},
        )
        return self._client

    def release(self) -> None:
        """Close an owned handle and return to the disconnected state."""
        if self._client is None:
            return
        if not self._owned:
            logger.debug("Leaving caller-supplied Redis client open")
            return

        client, self._client = self._client, None
        self.state = ConnectionState.DISCONNECTED
        client.close()
        logger.info("Closed Redis connection", extra={"host": self._config.host, "port": self._config.port})

    def invalidate(self) -> None:
        """Drop an owned handle after a transport failure; the next acquire() reconnects."""
        if self._client is None or not self._owned:
            return

        client, self._client = self._client, None
        self._discard(client)
        logger.warning(
            "Dropped Redis connection after a transport failure",
            extra={"host": self._config.host, "port": self._config.port},
        )

    # ------------ Handshake ------------

    def _connect(self) -> Any:
        host, port = self._config.host, self._config.port
        if not host:
            raise ConfigInconsistencyError("host")
        if port is None:
            raise ConfigInconsistencyError("port")

        index = self._config.index
        try:
            # single_connection_client opens the socket on construction and
            # runs AUTH then SELECT on it. Retry(NoBackoff(), 0) turns off
            # redis-py's command retries so a broken socket surfaces.
            client = self._client_factory(
                host=host,
                port=port,
                db=index,
                password=self._config.auth,
                socket_keepalive=self._config.persistent,
                socket_timeout=self._config.socket_timeout,
                socket_connect_timeout=self._config.socket_connect_timeout,
                single_connection_client=True,
                decode_responses=True,
                retry=Retry(NoBackoff(), 0),
            )
        except AuthenticationError as e:
            self.state = ConnectionState.DISCONNECTED
            logger.error("Redis rejected the configured credential", extra={"error": str(e)})
            raise AuthError({"error": str(e)}) from e
        except ResponseError as e:
            self.state = ConnectionState.DISCONNECTED
            logger.error(f"Redis rejected SELECT {index}", extra={"db": index, "error": str(e)})
            raise SelectDbError(index, {"error": str(e)}) from e
        except (RedisError, OSError) as e:
            self.state = ConnectionState.DISCONNECTED
            logger.error(
                f"Could not connect to Redis at {host}:{port}: {e}",
                extra={"host": host, "port": port, "error": str(e)},
            )
            raise CacheConnectionError(host, port, {"error": str(e)}) from e

        return client

    def _discard(self, client: Any) -> None:
        self.state = ConnectionState.DISCONNECTED
        try:
            client.close()
        except RedisError as e:
            logger.debug(f"Ignoring error while discarding failed Redis handle: {e}")
