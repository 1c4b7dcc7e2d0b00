"""
redisstash - Stats Set Maintainer

Keeps a Redis set (the "stats key") listing every key the adapter wrote.
Redis has no cheap way to enumerate a namespace, so this shadow index is
what query_keys() and flush() walk.

Membership is best-effort: Redis may expire a key without the set hearing
about it, so readers must tolerate entries whose key no longer exists.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from redis.exceptions import RedisError

from ..errors import TrackingDisabledError
from .namespace import as_text

logger = logging.getLogger(__name__)


class ShadowIndex(ABC):
    """Enumerable index of the keys a backend has written."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether enumeration and bulk invalidation are available."""
        pass

    @abstractmethod
    def track(self, key: str) -> None:
        """Record a fully-qualified key."""
        pass

    @abstractmethod
    def untrack(self, key: str) -> None:
        """Forget a fully-qualified key."""
        pass

    @abstractmethod
    def list_tracked(self, prefix: str | None = None) -> list[str]:
        """
        List tracked keys.

        Args:
            prefix: Keep only keys starting with this string

        Raises:
            TrackingDisabledError: Tracking is switched off
        """
        pass

    @abstractmethod
    def clear_all(self) -> int:
        """
        Delete every tracked key from the index and from the store.

        Returns:
            Number of keys swept

        Raises:
            TrackingDisabledError: Tracking is switched off
        """
        pass


class StatsSetMaintainer(ShadowIndex):
    """ShadowIndex backed by a Redis set (SADD / SREM / SMEMBERS)."""

    def __init__(self, stats_key: str, client_provider: Callable[[], Any]) -> None:
        """
        Args:
            stats_key: Name of the tracking set; empty string disables tracking
            client_provider: Returns a live Redis client (ConnectionManager.acquire)
        """
        self.stats_key = stats_key
        self._client = client_provider

    @property
    def enabled(self) -> bool:
        return self.stats_key != ""

    def track(self, key: str) -> None:
        if self.enabled:
            self._client().sadd(self.stats_key, key)

    def untrack(self, key: str) -> None:
        if self.enabled:
            self._client().srem(self.stats_key, key)

    def list_tracked(self, prefix: str | None = None) -> list[str]:
        if not self.enabled:
            raise TrackingDisabledError("query_keys")

        members = [as_text(key) for key in self._client().smembers(self.stats_key)]
        if not prefix:
            return members
        return [key for key in members if key.startswith(prefix)]

    def clear_all(self) -> int:
        if not self.enabled:
            raise TrackingDisabledError("flush")

        client = self._client()
        swept = 0
        # Iterate a snapshot; membership may change while we sweep
        for key in [as_text(member) for member in client.smembers(self.stats_key)]:
            try:
                client.srem(self.stats_key, key)
                client.delete(key)
            except RedisError as e:
                logger.warning(
                    f"Skipping key '{key}' during flush: {e}",
                    extra={"key": key, "stats_key": self.stats_key, "error": str(e)},
                )
                continue
            swept += 1

        logger.info(f"Flushed {swept} tracked keys", extra={"stats_key": self.stats_key, "swept": swept})
        return swept
