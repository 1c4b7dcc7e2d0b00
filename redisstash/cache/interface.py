"""
redisstash - Cache Interface

Defines the abstract interface cache backends implement. Operations are
synchronous and block until the store replies.

Two calling conventions are supported: explicit key names, and
parameterless calls that continue on the active key (the last one a call
established on the same instance).
"""

from abc import ABC, abstractmethod
from typing import Any


class CacheInterface(ABC):
    """Abstract base class for cache backends."""

    @abstractmethod
    def get(self, key_name: str, lifetime: int | None = None) -> Any | None:
        """
        Retrieve a value from the cache.

        Args:
            key_name: Logical cache key
            lifetime: Accepted for interface compatibility; reads do not touch TTLs

        Returns:
            Cached value if found, None otherwise
        """
        pass

    @abstractmethod
    def save(
        self,
        key_name: str | None = None,
        content: Any = None,
        lifetime: int | None = None,
        stop_buffer: bool = True,
    ) -> bool:
        """
        Store a value in the cache.

        Args:
            key_name: Logical cache key (None = active key)
            content: Value to store (None = the codec's buffered output)
            lifetime: TTL in seconds (None = last lifetime, then codec default)
            stop_buffer: Stop the codec's output buffering after storing

        Returns:
            True once the store accepted the write
        """
        pass

    @abstractmethod
    def delete(self, key_name: str) -> bool:
        """
        Delete a key from the cache.

        Returns:
            True if the key was deleted, False if it didn't exist
        """
        pass

    @abstractmethod
    def exists(self, key_name: str | None = None, lifetime: int | None = None) -> bool:
        """
        Check if a key exists in the cache.

        Returns:
            True if the key exists, False otherwise (including when no key resolves)
        """
        pass

    @abstractmethod
    def increment(self, key_name: str | None = None, value: int = 1) -> int:
        """Atomically add ``value`` to a counter; a missing counter starts at zero."""
        pass

    @abstractmethod
    def decrement(self, key_name: str | None = None, value: int = 1) -> int:
        """Atomically subtract ``value`` from a counter; a missing counter starts at zero."""
        pass

    @abstractmethod
    def query_keys(self, prefix: str | None = None) -> list[str]:
        """
        List the fully-qualified keys the backend has written.

        Args:
            prefix: Keep only keys starting with this string
        """
        pass

    @abstractmethod
    def flush(self) -> bool:
        """
        Delete every key the backend has written.

        Returns:
            True once the sweep completes
        """
        pass

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics (hits, misses, sets, deletes, ...)
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Close the cache backend and release resources.

        Should be called during graceful shutdown.
        """
        pass
