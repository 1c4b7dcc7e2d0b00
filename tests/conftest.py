"""
redisstash - Test Configuration and Shared Fixtures

Provides an in-process fake Redis client for unit tests and the shared
fixtures built on it.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from typing import Any

import pytest
from redis.exceptions import AuthenticationError, ResponseError
from redis.exceptions import ConnectionError as RedisConnectionError

from redisstash.cache.backends.redis import RedisCacheBackend
from redisstash.config import AdapterConfig

os.environ["LOG_LEVEL"] = "DEBUG"


class FakeRedis:
    """
    Minimal synchronous stand-in for ``redis.Redis``.

    Implements only the commands the adapter sends. Values are kept as
    strings and returned as such, or as bytes when built with
    ``decode_responses=False``; TTLs are recorded but never expire.
    """

    def __init__(self, password: str | None = None, databases: int = 16, decode_responses: bool = True) -> None:
        self.password = password
        self.databases = databases
        self.decode_responses = decode_responses
        self.data: dict[str, str] = {}
        self.sets: dict[str, set[str]] = {}
        self.ttls: dict[str, int | None] = {}
        self.commands: list[tuple[Any, ...]] = []
        self.db: int | None = None
        self.closed = False
        self.severed = False
        self.fail_on: dict[str, Exception] = {}

    def _record(self, *command: Any) -> None:
        if self.severed:
            raise RedisConnectionError("Connection closed by server.")
        self.commands.append(command)
        error = self.fail_on.get(str(command[0]).upper())
        if error is not None:
            raise error

    def _reply(self, value: str | None) -> Any:
        if value is None or self.decode_responses:
            return value
        return value.encode("utf-8")

    def handshake(self, password: str | None = None, db: int = 0) -> None:
        """Open a fresh connection the way redis-py does: AUTH, then SELECT for a non-zero db."""
        self.severed = False
        self.closed = False
        if password is not None:
            self._record("AUTH", password)
            if password != self.password:
                raise AuthenticationError("invalid username-password pair")
        if db:
            self._record("SELECT", db)
            if not 0 <= db < self.databases:
                raise ResponseError("DB index is out of range")
        self.db = db

    def sever(self) -> None:
        """Simulate the server dropping the connection."""
        self.severed = True

    def get(self, name: str) -> Any:
        self._record("GET", name)
        return self._reply(self.data.get(name))

    def set(self, name: str, value: Any, ex: int | None = None) -> bool:
        self._record("SET", name, value, ex)
        self.data[name] = str(value)
        self.ttls[name] = ex
        return True

    def delete(self, *names: str) -> int:
        self._record("DEL", *names)
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                removed += 1
            self.ttls.pop(name, None)
        return removed

    def exists(self, *names: str) -> int:
        self._record("EXISTS", *names)
        return sum(1 for name in names if name in self.data)

    def incrby(self, name: str, amount: int = 1) -> int:
        self._record("INCRBY", name, amount)
        try:
            current = int(self.data.get(name, "0"))
        except ValueError:
            raise ResponseError("value is not an integer or out of range") from None
        self.data[name] = str(current + amount)
        return current + amount

    def decrby(self, name: str, amount: int = 1) -> int:
        self._record("DECRBY", name, amount)
        try:
            current = int(self.data.get(name, "0"))
        except ValueError:
            raise ResponseError("value is not an integer or out of range") from None
        self.data[name] = str(current - amount)
        return current - amount

    def sadd(self, name: str, *values: str) -> int:
        self._record("SADD", name, *values)
        members = self.sets.setdefault(name, set())
        added = len(set(values) - members)
        members.update(values)
        return added

    def srem(self, name: str, *values: str) -> int:
        self._record("SREM", name, *values)
        members = self.sets.get(name, set())
        removed = len(members & set(values))
        members.difference_update(values)
        return removed

    def smembers(self, name: str) -> set[Any]:
        self._record("SMEMBERS", name)
        return {self._reply(member) for member in self.sets.get(name, set())}

    def close(self) -> None:
        self.closed = True

    def command_names(self) -> list[str]:
        return [str(command[0]).upper() for command in self.commands]


class FakeRedisFactory:
    """Callable used as ``client_factory``; hands out one FakeRedis, replaying the handshake on each call."""

    def __init__(self, client: FakeRedis) -> None:
        self.client = client
        self.calls: list[dict[str, Any]] = []
        self.connect_error: Exception | None = None

    def __call__(self, **kwargs: Any) -> FakeRedis:
        self.calls.append(kwargs)
        if self.connect_error is not None:
            raise self.connect_error
        self.client.handshake(kwargs.get("password"), kwargs.get("db", 0))
        return self.client


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def bytes_redis() -> FakeRedis:
    """Fake client behaving like redis.Redis built without decode_responses."""
    return FakeRedis(decode_responses=False)


@pytest.fixture
def client_factory(fake_redis: FakeRedis) -> FakeRedisFactory:
    return FakeRedisFactory(fake_redis)


@pytest.fixture
def adapter_config() -> AdapterConfig:
    return AdapterConfig(prefix="app:", lifetime=3600)


@pytest.fixture
def cache(adapter_config: AdapterConfig, client_factory: FakeRedisFactory) -> RedisCacheBackend:
    """Backend wired to the fake client."""
    return RedisCacheBackend(config=adapter_config, client_factory=client_factory)


@pytest.fixture
def unreachable() -> RedisConnectionError:
    return RedisConnectionError("Error 111 connecting to 127.0.0.1:6379. Connection refused.")


@pytest.fixture
def test_redis_db() -> int:
    """Logical database used by live tests (15 for isolation)."""
    return int(os.environ.get("TEST_REDIS_DB", "15"))


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Reset the cache registry and config singleton after each test."""
    yield
    from redisstash.cache.factory import reset_cache_factory
    from redisstash.config import reset_config

    reset_cache_factory()
    reset_config()
