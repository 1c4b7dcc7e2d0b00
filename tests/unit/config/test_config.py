"""
redisstash - Configuration Tests

Covers AdapterConfig defaults and validation, and environment loading.
"""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from redisstash.config import AdapterConfig, get_config, load_config, reload_config
from redisstash.errors import ConfigurationError

ENV_VARS = (
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_INDEX",
    "REDIS_PERSISTENT",
    "REDIS_AUTH",
    "CACHE_STATS_KEY",
    "CACHE_LIFETIME",
    "CACHE_PREFIX",
    "REDIS_SOCKET_TIMEOUT",
    "REDIS_SOCKET_CONNECT_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    # Keep a developer's .env out of the way
    monkeypatch.chdir(tmp_path)


class TestAdapterConfig:
    """Test suite for AdapterConfig."""

    def test_defaults(self) -> None:
        config = AdapterConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 6379
        assert config.index == 0
        assert config.persistent is False
        assert config.auth is None
        assert config.stats_key == "_PHCR"
        assert config.tracking_enabled is True
        assert config.client is None

    def test_absent_host_and_port_get_defaults(self) -> None:
        config = AdapterConfig(host=None, port=None)

        assert config.host == "127.0.0.1"
        assert config.port == 6379

    def test_empty_stats_key_disables_tracking(self) -> None:
        assert AdapterConfig(stats_key="").tracking_enabled is False

    def test_empty_auth_is_none(self) -> None:
        assert AdapterConfig(auth="").auth is None

    def test_immutable(self) -> None:
        config = AdapterConfig()

        with pytest.raises(ValidationError):
            config.host = "elsewhere"  # type: ignore[misc]

    @pytest.mark.parametrize("overrides", [{"port": 0}, {"port": 70000}, {"index": -1}])
    def test_invalid_values(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            AdapterConfig(**overrides)

    def test_client_is_not_serialized(self) -> None:
        config = AdapterConfig(client=object())

        assert "client" not in config.model_dump()


class TestLoader:
    """Environment-driven configuration loading."""

    def test_load_defaults(self) -> None:
        config = load_config(reload=True)

        assert config.cache.host == "127.0.0.1"
        assert config.cache.port == 6379
        assert config.cache.stats_key == "_PHCR"
        assert config.log_level == "WARNING"

    def test_load_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REDIS_HOST", "redis.internal")
        monkeypatch.setenv("REDIS_PORT", "6380")
        monkeypatch.setenv("REDIS_INDEX", "4")
        monkeypatch.setenv("REDIS_PERSISTENT", "true")
        monkeypatch.setenv("REDIS_AUTH", "pw")
        monkeypatch.setenv("CACHE_STATS_KEY", "")
        monkeypatch.setenv("CACHE_LIFETIME", "120")
        monkeypatch.setenv("CACHE_PREFIX", "svc:")

        cache = load_config(reload=True).cache

        assert cache.host == "redis.internal"
        assert cache.port == 6380
        assert cache.index == 4
        assert cache.persistent is True
        assert cache.auth == "pw"
        assert cache.tracking_enabled is False
        assert cache.lifetime == 120
        assert cache.prefix == "svc:"

    def test_load_from_env_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        # load_dotenv writes os.environ; registering the vars lets monkeypatch undo it
        monkeypatch.setenv("REDIS_HOST", "unset")
        monkeypatch.setenv("CACHE_PREFIX", "unset")
        env_file = tmp_path / "custom.env"
        env_file.write_text("REDIS_HOST=from-file\nCACHE_PREFIX=f:\n")

        config = reload_config(env_file=str(env_file))

        assert config.cache.host == "from-file"
        assert config.cache.prefix == "f:"

    def test_get_config_is_singleton(self) -> None:
        assert get_config() is get_config()

    def test_invalid_env_raises_configuration_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REDIS_PORT", "not-a-port")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(reload=True)

        assert exc_info.value.details["validation_errors"]

    def test_log_level_applied(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")

        load_config(reload=True)

        assert logging.getLogger("redisstash").level == logging.DEBUG
