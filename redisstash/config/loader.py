"""
redisstash - Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the runtime.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from ..observability.logging import configure_logging
from .schemas import StashConfig

logger = logging.getLogger(__name__)

_config_instance: StashConfig | None = None


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> StashConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated StashConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    if env_file:
        env_path = Path(env_file)
    else:
        env_path = Path.cwd() / ".env"

    if env_path.exists():
        logger.info(f"Loading environment from {env_path}")
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    config_dict = {
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "cache": {
            "host": os.getenv("REDIS_HOST"),
            "port": os.getenv("REDIS_PORT"),
            "index": os.getenv("REDIS_INDEX", "0"),
            "persistent": _env_bool("REDIS_PERSISTENT"),
            "auth": os.getenv("REDIS_AUTH"),
            "stats_key": os.getenv("CACHE_STATS_KEY", "_PHCR"),
            "lifetime": os.getenv("CACHE_LIFETIME", "3600"),
            "prefix": os.getenv("CACHE_PREFIX", ""),
            "socket_timeout": os.getenv("REDIS_SOCKET_TIMEOUT", "5"),
            "socket_connect_timeout": os.getenv("REDIS_SOCKET_CONNECT_TIMEOUT", "5"),
        },
    }

    try:
        _config_instance = StashConfig(**config_dict)  # type: ignore[arg-type]
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(include_url=False)},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables.",
            details={"validation_errors": e.errors(include_url=False)},
        ) from e

    configure_logging(_config_instance.log_level)
    logger.info(
        "Configuration loaded successfully",
        extra={
            "redis_host": _config_instance.cache.host,
            "redis_port": _config_instance.cache.port,
            "tracking_enabled": _config_instance.cache.tracking_enabled,
        },
    )
    return _config_instance


def get_config() -> StashConfig:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current StashConfig instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> StashConfig:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded StashConfig instance
    """
    return load_config(env_file=env_file, reload=True)


def reset_config() -> None:
    """Drop the cached configuration instance (testing only)."""
    global _config_instance
    _config_instance = None
