"""
redisstash - Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
The adapter configuration is immutable once constructed.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 6379
DEFAULT_STATS_KEY = "_PHCR"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AdapterConfig(BaseModel):
    """Redis cache adapter configuration."""

    host: str = Field(default=DEFAULT_HOST, description="Redis server host")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Redis server port")
    index: int = Field(default=0, ge=0, description="Logical database selected after connect")
    persistent: bool = Field(default=False, description="Keep a long-lived keepalive connection")
    auth: str | None = Field(default=None, description="Credential sent with AUTH after connect")
    stats_key: str = Field(
        default=DEFAULT_STATS_KEY,
        description="Name of the tracking set (empty string disables query_keys/flush)",
    )
    lifetime: int = Field(default=3600, description="Default TTL in seconds (<= 0 = no expiry)")
    prefix: str = Field(default="", description="Key namespace prefix")

    # Transport timeouts are delegated to redis-py
    socket_timeout: float | None = Field(default=5.0, gt=0, description="Redis socket timeout in seconds")
    socket_connect_timeout: float | None = Field(default=5.0, gt=0, description="Redis connect timeout in seconds")

    # Pre-built, already connected client; bypasses connect/auth/select
    client: Any | None = Field(default=None, exclude=True, repr=False, description="Pre-built Redis client")

    @field_validator("host", mode="before")
    @classmethod
    def default_host(cls, v: Any) -> Any:
        """Replace an absent host with the default so it is always resolvable."""
        return DEFAULT_HOST if v is None or v == "" else v

    @field_validator("port", mode="before")
    @classmethod
    def default_port(cls, v: Any) -> Any:
        """Replace an absent port with the default so it is always resolvable."""
        return DEFAULT_PORT if v is None or v == "" else v

    @field_validator("auth")
    @classmethod
    def empty_auth_is_none(cls, v: str | None) -> str | None:
        """Treat an empty credential as no credential."""
        return v or None

    @property
    def tracking_enabled(self) -> bool:
        """Whether the stats set (enumeration and flush) is enabled."""
        return self.stats_key != ""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class StashConfig(BaseModel):
    """Root configuration for redisstash."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    cache: AdapterConfig = Field(default_factory=AdapterConfig)

    model_config = ConfigDict(use_enum_values=True, frozen=True)
