"""
Configuration for keyshift migrations.

This module provides:
- EndpointConfig: Connection settings for one Redis instance
- MigrationConfig: Settings for a single migration run
- load_config: Load a MigrationConfig from a YAML file

Both models validate eagerly so that a bad configuration fails before any
connection is opened or any key is touched.

Example:
    >>> config = MigrationConfig(
    ...     match_pattern="user:*",
    ...     batch_size=500,
    ...     source=EndpointConfig(host="old-redis"),
    ...     target=EndpointConfig(host="new-redis", password="secret"),
    ... )

YAML files may use either snake_case keys or the camelCase keys of earlier
config files (``chunkSize``, ``matchPattern``, ``sourceRedis``,
``targetRedis``)::

    chunkSize: 25000
    matchPattern: "session:*"
    sourceRedis:
      host: localhost
      port: 6379
    targetRedis:
      host: localhost
      port: 6380
      password: secret
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from keyshift.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_MATCH_PATTERN = "*"
DEFAULT_BATCH_SIZE = 1000
DEFAULT_SCAN_COUNT = 25000


class EndpointConfig(BaseModel):
    """
    Connection settings for a Redis instance.

    Attributes:
        host: Hostname or IP address (default: "localhost")
        port: TCP port (default: 6379)
        password: Optional password; "credential" is accepted as an alias
        username: Optional ACL username
        db: Logical database index (default: 0)
        socket_timeout: Per-command timeout in seconds (default: 5.0)
        socket_connect_timeout: Connection timeout in seconds (default: 5.0)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str = Field(default="localhost", min_length=1)
    port: int = Field(default=6379, ge=1, le=65535)
    password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("password", "credential"),
    )
    username: str | None = None
    db: int = Field(default=0, ge=0)
    socket_timeout: float = Field(
        default=5.0,
        gt=0,
        validation_alias=AliasChoices("socket_timeout", "socketTimeout"),
    )
    socket_connect_timeout: float = Field(
        default=5.0,
        gt=0,
        validation_alias=AliasChoices("socket_connect_timeout", "socketConnectTimeout"),
    )

    @field_validator("password", "username", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @property
    def display_name(self) -> str:
        """Endpoint description safe for logs (never includes the password)."""
        return f"{self.host}:{self.port}/{self.db}"

    @property
    def display_url(self) -> str:
        """Connection URL in redis:// form with the password masked."""
        auth = ""
        if self.password is not None:
            auth = f"{quote(self.username or '', safe='')}:***@"
        elif self.username:
            auth = f"{quote(self.username, safe='')}@"
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class MigrationConfig(BaseModel):
    """
    Settings for one migration run.

    Attributes:
        match_pattern: Glob pattern for keys to migrate (default: "*").
            Empty or missing means every key.
        batch_size: Keys migrated concurrently per batch (must be > 0)
        scan_count: COUNT hint passed to each SCAN page (must be > 0)
        source: Endpoint to read from
        target: Endpoint to write to
        enable_tracing: Create OpenTelemetry spans for the run
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    match_pattern: str = Field(
        default=DEFAULT_MATCH_PATTERN,
        validation_alias=AliasChoices("match_pattern", "matchPattern"),
    )
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE,
        gt=0,
        validation_alias=AliasChoices("batch_size", "batchSize", "chunkSize"),
    )
    scan_count: int = Field(
        default=DEFAULT_SCAN_COUNT,
        gt=0,
        validation_alias=AliasChoices("scan_count", "scanCount"),
    )
    source: EndpointConfig = Field(
        default_factory=EndpointConfig,
        validation_alias=AliasChoices("source", "sourceRedis", "sourceEndpoint"),
    )
    target: EndpointConfig = Field(
        default_factory=EndpointConfig,
        validation_alias=AliasChoices("target", "targetRedis", "targetEndpoint"),
    )
    enable_tracing: bool = Field(
        default=True,
        validation_alias=AliasChoices("enable_tracing", "enableTracing"),
    )

    @field_validator("match_pattern", mode="before")
    @classmethod
    def _default_pattern(cls, value: Any) -> Any:
        if value is None or value == "":
            return DEFAULT_MATCH_PATTERN
        return value


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> MigrationConfig:
    """
    Load a migration configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated MigrationConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable, not a
            mapping, or fails validation
    """
    config_file = Path(path).expanduser()
    if not config_file.exists():
        raise ConfigurationError(f"Configuration file not found at specified path: {config_file}")

    try:
        payload = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error parsing configuration file {config_file}: {e}") from e

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ConfigurationError(
            f"Configuration file {config_file} must contain a mapping, "
            f"got {type(payload).__name__}"
        )

    try:
        config = MigrationConfig.model_validate(payload)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_file}: {e}") from e

    logger.debug("Loaded configuration from %s", config_file)
    return config


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_MATCH_PATTERN",
    "DEFAULT_SCAN_COUNT",
    "EndpointConfig",
    "MigrationConfig",
    "load_config",
]
