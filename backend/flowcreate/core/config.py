"""Application configuration management.

Settings are read from the process environment, optionally seeded from a
``.env`` file, converted to typed values and validated once.  Access them
through the cached ``get_settings()`` factory.

Architecture:
- EnvironmentLoader: environment variable loading with type conversion
- EngineConfig: integration engine tunables (timeouts, health thresholds)
- Settings: main configuration object
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any

from flowcreate.core.enums import Environment, LogFormat, LogLevel
from flowcreate.core.errors import ConfigurationError


def validate_string(value, key, required=False, min_length=None):
    if value is None and not required:
        return None
    if value is None and required:
        raise ConfigurationError(f"{key} is required", config_key=key)
    value = str(value)
    if min_length is not None and len(value) < min_length:
        raise ConfigurationError(
            f"{key} must be at least {min_length} characters", config_key=key
        )
    return value


def validate_integer(value, key, required=False, min_value=None, max_value=None):
    if value is None and not required:
        return None
    if value is None and required:
        raise ConfigurationError(f"{key} is required", config_key=key)
    try:
        val = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{key} must be an integer", config_key=key) from e
    if min_value is not None and val < min_value:
        raise ConfigurationError(f"{key} must be >= {min_value}", config_key=key)
    if max_value is not None and val > max_value:
        raise ConfigurationError(f"{key} must be <= {max_value}", config_key=key)
    return val


def validate_float(value, key, required=False, min_value=None, max_value=None):
    if value is None and not required:
        return None
    if value is None and required:
        raise ConfigurationError(f"{key} is required", config_key=key)
    try:
        val = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{key} must be a number", config_key=key) from e
    if min_value is not None and val < min_value:
        raise ConfigurationError(f"{key} must be >= {min_value}", config_key=key)
    if max_value is not None and val > max_value:
        raise ConfigurationError(f"{key} must be <= {max_value}", config_key=key)
    return val


def validate_boolean(value, key, required=False):
    if value is None and not required:
        return None
    if value is None and required:
        raise ConfigurationError(f"{key} is required", config_key=key)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ("true", "1", "yes", "on")
    return bool(value)


def validate_list(value, key, required=False):
    if value is None and not required:
        return None
    if value is None and required:
        raise ConfigurationError(f"{key} is required", config_key=key)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(value)


class EnvironmentLoader:
    """Environment variable loader with type conversion and validation."""

    def __init__(self, env_file: str = ".env"):
        """
        Initialize environment loader.

        Args:
            env_file: Optional environment file to load
        """
        self.env_file = env_file
        self._load_env_file()

    def _load_env_file(self) -> None:
        """Load environment variables from file if it exists."""
        if not self.env_file or not os.path.exists(self.env_file):
            return

        try:
            with open(self.env_file, encoding="utf-8") as f:
                for raw_line in f:
                    line = raw_line.strip()

                    if not line or line.startswith("#") or "=" not in line:
                        continue

                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()

                    if (value.startswith('"') and value.endswith('"')) or (
                        value.startswith("'") and value.endswith("'")
                    ):
                        value = value[1:-1]

                    # Process environment wins over the file
                    if key not in os.environ:
                        os.environ[key] = value

        except OSError as e:
            raise ConfigurationError(
                f"Failed to load environment file {self.env_file}: {e}"
            ) from e

    def get_string(
        self, key: str, default: str | None = None, required: bool = False, **kwargs
    ) -> str | None:
        """Get string value from environment."""
        return validate_string(os.environ.get(key, default), key, required, **kwargs)

    def get_integer(
        self, key: str, default: int | None = None, required: bool = False, **kwargs
    ) -> int | None:
        """Get integer value from environment."""
        return validate_integer(os.environ.get(key, default), key, required, **kwargs)

    def get_float(
        self, key: str, default: float | None = None, required: bool = False, **kwargs
    ) -> float | None:
        """Get float value from environment."""
        return validate_float(os.environ.get(key, default), key, required, **kwargs)

    def get_boolean(
        self, key: str, default: bool | None = None, required: bool = False
    ) -> bool | None:
        """Get boolean value from environment."""
        return validate_boolean(os.environ.get(key, default), key, required)

    def get_enum(
        self,
        key: str,
        enum_class: type[Enum],
        default: Enum | None = None,
        required: bool = False,
    ) -> Enum | None:
        """Get enum value from environment, matching by value or by name."""
        raw = os.environ.get(key)
        if raw is None:
            if required and default is None:
                raise ConfigurationError(f"{key} is required", config_key=key)
            return default

        for member in enum_class:
            member_value = member.value[0] if isinstance(member.value, tuple) else member.value
            if raw.lower() in (str(member_value).lower(), member.name.lower()):
                return member

        allowed = ", ".join(member.name.lower() for member in enum_class)
        raise ConfigurationError(f"{key} must be one of: {allowed}", config_key=key)

    def get_list(
        self, key: str, default: list[Any] | None = None, required: bool = False
    ) -> list[Any] | None:
        """Get comma separated list value from environment."""
        value = os.environ.get(key)
        if value is None:
            value = default
        return validate_list(value, key, required=required)


@dataclass
class EngineConfig:
    """
    Integration engine tunables.

    Usage Example:
        config = EngineConfig(transport_timeout_seconds=10)
        config.validate()
    """

    transport_timeout_seconds: float = field(default=30.0)
    credential_refresh_lead_seconds: int = field(default=300)
    health_slow_response_ms: float = field(default=2000.0)
    health_critical_response_ms: float = field(default=5000.0)
    health_stale_after_days: int = field(default=7)
    sync_max_batch_size: int = field(default=10000)
    default_page_size: int = field(default=10)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Validate engine configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.transport_timeout_seconds <= 0:
            raise ConfigurationError(
                "Transport timeout must be positive",
                config_key="transport_timeout_seconds",
            )
        if self.credential_refresh_lead_seconds < 0:
            raise ConfigurationError(
                "Credential refresh lead time cannot be negative",
                config_key="credential_refresh_lead_seconds",
            )
        if self.health_slow_response_ms >= self.health_critical_response_ms:
            raise ConfigurationError(
                "Slow response threshold must be below the critical threshold",
                config_key="health_slow_response_ms",
            )
        if self.health_stale_after_days < 1:
            raise ConfigurationError(
                "Staleness window must be at least one day",
                config_key="health_stale_after_days",
            )
        if self.sync_max_batch_size < 1:
            raise ConfigurationError(
                "Sync batch size ceiling must be positive",
                config_key="sync_max_batch_size",
            )
        if self.default_page_size < 1:
            raise ConfigurationError(
                "Default page size must be positive", config_key="default_page_size"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "transport_timeout_seconds": self.transport_timeout_seconds,
            "credential_refresh_lead_seconds": self.credential_refresh_lead_seconds,
            "health_slow_response_ms": self.health_slow_response_ms,
            "health_critical_response_ms": self.health_critical_response_ms,
            "health_stale_after_days": self.health_stale_after_days,
            "sync_max_batch_size": self.sync_max_batch_size,
            "default_page_size": self.default_page_size,
        }


class Settings:
    """
    Main application settings.

    Usage Example:
        settings = get_settings()
        timeout = settings.engine.transport_timeout_seconds
    """

    def __init__(self, env_file: str = ".env"):
        """
        Initialize settings with environment variable loading.

        Args:
            env_file: Environment file to load variables from
        """
        self.env_loader = EnvironmentLoader(env_file)

        self._load_application_config()
        self._load_engine_config()

    def _load_application_config(self) -> None:
        """Load core application configuration."""
        self.app_name = self.env_loader.get_string("APP_NAME", "FlowCreate")
        self.environment = self.env_loader.get_enum(
            "ENVIRONMENT", Environment, Environment.DEVELOPMENT
        )
        self.log_level = self.env_loader.get_enum("LOG_LEVEL", LogLevel, LogLevel.INFO)
        self.log_format = self.env_loader.get_enum(
            "LOG_FORMAT", LogFormat, LogFormat.JSON
        )

    def _load_engine_config(self) -> None:
        """Load integration engine configuration."""
        loader = self.env_loader
        self.engine = EngineConfig(
            transport_timeout_seconds=loader.get_float(
                "FLOWCREATE_TRANSPORT_TIMEOUT_SECONDS", 30.0, min_value=0.1, max_value=300
            ),
            credential_refresh_lead_seconds=loader.get_integer(
                "FLOWCREATE_CREDENTIAL_REFRESH_LEAD_SECONDS", 300, min_value=0
            ),
            health_slow_response_ms=loader.get_float(
                "FLOWCREATE_HEALTH_SLOW_RESPONSE_MS", 2000.0, min_value=1
            ),
            health_critical_response_ms=loader.get_float(
                "FLOWCREATE_HEALTH_CRITICAL_RESPONSE_MS", 5000.0, min_value=1
            ),
            health_stale_after_days=loader.get_integer(
                "FLOWCREATE_HEALTH_STALE_AFTER_DAYS", 7, min_value=1
            ),
            sync_max_batch_size=loader.get_integer(
                "FLOWCREATE_SYNC_MAX_BATCH_SIZE", 10000, min_value=1
            ),
            default_page_size=loader.get_integer(
                "FLOWCREATE_DEFAULT_PAGE_SIZE", 10, min_value=1, max_value=1000
            ),
        )


@lru_cache
def get_settings(env_file: str = ".env") -> Settings:
    """
    Get cached settings instance.

    Args:
        env_file: Environment file to load
    """
    return Settings(env_file)


__all__ = [
    "EngineConfig",
    "EnvironmentLoader",
    "Settings",
    "get_settings",
]
