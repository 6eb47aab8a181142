# ruff: noqa: A005
"""Structured logging built on structlog.

Every module obtains its logger through ``get_logger(__name__)`` and logs
with keyword context::

    logger = get_logger(__name__)
    logger.info("Integration executed", integration_id=str(integration.id))

Request scoped values (owner id, execution id) are bound with
``log_context`` and flow into every subsequent record through structlog's
contextvars integration.
"""

import logging
import re
import sys
from dataclasses import dataclass, field
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars

from flowcreate.core.enums import Environment, LogFormat, LogLevel
from flowcreate.core.errors import ConfigurationError


@dataclass
class LogConfig:
    """Logging configuration with validation and environment defaults."""

    level: LogLevel = field(default=LogLevel.INFO)
    format: LogFormat = field(default=LogFormat.JSON)
    environment: Environment = field(default=Environment.DEVELOPMENT)

    enable_timestamps: bool = field(default=True)
    enable_caller_info: bool = field(default=False)
    enable_sensitive_data_filtering: bool = field(default=True)
    max_message_length: int = field(default=10000)

    def __post_init__(self):
        self.validate()
        self.apply_environment_defaults()

    def validate(self) -> None:
        """
        Validate logging configuration parameters.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.max_message_length < 1000:
            raise ConfigurationError(
                "Maximum message length must be at least 1000 characters",
                config_key="max_message_length",
            )

    def apply_environment_defaults(self) -> None:
        """Apply environment-specific defaults."""
        if self.environment == Environment.DEVELOPMENT:
            self.format = LogFormat.CONSOLE
            self.enable_caller_info = True

        elif self.environment == Environment.TESTING:
            self.level = LogLevel.WARNING
            self.format = LogFormat.PLAIN

        elif self.environment == Environment.PRODUCTION:
            self.format = LogFormat.JSON
            self.enable_caller_info = False
            self.enable_sensitive_data_filtering = True

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "level": self.level.level_name,
            "format": self.format.value,
            "environment": self.environment.value,
            "enable_timestamps": self.enable_timestamps,
            "enable_caller_info": self.enable_caller_info,
            "enable_sensitive_data_filtering": self.enable_sensitive_data_filtering,
        }


class SensitiveDataFilter:
    """
    structlog processor masking credential material in log records.

    Secret references, tokens and authorization headers must never reach a
    log sink, even when a caller passes a whole credential as context.
    """

    def __init__(self, mask_char: str = "*"):
        self.mask_char = mask_char
        self.sensitive_patterns = [
            re.compile(r"password", re.IGNORECASE),
            re.compile(r"token", re.IGNORECASE),
            re.compile(r"secret", re.IGNORECASE),
            re.compile(r"api.?key", re.IGNORECASE),
            re.compile(r"credential", re.IGNORECASE),
            re.compile(r"authorization", re.IGNORECASE),
        ]

    def __call__(
        self, logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        return self.filter(event_dict)

    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of ``record`` with sensitive values masked."""
        filtered_record = {}

        for key, value in record.items():
            if self._is_sensitive_field(key):
                filtered_record[key] = self._mask_value(value)
            elif isinstance(value, dict):
                filtered_record[key] = self.filter(value)
            else:
                filtered_record[key] = value

        return filtered_record

    def _is_sensitive_field(self, field_name: str) -> bool:
        return any(pattern.search(field_name) for pattern in self.sensitive_patterns)

    def _mask_value(self, value: Any) -> Any:
        if value is None:
            return None
        return f"{self.mask_char * 3}[MASKED]"


class MessageLengthFilter:
    """structlog processor truncating overly long event messages."""

    def __init__(self, max_length: int = 10000):
        self.max_length = max_length

    def __call__(
        self, logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event = event_dict.get("event")
        if isinstance(event, str) and len(event) > self.max_length:
            event_dict["event"] = event[: self.max_length] + "... [TRUNCATED]"
        return event_dict


class StructuredLogger:
    """Thin wrapper over a structlog logger taking keyword context."""

    def __init__(self, name: str, config: LogConfig):
        self.name = name
        self.config = config
        self._logger = structlog.get_logger(name)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(LogLevel.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        """Log critical message."""
        self._log(LogLevel.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        kwargs["exc_info"] = True
        self.error(message, **kwargs)

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Return a logger carrying ``kwargs`` on every record."""
        bound = StructuredLogger(self.name, self.config)
        bound._logger = self._logger.bind(**kwargs)
        return bound

    def _log(self, level: LogLevel, message: str, **kwargs: Any) -> None:
        if level.priority < self.config.level.priority:
            return
        getattr(self._logger, level.level_name.lower())(message, **kwargs)


class LoggerFactory:
    """Creates structured loggers and configures structlog once."""

    def __init__(self, config: LogConfig):
        self.config = config
        self._loggers: dict[str, StructuredLogger] = {}
        self._configured = False

    def configure_logging(self) -> None:
        """Configure global logging settings."""
        if self._configured:
            return

        processors: list[Any] = [
            merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
        ]

        if self.config.enable_timestamps:
            processors.append(structlog.processors.TimeStamper(fmt="iso"))

        if self.config.enable_caller_info:
            processors.append(
                structlog.processors.CallsiteParameterAdder(
                    parameters=[
                        structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO,
                        structlog.processors.CallsiteParameter.FUNC_NAME,
                    ]
                )
            )

        if self.config.enable_sensitive_data_filtering:
            processors.append(SensitiveDataFilter())
        processors.append(MessageLengthFilter(self.config.max_message_length))

        processors.extend(
            [
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
            ]
        )

        if self.config.format == LogFormat.JSON:
            processors.append(structlog.processors.JSONRenderer())
        elif self.config.format == LogFormat.CONSOLE:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))
        else:
            processors.append(structlog.processors.KeyValueRenderer())

        structlog.configure(
            processors=processors,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            stream=sys.stdout,
            level=self.config.level.to_logging_level(),
        )

        if self.config.environment == Environment.PRODUCTION:
            logging.getLogger("httpx").setLevel(logging.WARNING)

        self._configured = True

    def get_logger(self, name: str) -> StructuredLogger:
        """Get or create structured logger."""
        if not self._configured:
            self.configure_logging()

        if name not in self._loggers:
            self._loggers[name] = StructuredLogger(name, self.config)

        return self._loggers[name]


_logger_factory: LoggerFactory | None = None


def configure_logging(config: LogConfig | None = None) -> None:
    """
    Configure global logging system.

    Args:
        config: Logging configuration (built from settings if not provided)
    """
    global _logger_factory  # noqa: PLW0603

    if config is None:
        from flowcreate.core.config import get_settings

        settings = get_settings()
        config = LogConfig(
            level=settings.log_level,
            format=settings.log_format,
            environment=settings.environment,
        )

    _logger_factory = LoggerFactory(config)
    _logger_factory.configure_logging()


def get_logger(name: str) -> StructuredLogger:
    """
    Get structured logger instance.

    Args:
        name: Logger name (usually __name__)
    """
    if _logger_factory is None:
        configure_logging()

    return _logger_factory.get_logger(name)


def log_context(**kwargs: Any) -> None:
    """Add context variables to all subsequent logs in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()


def bound_log_context(**kwargs: Any):
    """Context manager binding ``kwargs`` to the logs emitted inside the block."""
    return structlog.contextvars.bound_contextvars(**kwargs)


__all__ = [
    "LogConfig",
    "LoggerFactory",
    "MessageLengthFilter",
    "SensitiveDataFilter",
    "StructuredLogger",
    "bound_log_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "log_context",
]
