# common/config/logging_config.py
from dataclasses import dataclass
from .env_config import require_env, get_env, get_int_env
from .config_types import EnvBool, EnvLogLevel
from common.api_error import ConfigurationError

_default_log_level_env_key = "LOG_LEVEL"
_default_log_json_env_key = "LOG_JSON"
_default_slow_request_env_key = "LOG_SLOW_REQUEST_MS"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    log_level: EnvLogLevel
    json_logs: bool = False
    slow_request_ms: int = 1000

    @property
    def level_value(self) -> str:
        """Get string value of log level."""
        return self.log_level.value

    @property
    def level_int(self) -> int:
        """Get numeric log level."""
        return self.log_level.level


def load_logging_config(
    log_level_env_key: str = _default_log_level_env_key,
    log_json_env_key: str = _default_log_json_env_key,
    slow_request_env_key: str = _default_slow_request_env_key,
) -> LoggingConfig:
    """
    Load logging configuration from environment.

    Raises:
        ConfigurationError: If LOG_LEVEL is missing or any value is invalid
    """
    try:
        log_level_val = require_env(log_level_env_key).upper()
        return LoggingConfig(
            log_level=EnvLogLevel(log_level_val),
            json_logs=EnvBool.parse(get_env(log_json_env_key)),
            slow_request_ms=get_int_env(slow_request_env_key, 1000),
        )

    except ValueError as exc:
        valid_levels = ", ".join(level.value for level in EnvLogLevel)
        raise ConfigurationError(
            f"Invalid logging configuration. "
            f"{log_level_env_key} must be one of [{valid_levels}], "
            f"{log_json_env_key} must be 'true' or 'false'"
        ) from exc


__all__ = [
    "LoggingConfig",
    "load_logging_config",
]
