"""pikesre Infrastructure Layer.

Ambient services used by the command and rule layers:
- Logger: Structured logging with key-value context
- ConfigManager: Layered YAML/environment configuration
"""

from .config_manager import (
    CONFIG_SCHEMA,
    ConfigError,
    ConfigManager,
    ConfigSource,
    ConfigValue,
    get_config_manager,
    set_global_config,
)
from .logger import LogLevel, Logger, configure_logging, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
    "configure_logging",
    # ConfigManager exports
    "CONFIG_SCHEMA",
    "ConfigSource",
    "ConfigValue",
    "ConfigError",
    "ConfigManager",
    "get_config_manager",
    "set_global_config",
]
