#!/usr/bin/env python3
"""Hierarchical configuration manager for pikesre.

This module provides configuration management with:
- Layered precedence (defaults < system < user < environment < runtime)
- YAML configuration files
- Environment variable overrides (PIKESRE_*)
- Dot-path access to nested keys
- Simple type-schema validation

Example:
    >>> config = ConfigManager()
    >>> config.load_file("pikesre.yaml")
    >>> config.get("pikesre.logging.level", default="WARNING")
    >>> config.get("pikesre.engine.patterns", default=[])
"""

import copy
import os
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from pikesre.core.constants import DEFAULT_CONFIG, ErrorCode

ENV_PREFIX = "PIKESRE_"
ENV_NESTING = "__"


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    SYSTEM_CONFIG = 2
    USER_CONFIG = 3
    ENVIRONMENT = 4
    RUNTIME = 5  # Highest precedence


@dataclass
class ConfigValue:
    """Configuration value with metadata."""

    value: Any
    source: ConfigSource
    timestamp: float = field(default_factory=time.time)


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigManager:
    """Thread-safe hierarchical configuration manager.

    Values are looked up from the highest precedence source down:
    1. Runtime updates via set() or load_dict()
    2. Environment variables (PIKESRE_SECTION__KEY)
    3. User config file
    4. System config file
    5. Compiled defaults
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None, load_env: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Optional YAML config file to load as user config
            load_env: Whether to read PIKESRE_* environment variables
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._files: Dict[str, ConfigSource] = {}

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        if load_env:
            self._load_environment()

    def load_file(
        self, file_path: Union[str, Path], source: ConfigSource = ConfigSource.USER_CONFIG
    ) -> None:
        """Load configuration from a YAML file.

        Args:
            file_path: Path to YAML config file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT)
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.INTERNAL_ERROR)

        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}", ErrorCode.INVALID_INPUT)

        with self._lock:
            self._config[source] = config_data
            self._files[str(path)] = source

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Load configuration from a dictionary.

        Args:
            config_data: Configuration dictionary
            source: Configuration source level
        """
        with self._lock:
            self._config[source] = copy.deepcopy(config_data)

    def _load_environment(self) -> None:
        """Load configuration from environment variables.

        ``PIKESRE_LOGGING__LEVEL=DEBUG`` sets ``pikesre.logging.level``;
        a double underscore separates nesting levels.
        """
        env_config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            parts = key[len(ENV_PREFIX):].lower().split(ENV_NESTING)
            if not all(parts):
                continue

            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = {"pikesre": env_config}

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse an environment value into bool, int, float or str."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-separated key.

        Args:
            key: Key path (e.g., "pikesre.logging.level")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value

            return default

    @staticmethod
    def _get_nested(config: Dict[str, Any], key: str) -> Optional[Any]:
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def get_value(self, key: str) -> Optional[ConfigValue]:
        """Get a value together with the source that supplied it."""
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return ConfigValue(value=value, source=source)
        return None

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set configuration value.

        Args:
            key: Dot-separated key path
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            current = self._config.setdefault(source, {})
            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get merged configuration from all sources."""
        with self._lock:
            merged: Dict[str, Any] = {}
            for source in sorted(self._config.keys(), key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])
            return merged

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def reload(self) -> None:
        """Reload all file-based configurations."""
        with self._lock:
            files = list(self._files.items())

        for file_path, source in files:
            self.load_file(file_path, source)

    def validate_schema(self, schema: Dict[str, Any]) -> bool:
        """Validate merged configuration against a type schema.

        The schema mirrors the config shape, with Python types as leaves.
        Missing keys are treated as optional.

        Raises:
            ConfigError: If a value has the wrong type
        """
        return self._validate_dict(self.get_all(), schema, "")

    def _validate_dict(self, config: Dict[str, Any], schema: Dict[str, Any], prefix: str) -> bool:
        for key, expected_type in schema.items():
            if key not in config:
                continue

            value = config[key]
            path = f"{prefix}{key}"

            if isinstance(expected_type, dict):
                if not isinstance(value, dict):
                    raise ConfigError(f"Expected dict for {path}, got {type(value).__name__}")
                self._validate_dict(value, expected_type, f"{path}.")
            elif isinstance(expected_type, (type, tuple)):
                if value is not None and not isinstance(value, expected_type):
                    raise ConfigError(f"Invalid type for {path}: got {type(value).__name__}")

        return True

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear configuration.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source:
                if source in self._config and source != ConfigSource.COMPILED_DEFAULTS:
                    del self._config[source]
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]
                self._files.clear()


CONFIG_SCHEMA = {
    "pikesre": {
        "logging": {"level": str, "file": str},
        "engine": {"patterns": list, "pattern_files": (list, str)},
    }
}

# Global config manager instance
_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get or create the global configuration manager."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: Optional[ConfigManager]) -> None:
    """Set (or reset with None) the global configuration manager."""
    global _global_config
    _global_config = config
