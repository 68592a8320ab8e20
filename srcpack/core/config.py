#!/usr/bin/env python3
"""Layered configuration manager for SrcPack.

This module provides configuration management with:
- 5-level precedence hierarchy
- YAML config files
- Environment variable overrides (SRCPACK_*)
- Dotted-key access
- Thread-safe operations

Example:
    >>> config = ConfigManager()
    >>> config.load_file("srcpack.yaml")
    >>> config.get("srcpack.compression_level", default=6)
"""

import copy
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from srcpack.core.constants import DEFAULT_CONFIG, ConfigKey, ErrorCode

ENV_PREFIX = "SRCPACK_"
ENV_NESTING = "__"


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    USER_CONFIG = 2
    ENVIRONMENT = 3
    CLI_ARGS = 4
    RUNTIME = 5  # Highest precedence


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigManager:
    """Thread-safe layered configuration manager.

    Manages configuration from multiple sources with precedence:
    1. Compiled defaults (lowest)
    2. User config file (YAML)
    3. Environment variables (SRCPACK_*)
    4. CLI arguments
    5. Runtime updates (highest)
    """

    def __init__(self, config_file: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        """Initialize configuration manager.

        Args:
            config_file: Optional config file to load
            environ: Environment mapping to read overrides from (defaults to os.environ)
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._lock = threading.RLock()

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        self._load_environment(os.environ if environ is None else environ)

    def load_file(self, file_path: str, source: ConfigSource = ConfigSource.USER_CONFIG) -> None:
        """Load configuration from YAML file.

        Args:
            file_path: Path to YAML config file
            source: Configuration source level

        Raises:
            ConfigError: If file cannot be loaded or parsed
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT) from e
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.IO_ERROR) from e

        if config_data is None:
            config_data = {}

        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}", ErrorCode.INVALID_INPUT)

        if ConfigKey.ROOT not in config_data:
            config_data = {ConfigKey.ROOT: config_data}

        with self._lock:
            self._config[source] = config_data

    def load_dict(self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Load configuration from dictionary.

        Args:
            config_data: Configuration dictionary
            source: Configuration source level
        """
        if ConfigKey.ROOT not in config_data:
            config_data = {ConfigKey.ROOT: config_data}

        with self._lock:
            self._config[source] = copy.deepcopy(config_data)

    def _load_environment(self, environ: Dict[str, str]) -> None:
        """Load configuration from environment variables.

        Environment variables in format: SRCPACK_KEY=value, with ``__``
        separating nested keys.
        Example: SRCPACK_COMPRESSION_LEVEL=9, SRCPACK_LOGGING__LEVEL=DEBUG
        """
        env_config: Dict[str, Any] = {}

        for key, value in environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            parts = [p for p in key[len(ENV_PREFIX):].lower().split(ENV_NESTING) if p]
            if not parts:
                continue

            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
                if not isinstance(current, dict):
                    break
            else:
                parsed = self._parse_env_value(value)
                if parts == [ConfigKey.IGNORE] and not isinstance(parsed, list):
                    parsed = [value] if value else []
                current[parts[-1]] = parsed

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = {ConfigKey.ROOT: env_config}

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value.

        Args:
            value: String value from environment

        Returns:
            Parsed value (int, bool, None, list or str)
        """
        lowered = value.lower()
        if lowered in ("true", "yes"):
            return True
        if lowered in ("false", "no"):
            return False
        if lowered in ("null", "none"):
            return None

        try:
            return int(value)
        except ValueError:
            pass

        # Comma-separated pattern lists
        if "," in value:
            return [item.strip() for item in value.split(",") if item.strip()]

        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        An explicit null in a higher source overrides lower sources.

        Args:
            key: Dot-separated key path (e.g., "srcpack.compression_level")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config.keys(), key=lambda s: s.value, reverse=True):
                found, value = self._get_nested(self._config[source], key)
                if found:
                    return value

            return default

    def _get_nested(self, config: Dict[str, Any], key: str) -> Tuple[bool, Any]:
        """Get value from nested dictionary using dot notation.

        Returns:
            (found, value) pair
        """
        current: Any = config

        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return False, None
            current = current[part]

        return True, current

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
        """Get merged configuration from all sources.

        Returns:
            Merged configuration dictionary
        """
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
