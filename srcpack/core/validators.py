"""
SrcPack Core: Input Validators.

This module provides validation functions for configuration values and the
ignore-pattern lists supplied by callers.
"""
from typing import Any, Dict, Iterable, List, Optional

from srcpack.core.constants import ConfigKey, ErrorCode, Limits


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


def validate_patterns(patterns: Optional[Iterable[Any]]) -> List[str]:
    """Validate an ignore-pattern list.

    Pattern text is never rejected (any string compiles to a rule); only
    non-string entries are.

    Args:
        patterns: Sequence of pattern strings, or None

    Returns:
        The patterns as a list, empty for None

    Raises:
        ValidationError: If the sequence or one of its entries is not a string
    """
    if patterns is None:
        return []

    if isinstance(patterns, (str, bytes)):
        raise ValidationError("Ignore patterns must be a sequence of strings, not a single string")

    result = []
    for i, pattern in enumerate(patterns):
        if not isinstance(pattern, str):
            raise ValidationError(
                f"Ignore pattern at index {i} must be string, got {type(pattern).__name__}"
            )
        result.append(pattern)

    return result


def validate_compression_level(level: Any) -> int:
    """Validate gzip compression level.

    Args:
        level: Compression level

    Returns:
        The level as int

    Raises:
        ValidationError: If level is not an int in range
    """
    if isinstance(level, bool) or not isinstance(level, int):
        raise ValidationError(f"Compression level must be integer, got {type(level).__name__}")

    if not Limits.MIN_COMPRESSION_LEVEL <= level <= Limits.MAX_COMPRESSION_LEVEL:
        raise ValidationError(
            f"Compression level must be between {Limits.MIN_COMPRESSION_LEVEL} "
            f"and {Limits.MAX_COMPRESSION_LEVEL}, got {level}"
        )

    return level


def validate_buffer_size(size: Any) -> int:
    """Validate the streaming copy buffer size.

    Args:
        size: Buffer size in bytes

    Returns:
        The size as int

    Raises:
        ValidationError: If size is not an int in range
    """
    if isinstance(size, bool) or not isinstance(size, int):
        raise ValidationError(f"Buffer size must be integer, got {type(size).__name__}")

    if size < Limits.MIN_COPY_BUFFER_SIZE:
        raise ValidationError(f"Buffer size too small (min {Limits.MIN_COPY_BUFFER_SIZE}): {size}")

    if size > Limits.MAX_COPY_BUFFER_SIZE:
        raise ValidationError(f"Buffer size too large (max {Limits.MAX_COPY_BUFFER_SIZE}): {size}")

    return size


def validate_config(config: Dict[str, Any]) -> bool:
    """Validate the ``srcpack`` configuration section.

    Args:
        config: Merged configuration dictionary (with or without the
            top-level ``srcpack`` key)

    Returns:
        True if valid

    Raises:
        ValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ValidationError("Configuration must be a dictionary")

    section = config.get(ConfigKey.ROOT, config)
    if not isinstance(section, dict):
        raise ValidationError(f"'{ConfigKey.ROOT}' section must be a dictionary")

    if ConfigKey.COMPRESSION_LEVEL in section:
        validate_compression_level(section[ConfigKey.COMPRESSION_LEVEL])

    if ConfigKey.COPY_BUFFER_SIZE in section:
        validate_buffer_size(section[ConfigKey.COPY_BUFFER_SIZE])

    if ConfigKey.CASE_SENSITIVE in section:
        if not isinstance(section[ConfigKey.CASE_SENSITIVE], bool):
            raise ValidationError("case_sensitive must be boolean")

    if ConfigKey.IGNORE in section:
        ignore = section[ConfigKey.IGNORE]
        if ignore is not None and not isinstance(ignore, list):
            raise ValidationError("ignore must be a list of patterns")
        validate_patterns(ignore)

    if ConfigKey.IGNORE_FILE_NAME in section:
        name = section[ConfigKey.IGNORE_FILE_NAME]
        if name is not None:
            if not isinstance(name, str) or not name:
                raise ValidationError("ignore_file_name must be a non-empty string or null")
            if "/" in name or "\\" in name:
                raise ValidationError(f"ignore_file_name must be a bare file name: {name}")

    if ConfigKey.LOGGING in section:
        logging_config = section[ConfigKey.LOGGING]
        if not isinstance(logging_config, dict):
            raise ValidationError("logging must be a dictionary")

        if ConfigKey.LOG_LEVEL in logging_config:
            level = logging_config[ConfigKey.LOG_LEVEL]
            if level is None or str(level).upper() not in (
                "DEBUG",
                "INFO",
                "WARNING",
                "ERROR",
                "CRITICAL",
            ):
                raise ValidationError(f"Invalid log level: {level}")

    return True
