"""
SrcPack Core: Constants

This module provides system-wide constants, error codes, and the default
configuration shared by the archiver, the configuration layer and the CLI.
"""
from enum import IntEnum
from typing import FrozenSet

# Version information
SRCPACK_VERSION = "1.0.0"


# Error codes (0-9 range)
class ErrorCode(IntEnum):
    """Standardized error codes for SrcPack operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad pattern, invalid configuration
    NOT_FOUND = 2  # File or resource doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    INVALID_STATE = 4  # Operation called out of order
    IO_ERROR = 5  # Read/write failure while archiving
    INTERNAL_ERROR = 6  # Bug in SrcPack


# Names dropped at any depth before any rule is consulted
COMMON_IGNORE: FrozenSet[str] = frozenset({".git"})


# Resource limits and defaults
class Limits:
    """Resource limits and default values."""

    # gzip
    MIN_COMPRESSION_LEVEL = 1
    MAX_COMPRESSION_LEVEL = 9
    DEFAULT_COMPRESSION_LEVEL = 6

    # Streaming copy buffer for file contents
    MIN_COPY_BUFFER_SIZE = 512
    MAX_COPY_BUFFER_SIZE = 64 * 1024 * 1024  # 64MB
    DEFAULT_COPY_BUFFER_SIZE = 64 * 1024  # 64KB


# Configuration keys
class ConfigKey:
    """Configuration key constants."""

    # Top-level key
    ROOT = "srcpack"

    COMPRESSION_LEVEL = "compression_level"
    COPY_BUFFER_SIZE = "copy_buffer_size"
    CASE_SENSITIVE = "case_sensitive"
    IGNORE = "ignore"
    IGNORE_FILE_NAME = "ignore_file_name"
    LOGGING = "logging"

    # Logging configuration
    LOG_LEVEL = "level"
    LOG_FILE = "file"


DEFAULT_IGNORE_FILE_NAME = ".dockerignore"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.COMPRESSION_LEVEL: Limits.DEFAULT_COMPRESSION_LEVEL,
        ConfigKey.COPY_BUFFER_SIZE: Limits.DEFAULT_COPY_BUFFER_SIZE,
        ConfigKey.CASE_SENSITIVE: True,
        ConfigKey.IGNORE: [],
        ConfigKey.IGNORE_FILE_NAME: DEFAULT_IGNORE_FILE_NAME,
        ConfigKey.LOGGING: {
            ConfigKey.LOG_LEVEL: "INFO",
            ConfigKey.LOG_FILE: None,
        },
    }
}
