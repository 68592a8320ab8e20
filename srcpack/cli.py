#!/usr/bin/env python3
"""Command-line interface for SrcPack.

This module provides the CLI for packing a build context:
- Argument parsing and validation
- Configuration file loading and layering
- Logging setup
- Error-to-exit-code mapping

Example:
    >>> from srcpack.cli import parse_arguments
    >>> args = parse_arguments(["./app", "--output", "context.tar.gz"])
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from srcpack.archive import ArchiveError, ConfigurationError
from srcpack.core.config import ConfigError, ConfigManager, ConfigSource
from srcpack.core.constants import SRCPACK_VERSION, ConfigKey
from srcpack.core.logging import Logger
from srcpack.core.validators import ValidationError, validate_compression_level, validate_config

DESCRIPTION = "SrcPack - filtered source archives for remote builds"

EXIT_USAGE = 1
EXIT_IO = 2
EXIT_INTERRUPTED = 130


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If argument values fail validation
    """
    parser = argparse.ArgumentParser(
        prog="srcpack",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pack the current directory, honouring ./.dockerignore
  srcpack . --output context.tar.gz

  # Ship only the src directory
  srcpack . -o context.tar.gz --ignore '*' --ignore '!src/**'

  # Pack a single file and list what went in
  srcpack Dockerfile -o context.tar.gz --list

Patterns are evaluated last to first; the first match decides. A leading
'!' re-includes. Paths with no match inherit their parent's state.
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {SRCPACK_VERSION}",
    )

    parser.add_argument(
        "source",
        metavar="SOURCE",
        help="File or directory to pack (a missing path yields an empty archive)",
    )

    parser.add_argument(
        "-o",
        "--output",
        metavar="FILE",
        required=True,
        help="Destination .tar.gz file (created or truncated)",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file path (YAML format)",
    )

    # Filtering options
    filter_group = parser.add_argument_group("filtering options")

    filter_group.add_argument(
        "-i",
        "--ignore",
        metavar="PATTERN",
        action="append",
        default=[],
        help="Ignore pattern, highest priority last (can be specified multiple times)",
    )

    filter_group.add_argument(
        "--ignore-file",
        metavar="FILE",
        help="Read additional ignore patterns from FILE",
    )

    filter_group.add_argument(
        "--no-ignore-file",
        action="store_true",
        help="Do not read the ignore file found in the source directory",
    )

    # Archive options
    archive_group = parser.add_argument_group("archive options")

    archive_group.add_argument(
        "--compression-level",
        metavar="N",
        type=int,
        help="gzip compression level 1-9 (default: 6)",
    )

    archive_group.add_argument(
        "--list",
        action="store_true",
        help="Print the absolute path of every archived entry",
    )

    # Logging options
    log_group = parser.add_argument_group("logging options")

    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    log_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write logs to FILE",
    )

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments namespace

    Raises:
        CLIError: If validation fails
    """
    output_path = Path(args.output)

    if output_path.is_dir():
        raise CLIError(f"Output path is a directory: {args.output}")

    if args.ignore_file:
        ignore_path = Path(args.ignore_file)

        if not ignore_path.exists():
            raise CLIError(f"Ignore file does not exist: {args.ignore_file}")

        if not ignore_path.is_file():
            raise CLIError(f"Ignore file path is not a file: {args.ignore_file}")

    if args.config:
        config_path = Path(args.config)

        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}")

        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")

    if args.compression_level is not None:
        try:
            validate_compression_level(args.compression_level)
        except ValidationError as e:
            raise CLIError(str(e)) from e


def build_config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Build configuration dictionary from command-line arguments.

    Only options given on the command line appear, so unset flags do not
    mask file or environment values.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration dictionary for the CLI_ARGS layer
    """
    section: Dict[str, Any] = {}

    if args.compression_level is not None:
        section[ConfigKey.COMPRESSION_LEVEL] = args.compression_level

    if args.no_ignore_file:
        section[ConfigKey.IGNORE_FILE_NAME] = None

    logging_config: Dict[str, Any] = {}
    if args.debug:
        logging_config[ConfigKey.LOG_LEVEL] = "DEBUG"
    if args.log_file:
        logging_config[ConfigKey.LOG_FILE] = args.log_file
    if logging_config:
        section[ConfigKey.LOGGING] = logging_config

    return {ConfigKey.ROOT: section}


def load_configuration(args: argparse.Namespace) -> ConfigManager:
    """
    Layer defaults, config file, environment and CLI arguments.

    Args:
        args: Parsed arguments namespace

    Returns:
        Validated configuration manager

    Raises:
        ConfigError: If the config file cannot be loaded
        ValidationError: If the merged configuration is invalid
    """
    config = ConfigManager(args.config)
    config.load_dict(build_config_from_args(args), ConfigSource.CLI_ARGS)
    validate_config(config.get_all())
    return config


def setup_logging(args: argparse.Namespace, config: ConfigManager) -> Logger:
    """
    Setup logging based on arguments and configuration.

    Args:
        args: Parsed arguments namespace
        config: Configuration manager

    Returns:
        Configured logger instance
    """
    log_level = (
        config.get(f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}.{ConfigKey.LOG_LEVEL}") or "INFO"
    )
    log_file = config.get(f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}.{ConfigKey.LOG_FILE}")

    logger = Logger("srcpack", level=log_level)

    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))
        logger.debug(f"Logging to file: {log_file}")

    return logger


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Parses arguments, loads configuration and hands over to
    ``srcpack.main.run_srcpack``.

    Returns:
        Process exit code
    """
    try:
        args = parse_arguments(argv)

        config = load_configuration(args)

        logger = setup_logging(args, config)

        from srcpack.main import run_srcpack

        return run_srcpack(args, config, logger)

    except (CLIError, ConfigError, ValidationError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    except ArchiveError as e:
        print(f"Archive failed: {e}", file=sys.stderr)
        return EXIT_IO

    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return EXIT_IO

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
