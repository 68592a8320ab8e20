#!/usr/bin/env python3
"""Main entry point for packing a build context.

This module handles:
- Collecting ignore patterns from ignore files, configuration and flags
- Choosing the single-file or directory source
- Running the archiver and reporting the result

Example:
    >>> from srcpack.main import run_srcpack
    >>> run_srcpack(args, config, logger)
"""

import argparse
import os
from typing import List

from srcpack.archive import ArchiveOptions, CompressedArchive, compress_to_file
from srcpack.core.config import ConfigManager
from srcpack.core.constants import ConfigKey
from srcpack.core.logging import Logger
from srcpack.rules.engine import load_ignore_file


class SrcPackMain:
    """
    Drives one packing run from parsed arguments and configuration.
    """

    def __init__(self, args: argparse.Namespace, config: ConfigManager, logger: Logger):
        """
        Initialize the run.

        Args:
            args: Parsed command-line arguments
            config: Configuration manager
            logger: Logger instance
        """
        self.args = args
        self.config = config
        self.logger = logger
        self.source = os.path.abspath(args.source)

    def collect_patterns(self) -> List[str]:
        """
        Gather ignore patterns, lowest priority first.

        Order: ignore file in the source directory, ``--ignore-file``,
        configured ``ignore`` list, ``--ignore`` flags.

        Returns:
            Patterns in priority order
        """
        patterns: List[str] = []

        ignore_file_name = self.config.get(f"{ConfigKey.ROOT}.{ConfigKey.IGNORE_FILE_NAME}")
        if ignore_file_name and os.path.isdir(self.source):
            ignore_file = os.path.join(self.source, ignore_file_name)
            found = load_ignore_file(ignore_file)
            if found:
                self.logger.debug("Loaded ignore file", path=ignore_file, patterns=len(found))
            patterns.extend(found)

        if self.args.ignore_file:
            found = load_ignore_file(self.args.ignore_file)
            self.logger.debug("Loaded ignore file", path=self.args.ignore_file, patterns=len(found))
            patterns.extend(found)

        patterns.extend(self.config.get(f"{ConfigKey.ROOT}.{ConfigKey.IGNORE}") or [])
        patterns.extend(self.args.ignore or [])

        return patterns

    def build_archive(self) -> CompressedArchive:
        """
        Run the staged archiver against the source.

        Returns:
            The finished archive
        """
        options = ArchiveOptions.from_config(self.config)
        patterns = self.collect_patterns()

        self.logger.info(
            "Packing source",
            source=self.source,
            output=self.args.output,
            rules=len(patterns),
        )

        stage = compress_to_file(self.args.output, options=options, logger=self.logger)
        stage = stage.with_ignore_list(patterns)

        if os.path.isfile(self.source):
            return stage.with_file(self.source).compress()
        return stage.with_directory(self.source).compress()

    def run(self) -> int:
        """
        Pack the source and optionally print the archived paths.

        Returns:
            Exit code (0 on success)
        """
        archive = self.build_archive()

        if self.args.list:
            for path in archive.file_list():
                print(path)

        self.logger.info("Build context ready", output=archive.filename, entries=len(archive))
        return 0


def run_srcpack(args: argparse.Namespace, config: ConfigManager, logger: Logger) -> int:
    """
    Main entry point for one packing run.

    Args:
        args: Parsed command-line arguments
        config: Configuration manager
        logger: Logger instance

    Returns:
        Exit code
    """
    return SrcPackMain(args, config, logger).run()
