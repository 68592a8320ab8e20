#!/usr/bin/env python3
"""Filtered source archiver.

This module builds the ``.tar.gz`` build context:
- Depth-first walk of a directory tree (or a single file)
- Ignore rules evaluated per node, with inheritance from the parent
- Version-control metadata always dropped
- Directories written only when something below them was written
- Staged builder so operations can only be chained in order

Example:
    >>> archive = (
    ...     compress_to_file("context.tar.gz")
    ...     .with_ignore_list(["*", "!src/**"])
    ...     .with_directory("/work/app")
    ...     .compress()
    ... )
    >>> archive.file_list()
    ['/work/app/src/main.py', '/work/app/src']
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from srcpack.archive.writer import ArchiveError, ArchiveWriter, error_code_for
from srcpack.core.config import ConfigManager
from srcpack.core.constants import COMMON_IGNORE, ConfigKey, ErrorCode, Limits
from srcpack.core.logging import Logger, get_logger
from srcpack.core.validators import (
    validate_buffer_size,
    validate_compression_level,
    validate_patterns,
)
from srcpack.rules.engine import RuleSet, Verdict

_FileId = Tuple[int, int]


class ConfigurationError(Exception):
    """Archive operations invoked out of order."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_STATE):
        """Initialize ConfigurationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


class SourceKind(Enum):
    """What the archive source points at."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class ArchiveOptions:
    """Settings passed explicitly into an Archiver."""

    compression_level: int = Limits.DEFAULT_COMPRESSION_LEVEL
    copy_buffer_size: int = Limits.DEFAULT_COPY_BUFFER_SIZE
    case_sensitive: bool = True

    def __post_init__(self) -> None:
        validate_compression_level(self.compression_level)
        validate_buffer_size(self.copy_buffer_size)

    @classmethod
    def from_config(cls, config: ConfigManager) -> "ArchiveOptions":
        """Build options from the ``srcpack`` configuration section.

        Args:
            config: Configuration manager

        Returns:
            Archive options
        """
        root = ConfigKey.ROOT
        return cls(
            compression_level=config.get(
                f"{root}.{ConfigKey.COMPRESSION_LEVEL}", Limits.DEFAULT_COMPRESSION_LEVEL
            ),
            copy_buffer_size=config.get(
                f"{root}.{ConfigKey.COPY_BUFFER_SIZE}", Limits.DEFAULT_COPY_BUFFER_SIZE
            ),
            case_sensitive=bool(config.get(f"{root}.{ConfigKey.CASE_SENSITIVE}", True)),
        )


@dataclass
class _DirectoryFrame:
    """One directory on the explicit walk stack."""

    path: str  # Absolute
    relative: str  # Root-relative, "" for the root itself
    ignored: Optional[bool]  # Resolved state handed down to children
    children: Iterator[os.DirEntry]
    identity: _FileId  # (st_dev, st_ino) of the directory itself
    added: bool = False  # Something below was written


class Archiver:
    """Walks a source and writes the surviving entries to an archive.

    One instance produces one archive. The destination is opened on
    construction; ``finalize`` performs the walk and closes it.
    """

    def __init__(
        self,
        filename: Union[str, os.PathLike],
        options: Optional[ArchiveOptions] = None,
        logger: Optional[Logger] = None,
    ):
        """Initialize archiver and create the destination file.

        Args:
            filename: Destination ``.tar.gz`` path
            options: Archive options (defaults if omitted)
            logger: Logger (``srcpack.archive`` if omitted)

        Raises:
            ArchiveError: If the destination cannot be created
        """
        self._options = options or ArchiveOptions()
        self._logger = logger or get_logger("srcpack.archive")
        self._writer = ArchiveWriter(
            filename,
            compression_level=self._options.compression_level,
            copy_buffer_size=self._options.copy_buffer_size,
        )
        try:
            self._output_id = self._file_id(self._writer.filename)
        except ArchiveError:
            self._writer.abort()
            raise
        self._rules = RuleSet(case_sensitive=self._options.case_sensitive)
        self._file_list: List[str] = []
        self._source: Optional[Tuple[SourceKind, str]] = None
        self._finalized = False
        self._aborted = False

    @property
    def filename(self) -> str:
        return self._writer.filename

    @property
    def rules(self) -> RuleSet:
        return self._rules

    def set_ignore_rules(self, patterns: Optional[Sequence[str]]) -> None:
        """Replace the ignore rules.

        Args:
            patterns: Patterns in priority order (lowest first); None or
                empty means only the common-ignore set applies

        Raises:
            ConfigurationError: If a source was already set
            ValidationError: If an entry is not a string
        """
        self._ensure_usable()
        if self._source is not None or self._finalized:
            raise ConfigurationError("Ignore rules must be set before the source")

        try:
            self._rules = RuleSet(
                validate_patterns(patterns), case_sensitive=self._options.case_sensitive
            )
        except BaseException:
            self._abort()
            raise

    def set_source(self, kind: SourceKind, path: Union[str, os.PathLike]) -> None:
        """Record the single file or directory to archive.

        Raises:
            ConfigurationError: If a source was already set
        """
        self._ensure_usable()
        if self._source is not None or self._finalized:
            raise ConfigurationError("Archive source has already been set")

        self._source = (kind, os.path.abspath(os.fspath(path)))

    def finalize(self) -> List[str]:
        """Walk the source, write all entries and close the archive.

        Returns:
            Absolute paths written, in archive order

        Raises:
            ConfigurationError: If no source was set or already finalized
            ArchiveError: On any I/O failure; the partial file is unusable
        """
        self._ensure_usable()
        if self._finalized:
            raise ConfigurationError(f"Archive {self.filename} is already finalized")
        if self._source is None:
            self._abort()
            raise ConfigurationError("No source set before compress()")

        self._finalized = True
        kind, path = self._source

        with self._logger.add_context(archive=self.filename, source=path):
            try:
                if kind == SourceKind.FILE:
                    self._add_single_file(path)
                else:
                    self._add_tree(path)
            except BaseException as e:
                self._logger.exception("Archive aborted", e)
                self._abort()
                raise

            self._writer.close()
            self._logger.info("Archive written", entries=len(self._file_list))

        return self.file_list()

    def file_list(self) -> List[str]:
        """Get the absolute paths written to the archive.

        Raises:
            ConfigurationError: If the archive is not finalized yet
        """
        self._ensure_usable()
        if not self._finalized:
            raise ConfigurationError("File list is only available after compress()")
        return self._file_list.copy()

    def _abort(self) -> None:
        """Release the destination; the archive cannot be used afterwards."""
        self._aborted = True
        self._writer.abort()

    def _ensure_usable(self) -> None:
        if self._aborted:
            raise ConfigurationError(f"Archive {self.filename} was aborted")

    def _is_ignored(self, relative: str, parent_ignored: Optional[bool]) -> bool:
        """Resolve the effective ignore state of one node."""
        verdict = self._rules.evaluate(relative)
        if verdict == Verdict.EXCLUDED:
            return True
        if verdict == Verdict.INCLUDED:
            return False
        return bool(parent_ignored)

    def _add_single_file(self, path: str) -> None:
        name = os.path.basename(path)

        if not os.path.lexists(path):
            self._logger.debug("Source does not exist, archive will be empty")
            return

        if not os.path.isfile(path):
            self._logger.warning("Source is not a regular file, archive will be empty")
            return

        if name in COMMON_IGNORE:
            self._logger.debug("Skipping common-ignore entry", path=name)
            return

        if self._is_ignored(name, None):
            self._logger.debug("Skipping ignored file", path=name)
            return

        self._write_file(path, name)

    def _add_tree(self, root: str) -> None:
        if not os.path.lexists(root):
            self._logger.debug("Source does not exist, archive will be empty")
            return

        if not os.path.isdir(root):
            self._logger.warning("Source is not a directory, archive will be empty")
            return

        stack = [
            _DirectoryFrame(root, "", None, self._list_directory(root), self._file_id(root))
        ]
        # Directories currently open on the stack; a link back to one is a cycle
        active = {stack[0].identity}

        while stack:
            frame = stack[-1]
            entry = next(frame.children, None)

            if entry is None:
                stack.pop()
                active.discard(frame.identity)
                # The root itself is never a member
                if frame.added and stack:
                    self._write_directory(frame.path, frame.relative)
                    stack[-1].added = True
                continue

            if entry.name in COMMON_IGNORE:
                self._logger.debug("Skipping common-ignore entry", path=entry.path)
                continue

            relative = f"{frame.relative}/{entry.name}" if frame.relative else entry.name
            kind = self._classify(entry)

            if kind == SourceKind.DIRECTORY:
                identity = self._file_id(entry)
                if identity in active:
                    self._logger.debug("Skipping directory link cycle", path=relative)
                    continue
                ignored = self._is_ignored(relative, frame.ignored)
                stack.append(
                    _DirectoryFrame(
                        entry.path, relative, ignored, self._list_directory(entry.path), identity
                    )
                )
                active.add(identity)
            elif kind == SourceKind.FILE:
                if self._file_id(entry) == self._output_id:
                    self._logger.debug("Skipping the archive being written", path=relative)
                elif self._is_ignored(relative, frame.ignored):
                    self._logger.debug("Skipping ignored file", path=relative)
                else:
                    self._write_file(entry.path, relative)
                    frame.added = True
            else:
                self._logger.debug("Skipping unsupported entry", path=relative)

    def _list_directory(self, path: str) -> Iterator[os.DirEntry]:
        """Snapshot a directory listing in file-system order."""
        try:
            with os.scandir(path) as it:
                return iter(list(it))
        except OSError as e:
            raise ArchiveError(f"Cannot list directory {path}: {e}", error_code_for(e)) from e

    def _classify(self, entry: os.DirEntry) -> Optional[SourceKind]:
        """Symlinks are followed for both files and directories."""
        try:
            if entry.is_dir():
                return SourceKind.DIRECTORY
            if entry.is_file():
                return SourceKind.FILE
        except OSError as e:
            raise ArchiveError(f"Cannot stat {entry.path}: {e}", error_code_for(e)) from e
        return None

    def _file_id(self, target: Union[str, os.DirEntry]) -> _FileId:
        """Device and inode of a path or entry, following symlinks."""
        try:
            st = target.stat() if isinstance(target, os.DirEntry) else os.stat(target)
        except OSError as e:
            path = target.path if isinstance(target, os.DirEntry) else target
            raise ArchiveError(f"Cannot stat {path}: {e}", error_code_for(e)) from e
        return (st.st_dev, st.st_ino)

    def _write_file(self, path: str, relative: str) -> None:
        self._writer.add_file(path, relative)
        self._file_list.append(path)
        self._logger.debug("Added file", path=relative)

    def _write_directory(self, path: str, relative: str) -> None:
        self._writer.add_directory(path, relative)
        self._file_list.append(path)
        self._logger.debug("Added directory", path=relative)


class _Stage:
    """Single-use handle onto an Archiver."""

    def __init__(self, archiver: Archiver):
        self._archiver = archiver
        self._spent = False

    def _advance(self) -> Archiver:
        if self._spent:
            raise ConfigurationError(f"{type(self).__name__} has already been used")
        self._spent = True
        return self._archiver


class SourceStage(_Stage):
    """Choose exactly one source."""

    def with_file(self, filename: Union[str, os.PathLike]) -> "CompressStage":
        """Archive a single file under its base name."""
        archiver = self._advance()
        archiver.set_source(SourceKind.FILE, filename)
        return CompressStage(archiver)

    def with_directory(self, directory: Union[str, os.PathLike]) -> "CompressStage":
        """Archive everything below a directory, relative to it."""
        archiver = self._advance()
        archiver.set_source(SourceKind.DIRECTORY, directory)
        return CompressStage(archiver)


class IgnoreStage(SourceStage):
    """Set ignore rules, or skip straight to choosing the source."""

    def with_ignore_list(self, ignore_list: Optional[Sequence[str]]) -> SourceStage:
        archiver = self._advance()
        archiver.set_ignore_rules(ignore_list)
        return SourceStage(archiver)


class CompressStage(_Stage):
    """Run the walk and finalize the archive."""

    def compress(self) -> "CompressedArchive":
        archiver = self._advance()
        archiver.finalize()
        return CompressedArchive(archiver)


class CompressedArchive:
    """A finished archive and the paths it contains."""

    def __init__(self, archiver: Archiver):
        self._archiver = archiver

    @property
    def filename(self) -> str:
        return self._archiver.filename

    def file_list(self) -> List[str]:
        """Absolute source paths of every member, in archive order."""
        return self._archiver.file_list()

    def __len__(self) -> int:
        return len(self._archiver.file_list())


def compress_to_file(
    filename: Union[str, os.PathLike],
    options: Optional[ArchiveOptions] = None,
    logger: Optional[Logger] = None,
) -> IgnoreStage:
    """Start building an archive at ``filename``.

    The destination is created or truncated immediately.

    Args:
        filename: Destination ``.tar.gz`` path
        options: Archive options
        logger: Logger to report progress to

    Returns:
        First builder stage

    Raises:
        ArchiveError: If the destination cannot be created
    """
    return IgnoreStage(Archiver(filename, options=options, logger=logger))
