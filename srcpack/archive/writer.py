#!/usr/bin/env python3
"""Sequential gzip-compressed tar writer.

This module provides the low-level container writer used by the archiver:
- gzip-compressed tar (PAX format, so long and non-ASCII names are kept)
- One entry per call, appended in call order, never rewritten
- File contents streamed in fixed-size chunks
- Finalized exactly once

Example:
    >>> writer = ArchiveWriter("context.tar.gz")
    >>> writer.add_file("/work/app/src/main.py", "src/main.py")
    >>> writer.add_directory("/work/app/src", "src")
    >>> writer.close()
"""

import gzip
import os
import tarfile
from typing import Union

from srcpack.core.constants import ErrorCode, Limits


class ArchiveError(OSError):
    """I/O failure while creating or writing an archive."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.IO_ERROR):
        """Initialize ArchiveError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


def error_code_for(exc: OSError) -> ErrorCode:
    """Map an OSError to the matching error code."""
    if isinstance(exc, PermissionError):
        return ErrorCode.PERMISSION_DENIED
    if isinstance(exc, FileNotFoundError):
        return ErrorCode.NOT_FOUND
    return ErrorCode.IO_ERROR


class ArchiveWriter:
    """Append-only writer over a ``.tar.gz`` file.

    The destination is created (or truncated) on construction. Entries are
    written with metadata taken from ``os.stat`` (symlinks dereferenced).
    """

    def __init__(
        self,
        filename: Union[str, os.PathLike],
        compression_level: int = Limits.DEFAULT_COMPRESSION_LEVEL,
        copy_buffer_size: int = Limits.DEFAULT_COPY_BUFFER_SIZE,
    ):
        """Open the destination archive.

        Args:
            filename: Destination path
            compression_level: gzip level (1-9)
            copy_buffer_size: Chunk size for streaming file contents

        Raises:
            ArchiveError: If the destination cannot be created
        """
        self.filename = os.fspath(filename)
        self.entry_count = 0
        self._closed = False

        try:
            self._gzip = gzip.GzipFile(self.filename, "wb", compresslevel=compression_level)
        except OSError as e:
            raise ArchiveError(
                f"Cannot create archive {self.filename}: {e}", error_code_for(e)
            ) from e

        # The tar layer never closes the gzip stream; close() and abort() do
        self._tar = tarfile.open(
            fileobj=self._gzip,
            mode="w",
            format=tarfile.PAX_FORMAT,
            dereference=True,
            copybufsize=copy_buffer_size,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise ArchiveError(
                f"Archive {self.filename} is already finalized", ErrorCode.INVALID_STATE
            )

    def add_file(self, source_path: str, arcname: str) -> tarfile.TarInfo:
        """Write a regular file entry followed by its contents.

        Args:
            source_path: File to read
            arcname: Member name (forward-slash relative path)

        Returns:
            The header that was written

        Raises:
            ArchiveError: If the file cannot be read or the archive written
        """
        self._ensure_open()
        try:
            tarinfo = self._tar.gettarinfo(source_path, arcname=arcname)
            with open(source_path, "rb") as f:
                self._tar.addfile(tarinfo, f)
        except OSError as e:
            raise ArchiveError(f"Failed to archive {source_path}: {e}", error_code_for(e)) from e

        self.entry_count += 1
        return tarinfo

    def add_directory(self, source_path: str, arcname: str) -> tarfile.TarInfo:
        """Write a directory entry (header only).

        Args:
            source_path: Directory whose metadata is recorded
            arcname: Member name (forward-slash relative path)

        Returns:
            The header that was written

        Raises:
            ArchiveError: If the directory cannot be stat'ed or the archive written
        """
        self._ensure_open()
        try:
            tarinfo = self._tar.gettarinfo(source_path, arcname=arcname)
            self._tar.addfile(tarinfo)
        except OSError as e:
            raise ArchiveError(f"Failed to archive {source_path}: {e}", error_code_for(e)) from e

        self.entry_count += 1
        return tarinfo

    def close(self) -> None:
        """Write the tar trailer, flush the compressor and close the file.

        Raises:
            ArchiveError: If already closed or the final flush fails
        """
        self._ensure_open()
        self._closed = True
        try:
            self._tar.close()
            self._gzip.close()
        except OSError as e:
            self._gzip.close()
            raise ArchiveError(
                f"Failed to finalize archive {self.filename}: {e}", error_code_for(e)
            ) from e

    def abort(self) -> None:
        """Release the destination without writing the tar trailer.

        The partial file left behind is not a valid archive.
        """
        if self._closed:
            return
        self._closed = True
        self._gzip.close()

    def __enter__(self) -> "ArchiveWriter":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()
