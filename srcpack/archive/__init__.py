"""SrcPack Archive Layer.

This module produces the compressed build context:
- ArchiveWriter: Sequential gzip-compressed tar writer
- Archiver: Tree walk applying ignore rules
- compress_to_file: Staged builder entry point

Stages chain in one order only:
compress_to_file -> with_ignore_list (optional) -> with_file | with_directory
-> compress -> file_list
"""

from .archiver import (
    Archiver,
    ArchiveOptions,
    CompressedArchive,
    CompressStage,
    ConfigurationError,
    IgnoreStage,
    SourceKind,
    SourceStage,
    compress_to_file,
)
from .writer import ArchiveError, ArchiveWriter

__all__ = [
    # Writer
    "ArchiveError",
    "ArchiveWriter",
    # Archiver
    "Archiver",
    "ArchiveOptions",
    "ConfigurationError",
    "SourceKind",
    # Staged builder
    "compress_to_file",
    "IgnoreStage",
    "SourceStage",
    "CompressStage",
    "CompressedArchive",
]
