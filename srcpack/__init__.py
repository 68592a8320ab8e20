"""SrcPack - filtered source archives for remote builds.

Packages a directory (or a single file) into a gzip-compressed tar archive,
leaving out paths matched by a gitignore-style rule list:

    >>> from srcpack import compress_to_file
    >>> archive = (
    ...     compress_to_file("context.tar.gz")
    ...     .with_ignore_list(["*.log", "build/**"])
    ...     .with_directory(".")
    ...     .compress()
    ... )
    >>> paths = archive.file_list()
"""

from srcpack.archive import (
    ArchiveError,
    ArchiveOptions,
    CompressedArchive,
    ConfigurationError,
    compress_to_file,
)
from srcpack.core.constants import SRCPACK_VERSION as __version__
from srcpack.rules import RuleSet, Verdict, compile_pattern

__all__ = [
    "__version__",
    "compress_to_file",
    "ArchiveOptions",
    "CompressedArchive",
    "ArchiveError",
    "ConfigurationError",
    "RuleSet",
    "Verdict",
    "compile_pattern",
]
