"""SrcPack Rules System.

This module provides ignore-list handling:
- compile_pattern: One gitignore-style pattern to an IgnoreRule
- RuleSet: Ordered rules with last-match-wins evaluation
- load_ignore_file: Patterns from a .dockerignore-style file

Rules decide which paths of the source tree end up in the archive.
"""

from .engine import RuleSet, Verdict, load_ignore_file, parse_ignore_lines
from .patterns import IgnoreRule, Polarity, compile_pattern, normalize_path, translate_glob

__all__ = [
    # Pattern compilation
    "Polarity",
    "IgnoreRule",
    "compile_pattern",
    "normalize_path",
    "translate_glob",
    # Rule evaluation
    "Verdict",
    "RuleSet",
    "parse_ignore_lines",
    "load_ignore_file",
]
