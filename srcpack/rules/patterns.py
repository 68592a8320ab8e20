#!/usr/bin/env python3
r"""Ignore-pattern compilation.

This module turns one ignore-list entry into an ``IgnoreRule``:
- ``!`` prefix flips the rule to re-include matching paths
- ``*`` and ``?`` stay within one path segment
- ``**`` crosses segment boundaries
- Everything else is literal and matched against the whole relative path

Example:
    >>> rule = compile_pattern("!dir/**")
    >>> rule.polarity
    <Polarity.INCLUDE: 'include'>
    >>> rule.matches("dir/sub/a.txt")
    True
    >>> rule.matches("dir")
    False
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Pattern

NEGATION_PREFIX = "!"


class Polarity(Enum):
    """What a matching rule does to the path."""

    EXCLUDE = "exclude"  # Leave out of the archive
    INCLUDE = "include"  # Re-include (negated pattern)


@dataclass(frozen=True)
class IgnoreRule:
    """A compiled ignore-list entry."""

    pattern: str  # Raw text as supplied by the caller
    polarity: Polarity
    regex: Pattern[str] = field(compare=False, repr=False)

    @property
    def is_exclude(self) -> bool:
        """True if a match excludes the path."""
        return self.polarity == Polarity.EXCLUDE

    def matches(self, path: str) -> bool:
        """Check whether the rule accepts a relative path.

        Args:
            path: Path relative to the archive root

        Returns:
            True if the whole path matches
        """
        return self.regex.fullmatch(normalize_path(path)) is not None


def normalize_path(path: str) -> str:
    """Normalize a relative path for matching.

    Separators become forward slashes and leading/trailing slashes are
    removed.

    Args:
        path: Relative path in host or forward-slash form

    Returns:
        Normalized path
    """
    return str(path).replace("\\", "/").strip("/")


def _normalize_pattern(pattern: str) -> str:
    pattern = pattern.replace("\\", "/")

    # Anchors are implicit: every pattern is relative to the root
    while pattern.startswith("./"):
        pattern = pattern[2:]

    return pattern.strip("/")


def translate_glob(pattern: str) -> str:
    """Translate a normalized glob into an anchored-by-fullmatch regex.

    Args:
        pattern: Glob without negation prefix or surrounding slashes

    Returns:
        Regular expression source
    """
    parts = []
    i = 0
    n = len(pattern)

    while i < n:
        char = pattern[i]

        if pattern.startswith("**", i):
            at_segment_start = i == 0 or pattern[i - 1] == "/"
            if at_segment_start and pattern.startswith("**/", i):
                # Zero or more whole directories
                parts.append("(?:.*/)?")
                i += 3
            else:
                parts.append(".*")
                i += 2
        elif char == "*":
            parts.append("[^/]*")
            i += 1
        elif char == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(char))
            i += 1

    return "".join(parts)


def compile_pattern(pattern: str, case_sensitive: bool = True) -> IgnoreRule:
    """Compile one ignore-list entry.

    Never fails: an empty or degenerate pattern compiles to a rule that
    matches nothing, since relative paths are never empty.

    Args:
        pattern: Raw pattern, optionally prefixed with ``!``
        case_sensitive: Whether matching is case-sensitive

    Returns:
        Compiled rule
    """
    body = pattern
    polarity = Polarity.EXCLUDE
    if body.startswith(NEGATION_PREFIX):
        polarity = Polarity.INCLUDE
        body = body[len(NEGATION_PREFIX):]

    flags = 0 if case_sensitive else re.IGNORECASE
    regex = re.compile(translate_glob(_normalize_pattern(body)), flags)

    return IgnoreRule(pattern=pattern, polarity=polarity, regex=regex)
