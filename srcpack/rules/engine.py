#!/usr/bin/env python3
"""Ordered ignore-rule evaluation.

This module provides the rule set consulted for every node of the walk:
- Rules kept in caller order, later rules have higher priority
- Last-match-wins evaluation with a three-valued verdict
- Ignore-file parsing (.dockerignore style)

Example:
    >>> rules = RuleSet(["*", "!dir/**"])
    >>> rules.evaluate("a.txt")
    <Verdict.EXCLUDED: 'excluded'>
    >>> rules.evaluate("dir/a.txt")
    <Verdict.INCLUDED: 'included'>
    >>> rules.evaluate("dir/sub/a.txt")
    <Verdict.INCLUDED: 'included'>
"""

from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from srcpack.rules.patterns import IgnoreRule, Polarity, compile_pattern

COMMENT_PREFIX = "#"


class Verdict(Enum):
    """Outcome of evaluating one path, before inheritance."""

    EXCLUDED = "excluded"
    INCLUDED = "included"
    UNSET = "unset"  # No rule matched


class RuleSet:
    """Ordered collection of ignore rules.

    Rules are never reordered: evaluation walks from the last added rule to
    the first and the first match decides. Callers put broad rules first and
    specific overrides last.
    """

    def __init__(self, patterns: Optional[Iterable[str]] = None, case_sensitive: bool = True):
        """Initialize rule set.

        Args:
            patterns: Initial patterns, in priority order (lowest first)
            case_sensitive: Whether patterns match case-sensitively
        """
        self._rules: List[IgnoreRule] = []
        self._case_sensitive = case_sensitive

        for pattern in patterns or ():
            self.add_pattern(pattern)

    def add_pattern(self, pattern: str) -> IgnoreRule:
        """Compile a pattern and append it as the highest-priority rule.

        Args:
            pattern: Raw pattern text

        Returns:
            The compiled rule
        """
        rule = compile_pattern(pattern, case_sensitive=self._case_sensitive)
        self._rules.append(rule)
        return rule

    def add_rule(self, rule: IgnoreRule) -> None:
        """Append an already compiled rule as the highest-priority rule."""
        self._rules.append(rule)

    def get_matching_rule(self, path: str) -> Optional[IgnoreRule]:
        """Find the rule that decides a path.

        Args:
            path: Path relative to the archive root

        Returns:
            Highest-priority matching rule, or None
        """
        for rule in reversed(self._rules):
            if rule.matches(path):
                return rule
        return None

    def evaluate(self, path: str) -> Verdict:
        """Evaluate a relative path.

        Args:
            path: Path relative to the archive root

        Returns:
            EXCLUDED or INCLUDED from the deciding rule, UNSET if none match
        """
        rule = self.get_matching_rule(path)
        if rule is None:
            return Verdict.UNSET
        if rule.polarity == Polarity.EXCLUDE:
            return Verdict.EXCLUDED
        return Verdict.INCLUDED

    def get_rules(self) -> List[IgnoreRule]:
        """Get all rules in priority order (lowest first)."""
        return self._rules.copy()

    @property
    def case_sensitive(self) -> bool:
        return self._case_sensitive

    def __iter__(self) -> Iterator[IgnoreRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        """Return number of rules."""
        return len(self._rules)

    def __bool__(self) -> bool:
        """Return True if any rules are registered."""
        return bool(self._rules)


def parse_ignore_lines(lines: Iterable[str]) -> List[str]:
    """Extract patterns from ignore-file lines.

    Whitespace is trimmed; blank lines and ``#`` comments are skipped.

    Args:
        lines: Raw lines

    Returns:
        Patterns in file order
    """
    patterns = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            continue
        patterns.append(stripped)
    return patterns


def load_ignore_file(path: Union[str, Path]) -> List[str]:
    """Read patterns from an ignore file.

    Args:
        path: Path to a .dockerignore-style file

    Returns:
        Patterns in file order, empty if the file does not exist

    Raises:
        OSError: If the file exists but cannot be read
    """
    path = Path(path)
    if not path.is_file():
        return []

    with open(path, "r", encoding="utf-8") as f:
        return parse_ignore_lines(f)
