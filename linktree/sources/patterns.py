#!/usr/bin/env python3
r"""Pattern-based file filters with glob and regex support.

This module provides the default file filter predicate for the file iterator:
- Glob pattern matching (*.txt, **/notes/*.md)
- Regex pattern matching with compiled patterns
- Include/exclude lists with exclude-first precedence

A glob without a "/" is matched against the file's base name, so "*.txt"
selects text files at any depth. Globs containing "/" and all regexes are
matched against the whole path.

Example:
    >>> file_filter = PatternFilter(include=["*.txt"], exclude=["*.bak.txt"])
    >>> file_filter("trove/files/christmas.txt")
    True
"""

import fnmatch
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Pattern, Union

from linktree.core.errors import ConfigurationError

REGEX_PREFIX = "regex:"


class PatternType(Enum):
    """Pattern matching type."""

    GLOB = "glob"  # Shell-style patterns (*.txt, **/*.md)
    REGEX = "regex"  # Regular expressions


@dataclass
class PatternEntry:
    """A single compiled pattern."""

    pattern: str
    pattern_type: PatternType
    compiled: Union[Pattern, str]
    basename_only: bool = False


def _glob_to_regex(pattern: str) -> Pattern:
    """Translate a glob with ** into a regex over "/"-separated paths."""
    doublestar = "\x00DOUBLESTAR\x00"
    star = "\x00STAR\x00"
    question = "\x00QUESTION\x00"

    regex = pattern.replace("**", doublestar).replace("*", star).replace("?", question)
    regex = re.escape(regex)

    # **/ matches any number of leading directories, including none
    regex = regex.replace(re.escape(doublestar) + re.escape("/"), "(?:.*/|)")
    regex = regex.replace(re.escape("/") + re.escape(doublestar), "(?:/.*|)")
    regex = regex.replace(re.escape(doublestar), ".*")
    regex = regex.replace(re.escape(star), "[^/]*")
    regex = regex.replace(re.escape(question), "[^/]")

    return re.compile("^" + regex + "$")


class PatternMatcher:
    """Matches paths against any of a list of patterns (OR logic)."""

    def __init__(self, case_sensitive: bool = True):
        """Initialize pattern matcher.

        Args:
            case_sensitive: Whether patterns are case-sensitive
        """
        self._patterns: List[PatternEntry] = []
        self._case_sensitive = case_sensitive

    def add_pattern(self, pattern: str) -> None:
        """Add a glob, or a regex when prefixed with "regex:".

        Raises:
            ConfigurationError: If the pattern is empty or an invalid regex
        """
        if not pattern:
            raise ConfigurationError("Pattern cannot be empty")

        if pattern.startswith(REGEX_PREFIX):
            self.add_regex_pattern(pattern[len(REGEX_PREFIX):])
        else:
            self.add_glob_pattern(pattern)

    def add_glob_pattern(self, pattern: str) -> None:
        normalized = pattern.replace("\\", "/")
        if not self._case_sensitive:
            normalized = normalized.lower()

        basename_only = "/" not in normalized
        compiled: Union[Pattern, str] = normalized
        if "**" in normalized:
            compiled = _glob_to_regex(normalized)

        self._patterns.append(
            PatternEntry(
                pattern=pattern,
                pattern_type=PatternType.GLOB,
                compiled=compiled,
                basename_only=basename_only,
            )
        )

    def add_regex_pattern(self, pattern: str) -> None:
        flags = 0 if self._case_sensitive else re.IGNORECASE
        try:
            compiled = re.compile(pattern, flags)
        except re.error as e:
            raise ConfigurationError(f"Invalid regex pattern {pattern!r}: {e}")

        self._patterns.append(
            PatternEntry(pattern=pattern, pattern_type=PatternType.REGEX, compiled=compiled)
        )

    def _normalize_path(self, path: Union[str, os.PathLike]) -> str:
        normalized = os.fspath(path).replace("\\", "/")
        if not self._case_sensitive:
            normalized = normalized.lower()
        return normalized

    def matches(self, path: Union[str, os.PathLike]) -> bool:
        """Check if path matches any pattern.

        Args:
            path: File path to check

        Returns:
            True if path matches at least one pattern
        """
        normalized = self._normalize_path(path)
        basename = normalized.rsplit("/", 1)[-1]

        for entry in self._patterns:
            if entry.pattern_type == PatternType.REGEX:
                if entry.compiled.search(normalized):
                    return True
                continue

            target = basename if entry.basename_only else normalized.lstrip("/")
            if isinstance(entry.compiled, str):
                if fnmatch.fnmatchcase(target, entry.compiled):
                    return True
            elif entry.compiled.match(target):
                return True

        return False

    def __len__(self) -> int:
        return len(self._patterns)

    def __bool__(self) -> bool:
        return bool(self._patterns)


class PatternFilter:
    """Include/exclude file filter usable as the builder's file_filter.

    Logic:
    1. If the path matches any exclude pattern -> rejected
    2. If there are no include patterns -> accepted
    3. Otherwise accepted only if some include pattern matches
    """

    def __init__(
        self,
        include: Optional[Iterable[str]] = None,
        exclude: Optional[Iterable[str]] = None,
        case_sensitive: bool = True,
    ):
        self._include = PatternMatcher(case_sensitive)
        self._exclude = PatternMatcher(case_sensitive)

        for pattern in include or ():
            self._include.add_pattern(pattern)
        for pattern in exclude or ():
            self._exclude.add_pattern(pattern)

    def add_include_pattern(self, pattern: str) -> None:
        self._include.add_pattern(pattern)

    def add_exclude_pattern(self, pattern: str) -> None:
        self._exclude.add_pattern(pattern)

    def matches(self, path: Union[str, os.PathLike]) -> bool:
        if self._exclude.matches(path):
            return False

        if not self._include:
            return True

        return self._include.matches(path)

    __call__ = matches

    def __repr__(self) -> str:
        return f"PatternFilter(include={len(self._include)}, exclude={len(self._exclude)})"
