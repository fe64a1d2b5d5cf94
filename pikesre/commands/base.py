#!/usr/bin/env python3
"""Match enumeration for structural regular expressions.

This module is the bridge between pikesre and Python's ``re`` module:
- Command type: the pure ``str -> str`` unit of composition
- Match records with positions and capture groups
- Global-scan match enumeration with zero-length match stepping

Example:
    >>> find_matches(r"\\d+", "a1b23c456")
    [Match(text='1', start=1, end=2, groups=('1',)), ...]
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Tuple, Union

from pikesre.core.validators import ValidationError

Command = Callable[[str], str]
PatternLike = Union[str, Pattern[str]]


@dataclass(frozen=True)
class Match:
    """A single regex match.

    ``groups[0]`` is the full match text; later entries are capture
    groups, ``None`` for groups that did not participate.
    """

    text: str
    start: int
    end: int
    groups: Tuple[Optional[str], ...]

    @classmethod
    def from_re(cls, match: "re.Match[str]") -> "Match":
        """Build a Match from an ``re.Match``."""
        return cls(
            text=match.group(0),
            start=match.start(),
            end=match.end(),
            groups=(match.group(0),) + match.groups(),
        )

    def __len__(self) -> int:
        return self.end - self.start


def compile_regex(pattern: PatternLike, flags: int = 0) -> Pattern[str]:
    """Compile a regex source, passing compiled patterns through.

    Args:
        pattern: Regex source or compiled pattern
        flags: Flags applied to string sources

    Returns:
        Compiled pattern

    Raises:
        re.error: If a string source is malformed
        TypeError: If pattern is neither a string nor a compiled pattern
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    if isinstance(pattern, str):
        return re.compile(pattern, flags)
    raise TypeError(f"Expected str or compiled pattern, got {type(pattern).__name__}")


def iter_re_matches(regex: Pattern[str], text: str):
    """Yield ``re.Match`` objects using global-scan semantics.

    The scan resumes at each match's end. After a zero-length match the
    scan resumes one character past the match start, so patterns that can
    match the empty string (``x*``) always terminate.
    """
    pos = 0
    length = len(text)
    while pos <= length:
        match = regex.search(text, pos)
        if match is None:
            return
        yield match
        if match.end() == match.start():
            pos = match.start() + 1
        else:
            pos = match.end()


def find_matches(pattern: PatternLike, text: str) -> List[Match]:
    """Find all non-overlapping matches of pattern in text.

    Args:
        pattern: Regex source or compiled pattern
        text: Text to scan

    Returns:
        Matches ordered by start position (empty list if none)
    """
    regex = compile_regex(pattern)
    return [Match.from_re(m) for m in iter_re_matches(regex, text)]


def first_match(pattern: PatternLike, text: str) -> Optional[Match]:
    """Return the leftmost match of pattern in text, or None."""
    match = compile_regex(pattern).search(text)
    return Match.from_re(match) if match else None


def contains_match(pattern: PatternLike, text: str) -> bool:
    """Test whether pattern matches anywhere in text."""
    return compile_regex(pattern).search(text) is not None


class CommandError(ValidationError):
    """Invalid arguments given to a command constructor."""
