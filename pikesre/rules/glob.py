#!/usr/bin/env python3
"""Segment glob matching for slash-delimited document keys.

This module matches whole path segments rather than characters:
- Literal segments must equal the path segment exactly
- ``*`` matches exactly one segment
- ``**`` matches zero or more segments
- Empty segments (leading, trailing or doubled slashes) are ignored

Example:
    >>> glob_match("/users/**", "/users")
    True
    >>> extract_glob_captures("/u/*/p/*", "/u/1/p/2")
    ['1', '2']
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Callable, List, Optional, Pattern, Sequence, Tuple

from pikesre.core.constants import GLOB_DOUBLE, GLOB_SINGLE, PATH_SEPARATOR


class SegmentType(Enum):
    """Glob segment kind."""

    LITERAL = "literal"
    SINGLE = "single"  # *
    DOUBLE = "double"  # **


@dataclass(frozen=True)
class GlobSegment:
    """One compiled glob segment."""

    type: SegmentType
    value: Optional[str] = None


def split_path(path: str) -> List[str]:
    """Split a slash-delimited path, dropping empty segments."""
    return [part for part in path.split(PATH_SEPARATOR) if part]


def parse_glob_segments(pattern: str) -> Tuple[GlobSegment, ...]:
    """Compile a glob pattern into segments."""
    segments = []
    for part in split_path(pattern):
        if part == GLOB_DOUBLE:
            segments.append(GlobSegment(SegmentType.DOUBLE))
        elif part == GLOB_SINGLE:
            segments.append(GlobSegment(SegmentType.SINGLE))
        else:
            segments.append(GlobSegment(SegmentType.LITERAL, part))
    return tuple(segments)


def _build_search(glob: Sequence[GlobSegment], path: Sequence[str]) -> Callable[[int, int], bool]:
    """Return a memoized matcher over (segment index, path index) pairs.

    Memoization keeps ``**`` backtracking polynomial in the number of
    segments instead of exponential.
    """

    @lru_cache(maxsize=None)
    def search(gi: int, pi: int) -> bool:
        if gi >= len(glob):
            return pi >= len(path)

        segment = glob[gi]

        if segment.type is SegmentType.DOUBLE:
            return any(search(gi + 1, pi + skip) for skip in range(len(path) - pi + 1))

        if pi >= len(path):
            return False

        if segment.type is SegmentType.LITERAL and segment.value != path[pi]:
            return False

        return search(gi + 1, pi + 1)

    return search


@dataclass(frozen=True)
class GlobPattern:
    """A compiled glob pattern, reusable across many paths."""

    pattern: str
    segments: Tuple[GlobSegment, ...] = field(default=())

    @classmethod
    def compile(cls, pattern: str) -> "GlobPattern":
        return cls(pattern=pattern, segments=parse_glob_segments(pattern))

    def matches(self, path: str) -> bool:
        """Test whether path matches this pattern."""
        parts = split_path(path)
        return _build_search(self.segments, parts)(0, 0)

    def captures(self, path: str) -> Optional[List[str]]:
        """Return wildcard captures for path, or None when it does not match.

        Single wildcards capture their segment; double wildcards capture
        the run of segments they consume (possibly none), taking the
        shortest run that still lets the rest of the pattern match.
        Captures are emitted in segment order.
        """
        parts = split_path(path)
        search = _build_search(self.segments, parts)
        if not search(0, 0):
            return None

        captures: List[str] = []
        pi = 0
        for gi, segment in enumerate(self.segments):
            if segment.type is SegmentType.DOUBLE:
                skip = next(
                    skip for skip in range(len(parts) - pi + 1) if search(gi + 1, pi + skip)
                )
                captures.extend(parts[pi:pi + skip])
                pi += skip
            else:
                if segment.type is SegmentType.SINGLE:
                    captures.append(parts[pi])
                pi += 1
        return captures

    def to_regex(self) -> Pattern[str]:
        """Build a regex accepting exactly the paths this pattern matches."""
        body = []
        for segment in self.segments:
            if segment.type is SegmentType.DOUBLE:
                body.append(r"(?:(?:^/*|/+)[^/]+)*")
            elif segment.type is SegmentType.SINGLE:
                body.append(r"(?:^/*|/+)[^/]+")
            else:
                body.append(r"(?:^/*|/+)" + re.escape(segment.value or ""))
        return re.compile("^" + "".join(body) + "/*$")

    def __call__(self, path: str) -> bool:
        return self.matches(path)


def compile_glob(pattern: str) -> GlobPattern:
    """Compile a glob pattern for reuse."""
    return GlobPattern.compile(pattern)


def glob_match(pattern: str, path: str) -> bool:
    """One-shot glob test."""
    return compile_glob(pattern).matches(path)


def glob_to_regex(pattern: str) -> Pattern[str]:
    """Convert a glob pattern to an equivalent compiled regex.

    The regex accepts the same paths as compile_glob(pattern).matches,
    including extra leading, trailing and doubled slashes.
    """
    return compile_glob(pattern).to_regex()


def extract_glob_captures(pattern: str, path: str) -> Optional[List[str]]:
    """Return the path segments aligned with wildcards, or None on no match."""
    return compile_glob(pattern).captures(path)
