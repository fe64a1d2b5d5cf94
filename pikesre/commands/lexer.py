#!/usr/bin/env python3
"""Lexer generation and region tokenizing.

This module compiles several named patterns into one alternation and
classifies runs of input:
- TokenDef: a named pattern, optionally skipped on output
- create_lexer(): build a scanner from token definitions
- Unmatched spans become ERROR tokens, so every input offset is covered
- tokenize(): split text into "match" / "between" regions for one pattern

Example:
    >>> lexer = create_lexer([
    ...     TokenDef("NUMBER", r"\\d+"),
    ...     TokenDef("WORD", r"\\w+"),
    ...     TokenDef("SPACE", r"\\s+", skip=True),
    ... ])
    >>> [(t.kind, t.value) for t in lexer("hello 123")]
    [('WORD', 'hello'), ('NUMBER', '123')]
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Pattern, Sequence, Tuple, Union

from pikesre.commands.base import PatternLike, compile_regex, find_matches, iter_re_matches
from pikesre.core.constants import ERROR_TOKEN, ErrorCode
from pikesre.core.validators import ValidationError, validate_token_def
from pikesre.infrastructure.logger import get_logger

# Flags that can be re-applied as a scoped inline group, e.g. (?i:...)
_SCOPED_FLAGS = (
    (re.IGNORECASE, "i"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
    (re.ASCII, "a"),
)


class LexerError(ValidationError):
    """Malformed token definitions."""


@dataclass(frozen=True)
class TokenDef:
    """A named token pattern.

    Tokens whose definition has skip=True are consumed but not emitted.
    """

    name: str
    pattern: PatternLike
    skip: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TokenDef":
        """Build a TokenDef from a mapping with name/pattern/skip keys."""
        try:
            return cls(name=data["name"], pattern=data["pattern"], skip=bool(data.get("skip", False)))
        except KeyError as e:
            raise LexerError(f"Token definition missing field: {e}")


@dataclass(frozen=True)
class LexToken:
    """A token produced by a lexer.

    groups holds the full token text followed by the defining pattern's
    own capture groups ("" for groups that did not participate).
    ERROR tokens have no groups.
    """

    kind: str
    value: str
    groups: Tuple[str, ...]
    start: int
    end: int

    @property
    def is_error(self) -> bool:
        return self.kind == ERROR_TOKEN


@dataclass(frozen=True)
class Token:
    """A region of text produced by tokenize(): a match or the text between."""

    type: str  # "match" or "between"
    text: str
    start: int
    end: int
    groups: Optional[Tuple[Optional[str], ...]] = None


TokenDefLike = Union[TokenDef, Mapping[str, Any], Tuple[Any, ...]]


def _coerce_def(defn: TokenDefLike) -> TokenDef:
    if isinstance(defn, TokenDef):
        return defn
    if isinstance(defn, Mapping):
        return TokenDef.from_dict(defn)
    if isinstance(defn, tuple) and len(defn) in (2, 3):
        return TokenDef(*defn)
    raise LexerError(f"Unsupported token definition: {defn!r}")


def _scoped_source(regex: Pattern[str]) -> str:
    """Return the pattern source, wrapped so its own flags survive merging."""
    letters = "".join(letter for flag, letter in _SCOPED_FLAGS if regex.flags & flag)
    if "x" in letters:
        # a trailing comment would otherwise swallow the closing paren
        return f"(?{letters}:{regex.pattern}\n)"
    if letters:
        return f"(?{letters}:{regex.pattern})"
    return regex.pattern


@dataclass(frozen=True)
class _CompiledDef:
    name: str
    skip: bool
    group_index: int  # absolute index of the wrapping group
    group_count: int  # capture groups inside the definition


class Lexer:
    """Scanner built from an ordered list of token definitions.

    Definition *i* is wrapped in its own capturing group. Its absolute
    group index is one past all groups of the definitions before it,
    counting each definition's wrapper plus its internal groups. The
    definition that fired is the first whose wrapper group participated.
    """

    def __init__(self, defs: Sequence[TokenDefLike]):
        self._defs: List[_CompiledDef] = []
        sources: List[str] = []
        offset = 1

        for raw in defs:
            defn = _coerce_def(raw)
            try:
                regex = validate_token_def(defn.name, defn.pattern)
            except ValidationError as e:
                raise LexerError(f"Invalid token '{defn.name}': {e.message}")

            self._defs.append(_CompiledDef(defn.name, defn.skip, offset, regex.groups))
            sources.append(f"({_scoped_source(regex)})")
            offset += 1 + regex.groups

        self._combined: Optional[Pattern[str]] = None
        if sources:
            try:
                self._combined = re.compile("|".join(sources))
            except re.error as e:
                raise LexerError(f"Token definitions cannot be combined: {e}", ErrorCode.CONFLICT)

        get_logger().debug(
            "Lexer compiled",
            tokens=len(self._defs),
            groups=offset - 1,
        )

    @property
    def pattern(self) -> Optional[Pattern[str]]:
        """The combined alternation (None when there are no definitions)."""
        return self._combined

    @property
    def group_offsets(self) -> List[int]:
        """Absolute wrapper group index of each definition, in order."""
        return [d.group_index for d in self._defs]

    def _fired(self, match: re.Match) -> Optional[_CompiledDef]:
        for defn in self._defs:
            if match.group(defn.group_index) is not None:
                return defn
        return None

    def scan(self, text: str) -> List[LexToken]:
        """Scan text into tokens covering every offset."""
        tokens: List[LexToken] = []
        last_end = 0

        if self._combined is not None:
            for match in iter_re_matches(self._combined, text):
                defn = self._fired(match)
                if defn is None:
                    continue

                if match.start() > last_end:
                    tokens.append(_error_token(text, last_end, match.start()))

                if not defn.skip:
                    own = match.groups()[defn.group_index:defn.group_index + defn.group_count]
                    tokens.append(
                        LexToken(
                            kind=defn.name,
                            value=match.group(0),
                            groups=(match.group(0),) + tuple(g or "" for g in own),
                            start=match.start(),
                            end=match.end(),
                        )
                    )
                last_end = match.end()

        if last_end < len(text):
            tokens.append(_error_token(text, last_end, len(text)))

        return tokens

    __call__ = scan

    def __len__(self) -> int:
        return len(self._defs)


def _error_token(text: str, start: int, end: int) -> LexToken:
    return LexToken(kind=ERROR_TOKEN, value=text[start:end], groups=(), start=start, end=end)


def create_lexer(defs: Sequence[TokenDefLike]) -> Callable[[str], List[LexToken]]:
    """Build a lexer from token definitions.

    Definitions may be TokenDef instances, mappings with name/pattern/skip
    keys, or (name, pattern[, skip]) tuples. Earlier definitions win when
    several could match at the same position.

    Raises:
        LexerError: If a definition is malformed or the definitions
            cannot be combined (e.g. duplicate named groups)
    """
    return Lexer(defs)


def tokenize(text: str, pattern: PatternLike) -> List[Token]:
    """Split text into "match" and non-empty "between" regions."""
    tokens: List[Token] = []
    last_end = 0

    for match in find_matches(pattern, text):
        if match.start > last_end:
            tokens.append(Token("between", text[last_end:match.start], last_end, match.start))
        tokens.append(Token("match", match.text, match.start, match.end, match.groups))
        last_end = match.end

    if last_end < len(text):
        tokens.append(Token("between", text[last_end:], last_end, len(text)))

    return tokens


def extract(text: str, pattern: PatternLike) -> List[str]:
    """Return the text of every match."""
    return [m.text for m in find_matches(pattern, text)]


def extract_groups(text: str, pattern: PatternLike) -> List[Tuple[Optional[str], ...]]:
    """Return the groups (full match first) of every match."""
    return [m.groups for m in find_matches(pattern, text)]


def transform(
    text: str,
    pattern: PatternLike,
    fn: Callable[[str, Tuple[Optional[str], ...]], str],
) -> str:
    """Rewrite each match with fn(match_text, groups)."""
    regex = compile_regex(pattern)
    parts: List[str] = []
    last_end = 0

    for match in iter_re_matches(regex, text):
        parts.append(text[last_end:match.start()])
        parts.append(fn(match.group(0), (match.group(0),) + match.groups()))
        last_end = match.end()

    if not parts:
        return text
    parts.append(text[last_end:])
    return "".join(parts)
