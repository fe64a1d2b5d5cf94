#!/usr/bin/env python3
"""Core structural regular expression commands.

Based on Rob Pike's 1987 paper "Structural Regular Expressions". Text is
treated as matching and non-matching regions that are selected and
transformed independently, rather than as one flat string.

Every constructor returns a Command, a pure ``str -> str`` function:
- x: transform each match, keep the text between matches
- y: transform each run between matches, keep the matches
- g / v: run a command when the pattern does / does not match
- s: global substitution with ``$1`` style backreferences
- c / d / p: constant, delete, identity
- n / l: transform a character / line range (negative indices allowed)

Example:
    >>> double = x(r"\\d+", lambda num: str(int(num) * 2))
    >>> double("a1b2c3")
    'a2b4c6'
    >>> y(r"\\d+", str.upper)("hello123world")
    'HELLO123WORLD'
"""

import re
from typing import Callable, List, Optional, Pattern, Tuple, Union

from pikesre.commands.base import (
    Command,
    CommandError,
    PatternLike,
    compile_regex,
    contains_match,
    iter_re_matches,
)

Replacement = Union[str, Callable[[re.Match], str]]


def _require_command(cmd: Command, name: str = "cmd") -> Command:
    if not callable(cmd):
        raise CommandError(f"{name} must be callable, got {type(cmd).__name__}")
    return cmd


def x(pattern: PatternLike, cmd: Command) -> Command:
    """Extract: apply cmd to every match, keep everything else.

    Args:
        pattern: Regex pattern selecting the regions to transform
        cmd: Command applied to each match text

    Returns:
        Command that rewrites the matches of pattern
    """
    regex = compile_regex(pattern)
    _require_command(cmd)

    def run(text: str) -> str:
        parts: List[str] = []
        last_end = 0
        for match in iter_re_matches(regex, text):
            parts.append(text[last_end:match.start()])
            parts.append(cmd(match.group(0)))
            last_end = match.end()
        if not parts:
            return text
        parts.append(text[last_end:])
        return "".join(parts)

    return run


def y(pattern: PatternLike, cmd: Command) -> Command:
    """Complement of x: apply cmd to the text between matches.

    Matches are kept verbatim. Empty gaps (touching matches, a match at
    the very start or end) are never passed to cmd. Without any match
    the whole input is one gap.

    Args:
        pattern: Regex pattern selecting the regions to keep
        cmd: Command applied to each non-empty gap

    Returns:
        Command that rewrites everything except the matches
    """
    regex = compile_regex(pattern)
    _require_command(cmd)

    def run(text: str) -> str:
        parts: List[str] = []
        last_end = 0
        for match in iter_re_matches(regex, text):
            if match.start() > last_end:
                parts.append(cmd(text[last_end:match.start()]))
            parts.append(match.group(0))
            last_end = match.end()
        if last_end < len(text) or not parts:
            parts.append(cmd(text[last_end:]))
        return "".join(parts)

    return run


def g(pattern: PatternLike, cmd: Command) -> Command:
    """Guard: run cmd on the whole input only if pattern matches somewhere."""
    regex = compile_regex(pattern)
    _require_command(cmd)

    def run(text: str) -> str:
        if regex.search(text) is not None:
            return cmd(text)
        return text

    return run


def v(pattern: PatternLike, cmd: Command) -> Command:
    """Veto: run cmd on the whole input only if pattern does NOT match."""
    regex = compile_regex(pattern)
    _require_command(cmd)

    def run(text: str) -> str:
        if regex.search(text) is None:
            return cmd(text)
        return text

    return run


def p() -> Command:
    """Print: identity command."""
    return lambda text: text


def d() -> Command:
    """Delete: always return the empty string."""
    return lambda text: ""


def c(value: str) -> Command:
    """Change: ignore the input and return value."""
    return lambda text: value


# Replacement template pieces: literal text, group index, group name,
# or one of the positional markers below.
_BEFORE = object()
_AFTER = object()
_WHOLE = object()
_DIGITS = "0123456789"


def _compile_replacement(replacement: str, regex: Pattern[str]) -> List[object]:
    """Split a ``$``-style replacement into literal and group references.

    Supported tokens: ``$$``, ``$&``, ``$```, ``$'``, ``$N``, ``$NN`` and
    ``$<name>``. A token that names no existing group is kept literally.
    """
    pieces: List[object] = []
    literal: List[str] = []
    i = 0
    length = len(replacement)
    group_count = regex.groups

    def flush() -> None:
        if literal:
            pieces.append("".join(literal))
            literal.clear()

    while i < length:
        char = replacement[i]
        if char != "$" or i + 1 >= length:
            literal.append(char)
            i += 1
            continue

        nxt = replacement[i + 1]
        if nxt == "$":
            literal.append("$")
            i += 2
        elif nxt == "&":
            flush()
            pieces.append(_WHOLE)
            i += 2
        elif nxt == "`":
            flush()
            pieces.append(_BEFORE)
            i += 2
        elif nxt == "'":
            flush()
            pieces.append(_AFTER)
            i += 2
        elif nxt in _DIGITS:
            two = replacement[i + 1:i + 3]
            if len(two) == 2 and two[1] in _DIGITS and 1 <= int(two) <= group_count:
                flush()
                pieces.append(int(two))
                i += 3
            elif 1 <= int(nxt) <= group_count:
                flush()
                pieces.append(int(nxt))
                i += 2
            else:
                literal.append(char)
                i += 1
        elif nxt == "<" and regex.groupindex:
            close = replacement.find(">", i + 2)
            if close == -1:
                literal.append(char)
                i += 1
            else:
                flush()
                pieces.append(("name", replacement[i + 2:close]))
                i = close + 1
        else:
            literal.append(char)
            i += 1

    flush()
    return pieces


def _render_replacement(pieces: List[object], match: re.Match) -> str:
    out: List[str] = []
    for piece in pieces:
        if isinstance(piece, str):
            out.append(piece)
        elif isinstance(piece, int):
            out.append(match.group(piece) or "")
        elif isinstance(piece, tuple):
            name = piece[1]
            out.append((match.group(name) or "") if name in match.re.groupindex else "")
        elif piece is _WHOLE:
            out.append(match.group(0))
        elif piece is _BEFORE:
            out.append(match.string[:match.start()])
        elif piece is _AFTER:
            out.append(match.string[match.end():])
    return "".join(out)


def s(pattern: PatternLike, replacement: Replacement) -> Command:
    """Substitute every match of pattern with replacement.

    Uses ``re.Pattern.sub`` directly. String replacements understand
    ``$1``/``$12`` (groups), ``$<name>`` (named groups), ``$&`` (match),
    ``$``` / ``$'`` (text before / after the match) and ``$$`` (a literal
    dollar). Backslashes are literal. A callable replacement receives
    the ``re.Match``.

    Example:
        >>> s(r"(\\w+)@(\\w+)", "$2:$1")("john@acme")
        'acme:john'
    """
    regex = compile_regex(pattern)

    if callable(replacement):
        return lambda text: regex.sub(replacement, text)

    if not isinstance(replacement, str):
        raise CommandError(f"replacement must be str or callable, got {type(replacement).__name__}")

    pieces = _compile_replacement(replacement, regex)
    if all(isinstance(piece, str) for piece in pieces):
        literal = "".join(pieces)  # type: ignore[arg-type]
        return lambda text: regex.sub(lambda _m: literal, text)

    return lambda text: regex.sub(lambda m: _render_replacement(pieces, m), text)


def resolve_range(start: int, end: Optional[int], length: int) -> Tuple[int, int]:
    """Resolve slice-style indices against a length.

    Negative indices count from the end, indices are clamped into
    ``[0, length]`` and ``end=None`` means the end. When end falls before
    start the range is empty at start.
    """
    start_idx = max(0, length + start) if start < 0 else min(start, length)
    if end is None:
        end_idx = length
    else:
        end_idx = max(0, length + end) if end < 0 else min(end, length)
    return start_idx, max(start_idx, end_idx)


def n(start: int, end: Optional[int], cmd: Command) -> Command:
    """Apply cmd to the character range ``[start:end]``.

    Text outside the range is preserved around cmd's output.

    Example:
        >>> n(-3, None, lambda sel: "[" + sel + "]")("testing")
        'test[ing]'
    """
    _require_command(cmd)

    def run(text: str) -> str:
        lo, hi = resolve_range(start, end, len(text))
        return text[:lo] + cmd(text[lo:hi]) + text[hi:]

    return run


def l(start: int, end: Optional[int], cmd: Command) -> Command:  # noqa: E741
    """Apply cmd to the newline-delimited line range ``[start:end]``.

    The selected lines are joined with newlines for cmd; its output is
    split on newlines again and spliced between the untouched lines.
    """
    _require_command(cmd)

    def run(text: str) -> str:
        lines = text.split("\n")
        lo, hi = resolve_range(start, end, len(lines))
        replaced = cmd("\n".join(lines[lo:hi])).split("\n")
        return "\n".join(lines[:lo] + replaced + lines[hi:])

    return run


def x_all(pattern: PatternLike, cmd: Command) -> Callable[[str], List[str]]:
    """Collect cmd applied to every match, without rebuilding the text.

    Example:
        >>> x_all(r"\\d+", p())("a1b23c456")
        ['1', '23', '456']
    """
    regex = compile_regex(pattern)
    _require_command(cmd)
    return lambda text: [cmd(m.group(0)) for m in iter_re_matches(regex, text)]


def x_first(pattern: PatternLike, cmd: Command) -> Command:
    """Apply cmd to the first match only, leaving the rest untouched.

    Input without a match is returned unchanged.
    """
    regex = compile_regex(pattern)
    _require_command(cmd)

    def run(text: str) -> str:
        match = regex.search(text)
        if match is None:
            return text
        return text[:match.start()] + cmd(match.group(0)) + text[match.end():]

    return run


def if_match(pattern: PatternLike, then_cmd: Command, else_cmd: Command) -> Command:
    """Branch on whether pattern matches anywhere in the input."""
    regex = compile_regex(pattern)
    _require_command(then_cmd, "then_cmd")
    _require_command(else_cmd, "else_cmd")

    def run(text: str) -> str:
        if contains_match(regex, text):
            return then_cmd(text)
        return else_cmd(text)

    return run
