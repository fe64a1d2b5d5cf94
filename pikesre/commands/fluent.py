#!/usr/bin/env python3
"""Fluent builder for structural regex pipelines.

SRE holds a text value and an ordered list of commands. Chained methods
append commands; terminal methods fold them over the text on demand.

Example:
    >>> sre("hello 123 world 456").x(r"\\d+", c("NUM")).value()
    'hello NUM world NUM'
    >>> sre("a,b,c").split(",")
    ['a', 'b', 'c']
"""

from functools import reduce
from typing import List, Optional

from pikesre.commands import structural
from pikesre.commands.base import Command, Match, PatternLike, compile_regex, find_matches
from pikesre.commands.structural import Replacement, resolve_range


def _keep_if(matches: bool, regex_like: PatternLike) -> Command:
    regex = compile_regex(regex_like)

    def run(text: str) -> str:
        found = regex.search(text) is not None
        return text if found == matches else ""

    return run


class SRE:
    """Fluent structural regex pipeline over a held text value.

    Methods that take an optional command apply it the same way as the
    functional command of the same name. Without a command:
    - x / y leave the text unchanged
    - g / v act as filters: keep the value, or replace it with ""
    - n / l narrow the value to the selected range
    """

    def __init__(self, text: str):
        self._text = text
        self._commands: List[Command] = []

    def _push(self, cmd: Command) -> "SRE":
        self._commands.append(cmd)
        return self

    def x(self, pattern: PatternLike, cmd: Optional[Command] = None) -> "SRE":
        """Transform every match of pattern."""
        return self._push(structural.x(pattern, cmd or structural.p()))

    def y(self, pattern: PatternLike, cmd: Optional[Command] = None) -> "SRE":
        """Transform every run of text between matches of pattern."""
        return self._push(structural.y(pattern, cmd or structural.p()))

    def g(self, pattern: PatternLike, cmd: Optional[Command] = None) -> "SRE":
        """Guard: apply cmd if pattern matches, or drop the value when no cmd."""
        if cmd is None:
            return self._push(_keep_if(True, pattern))
        return self._push(structural.g(pattern, cmd))

    def v(self, pattern: PatternLike, cmd: Optional[Command] = None) -> "SRE":
        """Veto: apply cmd unless pattern matches, or drop matching values when no cmd."""
        if cmd is None:
            return self._push(_keep_if(False, pattern))
        return self._push(structural.v(pattern, cmd))

    def s(self, pattern: PatternLike, replacement: Replacement) -> "SRE":
        """Substitute every match of pattern."""
        return self._push(structural.s(pattern, replacement))

    def c(self, value: str) -> "SRE":
        """Replace the whole value with a constant."""
        return self._push(structural.c(value))

    def d(self) -> "SRE":
        """Replace the whole value with the empty string."""
        return self._push(structural.d())

    def p(self) -> "SRE":
        """Identity step."""
        return self._push(structural.p())

    def n(self, start: int, end: Optional[int] = None, cmd: Optional[Command] = None) -> "SRE":
        """Character range: transform it with cmd, or narrow to it."""
        if cmd is not None:
            return self._push(structural.n(start, end, cmd))

        def narrow(text: str) -> str:
            lo, hi = resolve_range(start, end, len(text))
            return text[lo:hi]

        return self._push(narrow)

    def l(self, start: int, end: Optional[int] = None, cmd: Optional[Command] = None) -> "SRE":  # noqa: E741
        """Line range: transform it with cmd, or narrow to it."""
        if cmd is not None:
            return self._push(structural.l(start, end, cmd))

        def narrow(text: str) -> str:
            lines = text.split("\n")
            lo, hi = resolve_range(start, end, len(lines))
            return "\n".join(lines[lo:hi])

        return self._push(narrow)

    def apply(self, cmd: Command) -> "SRE":
        """Append an arbitrary command."""
        return self._push(cmd)

    def value(self) -> str:
        """Evaluate the pipeline."""
        return reduce(lambda acc, cmd: cmd(acc), self._commands, self._text)

    def matches(self, pattern: PatternLike) -> List[str]:
        """Evaluate, then return the text of every match of pattern."""
        return [m.text for m in find_matches(pattern, self.value())]

    def match_details(self, pattern: PatternLike) -> List[Match]:
        """Evaluate, then return every match of pattern with positions."""
        return find_matches(pattern, self.value())

    def split(self, pattern: PatternLike) -> List[str]:
        """Evaluate, then split the result on pattern."""
        return compile_regex(pattern).split(self.value())

    def test(self, pattern: PatternLike) -> bool:
        """Evaluate, then report whether pattern matches anywhere."""
        return compile_regex(pattern).search(self.value()) is not None

    def __str__(self) -> str:
        return self.value()

    def __repr__(self) -> str:
        return f"<SRE text={self._text!r} steps={len(self._commands)}>"


def sre(text: str) -> SRE:
    """Start a fluent pipeline over text."""
    return SRE(text)
