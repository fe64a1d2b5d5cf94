#!/usr/bin/env python3
"""Command pipelines.

Commands compose left to right: the output of each command is the input
of the next.

Example:
    >>> sanitize = pipe(
    ...     x(r"\\s+", c(" ")),
    ...     x(r"[<>]", d()),
    ...     g(r"(?i)password", c("[REDACTED]")),
    ... )
    >>> sanitize("a   <b>")
    'a b'
"""

from functools import reduce
from typing import Tuple

from pikesre.commands.base import Command, CommandError


def pipe(*commands: Command) -> Command:
    """Compose commands left to right.

    ``pipe()`` is the identity and ``pipe(f)`` behaves exactly as ``f``.

    Args:
        *commands: Commands to apply in order

    Returns:
        A single command applying all commands in sequence
    """
    for index, cmd in enumerate(commands):
        if not callable(cmd):
            raise CommandError(f"pipe argument {index} is not callable: {cmd!r}")

    steps: Tuple[Command, ...] = tuple(commands)

    def run(text: str) -> str:
        return reduce(lambda acc, cmd: cmd(acc), steps, text)

    return run


chain = pipe
