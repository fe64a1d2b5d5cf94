#!/usr/bin/env python3
"""Placeholder substitution for rule outputs.

Supported placeholders:
- ${N}: regex capture group N (0 is the full match)
- ${path.N}: path segment N (0-indexed)
- ${uuid}: a freshly generated identifier, one per occurrence
- ${input}: the original input text
- ${data.field}: nested field lookup, e.g. ${data.user.name}

Expansion is a single left-to-right pass, so text produced by one
placeholder is never expanded again.

Example:
    >>> ctx = TemplateContext(path=["users", "42"], data={"user": {"name": "ada"}})
    >>> substitute_string("/audit/${path.1}/${data.user.name}", ctx)
    '/audit/42/ada'
"""

import json
import random
import re
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, List, Mapping, Optional, Sequence

from pikesre.commands.base import Command, PatternLike, compile_regex
from pikesre.core.constants import PATH_SEPARATOR

PLACEHOLDER_PATTERN = re.compile(
    r"\$\{(?:(?P<capture>\d+)|path\.(?P<path>\d+)|(?P<uuid>uuid)|(?P<input>input)|data\.(?P<data>[A-Za-z0-9_.]+))\}"
)

IdFactory = Callable[[], str]


@dataclass(frozen=True)
class TemplateContext:
    """Values available to placeholders.

    A placeholder whose field is None is left in the output untouched.
    """

    captures: Optional[Sequence[Optional[str]]] = None
    path: Optional[Sequence[str]] = None
    data: Optional[Mapping[str, Any]] = None
    input: Optional[str] = None


class IdGenerator:
    """Short identifier source: 8 hex chars of clock, 8 of randomness.

    Pass a seed and a clock for reproducible identifiers in tests.
    """

    def __init__(self, seed: Optional[int] = None, clock: Callable[[], float] = time.time):
        self._random = random.Random(seed)
        self._clock = clock

    def generate(self) -> str:
        millis = int(self._clock() * 1000) & 0xFFFFFFFF
        return f"{millis:08x}{self._random.getrandbits(32):08x}"

    __call__ = generate


_default_generator = IdGenerator()


def generate_id() -> str:
    """Generate a 16-character lowercase hex identifier."""
    return _default_generator.generate()


def parse_path(path: str) -> List[str]:
    """Split a path into its non-empty segments."""
    return [segment for segment in path.split(PATH_SEPARATOR) if segment]


def _lookup(data: Any, dotted: str) -> Any:
    current = data
    for part in dotted.split("."):
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, (list, tuple)) and part.isdecimal() and int(part) < len(current):
            current = current[int(part)]
        else:
            return None
    return current


def _render(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if not isinstance(value, (Mapping, list, tuple, int, float)):
        # dates and other non-JSON scalars render as their str() form
        return str(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _at(items: Sequence[Optional[str]], index: str) -> str:
    i = int(index)
    if i < len(items):
        return items[i] or ""
    return ""


def substitute_string(
    template: str,
    ctx: Optional[TemplateContext] = None,
    id_factory: Optional[IdFactory] = None,
) -> str:
    """Expand every placeholder in template.

    Args:
        template: Text containing ${...} placeholders
        ctx: Substitution context (empty context when omitted)
        id_factory: Identifier source for ${uuid} (defaults to generate_id)

    Returns:
        The expanded text
    """
    ctx = ctx or TemplateContext()
    new_id = id_factory or generate_id

    def expand(match: re.Match) -> str:
        kind = match.lastgroup
        token = match.group(kind)

        if kind == "uuid":
            return new_id()
        if kind == "capture" and ctx.captures is not None:
            return _at(ctx.captures, token)
        if kind == "path" and ctx.path is not None:
            return _at(ctx.path, token)
        if kind == "input" and ctx.input is not None:
            return ctx.input
        if kind == "data" and ctx.data is not None:
            return _render(_lookup(ctx.data, token))
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(expand, template)


def substitute_value(
    value: Any,
    ctx: Optional[TemplateContext] = None,
    id_factory: Optional[IdFactory] = None,
) -> Any:
    """Expand placeholders throughout a structured value.

    Mapping keys and string leaves are expanded independently, lists and
    tuples element by element. Other scalars are returned unchanged.
    """
    if isinstance(value, str):
        return substitute_string(value, ctx, id_factory)
    if isinstance(value, Mapping):
        result = {}
        for key, item in value.items():
            if isinstance(key, str):
                key = substitute_string(key, ctx, id_factory)
            result[key] = substitute_value(item, ctx, id_factory)
        return result
    if isinstance(value, list):
        return [substitute_value(item, ctx, id_factory) for item in value]
    if isinstance(value, tuple):
        return tuple(substitute_value(item, ctx, id_factory) for item in value)
    return value


def template(
    tmpl: str,
    captures: Optional[Sequence[Optional[str]]] = None,
    path: Optional[Sequence[str]] = None,
    data: Optional[Mapping[str, Any]] = None,
    id_factory: Optional[IdFactory] = None,
) -> Command:
    """Build a command rendering tmpl, with the command input as ${input}."""
    base = TemplateContext(captures=captures, path=path, data=data)

    def run(text: str) -> str:
        return substitute_string(tmpl, replace(base, input=text), id_factory)

    return run


def with_captures(pattern: PatternLike, text: str) -> List[str]:
    """Return the groups of the first match (full match first), or []."""
    match = compile_regex(pattern).search(text)
    if match is None:
        return []
    return [match.group(0)] + [group or "" for group in match.groups()]
