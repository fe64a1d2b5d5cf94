#!/usr/bin/env python3
"""Ready-made rule definitions.

Each factory returns a PatternDef that can be passed to PatternEngine.add.

Example:
    >>> engine = PatternEngine()
    >>> engine.add(email_extractor_pattern("/inbox/**"))
"""

from pikesre.rules.engine import PatternDef

EMAIL_REGEX = r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"


def logger_pattern(watch: str = "/**") -> PatternDef:
    """Log every document written under watch."""
    return PatternDef(
        name="logger",
        watch=watch,
        emit="log/write@v1",
        emit_path="/logs/${uuid}",
        template={
            "path": "${input}",
            "timestamp": "${uuid}",
        },
    )


def email_extractor_pattern(watch: str = "/**") -> PatternDef:
    """Extract the first email address found in a payload."""
    return PatternDef(
        name="email-extractor",
        watch=watch,
        x=EMAIL_REGEX,
        emit="extracted/email@v1",
        emit_path="/extracted/emails/${uuid}",
        template={
            "email": "${1}",
            "source": "${path.0}/${path.1}",
        },
    )


def type_index_pattern(type_filter: str, watch: str = "/**") -> PatternDef:
    """Index documents whose payload mentions type_filter.

    Args:
        type_filter: Regex guarding the payload; also names the index
        watch: Glob of keys to index
    """
    return PatternDef(
        name=f"index-{type_filter}",
        watch=watch,
        g=type_filter,
        emit=f"index/{type_filter}@v1",
        emit_path=f"/indexes/{type_filter}/${{uuid}}",
        template={
            "path": "${path.0}/${path.1}",
            "data": "${input}",
        },
    )
