"""pikesre Commands - Structural regular expression algebra.

This module provides the text side of pikesre:
- find_matches: global-scan match enumeration
- x, y, g, v, s, c, d, p, n, l: composable commands
- pipe: left-to-right composition
- sre: fluent pipeline builder
- create_lexer: multi-pattern token scanner
"""

from .base import Command, CommandError, Match, PatternLike, compile_regex, find_matches
from .fluent import SRE, sre
from .lexer import (
    LexToken,
    Lexer,
    LexerError,
    Token,
    TokenDef,
    create_lexer,
    extract,
    extract_groups,
    tokenize,
    transform,
)
from .pipeline import chain, pipe
from .structural import c, d, g, if_match, l, n, p, s, v, x, x_all, x_first, y

__all__ = [
    # Matcher
    "Command",
    "CommandError",
    "Match",
    "PatternLike",
    "compile_regex",
    "find_matches",
    # Commands
    "x",
    "y",
    "g",
    "v",
    "s",
    "c",
    "d",
    "p",
    "n",
    "l",
    "x_all",
    "x_first",
    "if_match",
    # Composition
    "pipe",
    "chain",
    "SRE",
    "sre",
    # Lexer
    "Token",
    "TokenDef",
    "LexToken",
    "Lexer",
    "LexerError",
    "create_lexer",
    "tokenize",
    "extract",
    "extract_groups",
    "transform",
]
