"""pikesre - Structural regular expressions for Python.

Commands select text with a regex and transform it with another command,
composing into pipelines. Rules apply the same ideas to keyed documents.

Example:
    >>> from pikesre import c, pipe, x
    >>> pipe(x(r"\\d+", c("N")))("a1b22")
    'aNbN'
"""

from pikesre.commands import (
    SRE,
    Command,
    CommandError,
    LexToken,
    Lexer,
    LexerError,
    Match,
    PatternLike,
    Token,
    TokenDef,
    c,
    chain,
    compile_regex,
    create_lexer,
    d,
    extract,
    extract_groups,
    find_matches,
    g,
    if_match,
    l,
    n,
    p,
    pipe,
    s,
    sre,
    tokenize,
    transform,
    v,
    x,
    x_all,
    x_first,
    y,
)
from pikesre.core.constants import PIKESRE_VERSION, ErrorCode
from pikesre.core.validators import ValidationError
from pikesre.infrastructure import ConfigError, ConfigManager, Logger, LogLevel, configure_logging, get_logger
from pikesre.rules import (
    CompiledPattern,
    Document,
    DocumentMetadata,
    GlobPattern,
    IdGenerator,
    PatternCompileError,
    PatternDef,
    PatternEngine,
    Scroll,
    TemplateContext,
    apply_pattern,
    compile_glob,
    compile_pattern,
    email_extractor_pattern,
    extract_glob_captures,
    generate_id,
    glob_match,
    glob_to_regex,
    logger_pattern,
    parse_path,
    pattern,
    substitute_string,
    substitute_value,
    template,
    type_index_pattern,
    with_captures,
)

__version__ = PIKESRE_VERSION

__all__ = [
    "__version__",
    "ErrorCode",
    "ValidationError",
    # Infrastructure
    "ConfigError",
    "ConfigManager",
    "Logger",
    "LogLevel",
    "configure_logging",
    "get_logger",
    # Commands
    "Command",
    "CommandError",
    "Match",
    "PatternLike",
    "compile_regex",
    "find_matches",
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
    # Rules
    "GlobPattern",
    "compile_glob",
    "glob_match",
    "glob_to_regex",
    "extract_glob_captures",
    "TemplateContext",
    "IdGenerator",
    "generate_id",
    "parse_path",
    "substitute_string",
    "substitute_value",
    "template",
    "with_captures",
    "Document",
    "DocumentMetadata",
    "Scroll",
    "PatternDef",
    "CompiledPattern",
    "PatternCompileError",
    "PatternEngine",
    "compile_pattern",
    "apply_pattern",
    "pattern",
    "logger_pattern",
    "email_extractor_pattern",
    "type_index_pattern",
]
