"""
pikesre Core: Constants

This module provides library-wide constants and error codes shared by
the command algebra, the lexer, and the pattern engine.
"""
from enum import IntEnum

# Version information
PIKESRE_VERSION = "1.0.0"
PIKESRE_API_VERSION = 1


class ErrorCode(IntEnum):
    """Standardized error codes for pikesre exceptions."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Malformed regex, rule or token definition
    NOT_FOUND = 2  # Missing file or named rule
    CONFLICT = 4  # Clashing definitions (duplicate group names)
    INTERNAL_ERROR = 6  # Bug in pikesre


# Reserved lexer token kind for unmatched input spans
ERROR_TOKEN = "ERROR"

# Path separator for document keys and glob patterns
PATH_SEPARATOR = "/"

# Glob wildcard segments
GLOB_SINGLE = "*"
GLOB_DOUBLE = "**"

# Metadata version stamped on every reaction document
REACTION_VERSION = 1

# Generated identifiers: 8 hex chars of clock + 8 hex chars of randomness
ID_LENGTH = 16
ID_PATTERN = r"^[0-9a-f]{16}$"


class Limits:
    """Input limits used by validators."""

    MAX_PATTERN_LENGTH = 4096
    MAX_RULE_NAME_LENGTH = 255
    MAX_TOKEN_NAME_LENGTH = 255


class ConfigKey:
    """Configuration key constants."""

    ROOT = "pikesre"
    LOGGING_LEVEL = "pikesre.logging.level"
    LOGGING_FILE = "pikesre.logging.file"
    ENGINE_PATTERNS = "pikesre.engine.patterns"
    ENGINE_PATTERN_FILES = "pikesre.engine.pattern_files"

    # Pattern definition fields
    RULE_NAME = "name"
    RULE_WATCH = "watch"
    RULE_EXTRACT = "x"
    RULE_GUARD = "g"
    RULE_VETO = "v"
    RULE_EMIT = "emit"
    RULE_EMIT_PATH = "emit_path"
    RULE_TEMPLATE = "template"
    RULE_THEN = "then"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        "logging": {
            "level": "WARNING",
            "file": None,
        },
        "engine": {
            "patterns": [],
            "pattern_files": [],
        },
    }
}
