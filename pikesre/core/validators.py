"""
pikesre Core: Input Validators.

This module provides validation functions for regex sources, glob patterns,
rule definitions, and lexer token definitions. Validation happens at
construction time so that malformed input is rejected before any text is
processed.
"""
import re
from typing import Any, Mapping, Pattern, Union

from pikesre.core.constants import ERROR_TOKEN, ConfigKey, ErrorCode, Limits


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


def validate_regex(pattern: Union[str, Pattern[str]], flags: int = 0) -> Pattern[str]:
    """Validate and compile a regex pattern.

    Already compiled patterns are returned unchanged.

    Args:
        pattern: Regex pattern string or compiled pattern
        flags: Flags used when compiling a string source

    Returns:
        Compiled regex pattern

    Raises:
        ValidationError: If pattern is invalid
    """
    if isinstance(pattern, re.Pattern):
        return pattern

    if not isinstance(pattern, str):
        raise ValidationError(f"Regex pattern must be string, got {type(pattern).__name__}")

    if len(pattern) > Limits.MAX_PATTERN_LENGTH:
        raise ValidationError(f"Regex pattern exceeds maximum length ({Limits.MAX_PATTERN_LENGTH})")

    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise ValidationError(f"Failed to compile regex pattern {pattern!r}: {e}")


def validate_glob(pattern: str) -> bool:
    """Validate glob pattern.

    Args:
        pattern: Glob pattern string

    Returns:
        True if valid

    Raises:
        ValidationError: If pattern is invalid
    """
    if not isinstance(pattern, str):
        raise ValidationError(f"Glob pattern must be string, got {type(pattern).__name__}")

    if not pattern:
        raise ValidationError("Glob pattern cannot be empty")

    if len(pattern) > Limits.MAX_PATTERN_LENGTH:
        raise ValidationError(f"Glob pattern exceeds maximum length ({Limits.MAX_PATTERN_LENGTH})")

    if "\0" in pattern:
        raise ValidationError("Invalid glob pattern: contains null bytes")

    return True


def validate_name(name: Any, kind: str = "Rule", max_length: int = Limits.MAX_RULE_NAME_LENGTH) -> bool:
    """Validate a rule or token name.

    Args:
        name: Name to validate
        kind: Label used in error messages
        max_length: Maximum allowed length

    Returns:
        True if valid

    Raises:
        ValidationError: If name is invalid
    """
    if not isinstance(name, str) or not name:
        raise ValidationError(f"{kind} name must be a non-empty string: {name!r}")

    if len(name) > max_length:
        raise ValidationError(f"{kind} name exceeds maximum length ({max_length})")

    return True


def validate_pattern_def(defn: Mapping[str, Any]) -> bool:
    """Validate a pattern (rule) definition mapping.

    Required fields: name, watch, emit, emit_path. Optional regex fields
    x, g, v must compile; then must be a name when present.

    Args:
        defn: Pattern definition mapping

    Returns:
        True if valid

    Raises:
        ValidationError: If the definition is invalid
    """
    if not isinstance(defn, Mapping):
        raise ValidationError("Pattern definition must be a mapping")

    for key in (ConfigKey.RULE_NAME, ConfigKey.RULE_WATCH, ConfigKey.RULE_EMIT, ConfigKey.RULE_EMIT_PATH):
        if key not in defn or defn[key] is None:
            raise ValidationError(f"Pattern definition must have '{key}' field")

    validate_name(defn[ConfigKey.RULE_NAME])
    validate_glob(defn[ConfigKey.RULE_WATCH])

    if not isinstance(defn[ConfigKey.RULE_EMIT], str):
        raise ValidationError(f"Pattern emit must be string: {defn[ConfigKey.RULE_EMIT]!r}")
    if not isinstance(defn[ConfigKey.RULE_EMIT_PATH], str):
        raise ValidationError(f"Pattern emit_path must be string: {defn[ConfigKey.RULE_EMIT_PATH]!r}")

    for key in (ConfigKey.RULE_EXTRACT, ConfigKey.RULE_GUARD, ConfigKey.RULE_VETO):
        source = defn.get(key)
        if source:
            validate_regex(source)

    then = defn.get(ConfigKey.RULE_THEN)
    if then is not None:
        validate_name(then, kind="Cascade target")

    return True


def validate_token_def(name: Any, pattern: Any) -> Pattern[str]:
    """Validate one lexer token definition.

    Args:
        name: Token kind name
        pattern: Regex source or compiled pattern

    Returns:
        Compiled regex pattern

    Raises:
        ValidationError: If the definition is invalid
    """
    validate_name(name, kind="Token", max_length=Limits.MAX_TOKEN_NAME_LENGTH)
    if name == ERROR_TOKEN:
        raise ValidationError(f"Token name {ERROR_TOKEN!r} is reserved for unmatched input")
    return validate_regex(pattern)
