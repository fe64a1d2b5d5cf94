"""Tests for input validators."""
import re

import pytest

from pikesre.core.constants import ERROR_TOKEN, ErrorCode, Limits
from pikesre.core.validators import (
    ValidationError,
    validate_glob,
    validate_name,
    validate_pattern_def,
    validate_regex,
    validate_token_def,
)


def make_def(**overrides):
    defn = {"name": "audit", "watch": "/users/*", "emit": "audit@v1", "emit_path": "/audit/${uuid}"}
    defn.update(overrides)
    return defn


class TestValidationError:
    """Tests for ValidationError."""

    def test_defaults(self):
        """Default error code is INVALID_INPUT."""
        error = ValidationError("bad input")
        assert str(error) == "bad input"
        assert error.message == "bad input"
        assert error.error_code == ErrorCode.INVALID_INPUT

    def test_custom_code(self):
        """Error code can be overridden."""
        assert ValidationError("gone", ErrorCode.NOT_FOUND).error_code == ErrorCode.NOT_FOUND


class TestValidateRegex:
    """Tests for validate_regex."""

    def test_compiles_source(self):
        """String sources are compiled with the given flags."""
        compiled = validate_regex(r"[a-z]+", re.IGNORECASE)
        assert compiled.match("ABC")

    def test_compiled_passthrough(self):
        """Compiled patterns are returned unchanged."""
        compiled = re.compile(r"\d")
        assert validate_regex(compiled) is compiled

    def test_invalid_source(self):
        """Malformed regexes are rejected."""
        with pytest.raises(ValidationError, match="Failed to compile"):
            validate_regex("(unclosed")

    def test_not_string(self):
        """Non-string sources are rejected."""
        with pytest.raises(ValidationError, match="must be string"):
            validate_regex(42)

    def test_too_long(self):
        """Overlong sources are rejected."""
        with pytest.raises(ValidationError, match="maximum length"):
            validate_regex("a" * (Limits.MAX_PATTERN_LENGTH + 1))


class TestValidateGlob:
    """Tests for validate_glob."""

    @pytest.mark.parametrize("glob", ["/users/*", "/**", "docs/*/index"])
    def test_valid(self, glob):
        assert validate_glob(glob) is True

    @pytest.mark.parametrize(
        "glob,message",
        [("", "cannot be empty"), ("/a\0b", "null bytes"), (None, "must be string")],
    )
    def test_invalid(self, glob, message):
        with pytest.raises(ValidationError, match=message):
            validate_glob(glob)


class TestValidateName:
    """Tests for validate_name."""

    def test_valid(self):
        assert validate_name("email-extractor") is True

    def test_empty(self):
        """Empty names are rejected with the kind in the message."""
        with pytest.raises(ValidationError, match="Token name"):
            validate_name("", kind="Token")

    def test_too_long(self):
        with pytest.raises(ValidationError, match="maximum length"):
            validate_name("x" * 11, max_length=10)


class TestValidatePatternDef:
    """Tests for validate_pattern_def."""

    def test_minimal(self):
        """Required fields alone are enough."""
        assert validate_pattern_def(make_def()) is True

    def test_full(self):
        """Optional regexes and cascade target are checked."""
        assert validate_pattern_def(make_def(x=r"(\w+)", g="ok", v="", then="next")) is True

    def test_not_mapping(self):
        with pytest.raises(ValidationError, match="must be a mapping"):
            validate_pattern_def(["name"])

    @pytest.mark.parametrize("field", ["name", "watch", "emit", "emit_path"])
    def test_missing_required(self, field):
        defn = make_def()
        del defn[field]
        with pytest.raises(ValidationError, match=f"'{field}'"):
            validate_pattern_def(defn)

    def test_null_required(self):
        with pytest.raises(ValidationError, match="'emit'"):
            validate_pattern_def(make_def(emit=None))

    def test_non_string_emit(self):
        with pytest.raises(ValidationError, match="emit must be string"):
            validate_pattern_def(make_def(emit=3))

    def test_bad_regex(self):
        with pytest.raises(ValidationError, match="Failed to compile"):
            validate_pattern_def(make_def(g="[oops"))

    def test_bad_then(self):
        with pytest.raises(ValidationError, match="Cascade target"):
            validate_pattern_def(make_def(then=""))


class TestValidateTokenDef:
    """Tests for validate_token_def."""

    def test_valid(self):
        assert validate_token_def("NUM", r"\d+").pattern == r"\d+"

    def test_bad_name(self):
        with pytest.raises(ValidationError, match="Token name"):
            validate_token_def(None, r"\d+")

    def test_bad_pattern(self):
        with pytest.raises(ValidationError):
            validate_token_def("NUM", "(")

    def test_reserved_name(self):
        """The ERROR kind is reserved for unmatched input."""
        with pytest.raises(ValidationError, match="reserved"):
            validate_token_def(ERROR_TOKEN, r"\d+")
