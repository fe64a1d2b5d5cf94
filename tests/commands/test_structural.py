#!/usr/bin/env python3
"""Tests for structural regex commands."""

import re

import pytest

from pikesre.commands.base import CommandError, find_matches
from pikesre.commands.structural import (
    c,
    d,
    g,
    if_match,
    l,
    n,
    p,
    resolve_range,
    s,
    v,
    x,
    x_all,
    x_first,
    y,
)


class TestExtract:
    """Tests for the x command."""

    def test_transform_matches(self):
        """Test each match is replaced by cmd output."""
        assert x(r"\d+", c("N"))("a1b22") == "aNbN"

    def test_cmd_receives_match_text(self):
        """Test cmd is called with each match text."""
        assert x(r"\d+", lambda num: str(int(num) * 2))("a1b2c3") == "a2b4c6"

    def test_no_match_returns_input(self):
        """Test input is unchanged when nothing matches."""
        assert x(r"\d", c("N"))("abc") == "abc"

    def test_empty_input(self):
        """Test empty input."""
        assert x(r"\d", c("N"))("") == ""

    def test_whole_string_match(self):
        """Test a match covering the whole input."""
        assert x("abc", c("X"))("abc") == "X"

    def test_touching_matches(self):
        """Test adjacent matches keep every boundary character."""
        assert x("a", c("b"))("aaa") == "bbb"

    def test_zero_length_matches(self):
        """Test zero-length matches neither drop nor duplicate text."""
        assert x("x*", c("-"))("ab") == "-a-b-"

    def test_identity_is_noop(self):
        """Test x with identity returns the input."""
        text = "a1b22c333"
        assert x(r"\d+", p())(text) == text

    def test_compiled_pattern(self):
        """Test compiled patterns with flags are honored."""
        assert x(re.compile("A", re.IGNORECASE), c("-"))("aA") == "--"

    def test_non_callable_cmd(self):
        """Test a non-callable cmd is rejected at construction."""
        with pytest.raises(CommandError):
            x("a", "not callable")

    def test_malformed_regex(self):
        """Test malformed regex fails at construction."""
        with pytest.raises(re.error):
            x("(", p())


class TestComplement:
    """Tests for the y command."""

    def test_transform_gaps(self):
        """Test gaps between matches are transformed."""
        assert y(r"\d+", c("-"))("a1b2c") == "-1-2-"

    def test_matches_kept(self):
        """Test matches pass through verbatim."""
        assert y(r"\d+", str.upper)("hello123world") == "HELLO123WORLD"

    def test_no_match_transforms_everything(self):
        """Test whole input is one gap without matches."""
        assert y(r"\d", str.upper)("abc") == "ABC"

    def test_empty_gaps_skipped(self):
        """Test touching matches and boundary matches create no gaps."""
        seen = []

        def record(text):
            seen.append(text)
            return text.upper()

        assert y(r"\d", record)("1ab23c4") == "1AB23C4"
        assert seen == ["ab", "c"]

    def test_touching_matches_only(self):
        """Test cmd is never called when matches cover the input."""
        assert y(r"\d", c("-"))("12") == "12"


class TestGuards:
    """Tests for g, v and if_match."""

    def test_guard_matches(self):
        """Test g runs cmd when the pattern matches."""
        assert g("err", c("!"))("an error") == "!"

    def test_guard_no_match(self):
        """Test g returns input unchanged otherwise."""
        assert g("err", c("!"))("fine") == "fine"

    def test_veto_no_match(self):
        """Test v runs cmd when the pattern does not match."""
        assert v("err", c("!"))("fine") == "!"

    def test_veto_matches(self):
        """Test v leaves matching input unchanged."""
        assert v("err", c("!"))("an error") == "an error"

    def test_guard_sees_whole_input(self):
        """Test g passes the whole input, not the match, to cmd."""
        assert g("b", str.upper)("abc") == "ABC"

    def test_if_match(self):
        """Test if_match selects a branch."""
        cmd = if_match(r"\d", c("digits"), c("letters"))
        assert cmd("a1") == "digits"
        assert cmd("ab") == "letters"


class TestSubstitute:
    """Tests for the s command."""

    def test_numbered_groups(self):
        """Test $N references."""
        assert s(r"(\w+)@(\w+)", "$2:$1")("john@acme") == "acme:john"

    def test_whole_match(self):
        """Test $& inserts the match."""
        assert s(r"\d+", "[$&]")("a12b3") == "a[12]b[3]"

    def test_before_and_after(self):
        """Test $` and $' insert surrounding text."""
        assert s("b", "($`|$')")("abc") == "a(a|c)c"

    def test_literal_dollar(self):
        """Test $$ inserts one dollar sign."""
        assert s("a", "$$")("aa") == "$$"

    def test_two_digit_group_needs_group(self):
        """Test $10 falls back to $1 followed by 0."""
        assert s("(a)", "$10")("a") == "a0"

    def test_two_digit_group(self):
        """Test $10 selects group ten when it exists."""
        pattern = "".join(f"({ch})" for ch in "abcdefghij")
        assert s(pattern, "$10$1")("abcdefghij") == "ja"

    def test_unknown_group_literal(self):
        """Test a reference to a missing group stays literal."""
        assert s("a", "$1")("a") == "$1"

    def test_named_group(self):
        """Test $<name> references."""
        assert s(r"(?P<word>\w+)", "<$<word>>")("hi") == "<hi>"

    def test_non_participating_group(self):
        """Test unmatched groups expand to empty text."""
        assert s(r"(a)|(b)", "[$2]")("ab") == "[][b]"

    def test_backslash_literal(self):
        """Test backslashes are not escape sequences."""
        assert s("a", r"\n")("a") == r"\n"

    def test_trailing_dollar(self):
        """Test a trailing dollar is literal."""
        assert s("a", "x$")("a") == "x$"

    def test_callable_replacement(self):
        """Test callables receive re.Match objects."""
        assert s(r"\d", lambda m: str(int(m.group(0)) * 2))("a4b5") == "a8b10"

    def test_zero_length_substitution(self):
        """Test substitution of empty matches."""
        assert s("x*", "-")("ab") == "-a-b-"

    def test_invalid_replacement_type(self):
        """Test non-string, non-callable replacements are rejected."""
        with pytest.raises(CommandError):
            s("a", 5)


class TestConstants:
    """Tests for c, d and p."""

    def test_change(self):
        """Test c ignores its input."""
        assert c("x")("anything") == "x"

    def test_delete(self):
        """Test d returns empty text."""
        assert d()("anything") == ""

    def test_print(self):
        """Test p is the identity."""
        assert p()("anything") == "anything"


class TestRanges:
    """Tests for n, l and resolve_range."""

    def test_resolve_range(self):
        """Test slice-style resolution and clamping."""
        assert resolve_range(0, None, 5) == (0, 5)
        assert resolve_range(-2, None, 5) == (3, 5)
        assert resolve_range(1, -1, 5) == (1, 4)
        assert resolve_range(-100, 100, 5) == (0, 5)
        assert resolve_range(4, 2, 5) == (4, 4)

    def test_char_range(self):
        """Test n transforms the selected characters."""
        assert n(0, 2, str.upper)("hello") == "HEllo"

    def test_char_range_negative(self):
        """Test negative start counts from the end."""
        assert n(-3, None, lambda sel: "[" + sel + "]")("testing") == "test[ing]"

    def test_char_range_clamped(self):
        """Test out-of-range indices are clamped."""
        assert n(-100, 2, str.upper)("abc") == "ABc"
        assert n(10, 20, c("X"))("abc") == "abcX"

    def test_char_range_inverted(self):
        """Test an inverted range inserts at start without duplication."""
        assert n(3, 1, c("X"))("hello") == "helXlo"

    def test_line_range(self):
        """Test l transforms the selected lines."""
        assert l(1, 2, str.upper)("a\nb\nc") == "a\nB\nc"

    def test_line_range_negative(self):
        """Test negative line indices."""
        assert l(-1, None, c("z"))("a\nb") == "a\nz"

    def test_line_range_splices_output(self):
        """Test multi-line output is spliced in place."""
        assert l(0, 1, c("x\ny"))("a\nb") == "x\ny\nb"

    def test_line_range_delete_all(self):
        """Test deleting every line."""
        assert l(0, None, d())("a\nb") == ""


class TestFirstAndAll:
    """Tests for x_first and x_all."""

    def test_x_all(self):
        """Test x_all collects command outputs."""
        assert x_all(r"\d+", p())("a1b23c456") == ["1", "23", "456"]

    def test_x_all_no_match(self):
        """Test x_all without matches."""
        assert x_all(r"\d", p())("abc") == []

    def test_x_first(self):
        """Test only the first match is transformed in place."""
        assert x_first(r"\d+", c("N"))("a1b2") == "aNb2"

    def test_x_first_no_match(self):
        """Test x_first leaves unmatched input unchanged."""
        assert x_first(r"\d", c("N"))("abc") == "abc"


def recorder(log):
    def record(text):
        log.append(text)
        return text

    return record


class TestProperties:
    """Algebraic properties of x, y and s."""

    @pytest.mark.parametrize(
        "pattern,text",
        [
            (r"x*", "axxbx"),
            (r"a|", "banana"),
            (r"\d", "a12b3"),
            (r"ab", "ababab"),
            (r"\d+", "123"),
            (r"z", "abc"),
            (r"\d", ""),
        ],
    )
    def test_x_and_y_partition_text(self, pattern, text):
        """Test x matches and y gaps interleave back into the input."""
        matches, gaps = [], []
        assert x(pattern, recorder(matches))(text) == text
        assert y(pattern, recorder(gaps))(text) == text

        spans = find_matches(pattern, text)
        assert matches == [m.text for m in spans]

        pending = iter(gaps)
        rebuilt = []
        last_end = 0
        for match, match_text in zip(spans, matches):
            if match.start > last_end:
                rebuilt.append(next(pending))
            rebuilt.append(match_text)
            last_end = match.end
        if last_end < len(text) or not spans:
            rebuilt.append(next(pending))

        assert "".join(rebuilt) == text
        assert next(pending, None) is None

    @pytest.mark.parametrize(
        "pattern,replacement,text",
        [
            (r"\d+", "N", "a1b22c333"),
            (r"(\w+)@(\w+)", "$2 at $1", "mail ann@ex now"),
            (r"foo", "bar", "foofoo"),
        ],
    )
    def test_s_fixed_point(self, pattern, replacement, text):
        """Test s is a fixed point once its output no longer matches."""
        sub = s(pattern, replacement)
        once = sub(text)
        assert re.search(pattern, once) is None
        assert sub(once) == once

    @pytest.mark.parametrize(
        "pattern,cmd,text",
        [
            (r"[a-z]+", str.upper, "abc 12 de"),
            (r"\d+", c("#"), "a1b22"),
            (r"\s+", d(), "a b\tc\n"),
        ],
    )
    def test_x_fixed_point(self, pattern, cmd, text):
        """Test x is a fixed point after one application when cmd output misses."""
        extract = x(pattern, cmd)
        once = extract(text)
        assert re.search(pattern, once) is None
        assert extract(once) == once
