"""Tests for core.patterns."""

import re

import pytest

from core.patterns import (
    InvalidPatternError,
    compile_pattern,
    ensure_global,
    expand_template,
    flags_to_re,
    to_python_syntax,
    validate_pattern,
)


class TestFlags:
    def test_ensure_global_appends(self):
        assert ensure_global("i") == "ig"

    def test_ensure_global_keeps_existing(self):
        assert ensure_global("gi") == "gi"

    def test_ensure_global_empty(self):
        assert ensure_global("") == "g"
        assert ensure_global(None) == "g"

    def test_flag_bits(self):
        bits = flags_to_re("gims")
        assert bits & re.IGNORECASE
        assert bits & re.MULTILINE
        assert bits & re.DOTALL

    def test_unknown_flag_rejected(self):
        with pytest.raises(ValueError, match="unsupported flag 'y'"):
            flags_to_re("gy")

    def test_repeated_flag_rejected(self):
        with pytest.raises(ValueError, match="repeated"):
            flags_to_re("gg")


class TestCompilePattern:
    def test_case_insensitive(self):
        assert compile_pattern("abc", "gi").search("xABCx")

    def test_bad_pattern(self):
        with pytest.raises(InvalidPatternError) as info:
            compile_pattern("(", "g")
        assert info.value.pattern == "("
        assert info.value.rule_index is None

    def test_bad_flags(self):
        with pytest.raises(InvalidPatternError, match="unsupported flag"):
            compile_pattern("a", "gq")

    def test_for_rule_tags_index(self):
        err = InvalidPatternError("(", "g", "missing )").for_rule(2)
        assert err.rule_index == 2
        assert "Rule #3" in str(err)

    def test_validate_pattern(self):
        assert validate_pattern("a+") is None
        assert validate_pattern("[") is not None


class TestExpandTemplate:
    def _sub(self, pattern, template, text):
        return re.compile(pattern).sub(expand_template(template), text)

    def test_plain_text(self):
        assert self._sub("a", "X", "banana") == "bXnXnX"

    def test_numbered_groups(self):
        assert self._sub(r"(\w+)@(\w+)", "$2 at $1", "joe@example") == "example at joe"

    def test_whole_match_and_dollar(self):
        assert self._sub(r"\d+", "$$$&", "cost 5") == "cost $5"

    def test_named_group(self):
        assert self._sub(r"(?P<word>\w+)", "<$<word>>", "hi") == "<hi>"

    def test_unknown_group_is_literal(self):
        assert self._sub(r"(a)", "$3", "a") == "$3"

    def test_two_digit_falls_back_to_one(self):
        assert self._sub(r"(a)", "$10", "a") == "a0"

    def test_unmatched_group_is_empty(self):
        assert self._sub(r"(x)?b", "[$1]", "b") == "[]"

    def test_before_and_after(self):
        assert self._sub(r"-", "$'|$`", "ab-cd") == "abcd|abcd"

    def test_backslash_is_literal(self):
        assert self._sub(r"(a)", r"\1", "a") == "\\1"


class TestJsGroupSyntax:
    def test_named_group_rewritten(self):
        assert to_python_syntax(r"(?<year>\d+)") == r"(?P<year>\d+)"

    def test_named_backreference(self):
        regex = compile_pattern(r"(?<q>['\"]).*?\k<q>")
        assert regex.search("say 'hi' now").group(0) == "'hi'"

    def test_lookbehind_untouched(self):
        assert to_python_syntax(r"(?<=a)b(?<!c)") == r"(?<=a)b(?<!c)"

    def test_python_syntax_untouched(self):
        assert to_python_syntax(r"(?P<w>\w+)(?P=w)") == r"(?P<w>\w+)(?P=w)"

    def test_character_class_untouched(self):
        regex = compile_pattern(r"[(?<x>]+")
        assert regex.groupindex == {}
        assert regex.fullmatch("(?<x>")

    def test_escaped_paren_untouched(self):
        assert to_python_syntax(r"\(?<x>") == r"\(?<x>"

    def test_js_named_group_in_template(self):
        regex = compile_pattern(r"(?<first>\w+) (?<last>\w+)")
        assert regex.sub(expand_template("$<last>, $<first>"), "Jane Doe") == "Doe, Jane"
