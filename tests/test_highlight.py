"""Tests for core.highlight."""

from core.highlight import (
    PREVIEW_STYLE,
    HighlightConfig,
    HighlightEngine,
    StyleTable,
    expand_windows,
    rule_style,
)
from core.host import INFO, WARNING
from core.rules import PreviewPattern, ReplaceRule
from core.scanner import PREVIEW


def _starts(spans):
    return [s.start for s in spans]


class TestExpandWindows:
    def test_margin_is_clamped(self):
        assert expand_windows([(10, 20)], 100, 5) == [(5, 25)]
        assert expand_windows([(10, 20)], 22, 50) == [(0, 22)]

    def test_no_visible_range_starts_at_zero(self):
        assert expand_windows([], 100, 30) == [(0, 30)]

    def test_overlapping_windows_merge(self):
        assert expand_windows([(50, 60), (10, 20)], 1000, 20) == [(0, 80)]

    def test_distant_windows_stay_separate(self):
        assert expand_windows([(0, 10), (500, 510)], 1000, 5) == [(0, 15), (495, 515)]


class TestStyleTable:
    def test_style_is_stable_per_index(self):
        table = StyleTable()
        assert table.style_for(3) is table.style_for(3)
        assert table.style_for(3).style_id == "rule-3"

    def test_palette_cycles(self):
        assert rule_style(0).background == rule_style(6).background
        assert rule_style(0).background != rule_style(1).background

    def test_prune_returns_dead_ids(self):
        table = StyleTable()
        for i in range(4):
            table.style_for(i)
        assert table.prune(2) == ["rule-2", "rule-3"]
        assert len(table) == 2
        assert 1 in table and 2 not in table


class TestRuleHighlighting:
    def test_spans_per_rule(self):
        engine = HighlightEngine()
        result = engine.recompute("banana", [ReplaceRule("an"), ReplaceRule("b")])
        assert _starts(result.spans["rule-0"]) == [1, 3]
        assert _starts(result.spans["rule-1"]) == [0]

    def test_invalid_rule_does_not_block_others(self):
        engine = HighlightEngine()
        result = engine.recompute("banana", [ReplaceRule("("), ReplaceRule("a")])
        assert result.spans["rule-0"] == []
        assert _starts(result.spans["rule-1"]) == [1, 3, 5]
        assert result.notices == []

    def test_disabled_rule_has_no_spans(self):
        engine = HighlightEngine()
        result = engine.recompute("banana", [ReplaceRule("a", enabled=False)])
        assert "rule-0" not in result.spans

    def test_disabling_clears_previous_spans(self):
        engine = HighlightEngine()
        engine.recompute("banana", [ReplaceRule("a")])
        result = engine.recompute("banana", [ReplaceRule("a", enabled=False)])
        assert result.spans["rule-0"] == []

    def test_span_carries_rule_index(self):
        engine = HighlightEngine()
        result = engine.recompute("xay", [ReplaceRule("z"), ReplaceRule("a")])
        assert result.spans["rule-1"][0].rule_index == 1

    def test_idempotent(self):
        engine = HighlightEngine()
        rules = [ReplaceRule("an", flags="gi"), ReplaceRule("b")]
        first = engine.recompute("Banana band", rules, PreviewPattern("n"))
        second = engine.recompute("Banana band", rules, PreviewPattern("n"))
        assert first.spans == second.spans
        assert second.disposed == []

    def test_deleting_rules_disposes_their_styles(self):
        engine = HighlightEngine()
        engine.recompute("abc", [ReplaceRule("a"), ReplaceRule("b"), ReplaceRule("c")])
        result = engine.recompute("abc", [ReplaceRule("a")])
        assert result.disposed == ["rule-1", "rule-2"]
        assert set(result.spans) == {"rule-0", PREVIEW}

    def test_only_window_is_scanned(self):
        text = "a" + "." * 100 + "a"
        engine = HighlightEngine(HighlightConfig(margin=10))
        result = engine.recompute(text, [ReplaceRule("a")], visible_ranges=[(0, 5)])
        assert _starts(result.spans["rule-0"]) == [0]

    def test_rule_cap(self):
        engine = HighlightEngine(HighlightConfig(rule_max_matches=2))
        result = engine.recompute("aaaa", [ReplaceRule("a")])
        assert len(result.spans["rule-0"]) == 2

    def test_dispose_all(self):
        engine = HighlightEngine()
        engine.recompute("ab", [ReplaceRule("a"), ReplaceRule("b")])
        assert engine.dispose_all() == ["rule-0", "rule-1"]
        assert len(engine.styles) == 0


class TestPreview:
    def test_preview_spans_and_style(self):
        engine = HighlightEngine()
        result = engine.recompute("banana", [], PreviewPattern("na"))
        assert _starts(result.spans[PREVIEW]) == [2, 4]
        assert result.styles[PREVIEW] is PREVIEW_STYLE

    def test_preview_entry_present_without_preview(self):
        result = HighlightEngine().recompute("banana", [])
        assert result.spans[PREVIEW] == []

    def test_cap_and_notice(self):
        engine = HighlightEngine(HighlightConfig(preview_max_matches=3))
        result = engine.recompute("a" * 10, [], PreviewPattern("a"))
        assert len(result.spans[PREVIEW]) == 3
        assert result.preview_truncated is True
        assert result.notices[0].kind == INFO
        assert "first 3" in result.notices[0].message

    def test_exactly_at_cap_has_no_notice(self):
        engine = HighlightEngine(HighlightConfig(preview_max_matches=3))
        result = engine.recompute("aaa", [], PreviewPattern("a"))
        assert result.preview_truncated is False
        assert result.notices == []

    def test_zero_length_matches_skipped(self):
        engine = HighlightEngine()
        result = engine.recompute("abc", [], PreviewPattern("x*"))
        assert result.spans[PREVIEW] == []

    def test_invalid_preview_is_a_warning(self):
        engine = HighlightEngine()
        result = engine.recompute("abc", [ReplaceRule("a")], PreviewPattern("[a"))
        assert result.preview_error
        assert result.notices[0].kind == WARNING
        assert result.notices[0].message.startswith("Invalid preview pattern:")
        assert result.spans[PREVIEW] == []
        assert _starts(result.spans["rule-0"]) == [0]

    def test_preview_flags(self):
        engine = HighlightEngine()
        result = engine.recompute("Aa", [], PreviewPattern("a", "gi"))
        assert _starts(result.spans[PREVIEW]) == [0, 1]
