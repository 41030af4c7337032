"""Match highlighting for the enabled rules and the live preview pattern.

One :meth:`HighlightEngine.recompute` call produces the complete decoration
set for a document: every enabled rule is scanned over the visible window
(visible ranges widened by a margin), the preview pattern on top of that.
The result replaces the previous one wholesale; nothing is diffed.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from core.host import INFO, WARNING, Notice
from core.patterns import InvalidPatternError
from core.rules import PreviewPattern, ReplaceRule
from core.scanner import PREVIEW, MatchSpan, scan

logger = logging.getLogger(__name__)

DEFAULT_MARGIN = 5000
DEFAULT_PREVIEW_MAX_MATCHES = 500

RGBA = tuple[int, int, int, int]

# Rule colours, assigned by rule index modulo palette size (alpha ≈ 0.3)
PALETTE: list[tuple[int, int, int]] = [
    (255, 215, 0),
    (135, 206, 235),
    (144, 238, 144),
    (255, 182, 193),
    (255, 165, 0),
    (173, 216, 230),
]
_RULE_ALPHA = 77


@dataclass(frozen=True)
class HighlightStyle:
    style_id: str
    background: RGBA
    border: RGBA
    border_style: str = "solid"     # "solid" | "dashed"


PREVIEW_STYLE = HighlightStyle(
    style_id=PREVIEW,
    background=(255, 235, 59, 89),
    border=(255, 193, 7, 230),
    border_style="dashed",
)


def rule_style_id(index: int) -> str:
    return f"rule-{index}"


def rule_style(index: int) -> HighlightStyle:
    r, g, b = PALETTE[index % len(PALETTE)]
    return HighlightStyle(
        style_id=rule_style_id(index),
        background=(r, g, b, _RULE_ALPHA),
        border=(r, g, b, 255),
    )


@dataclass
class HighlightConfig:
    margin: int = DEFAULT_MARGIN
    preview_max_matches: int | None = DEFAULT_PREVIEW_MAX_MATCHES
    rule_max_matches: int | None = None


@dataclass
class HighlightResult:
    """Outcome of one recompute pass.

    ``spans`` has an entry for every live style (possibly empty, so that
    stale decorations get cleared); ``styles`` resolves those ids.
    """

    spans: dict[str, list[MatchSpan]] = field(default_factory=dict)
    styles: dict[str, HighlightStyle] = field(default_factory=dict)
    notices: list[Notice] = field(default_factory=list)
    disposed: list[str] = field(default_factory=list)
    preview_truncated: bool = False
    preview_error: str | None = None


class StyleTable:
    """Rule index → style, created on first use, released when the index dies."""

    def __init__(self) -> None:
        self._styles: dict[int, HighlightStyle] = {}

    def __len__(self) -> int:
        return len(self._styles)

    def __contains__(self, index: int) -> bool:
        return index in self._styles

    def style_for(self, index: int) -> HighlightStyle:
        style = self._styles.get(index)
        if style is None:
            style = rule_style(index)
            self._styles[index] = style
        return style

    def prune(self, rule_count: int) -> list[str]:
        """Drop styles for indices >= *rule_count*; return their ids."""
        dead = sorted(i for i in self._styles if i >= rule_count)
        for i in dead:
            del self._styles[i]
        return [rule_style_id(i) for i in dead]

    def items(self) -> list[tuple[int, HighlightStyle]]:
        return sorted(self._styles.items())


class _TextDocument:
    """Adapts a plain string to the document reads the engine needs."""

    def __init__(self, text: str) -> None:
        self._text = text

    def get_document_length(self) -> int:
        return len(self._text)

    def get_document_text_window(self, start: int, end: int) -> str:
        return self._text[start:end]


def expand_windows(
    visible_ranges: Sequence[tuple[int, int]],
    length: int,
    margin: int,
) -> list[tuple[int, int]]:
    """Widen each visible range by *margin*, clamp, and merge overlaps.

    With no visible range the window starts at offset 0.
    """
    ranges = list(visible_ranges) or [(0, 0)]
    widened = sorted(
        (max(0, min(s, e) - margin), min(length, max(s, e) + margin))
        for s, e in ranges
    )
    merged: list[tuple[int, int]] = []
    for start, end in widened:
        if merged and start <= merged[-1][1]:
            prev_start, prev_end = merged[-1]
            merged[-1] = (prev_start, max(prev_end, end))
        else:
            merged.append((start, end))
    return merged


class HighlightEngine:
    """Computes decoration spans; holds the rule style table between passes."""

    def __init__(self, config: HighlightConfig | None = None) -> None:
        self.config = config or HighlightConfig()
        self.styles = StyleTable()

    def recompute(
        self,
        document,
        rules: Sequence[ReplaceRule],
        preview: PreviewPattern | None = None,
        visible_ranges: Sequence[tuple[int, int]] = (),
    ) -> HighlightResult:
        """Scan the visible window for every enabled rule and the preview.

        Args:
            document: A string, or an object with ``get_document_length()``
                and ``get_document_text_window(start, end)``.
            rules: Rule snapshot, in order.
            preview: The pattern being composed, if any.
            visible_ranges: On-screen character ranges.

        Returns:
            A fresh :class:`HighlightResult`.  Never raises for bad patterns.
        """
        if isinstance(document, str):
            document = _TextDocument(document)
        result = HighlightResult()
        result.disposed = self.styles.prune(len(rules))

        windows = [
            (start, document.get_document_text_window(start, end))
            for start, end in expand_windows(
                visible_ranges, document.get_document_length(), self.config.margin
            )
        ]

        for index, rule in enumerate(rules):
            if not rule.enabled or not rule.find:
                continue
            style = self.styles.style_for(index)
            result.spans[style.style_id] = self._scan_rule(index, rule, windows)

        for index, style in self.styles.items():
            result.styles[style.style_id] = style
            result.spans.setdefault(style.style_id, [])

        result.styles[PREVIEW] = PREVIEW_STYLE
        result.spans[PREVIEW] = []
        if preview is not None and preview.find:
            self._scan_preview(preview, windows, result)

        logger.debug(
            "Highlight pass: %d rules, %d windows, %d spans",
            len(rules),
            len(windows),
            sum(len(v) for v in result.spans.values()),
        )
        return result

    def dispose_all(self) -> list[str]:
        """Release every rule style (session teardown)."""
        return self.styles.prune(0)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _scan_rule(
        self,
        index: int,
        rule: ReplaceRule,
        windows: list[tuple[int, str]],
    ) -> list[MatchSpan]:
        cap = self.config.rule_max_matches
        spans: list[MatchSpan] = []
        try:
            for start, text in windows:
                remaining = None if cap is None else cap - len(spans)
                if remaining is not None and remaining <= 0:
                    break
                matches = scan(
                    text, rule.find, rule.flags, remaining,
                    offset=start, rule_index=index,
                )
                spans.extend(matches)
                if matches.truncated:
                    logger.debug("Rule #%d capped at %d matches", index + 1, cap)
                    break
        except InvalidPatternError as exc:
            # Expected while a pattern is being typed; only this rule is dropped
            logger.debug("Skipping rule #%d: %s", index + 1, exc.reason)
            return []
        return spans

    def _scan_preview(
        self,
        preview: PreviewPattern,
        windows: list[tuple[int, str]],
        result: HighlightResult,
    ) -> None:
        cap = self.config.preview_max_matches
        spans: list[MatchSpan] = []
        truncated = False
        try:
            for start, text in windows:
                for span in scan(text, preview.find, preview.flags, offset=start, rule_index=PREVIEW):
                    if span.is_empty:
                        continue
                    if cap is not None and len(spans) >= cap:
                        truncated = True
                        break
                    spans.append(span)
                if truncated:
                    break
        except InvalidPatternError as exc:
            result.preview_error = exc.reason
            result.notices.append(Notice(WARNING, f"Invalid preview pattern: {exc.reason}"))
            return

        result.spans[PREVIEW] = spans
        if truncated:
            result.preview_truncated = True
            result.notices.append(
                Notice(INFO, f"Too many matches; showing only the first {cap}.")
            )
