"""Lazy regex match scanning with zero-length-match protection and a match cap."""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import NoReturn

from core.patterns import compile_pattern, ensure_global

logger = logging.getLogger(__name__)

PREVIEW = "preview"


@dataclass(frozen=True)
class MatchSpan:
    start: int              # absolute offset of the first matched character
    end: int                # absolute offset one past the last matched character
    text: str
    rule_index: int | str | None = None   # rule position, PREVIEW, or None

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


class MatchScan:
    """Iterator over the matches of one compiled pattern in one text.

    Matches are computed on demand, left to right and non-overlapping.  The
    iterator is single-use: once exhausted it yields nothing more.

    Attributes:
        truncated: True once the cap was reached *and* another match exists.
        count: Number of spans produced so far.
    """

    def __init__(
        self,
        regex: re.Pattern,
        text: str,
        max_matches: int | None = None,
        offset: int = 0,
        rule_index: int | str | None = None,
    ) -> None:
        self._regex = regex
        self._text = text
        self._max = max_matches
        self._offset = offset
        self._rule_index = rule_index
        self._pos = 0
        self._done = False
        self.truncated = False
        self.count = 0

    def __iter__(self) -> Iterator[MatchSpan]:
        return self

    def __next__(self) -> MatchSpan:
        if self._done:
            raise StopIteration
        if self._max is not None and self.count >= self._max:
            # Peek one match to tell "exactly at the cap" from "cut short"
            self.truncated = self._search() is not None
            self._finish()
        m = self._search()
        if m is None:
            self._finish()
        if m.end() == m.start():
            if m.end() >= len(self._text):
                self._done = True
            else:
                self._pos = m.end() + 1
        else:
            self._pos = m.end()
        self.count += 1
        return MatchSpan(
            start=self._offset + m.start(),
            end=self._offset + m.end(),
            text=m.group(0),
            rule_index=self._rule_index,
        )

    def _search(self) -> re.Match | None:
        if self._pos > len(self._text):
            return None
        return self._regex.search(self._text, self._pos)

    def _finish(self) -> NoReturn:
        self._done = True
        raise StopIteration


def scan(
    text: str,
    pattern: str,
    flags: str | None = "g",
    max_matches: int | None = None,
    *,
    offset: int = 0,
    rule_index: int | str | None = None,
) -> MatchScan:
    """Scan *text* for every match of *pattern*.

    The global flag is always forced on.  The pattern is compiled eagerly so
    that errors surface here rather than on first iteration.

    Args:
        text: Text to scan (a whole document or a window slice of it).
        pattern: Regex source.
        flags: Rule flag letters.
        max_matches: Stop after this many spans; ``None`` for no cap.
        offset: Added to every span offset, for re-basing a window slice.
        rule_index: Tag stamped on every produced span.

    Raises:
        InvalidPatternError: If pattern + flags do not compile.
    """
    regex = compile_pattern(pattern, ensure_global(flags))
    return MatchScan(regex, text, max_matches, offset=offset, rule_index=rule_index)
