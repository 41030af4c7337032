"""Rule data types and helpers for the persisted rule-list format.

A persisted rule list is an ordered array of records::

    [{"find": "colou?r", "replace": "hue", "flags": "gi", "enabled": true}, ...]

``flags`` defaults to ``"g"`` and ``enabled`` to ``True`` when absent.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass

from core.patterns import GLOBAL_FLAG

logger = logging.getLogger(__name__)

# "/pattern/flags" literal typed into the find box
_LITERAL_RE = re.compile(r"^/(.*)/(\w*)$", re.DOTALL)


@dataclass(frozen=True)
class ReplaceRule:
    find: str
    replace: str = ""
    flags: str = GLOBAL_FLAG
    enabled: bool = True

    def to_record(self) -> dict:
        return asdict(self)

    def __str__(self) -> str:
        return describe_rule(self)


@dataclass(frozen=True)
class PreviewPattern:
    """The pattern currently being composed; highlighted but never persisted."""

    find: str
    flags: str = GLOBAL_FLAG


# ------------------------------------------------------------------
# Persisted records
# ------------------------------------------------------------------

def _as_str(value, default: str = "") -> str:
    return value if isinstance(value, str) else default


def rule_from_record(record) -> ReplaceRule | None:
    """Normalise one persisted record; returns None if it is not a mapping.

    Wrong-typed fields fall back to their defaults so that a corrupted store
    degrades to harmless rules instead of raising later.
    """
    if isinstance(record, ReplaceRule):
        return record
    if not isinstance(record, dict):
        return None
    enabled = record.get("enabled", True)
    return ReplaceRule(
        find=_as_str(record.get("find")),
        replace=_as_str(record.get("replace")),
        flags=_as_str(record.get("flags")) or GLOBAL_FLAG,
        enabled=enabled if isinstance(enabled, bool) else True,
    )


def rules_from_records(records: Iterable | None) -> list[ReplaceRule]:
    """Normalise a persisted rule list, dropping entries that are not records."""
    rules: list[ReplaceRule] = []
    for i, record in enumerate(records or []):
        rule = rule_from_record(record)
        if rule is None:
            logger.warning("Skipping malformed rule record #%d: %r", i + 1, record)
            continue
        rules.append(rule)
    return rules


def rules_to_records(rules: Iterable[ReplaceRule]) -> list[dict]:
    return [r.to_record() for r in rules]


# ------------------------------------------------------------------
# Input / display helpers
# ------------------------------------------------------------------

def parse_rule_input(raw: str) -> tuple[str, str]:
    """Split find-box input into ``(pattern, flags)``.

    ``/colou?r/gi`` yields ``("colou?r", "gi")``; anything else is taken as
    a plain pattern with the global flag.  Surrounding whitespace is ignored.
    """
    raw = raw.strip()
    m = _LITERAL_RE.match(raw)
    if m:
        return m.group(1), m.group(2) or GLOBAL_FLAG
    return raw, GLOBAL_FLAG


def describe_rule(rule: ReplaceRule) -> str:
    """Human-readable one-liner, e.g. ``/colou?r/gi → 'hue'``."""
    return f"/{rule.find}/{rule.flags} → '{rule.replace}'"


def filter_rules(rules: Sequence[ReplaceRule], query: str) -> list[int]:
    """Return indices of rules whose find, replace or flags contain *query*.

    Matching is case-insensitive; an empty query matches every rule.
    """
    q = query.strip().lower()
    if not q:
        return list(range(len(rules)))
    return [
        i for i, r in enumerate(rules)
        if q in r.find.lower() or q in r.replace.lower() or q in r.flags.lower()
    ]
