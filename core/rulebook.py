"""The editable, ordered rule list plus the live preview pattern."""

import logging
from collections.abc import Callable, Iterable

from core.host import RuleSource
from core.patterns import GLOBAL_FLAG, compile_pattern
from core.rules import PreviewPattern, ReplaceRule, rule_from_record, rules_to_records

logger = logging.getLogger(__name__)

RULES_CHANGED = "rules"
PREVIEW_CHANGED = "preview"


class RuleBook(RuleSource):
    """Ordered list of :class:`ReplaceRule` with the editing operations.

    Listeners registered with :meth:`subscribe` receive ``"rules"`` after any
    rule-list mutation and ``"preview"`` after the preview changes.  Readers
    take snapshots; the list itself is never handed out.
    """

    def __init__(self, rules: Iterable[ReplaceRule] = ()) -> None:
        self._rules: list[ReplaceRule] = list(rules)
        self._preview: PreviewPattern | None = None
        self._listeners: list[Callable[[str], None]] = []

    def __len__(self) -> int:
        return len(self._rules)

    def __getitem__(self, index: int) -> ReplaceRule:
        return self._rules[index]

    # ------------------------------------------------------------------
    # RuleSource
    # ------------------------------------------------------------------

    def get_rule_snapshot(self) -> tuple[ReplaceRule, ...]:
        return tuple(self._rules)

    def get_preview_pattern(self) -> PreviewPattern | None:
        return self._preview

    def records(self) -> list[dict]:
        return rules_to_records(self._rules)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def _emit(self, kind: str) -> None:
        for callback in list(self._listeners):
            callback(kind)

    # ------------------------------------------------------------------
    # Rule editing
    # ------------------------------------------------------------------

    def replace_all(self, rules: Iterable) -> None:
        """Load a whole list (rules or persisted records)."""
        self._rules = [r for r in (rule_from_record(x) for x in rules) if r is not None]
        self._emit(RULES_CHANGED)

    def add_rule(self, find: str, replace: str = "", flags: str = GLOBAL_FLAG) -> int:
        """Append a validated rule and return its index.

        Raises:
            InvalidPatternError: If *find* does not compile with *flags*.
        """
        flags = flags or GLOBAL_FLAG
        compile_pattern(find, flags)
        self._rules.append(ReplaceRule(find, replace, flags))
        logger.debug("Rule added: /%s/%s", find, flags)
        self._emit(RULES_CHANGED)
        return len(self._rules) - 1

    def save_rule(self, index: int, find: str, replace: str = "", flags: str = GLOBAL_FLAG) -> None:
        """Overwrite the rule at *index*; the saved rule is enabled.

        Raises:
            IndexError: If *index* is out of range.
            InvalidPatternError: If *find* does not compile with *flags*.
        """
        self._check_index(index)
        flags = flags or GLOBAL_FLAG
        compile_pattern(find, flags)
        self._rules[index] = ReplaceRule(find, replace, flags)
        self._emit(RULES_CHANGED)

    def delete_rule(self, index: int) -> ReplaceRule:
        self._check_index(index)
        removed = self._rules.pop(index)
        self._emit(RULES_CHANGED)
        return removed

    def duplicate_rule(self, index: int) -> int:
        """Insert a copy right after *index*; returns the copy's index."""
        self._check_index(index)
        self._rules.insert(index + 1, self._rules[index])
        self._emit(RULES_CHANGED)
        return index + 1

    def set_enabled(self, index: int, enabled: bool) -> None:
        self._check_index(index)
        rule = self._rules[index]
        if rule.enabled == enabled:
            return
        self._rules[index] = ReplaceRule(rule.find, rule.replace, rule.flags, enabled)
        self._emit(RULES_CHANGED)

    def move_up(self, index: int) -> bool:
        if 0 < index < len(self._rules):
            return self.move_rule(index, index - 1)
        return False

    def move_down(self, index: int) -> bool:
        if 0 <= index < len(self._rules) - 1:
            return self.move_rule(index, index + 1)
        return False

    def move_rule(self, from_index: int, to_index: int) -> bool:
        """Move a rule so that it ends up at *to_index*.

        The rule is removed first and reinserted at *to_index* (clamped to
        the list), so ``move_rule(0, 2)`` on ``[a, b, c]`` gives
        ``[b, c, a]`` and ``move_rule(2, 0)`` gives ``[c, a, b]``.

        Returns:
            True if the order changed.
        """
        self._check_index(from_index)
        to_index = max(0, min(to_index, len(self._rules) - 1))
        if from_index == to_index:
            return False
        moved = self._rules.pop(from_index)
        self._rules.insert(to_index, moved)
        self._emit(RULES_CHANGED)
        return True

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._rules):
            raise IndexError(f"No rule #{index + 1} (have {len(self._rules)})")

    # ------------------------------------------------------------------
    # Preview
    # ------------------------------------------------------------------

    def set_preview(self, find: str, flags: str = GLOBAL_FLAG) -> None:
        """Show *find* as the live preview; an empty pattern clears it.

        The pattern is not validated here; the highlighter reports invalid
        previews as notices.
        """
        if not find:
            self.clear_preview()
            return
        preview = PreviewPattern(find, flags or GLOBAL_FLAG)
        if preview == self._preview:
            return
        self._preview = preview
        self._emit(PREVIEW_CHANGED)

    def clear_preview(self) -> None:
        if self._preview is None:
            return
        self._preview = None
        self._emit(PREVIEW_CHANGED)
