"""Sequential (cascading) application of replace rules to a text buffer."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from core.patterns import InvalidPatternError, compile_pattern, ensure_global, expand_template
from core.rules import ReplaceRule

logger = logging.getLogger(__name__)


@dataclass
class ReplaceOutcome:
    text: str
    applied_count: int                  # enabled rules that ran
    replacements: list[int] = field(default_factory=list)   # substitutions per applied rule

    @property
    def total_replacements(self) -> int:
        return sum(self.replacements)


def apply_rules(text: str, rules: Sequence[ReplaceRule]) -> ReplaceOutcome:
    """Apply every enabled rule to *text*, in order.

    Rule *i* runs on the output of rule *i-1*, so later rules see text that
    earlier rules produced.  Each rule replaces all of its non-overlapping
    matches.  Disabled rules, and rules with an empty pattern, are skipped
    and not counted.

    All enabled rules are compiled before the first substitution; the input
    string is never modified, so a failure leaves no partial result.

    Args:
        text: The full document text.
        rules: Ordered rule snapshot.

    Returns:
        A :class:`ReplaceOutcome` with the transformed text.

    Raises:
        InvalidPatternError: With ``rule_index`` set, for the first enabled
            rule whose pattern or flags are invalid.
    """
    compiled = []
    for index, rule in enumerate(rules):
        if not rule.enabled or not rule.find:
            continue
        try:
            regex = compile_pattern(rule.find, ensure_global(rule.flags))
        except InvalidPatternError as exc:
            raise exc.for_rule(index) from exc
        compiled.append((index, regex, expand_template(rule.replace)))

    current = text
    counts: list[int] = []
    for index, regex, repl in compiled:
        current, n = regex.subn(repl, current)
        counts.append(n)
        logger.debug("Rule #%d: %d replacement(s)", index + 1, n)

    return ReplaceOutcome(text=current, applied_count=len(compiled), replacements=counts)
