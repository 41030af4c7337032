"""Regex compilation and replacement-template expansion for rules.

Rule flags, patterns and replacement templates use the JavaScript-style
syntax of the persisted rule format (``gim`` flag letters, ``(?<name>...)``
groups, ``$1`` / ``$&`` backreferences).  This module translates them into
Python's ``re`` semantics.
"""

import logging
import re
from collections.abc import Callable

logger = logging.getLogger(__name__)

GLOBAL_FLAG = "g"

# Flag letter → re flag.  "g" and "u" have no re equivalent.
_FLAG_BITS = {
    "g": 0,
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,
    "x": re.VERBOSE,
}

_TEMPLATE_TOKEN_RE = re.compile(r"\$(?:(\$)|(&)|(`)|(')|(\d{1,2})|<([^>]*)>)")


class InvalidPatternError(ValueError):
    """Raised when a rule's pattern or flags cannot be compiled."""

    def __init__(
        self,
        pattern: str,
        flags: str,
        reason: str,
        rule_index: int | None = None,
    ) -> None:
        self.pattern = pattern
        self.flags = flags
        self.reason = reason
        self.rule_index = rule_index
        if rule_index is None:
            msg = f"Invalid pattern /{pattern}/{flags}: {reason}"
        else:
            msg = f"Rule #{rule_index + 1} has an invalid pattern /{pattern}/{flags}: {reason}"
        super().__init__(msg)

    def for_rule(self, rule_index: int) -> "InvalidPatternError":
        """Return a copy of this error tagged with *rule_index*."""
        return InvalidPatternError(self.pattern, self.flags, self.reason, rule_index)


# ------------------------------------------------------------------
# Flags
# ------------------------------------------------------------------

def ensure_global(flags: str | None) -> str:
    """Return *flags* with the global flag present (empty → "g")."""
    flags = flags or ""
    return flags if GLOBAL_FLAG in flags else flags + GLOBAL_FLAG


def flags_to_re(flags: str | None) -> int:
    """Convert a flag string such as ``"gim"`` to ``re`` flag bits.

    Raises:
        ValueError: On an unknown or repeated flag letter.
    """
    bits = 0
    seen: set[str] = set()
    for ch in flags or "":
        if ch not in _FLAG_BITS:
            raise ValueError(f"unsupported flag '{ch}'")
        if ch in seen:
            raise ValueError(f"repeated flag '{ch}'")
        seen.add(ch)
        bits |= _FLAG_BITS[ch]
    return bits


# ------------------------------------------------------------------
# Patterns
# ------------------------------------------------------------------

def to_python_syntax(pattern: str) -> str:
    """Rewrite JS named groups for ``re``.

    ``(?<name>...)`` becomes ``(?P<name>...)`` and ``\\k<name>`` becomes
    ``(?P=name)``.  Lookbehinds, escaped characters and the inside of
    character classes are left untouched.
    """
    if "<" not in pattern:
        return pattern
    out: list[str] = []
    i, n = 0, len(pattern)
    in_class = False
    while i < n:
        ch = pattern[i]
        if ch == "\\":
            if not in_class and pattern.startswith("k<", i + 1):
                end = pattern.find(">", i + 3)
                if end != -1:
                    out.append(f"(?P={pattern[i + 3:end]})")
                    i = end + 1
                    continue
            out.append(pattern[i:i + 2])
            i += 2
            continue
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
        elif pattern.startswith("(?<", i) and pattern[i + 3:i + 4] not in ("=", "!", ""):
            out.append("(?P<")
            i += 3
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def compile_pattern(pattern: str, flags: str | None = GLOBAL_FLAG) -> re.Pattern:
    """Compile *pattern* with rule *flags*.

    Args:
        pattern: Regex source.
        flags: Flag letters; ``None`` or ``""`` means ``"g"``.

    Returns:
        The compiled pattern.

    Raises:
        InvalidPatternError: If the flags or the pattern are invalid.
    """
    flags = flags or GLOBAL_FLAG
    if not isinstance(pattern, str):
        raise InvalidPatternError(str(pattern), flags, "pattern is not a string")
    try:
        return re.compile(to_python_syntax(pattern), flags_to_re(flags))
    except re.error as exc:
        raise InvalidPatternError(pattern, flags, str(exc)) from exc
    except ValueError as exc:
        raise InvalidPatternError(pattern, flags, str(exc)) from exc


def validate_pattern(pattern: str, flags: str | None = GLOBAL_FLAG) -> str | None:
    """Return None if *pattern* compiles, otherwise the failure reason."""
    try:
        compile_pattern(pattern, flags)
    except InvalidPatternError as exc:
        return exc.reason
    return None


# ------------------------------------------------------------------
# Replacement templates
# ------------------------------------------------------------------

def expand_template(template: str) -> Callable[[re.Match], str]:
    """Build a ``re.sub`` callable that expands a JS-style replacement template.

    Supported tokens: ``$$`` (dollar), ``$&`` (whole match), ``$``` (text
    before the match), ``$'`` (text after), ``$1``–``$99`` and ``$<name>``.
    A reference to a group that does not exist is left as literal text and an
    unmatched group expands to an empty string.  Backslashes are literal.
    """
    if "$" not in template:
        return lambda m: template

    def _expand(m: re.Match) -> str:
        ngroups = m.re.groups
        named = m.re.groupindex

        def _token(t: re.Match) -> str:
            dollar, amp, before, after, digits, name = t.groups()
            if dollar:
                return "$"
            if amp:
                return m.group(0)
            if before:
                return m.string[:m.start()]
            if after:
                return m.string[m.end():]
            if digits is not None:
                n = int(digits)
                if len(digits) == 2 and 1 <= n <= ngroups:
                    return m.group(n) or ""
                first = int(digits[0])
                if 1 <= first <= ngroups:
                    return (m.group(first) or "") + digits[1:]
                return t.group(0)
            # $<name>
            if not named:
                return t.group(0)
            if name in named:
                return m.group(name) or ""
            return ""

        return _TEMPLATE_TOKEN_RE.sub(_token, template)

    return _expand
