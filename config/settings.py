"""Application-wide settings backed by QSettings.

Usage:
    from config.settings import AppSettings
    settings = AppSettings()
    settings.throttle_ms = 2000
    rules = settings.rules
"""

import json
import logging
import os

from platformdirs import user_documents_dir
from PyQt6.QtCore import QSettings

from core.highlight import DEFAULT_MARGIN, DEFAULT_PREVIEW_MAX_MATCHES, HighlightConfig
from core.rules import ReplaceRule, rules_from_records, rules_to_records
from core.session import DEFAULT_THROTTLE_MS

logger = logging.getLogger(__name__)

APP_NAME = "BatchRegexReplace"
APP_ORG = "BatchRegexReplace"

DEFAULT_PREVIEW_DEBOUNCE_MS = 150


class AppSettings:
    """Thin wrapper around QSettings with typed property accessors."""

    def __init__(self, qsettings: QSettings | None = None) -> None:
        self._qs = qsettings if qsettings is not None else QSettings(APP_ORG, APP_NAME)

    def _int(self, key: str, default: int) -> int:
        try:
            return int(self._qs.value(key, default))
        except (TypeError, ValueError):
            logger.warning("Ignoring non-numeric setting %s", key)
            return default

    # ------------------------------------------------------------------
    # Highlighting
    # ------------------------------------------------------------------

    @property
    def margin(self) -> int:
        return self._int("highlight/margin", DEFAULT_MARGIN)

    @margin.setter
    def margin(self, value: int) -> None:
        self._qs.setValue("highlight/margin", int(value))

    @property
    def throttle_ms(self) -> int:
        env = os.environ.get("BRR_THROTTLE_MS")
        if env and env.isdigit():
            return int(env)
        return self._int("highlight/throttle_ms", DEFAULT_THROTTLE_MS)

    @throttle_ms.setter
    def throttle_ms(self, value: int) -> None:
        self._qs.setValue("highlight/throttle_ms", int(value))

    @property
    def preview_debounce_ms(self) -> int:
        return self._int("highlight/preview_debounce_ms", DEFAULT_PREVIEW_DEBOUNCE_MS)

    @preview_debounce_ms.setter
    def preview_debounce_ms(self, value: int) -> None:
        self._qs.setValue("highlight/preview_debounce_ms", int(value))

    @property
    def preview_max_matches(self) -> int:
        return self._int("highlight/preview_max_matches", DEFAULT_PREVIEW_MAX_MATCHES)

    @preview_max_matches.setter
    def preview_max_matches(self, value: int) -> None:
        self._qs.setValue("highlight/preview_max_matches", int(value))

    @property
    def rule_max_matches(self) -> int:
        """Per-rule highlight cap; 0 means unlimited."""
        return self._int("highlight/rule_max_matches", 0)

    @rule_max_matches.setter
    def rule_max_matches(self, value: int) -> None:
        self._qs.setValue("highlight/rule_max_matches", int(value))

    def highlight_config(self) -> HighlightConfig:
        return HighlightConfig(
            margin=max(0, self.margin),
            preview_max_matches=self.preview_max_matches or None,
            rule_max_matches=self.rule_max_matches or None,
        )

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    @property
    def rules(self) -> list[ReplaceRule]:
        raw = self._qs.value("rules/list", "[]")
        try:
            records = json.loads(raw or "[]")
        except (TypeError, ValueError) as exc:
            logger.warning("Stored rule list is corrupt, starting empty: %s", exc)
            return []
        if not isinstance(records, list):
            logger.warning("Stored rule list is not a list, starting empty")
            return []
        return rules_from_records(records)

    @rules.setter
    def rules(self, value: list[ReplaceRule]) -> None:
        self._qs.setValue("rules/list", json.dumps(rules_to_records(value), ensure_ascii=False))

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    @property
    def last_open_dir(self) -> str:
        return self._qs.value("files/last_open_dir", user_documents_dir())

    @last_open_dir.setter
    def last_open_dir(self, value: str) -> None:
        self._qs.setValue("files/last_open_dir", value)

    # ------------------------------------------------------------------
    # Window
    # ------------------------------------------------------------------

    @property
    def window_geometry(self) -> bytes | None:
        val = self._qs.value("window/geometry")
        return bytes(val) if val else None

    @window_geometry.setter
    def window_geometry(self, value: bytes) -> None:
        self._qs.setValue("window/geometry", value)

    @property
    def dark_mode(self) -> bool:
        return self._qs.value("ui/dark_mode", False, type=bool)

    @dark_mode.setter
    def dark_mode(self, value: bool) -> None:
        self._qs.setValue("ui/dark_mode", value)

    def sync(self) -> None:
        self._qs.sync()
