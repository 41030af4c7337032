"""Per-document highlighting and batch-replace session.

A :class:`DocumentSession` is created when an editor gets a document and
torn down when it goes away.  It owns everything that used to be ambient
state in an editor extension: the pending recompute timer, the style table,
the set of styles currently drawn and the last preview notice.
"""

import logging

from core.highlight import HighlightConfig, HighlightEngine, HighlightResult
from core.host import ERROR, INFO, WARNING, EditorHost, Notice, RuleSource
from core.patterns import InvalidPatternError
from core.replacer import ReplaceOutcome, apply_rules
from core.scheduler import RecomputeDispatcher, Scheduler

logger = logging.getLogger(__name__)

DEFAULT_THROTTLE_MS = 3000


class BatchReplaceError(Exception):
    """Raised when a batch replace cannot run."""


class NoActiveDocumentError(BatchReplaceError):
    """Raised when there is no document to operate on."""


class EmptyRuleSetError(BatchReplaceError):
    """Raised when no enabled rule has a pattern to apply."""


class DocumentSession:
    """Binds one :class:`EditorHost` to a rule source and the engines.

    Content edits schedule a throttled recompute; viewport, rule and preview
    changes recompute immediately.  Call :meth:`attach` to start and
    :meth:`detach` to release every timer, subscription and style.
    """

    def __init__(
        self,
        host: EditorHost,
        rule_source: RuleSource,
        scheduler: Scheduler,
        config: HighlightConfig | None = None,
        throttle_ms: int = DEFAULT_THROTTLE_MS,
    ) -> None:
        self._host = host
        self._rules = rule_source
        self._engine = HighlightEngine(config)
        self._dispatcher = RecomputeDispatcher(scheduler, throttle_ms, self.recompute_highlights)
        self._unsubscribers: list = []
        self._rendered: set[str] = set()
        self._last_preview_notice: tuple | None = None
        self._attached = False
        self.last_result: HighlightResult | None = None

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def recompute_pending(self) -> bool:
        return self._dispatcher.pending

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def attach(self) -> None:
        if self._attached:
            return
        self._attached = True
        self._unsubscribers = [
            self._host.on_document_changed(self.on_document_changed),
            self._host.on_visible_range_changed(self.on_visible_range_changed),
        ]
        subscribe = getattr(self._rules, "subscribe", None)
        if subscribe is not None:
            self._unsubscribers.append(subscribe(self.on_rules_changed))
        logger.debug("Session attached")
        self._dispatcher.request()

    def detach(self) -> None:
        if not self._attached:
            return
        self._attached = False
        self._dispatcher.cancel()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        for style_id in sorted(self._rendered):
            self._host.dispose_style(style_id)
        self._rendered.clear()
        self._engine.dispose_all()
        logger.debug("Session detached")

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def on_document_changed(self) -> None:
        self._dispatcher.request(throttled=True)

    def on_visible_range_changed(self) -> None:
        self._dispatcher.request()

    def on_rules_changed(self, _kind: str = "") -> None:
        self._dispatcher.request()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def recompute_highlights(self) -> HighlightResult | None:
        """Run one full highlight pass and push it to the host."""
        if not self._host.has_document():
            return None
        result = self._engine.recompute(
            self._host,
            self._rules.get_rule_snapshot(),
            self._rules.get_preview_pattern(),
            self._host.get_visible_ranges(),
        )
        for style_id in result.disposed:
            self._host.dispose_style(style_id)
            self._rendered.discard(style_id)
        for style_id, spans in result.spans.items():
            if not spans and style_id not in self._rendered:
                continue
            self._host.render_decorations(result.styles[style_id], spans)
            self._rendered.add(style_id)
        self._report_preview(result)
        self.last_result = result
        return result

    def apply_batch_replace(self) -> int:
        """Apply the enabled rules to the document; returns rules applied.

        Every failure is reported through ``host.notify`` and leaves the
        document untouched; 0 is returned in that case.
        """
        try:
            outcome = self.run_batch_replace()
        except BatchReplaceError as exc:
            self._host.notify(WARNING, str(exc))
            return 0
        except InvalidPatternError as exc:
            logger.warning("Batch replace aborted: %s", exc)
            self._host.notify(ERROR, str(exc))
            return 0
        self._host.notify(
            INFO,
            f"Applied {outcome.applied_count} rule(s); "
            f"{outcome.total_replacements} replacement(s).",
        )
        return outcome.applied_count

    def run_batch_replace(self) -> ReplaceOutcome:
        """Apply the enabled rules and write the result back once.

        Raises:
            NoActiveDocumentError: If the host has no document.
            EmptyRuleSetError: If no enabled rule has a pattern.
            InvalidPatternError: If an enabled rule does not compile.
        """
        if not self._host.has_document():
            raise NoActiveDocumentError("No active document to replace in.")
        rules = self._rules.get_rule_snapshot()
        if not any(r.enabled and r.find for r in rules):
            raise EmptyRuleSetError("There are no rules to apply.")

        original = self._host.get_document_text()
        outcome = apply_rules(original, rules)
        if outcome.text != original:
            self._host.write_document(outcome.text)
        logger.info(
            "Batch replace: %d rule(s), %d replacement(s)",
            outcome.applied_count,
            outcome.total_replacements,
        )
        return outcome

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def _report_preview(self, result: HighlightResult) -> None:
        """Forward preview notices, skipping repeats for the same preview."""
        preview = self._rules.get_preview_pattern()
        key = (preview, tuple(result.notices))
        if key == self._last_preview_notice:
            return
        self._last_preview_notice = key
        for notice in result.notices:
            self._notify(notice)

    def _notify(self, notice: Notice) -> None:
        self._host.notify(notice.kind, notice.message)
