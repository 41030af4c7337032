"""Collaborator contracts between the core engines and a host editor.

The core only talks to an editor through :class:`EditorHost` and reads rules
through :class:`RuleSource`.  ``app/editor.py`` implements the former for a
``QPlainTextEdit``; :class:`core.rulebook.RuleBook` implements the latter.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass

INFO = "info"
WARNING = "warning"
ERROR = "error"

Unsubscribe = Callable[[], None]


class EditorHost(ABC):
    """An editor showing one document."""

    # ------------------------------------------------------------------
    # Inbound: document and viewport
    # ------------------------------------------------------------------

    @abstractmethod
    def has_document(self) -> bool:
        """True while there is a document to operate on."""

    @abstractmethod
    def get_document_text(self) -> str:
        """Full document text."""

    @abstractmethod
    def get_document_text_window(self, start: int, end: int) -> str:
        """Document text between two character offsets."""

    @abstractmethod
    def get_document_length(self) -> int:
        """Document length in characters."""

    @abstractmethod
    def get_visible_ranges(self) -> list[tuple[int, int]]:
        """Character-offset ranges currently on screen."""

    @abstractmethod
    def on_document_changed(self, callback: Callable[[], None]) -> Unsubscribe:
        """Call *callback* after every content edit."""

    @abstractmethod
    def on_visible_range_changed(self, callback: Callable[[], None]) -> Unsubscribe:
        """Call *callback* after scrolling or resizing."""

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    @abstractmethod
    def render_decorations(self, style, spans: Sequence) -> None:
        """Replace every decoration drawn with *style* by *spans*.

        Args:
            style: A :class:`core.highlight.HighlightStyle`.
            spans: :class:`core.scanner.MatchSpan` items, in document order.
        """

    @abstractmethod
    def dispose_style(self, style_id: str) -> None:
        """Release a style that will not be used again."""

    @abstractmethod
    def notify(self, kind: str, message: str) -> None:
        """Show a non-fatal notice; *kind* is INFO, WARNING or ERROR."""

    @abstractmethod
    def write_document(self, text: str) -> None:
        """Replace the whole document content in one undoable edit."""


class RuleSource(ABC):
    """Read-only view of the rule list and the live preview pattern."""

    @abstractmethod
    def get_rule_snapshot(self) -> tuple:
        """Ordered tuple of :class:`core.rules.ReplaceRule`."""

    @abstractmethod
    def get_preview_pattern(self):
        """The current :class:`core.rules.PreviewPattern`, or None."""


@dataclass(frozen=True)
class Notice:
    kind: str       # INFO | WARNING | ERROR
    message: str
