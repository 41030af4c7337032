"""Plain-text editor pane and its :class:`EditorHost` adapter."""

import bisect
import logging
from collections.abc import Callable, Sequence

from PyQt6.QtCore import QEvent, QObject, QPoint, pyqtSignal
from PyQt6.QtGui import QColor, QFont, QTextCharFormat, QTextCursor
from PyQt6.QtWidgets import QPlainTextEdit, QTextEdit

from core.host import EditorHost
from core.scanner import PREVIEW

logger = logging.getLogger(__name__)


class DocumentEdit(QPlainTextEdit):
    """The editing surface.  Monospace, no wrapping, placeholder text."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setFont(QFont("Monospace", 11))
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        self.setPlaceholderText("Open a file or paste text, then add rules on the right...")


class _OffsetMap:
    """Converts between Python string indices and Qt (UTF-16) positions.

    Characters outside the BMP take two UTF-16 units in QTextDocument but one
    index in a Python str; everything else lines up.
    """

    def __init__(self, text: str) -> None:
        self._astral = [] if text.isascii() else [
            i for i, ch in enumerate(text) if ord(ch) > 0xFFFF
        ]

    def to_qt(self, index: int) -> int:
        return index + bisect.bisect_left(self._astral, index)

    def from_qt(self, pos: int) -> int:
        # k-th astral char sits at Qt position astral[k] + k
        lo, hi = 0, len(self._astral)
        while lo < hi:
            mid = (lo + hi) // 2
            if self._astral[mid] + mid < pos:
                lo = mid + 1
            else:
                hi = mid
        return pos - lo


class QtEditorHost(EditorHost):
    """Exposes a :class:`QPlainTextEdit` to the core as an :class:`EditorHost`.

    Decorations are drawn as extra selections, one list per style; the
    preview style is drawn last so it stays on top.  Notices are re-emitted
    through ``signals.notice`` for the window to display.
    """

    class Signals(QObject):
        notice = pyqtSignal(str, str)   # (kind, message)
        viewport_resized = pyqtSignal()

        def eventFilter(self, obj, event) -> bool:
            if event.type() == QEvent.Type.Resize:
                self.viewport_resized.emit()
            return super().eventFilter(obj, event)

    def __init__(self, edit: QPlainTextEdit) -> None:
        self._edit = edit
        self.signals = self.Signals()
        self._selections: dict[str, list[QTextEdit.ExtraSelection]] = {}
        self._doc_callbacks: list[Callable[[], None]] = []
        self._view_callbacks: list[Callable[[], None]] = []
        self._offsets: _OffsetMap | None = None
        self._enabled = True

        edit.textChanged.connect(self._on_text_changed)
        edit.verticalScrollBar().valueChanged.connect(self._on_view_changed)
        edit.horizontalScrollBar().valueChanged.connect(self._on_view_changed)
        edit.viewport().installEventFilter(self.signals)
        self.signals.viewport_resized.connect(self._on_view_changed)

    @property
    def edit(self) -> QPlainTextEdit:
        return self._edit

    def set_enabled(self, enabled: bool) -> None:
        """With the host disabled, ``has_document()`` is False."""
        self._enabled = enabled

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def has_document(self) -> bool:
        return self._enabled

    def get_document_text(self) -> str:
        return self._edit.toPlainText()

    def get_document_text_window(self, start: int, end: int) -> str:
        return self.get_document_text()[start:end]

    def get_document_length(self) -> int:
        return len(self.get_document_text())

    def get_visible_ranges(self) -> list[tuple[int, int]]:
        viewport = self._edit.viewport()
        first = self._edit.cursorForPosition(QPoint(0, 0)).position()
        last = self._edit.cursorForPosition(
            QPoint(viewport.width() - 1, viewport.height() - 1)
        ).position()
        offsets = self._offset_map()
        return [(offsets.from_qt(first), offsets.from_qt(last))]

    def on_document_changed(self, callback: Callable[[], None]) -> Callable[[], None]:
        return self._add_callback(self._doc_callbacks, callback)

    def on_visible_range_changed(self, callback: Callable[[], None]) -> Callable[[], None]:
        return self._add_callback(self._view_callbacks, callback)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def render_decorations(self, style, spans: Sequence) -> None:
        fmt = QTextCharFormat()
        fmt.setBackground(QColor(*style.background))
        if style.border_style == "dashed":
            fmt.setUnderlineStyle(QTextCharFormat.UnderlineStyle.DashUnderline)
            fmt.setUnderlineColor(QColor(*style.border))

        offsets = self._offset_map()
        document = self._edit.document()
        selections = []
        for span in spans:
            if span.start == span.end:
                continue
            cursor = QTextCursor(document)
            cursor.setPosition(offsets.to_qt(span.start))
            cursor.setPosition(offsets.to_qt(span.end), QTextCursor.MoveMode.KeepAnchor)
            sel = QTextEdit.ExtraSelection()
            sel.cursor = cursor
            sel.format = fmt
            selections.append(sel)
        self._selections[style.style_id] = selections
        self._apply_selections()

    def dispose_style(self, style_id: str) -> None:
        if self._selections.pop(style_id, None) is not None:
            self._apply_selections()

    def notify(self, kind: str, message: str) -> None:
        logger.info("[%s] %s", kind, message)
        self.signals.notice.emit(kind, message)

    def write_document(self, text: str) -> None:
        cursor = QTextCursor(self._edit.document())
        cursor.beginEditBlock()
        cursor.select(QTextCursor.SelectionType.Document)
        cursor.insertText(text)
        cursor.endEditBlock()

    def decoration_count(self, style_id: str | None = None) -> int:
        if style_id is not None:
            return len(self._selections.get(style_id, []))
        return sum(len(v) for v in self._selections.values())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _offset_map(self) -> _OffsetMap:
        if self._offsets is None:
            self._offsets = _OffsetMap(self.get_document_text())
        return self._offsets

    def _apply_selections(self) -> None:
        ordered = [v for k, v in self._selections.items() if k != PREVIEW]
        ordered.append(self._selections.get(PREVIEW, []))
        self._edit.setExtraSelections([s for group in ordered for s in group])

    @staticmethod
    def _add_callback(bucket: list, callback: Callable[[], None]) -> Callable[[], None]:
        bucket.append(callback)

        def _remove() -> None:
            if callback in bucket:
                bucket.remove(callback)

        return _remove

    def _on_text_changed(self) -> None:
        self._offsets = None
        for callback in list(self._doc_callbacks):
            callback()

    def _on_view_changed(self, _value: int = 0) -> None:
        for callback in list(self._view_callbacks):
            callback()
