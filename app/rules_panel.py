"""Rule list panel: compose, edit, reorder, enable and search rules."""

import logging

from PyQt6.QtCore import QPoint, Qt, QTimer, pyqtSignal
from PyQt6.QtGui import QAction, QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMenu,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.patterns import GLOBAL_FLAG, InvalidPatternError, validate_pattern
from core.rulebook import PREVIEW_CHANGED, RuleBook
from core.rules import describe_rule, filter_rules, parse_rule_input

logger = logging.getLogger(__name__)


class _RuleList(QListWidget):
    """QListWidget whose drag-and-drop reports (from_row, to_row) instead of moving items.

    The rule book owns the order; the list is rebuilt from it afterwards.
    """

    rule_dropped = pyqtSignal(int, int)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.setDragDropMode(QAbstractItemView.DragDropMode.InternalMove)
        self.setDefaultDropAction(Qt.DropAction.MoveAction)

    def dropEvent(self, event) -> None:
        src = self.currentRow()
        target = self.itemAt(event.position().toPoint())
        dst = self.row(target) if target is not None else self.count() - 1
        event.setDropAction(Qt.DropAction.IgnoreAction)
        event.accept()
        if src >= 0 and dst >= 0 and src != dst:
            self.rule_dropped.emit(src, dst)


class RulesPanel(QWidget):
    """Side panel bound to a :class:`RuleBook`.

    Typing in the find box previews the pattern after a short debounce;
    ``/pattern/flags`` input sets flags.  Double-click a rule to edit it,
    right-click for more actions, drag to reorder.

    Signals:
        execute_requested: The user asked to apply the rules to the document.
    """

    execute_requested = pyqtSignal()

    def __init__(self, rulebook: RuleBook, preview_debounce_ms: int = 150, parent=None) -> None:
        super().__init__(parent)
        self._book = rulebook
        self._editing = -1
        self._build_ui()

        self._preview_timer = QTimer(self)
        self._preview_timer.setSingleShot(True)
        self._preview_timer.setInterval(preview_debounce_ms)
        self._preview_timer.timeout.connect(self._send_preview)

        self._unsubscribe = self._book.subscribe(self._on_book_changed)
        self._refresh()

    # ------------------------------------------------------------------
    # Build UI
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)

        self._find_input = QLineEdit()
        self._find_input.setPlaceholderText("Find  (regex, or /regex/flags)")
        self._find_input.textChanged.connect(self._on_find_text_changed)
        self._find_input.returnPressed.connect(self._on_commit)
        layout.addWidget(self._find_input)

        self._replace_input = QLineEdit()
        self._replace_input.setPlaceholderText("Replace  ($1, $&, $<name>)")
        self._replace_input.returnPressed.connect(self._on_commit)
        layout.addWidget(self._replace_input)

        btn_row = QWidget()
        bl = QHBoxLayout(btn_row)
        bl.setContentsMargins(0, 0, 0, 0)
        self._commit_btn = QPushButton("Add rule")
        self._commit_btn.clicked.connect(self._on_commit)
        bl.addWidget(self._commit_btn)
        self._cancel_btn = QPushButton("Cancel")
        self._cancel_btn.clicked.connect(self._exit_edit_mode)
        self._cancel_btn.hide()
        bl.addWidget(self._cancel_btn)
        bl.addStretch()
        layout.addWidget(btn_row)

        self._message_label = QLabel("")
        self._message_label.setWordWrap(True)
        self._message_label.setStyleSheet("color: #d9534f; font-size: 11px;")
        layout.addWidget(self._message_label)

        execute_btn = QPushButton("Apply rules to document")
        execute_btn.setToolTip("Run every enabled rule, top to bottom  (Ctrl+Shift+H)")
        execute_btn.clicked.connect(self.execute_requested)
        layout.addWidget(execute_btn)

        self._search_input = QLineEdit()
        self._search_input.setPlaceholderText("Search rules (find / replace / flags)")
        self._search_input.setClearButtonEnabled(True)
        self._search_input.textChanged.connect(self._apply_filter)
        layout.addWidget(self._search_input)

        self._list = _RuleList()
        self._list.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self._list.customContextMenuRequested.connect(self._show_context_menu)
        self._list.itemDoubleClicked.connect(lambda item: self._enter_edit_mode(self._list.row(item)))
        self._list.itemChanged.connect(self._on_item_changed)
        self._list.rule_dropped.connect(self._on_rule_dropped)
        layout.addWidget(self._list, stretch=1)

        self._empty_label = QLabel("No rules yet.")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty_label.setStyleSheet("color: gray;")
        layout.addWidget(self._empty_label)

        esc = QShortcut(QKeySequence("Escape"), self)
        esc.setContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
        esc.activated.connect(self._on_escape)

    # ------------------------------------------------------------------
    # Rule list
    # ------------------------------------------------------------------

    def _refresh(self) -> None:
        self._list.blockSignals(True)
        self._list.clear()
        for rule in self._book.get_rule_snapshot():
            item = QListWidgetItem(describe_rule(rule))
            item.setToolTip(f"Find: /{rule.find}/{rule.flags}\nReplace: '{rule.replace}'")
            item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable | Qt.ItemFlag.ItemIsDragEnabled)
            item.setCheckState(Qt.CheckState.Checked if rule.enabled else Qt.CheckState.Unchecked)
            self._list.addItem(item)
        self._list.blockSignals(False)
        self._empty_label.setVisible(len(self._book) == 0)
        self._apply_filter()

    def _apply_filter(self) -> None:
        visible = set(filter_rules(self._book.get_rule_snapshot(), self._search_input.text()))
        for row in range(self._list.count()):
            self._list.item(row).setHidden(row not in visible)

    def _on_book_changed(self, kind: str) -> None:
        if kind != PREVIEW_CHANGED:
            self._refresh()

    def _on_item_changed(self, item: QListWidgetItem) -> None:
        row = self._list.row(item)
        enabled = item.checkState() == Qt.CheckState.Checked
        QTimer.singleShot(0, lambda: self._book.set_enabled(row, enabled))

    def _show_context_menu(self, pos: QPoint) -> None:
        item = self._list.itemAt(pos)
        if item is None:
            return
        row = self._list.row(item)
        rule = self._book[row]
        menu = QMenu(self)

        edit_act = QAction("Edit", menu)
        edit_act.triggered.connect(lambda: self._enter_edit_mode(row))
        menu.addAction(edit_act)

        dup_act = QAction("Duplicate", menu)
        dup_act.triggered.connect(lambda: self._reorder(self._book.duplicate_rule, row))
        menu.addAction(dup_act)

        toggle_act = QAction("Disable" if rule.enabled else "Enable", menu)
        toggle_act.triggered.connect(lambda: self._book.set_enabled(row, not rule.enabled))
        menu.addAction(toggle_act)

        menu.addSeparator()
        up_act = QAction("Move up", menu)
        up_act.setEnabled(row > 0)
        up_act.triggered.connect(lambda: self._reorder(self._book.move_up, row))
        menu.addAction(up_act)

        down_act = QAction("Move down", menu)
        down_act.setEnabled(row < len(self._book) - 1)
        down_act.triggered.connect(lambda: self._reorder(self._book.move_down, row))
        menu.addAction(down_act)

        menu.addSeparator()
        del_act = QAction("Delete", menu)
        del_act.triggered.connect(lambda: self._reorder(self._book.delete_rule, row))
        menu.addAction(del_act)

        menu.exec(self._list.mapToGlobal(pos))

    def _reorder(self, action, *args) -> None:
        # Row numbers shift, so an edit in progress would target the wrong rule
        if self._editing >= 0:
            self._exit_edit_mode()
        action(*args)

    def _on_rule_dropped(self, src: int, dst: int) -> None:
        # Rebuilding the list inside dropEvent would delete the items being dropped
        QTimer.singleShot(0, lambda: self._reorder(self._book.move_rule, src, dst))

    # ------------------------------------------------------------------
    # Compose / edit
    # ------------------------------------------------------------------

    def _enter_edit_mode(self, row: int) -> None:
        if not 0 <= row < len(self._book):
            return
        rule = self._book[row]
        self._editing = row
        self._find_input.setText(rule.find if rule.flags == GLOBAL_FLAG else f"/{rule.find}/{rule.flags}")
        self._replace_input.setText(rule.replace)
        self._commit_btn.setText("Update rule")
        self._cancel_btn.show()
        self._find_input.setFocus()
        self._preview_timer.stop()
        self._send_preview()

    def _exit_edit_mode(self) -> None:
        self._editing = -1
        self._preview_timer.stop()
        self._find_input.blockSignals(True)
        self._find_input.clear()
        self._find_input.blockSignals(False)
        self._replace_input.clear()
        self._message_label.clear()
        self._commit_btn.setText("Add rule")
        self._cancel_btn.hide()
        self._book.clear_preview()

    def _on_escape(self) -> None:
        if self._editing >= 0:
            self._exit_edit_mode()

    def _on_commit(self) -> None:
        raw = self._find_input.text().strip()
        if not raw:
            return
        pattern, flags = parse_rule_input(raw)
        replacement = self._replace_input.text()
        try:
            if self._editing >= 0:
                self._book.save_rule(self._editing, pattern, replacement, flags)
            else:
                self._book.add_rule(pattern, replacement, flags)
        except InvalidPatternError as exc:
            self._message_label.setText(f"Error: {exc.reason}")
            return
        self._exit_edit_mode()

    def _on_find_text_changed(self, text: str) -> None:
        if not text.strip():
            self._preview_timer.stop()
            self._message_label.clear()
            self._book.clear_preview()
            return
        self._preview_timer.start()

    def _send_preview(self) -> None:
        pattern, flags = parse_rule_input(self._find_input.text())
        reason = validate_pattern(pattern, flags)
        self._message_label.setText(f"Preview error: {reason}" if reason else "")
        self._book.set_preview(pattern, flags)

    def closeEvent(self, event) -> None:
        self._unsubscribe()
        super().closeEvent(event)
