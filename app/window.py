"""Main application window for Batch Regex Replace."""

import logging
from pathlib import Path

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QSplitter,
)

from app.editor import DocumentEdit, QtEditorHost
from app.qt_scheduler import QtScheduler
from app.rules_panel import RulesPanel
from app.theme import apply_theme
from config.settings import AppSettings
from core.file_handler import FileHandlerError, read_document, write_document
from core.host import ERROR
from core.rulebook import RULES_CHANGED, RuleBook
from core.session import DocumentSession

logger = logging.getLogger(__name__)

_FILE_FILTER = "Documents (*.txt *.md *.docx);;All files (*)"


class MainWindow(QMainWindow):
    """Editor on the left, rule panel on the right.

    One :class:`DocumentSession` is live at a time; opening or creating a
    document tears the old one down and starts a fresh one.
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        super().__init__()
        self._settings = settings or AppSettings()
        self._path: Path | None = None
        self._book = RuleBook(self._settings.rules)
        self._book.subscribe(self._on_rules_changed)
        self._scheduler = QtScheduler(self)
        self._session: DocumentSession | None = None

        self._build_ui()
        self._build_menu()

        self._host = QtEditorHost(self._edit)
        self._host.signals.notice.connect(self._show_notice)
        self._start_session()

        geometry = self._settings.window_geometry
        if geometry:
            self.restoreGeometry(geometry)
        else:
            self.resize(1200, 800)
        self._update_title()
        self.statusBar().showMessage("Ready")

    # ------------------------------------------------------------------
    # Build UI
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        splitter = QSplitter(Qt.Orientation.Horizontal)
        self._edit = DocumentEdit()
        splitter.addWidget(self._edit)

        self._panel = RulesPanel(self._book, self._settings.preview_debounce_ms)
        self._panel.execute_requested.connect(self._apply_rules)
        splitter.addWidget(self._panel)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

    def _build_menu(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        self._add_action(file_menu, "&New", self._new_document, QKeySequence.StandardKey.New)
        self._add_action(file_menu, "&Open…", self._open_document, QKeySequence.StandardKey.Open)
        self._add_action(file_menu, "&Save", self._save_document, QKeySequence.StandardKey.Save)
        self._add_action(file_menu, "Save &As…", self._save_document_as, QKeySequence.StandardKey.SaveAs)
        file_menu.addSeparator()
        self._add_action(file_menu, "&Quit", self.close, QKeySequence.StandardKey.Quit)

        rules_menu = self.menuBar().addMenu("&Rules")
        self._add_action(rules_menu, "&Apply rules to document", self._apply_rules, QKeySequence("Ctrl+Shift+H"))
        self._add_action(rules_menu, "&Refresh highlights", self._refresh_highlights, QKeySequence("F5"))

        view_menu = self.menuBar().addMenu("&View")
        dark_act = QAction("&Dark mode", self)
        dark_act.setCheckable(True)
        dark_act.setChecked(self._settings.dark_mode)
        dark_act.toggled.connect(self._toggle_dark_mode)
        view_menu.addAction(dark_act)

    def _add_action(self, menu, text: str, slot, shortcut=None) -> QAction:
        act = QAction(text, self)
        if shortcut is not None:
            act.setShortcut(shortcut)
        act.triggered.connect(slot)
        menu.addAction(act)
        return act

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def _start_session(self) -> None:
        if self._session is not None:
            self._session.detach()
        self._session = DocumentSession(
            self._host,
            self._book,
            self._scheduler,
            config=self._settings.highlight_config(),
            throttle_ms=self._settings.throttle_ms,
        )
        self._session.attach()

    def _refresh_highlights(self) -> None:
        if self._session is not None:
            self._session.recompute_highlights()

    def _apply_rules(self) -> None:
        if self._session is None:
            return
        applied = self._session.apply_batch_replace()
        logger.debug("Apply rules finished: %d applied", applied)

    def _on_rules_changed(self, kind: str) -> None:
        if kind == RULES_CHANGED:
            self._settings.rules = list(self._book.get_rule_snapshot())

    def _show_notice(self, kind: str, message: str) -> None:
        if kind == ERROR:
            QMessageBox.critical(self, "Batch Replace", message)
        else:
            self.statusBar().showMessage(message, 5000)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def _new_document(self) -> None:
        self._path = None
        self._edit.clear()
        self._start_session()
        self._update_title()

    def _open_document(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Document", self._settings.last_open_dir, _FILE_FILTER
        )
        if not path:
            return
        try:
            text = read_document(Path(path))
        except FileHandlerError as exc:
            QMessageBox.critical(self, "File Error", str(exc))
            return
        self._path = Path(path)
        self._settings.last_open_dir = str(self._path.parent)
        self._edit.setPlainText(text)
        self._start_session()
        self._update_title()
        self.statusBar().showMessage(f"Opened: {path}")
        logger.info("Opened %s (%d chars)", path, len(text))

    def _save_document(self) -> None:
        if self._path is None:
            self._save_document_as()
            return
        self._write(self._path)

    def _save_document_as(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self, "Save Document", self._settings.last_open_dir, _FILE_FILTER
        )
        if not path:
            return
        self._path = Path(path)
        self._settings.last_open_dir = str(self._path.parent)
        self._write(self._path)
        self._update_title()

    def _write(self, path: Path) -> None:
        try:
            write_document(self._edit.toPlainText(), path)
        except FileHandlerError as exc:
            QMessageBox.critical(self, "Save Error", str(exc))
            return
        self.statusBar().showMessage(f"Saved: {path}")

    def _update_title(self) -> None:
        name = self._path.name if self._path else "Untitled"
        self.setWindowTitle(f"{name} — Batch Regex Replace")

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    def _toggle_dark_mode(self, enabled: bool) -> None:
        self._settings.dark_mode = enabled
        apply_theme(QApplication.instance(), enabled)

    def closeEvent(self, event) -> None:
        if self._session is not None:
            self._session.detach()
            self._session = None
        self._settings.window_geometry = self.saveGeometry()
        self._settings.sync()
        super().closeEvent(event)
