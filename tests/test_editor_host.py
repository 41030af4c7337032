"""Tests for the Qt editor host, run on the offscreen platform."""

from unittest.mock import MagicMock

import pytest

QtWidgets = pytest.importorskip("PyQt6.QtWidgets")
from PyQt6 import QtCore, QtGui  # noqa: E402

from app.editor import DocumentEdit, QtEditorHost, _OffsetMap  # noqa: E402
from core.highlight import PREVIEW_STYLE, rule_style  # noqa: E402
from core.scanner import MatchSpan  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


@pytest.fixture
def qt_host(qapp):
    edit = DocumentEdit()
    edit.setPlainText("banana bandana")
    return QtEditorHost(edit)


class TestOffsetMap:
    def test_ascii_is_identity(self):
        offsets = _OffsetMap("hello")
        assert offsets.to_qt(3) == 3
        assert offsets.from_qt(3) == 3

    def test_astral_characters_take_two_units(self):
        offsets = _OffsetMap("a\U0001F600b")
        assert offsets.to_qt(2) == 3
        assert offsets.from_qt(3) == 2
        assert offsets.to_qt(1) == 1


class TestQtEditorHost:
    def test_reads_document(self, qt_host):
        assert qt_host.has_document()
        assert qt_host.get_document_length() == 14
        assert qt_host.get_document_text_window(7, 10) == "ban"

    def test_disabled_host_has_no_document(self, qt_host):
        qt_host.set_enabled(False)
        assert not qt_host.has_document()

    def test_render_and_dispose(self, qt_host):
        spans = [MatchSpan(1, 3, "an", 0), MatchSpan(5, 5, "", 0)]
        qt_host.render_decorations(rule_style(0), spans)
        qt_host.render_decorations(PREVIEW_STYLE, [MatchSpan(0, 1, "b", "preview")])
        assert qt_host.decoration_count("rule-0") == 1
        assert qt_host.decoration_count() == 2
        assert len(qt_host.edit.extraSelections()) == 2
        qt_host.dispose_style("rule-0")
        assert qt_host.decoration_count() == 1

    def test_edit_notifies_listeners(self, qt_host):
        callback = MagicMock()
        unsubscribe = qt_host.on_document_changed(callback)
        qt_host.write_document("apple")
        assert qt_host.get_document_text() == "apple"
        assert callback.called
        unsubscribe()
        callback.reset_mock()
        qt_host.edit.setPlainText("pear")
        callback.assert_not_called()

    def test_viewport_resize_notifies_listeners(self, qt_host):
        callback = MagicMock()
        qt_host.on_visible_range_changed(callback)
        event = QtGui.QResizeEvent(QtCore.QSize(400, 300), QtCore.QSize(200, 100))
        QtWidgets.QApplication.sendEvent(qt_host.edit.viewport(), event)
        assert callback.called

    def test_notify_emits_signal(self, qt_host):
        received = []
        qt_host.signals.notice.connect(lambda kind, msg: received.append((kind, msg)))
        qt_host.notify("info", "done")
        assert received == [("info", "done")]
