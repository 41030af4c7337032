"""Shared fakes: a manual-clock scheduler and an in-memory editor host."""

import os

import pytest

from core.host import EditorHost
from core.scheduler import Scheduler, TimerHandle

# Qt tests (if any run) must not need a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class _FakeHandle(TimerHandle):
    def __init__(self, clock, due, callback) -> None:
        self.clock = clock
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler(Scheduler):
    """Timers only fire when the test calls :meth:`advance`."""

    def __init__(self) -> None:
        self.now = 0
        self.handles: list[_FakeHandle] = []

    def call_later(self, delay_ms, callback):
        handle = _FakeHandle(self, self.now + delay_ms, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[_FakeHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, ms: int) -> None:
        self.now += ms
        due = sorted((h for h in self.pending if h.due <= self.now), key=lambda h: h.due)
        for h in due:
            self.handles.remove(h)
            h.callback()


class FakeHost(EditorHost):
    def __init__(self, text: str = "", visible=None, has_document: bool = True) -> None:
        self.text = text
        self.visible = visible if visible is not None else [(0, len(text))]
        self.document = has_document
        self.rendered: dict[str, list] = {}
        self.render_calls: list[str] = []
        self.disposed: list[str] = []
        self.notices: list[tuple[str, str]] = []
        self.writes: list[str] = []
        self.doc_callbacks: list = []
        self.view_callbacks: list = []

    def has_document(self):
        return self.document

    def get_document_text(self):
        return self.text

    def get_document_text_window(self, start, end):
        return self.text[start:end]

    def get_document_length(self):
        return len(self.text)

    def get_visible_ranges(self):
        return list(self.visible)

    def on_document_changed(self, callback):
        self.doc_callbacks.append(callback)
        return lambda: self.doc_callbacks.remove(callback)

    def on_visible_range_changed(self, callback):
        self.view_callbacks.append(callback)
        return lambda: self.view_callbacks.remove(callback)

    def render_decorations(self, style, spans):
        self.rendered[style.style_id] = list(spans)
        self.render_calls.append(style.style_id)

    def dispose_style(self, style_id):
        self.rendered.pop(style_id, None)
        self.disposed.append(style_id)

    def notify(self, kind, message):
        self.notices.append((kind, message))

    def write_document(self, text):
        self.writes.append(text)
        self.text = text

    # test helpers
    def edit(self, text: str) -> None:
        self.text = text
        for cb in list(self.doc_callbacks):
            cb()

    def scroll(self, start: int, end: int) -> None:
        self.visible = [(start, end)]
        for cb in list(self.view_callbacks):
            cb()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def host():
    return FakeHost("banana bandana")


@pytest.fixture
def make_host():
    return FakeHost
