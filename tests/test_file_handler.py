"""Tests for core.file_handler."""

import pytest
from docx import Document

from core.file_handler import FileHandlerError, read_document, write_document


class TestReadDocument:
    def test_read_txt(self, tmp_path):
        f = tmp_path / "sample.txt"
        f.write_text("Hello, world!", encoding="utf-8")
        assert read_document(f) == "Hello, world!"

    def test_read_md(self, tmp_path):
        f = tmp_path / "sample.md"
        content = "# Title\n\nParagraph."
        f.write_text(content, encoding="utf-8")
        assert read_document(f) == content

    def test_latin1_fallback(self, tmp_path):
        f = tmp_path / "legacy.txt"
        f.write_bytes("café".encode("latin-1"))
        assert read_document(f) == "café"

    def test_read_docx(self, tmp_path):
        f = tmp_path / "sample.docx"
        doc = Document()
        doc.add_paragraph("First")
        doc.add_paragraph("Second")
        doc.save(str(f))
        assert read_document(f) == "First\nSecond"

    def test_unsupported_extension(self, tmp_path):
        f = tmp_path / "sample.pdf"
        f.write_text("data")
        with pytest.raises(FileHandlerError, match="Unsupported file type"):
            read_document(f)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileHandlerError, match="File not found"):
            read_document(tmp_path / "nonexistent.txt")

    def test_corrupt_docx(self, tmp_path):
        f = tmp_path / "broken.docx"
        f.write_text("not a zip")
        with pytest.raises(FileHandlerError, match="Cannot read .docx"):
            read_document(f)


class TestWriteDocument:
    def test_writes_utf8(self, tmp_path):
        out = tmp_path / "out.md"
        write_document("# Héllo\n\nWorld.", out)
        assert out.read_text(encoding="utf-8") == "# Héllo\n\nWorld."

    def test_creates_parent_dirs(self, tmp_path):
        out = tmp_path / "a" / "b" / "out.txt"
        write_document("x", out)
        assert out.exists()

    def test_docx_one_paragraph_per_line(self, tmp_path):
        out = tmp_path / "out.docx"
        write_document("one\ntwo", out)
        paragraphs = [p.text for p in Document(str(out)).paragraphs]
        assert paragraphs[-2:] == ["one", "two"]

    def test_unwritable_path(self, tmp_path):
        target = tmp_path / "dir.txt"
        target.mkdir()
        with pytest.raises(FileHandlerError, match="Cannot write"):
            write_document("x", target)
