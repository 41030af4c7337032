"""Document open/save for the editor.

Reads .txt, .md and .docx files as plain text; writes the same formats.
A .docx is flattened to one paragraph per line on save.
"""

import logging
from pathlib import Path

from docx import Document

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".md"}
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | {".docx"}


class FileHandlerError(Exception):
    """Raised when a file cannot be read or written."""


# ------------------------------------------------------------------
# Reading
# ------------------------------------------------------------------

def read_document(path: Path) -> str:
    """Read a document and return its contents as plain text.

    Args:
        path: Path to a .txt, .md or .docx file.

    Returns:
        The document text.

    Raises:
        FileHandlerError: If the file is missing, unsupported or unreadable.
    """
    path = Path(path)
    if not path.exists():
        raise FileHandlerError(f"File not found: {path}")

    ext = path.suffix.lower()
    if ext in TEXT_EXTENSIONS:
        return _read_text(path)
    if ext == ".docx":
        return _read_docx(path)
    raise FileHandlerError(
        f"Unsupported file type: '{ext}'. "
        f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
    )


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        # Fallback for files with non-UTF-8 encoding
        return path.read_text(encoding="latin-1")
    except OSError as exc:
        raise FileHandlerError(f"Cannot read {path.name}: {exc}") from exc


def _read_docx(path: Path) -> str:
    try:
        doc = Document(str(path))
    except Exception as exc:
        raise FileHandlerError(f"Cannot read .docx file: {exc}") from exc
    return "\n".join(para.text for para in doc.paragraphs)


# ------------------------------------------------------------------
# Writing
# ------------------------------------------------------------------

def write_document(text: str, path: Path) -> None:
    """Write *text* to *path*, choosing the format by extension.

    Unknown extensions are written as UTF-8 text.

    Raises:
        FileHandlerError: If the file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix.lower() == ".docx":
            doc = Document()
            for line in text.split("\n"):
                doc.add_paragraph(line)
            doc.save(str(path))
        else:
            path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise FileHandlerError(f"Cannot write {path.name}: {exc}") from exc
    logger.info("Wrote document: %s", path)
