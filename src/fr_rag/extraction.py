from __future__ import annotations

from pathlib import Path

import fitz  # PyMuPDF

from .io_utils import read_document_text


def extract_pdf_text(pdf_path: str | Path) -> str:
    """Extract plain text from every page of a PDF, pages separated by blank lines."""
    with fitz.open(pdf_path) as document:
        pages = [page.get_text("text") for page in document]
    return "\n\n".join(pages)


def extract_text(path: str | Path) -> str:
    """Return document text from a `.pdf` (via PyMuPDF) or a plain-text file."""
    source = Path(path)
    if source.suffix.lower() == ".pdf":
        return extract_pdf_text(source)
    return read_document_text(source)
