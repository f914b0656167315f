"""Tests for extraction.py: PyMuPDF mocked, plain text read from disk."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

from fr_rag.extraction import extract_pdf_text, extract_text


def _fake_document(pages: list[str]) -> MagicMock:
    document = MagicMock()
    document.__enter__.return_value = document
    document.__iter__.return_value = iter([MagicMock(**{"get_text.return_value": text}) for text in pages])
    return document


class TestExtractPdfText:
    @patch("fr_rag.extraction.fitz")
    def test_joins_pages_with_blank_line(self, mock_fitz):
        mock_fitz.open.return_value = _fake_document(["Página um", "Página dois"])
        assert extract_pdf_text("fr.pdf") == "Página um\n\nPágina dois"
        mock_fitz.open.assert_called_once_with("fr.pdf")

    @patch("fr_rag.extraction.fitz")
    def test_empty_pdf(self, mock_fitz):
        mock_fitz.open.return_value = _fake_document([])
        assert extract_pdf_text("vazio.pdf") == ""


class TestExtractText:
    @patch("fr_rag.extraction.fitz")
    def test_pdf_suffix_uses_pymupdf(self, mock_fitz, tmp_path):
        mock_fitz.open.return_value = _fake_document(["conteúdo"])
        assert extract_text(tmp_path / "FR.PDF") == "conteúdo"

    def test_text_file_read_directly(self, tmp_path):
        path = tmp_path / "fr.txt"
        path.write_text("Nome: Fulano", encoding="utf-8")
        assert extract_text(path) == "Nome: Fulano"
