"""Unit tests for document type resolution and text extraction."""

from __future__ import annotations

import io

import docx
import fitz
import pytest

from yucabot.services.text_extractor import (
    DocumentTextExtractor,
    DocumentType,
    resolve_document_type,
)
from yucabot.utils.errors import UnsupportedDocumentError

_DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _pdf_bytes(text: str) -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def _docx_bytes(*paragraphs: str) -> bytes:
    document = docx.Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


class TestResolveDocumentType:
    @pytest.mark.parametrize(
        "mime,expected",
        [
            ("application/pdf", DocumentType.PDF),
            (_DOCX_MIME, DocumentType.DOCX),
            ("text/plain", DocumentType.TEXT),
            ("text/plain; charset=utf-8", DocumentType.TEXT),
            ("Application/PDF", DocumentType.PDF),
        ],
    )
    def test_mime_type(self, mime: str, expected: DocumentType) -> None:
        assert resolve_document_type(mime, None) is expected

    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("schedule.pdf", DocumentType.PDF),
            ("Prices.DOCX", DocumentType.DOCX),
            ("notes.txt", DocumentType.TEXT),
        ],
    )
    def test_extension_fallback(self, filename: str, expected: DocumentType) -> None:
        assert resolve_document_type("application/octet-stream", filename) is expected

    def test_mime_wins_over_extension(self) -> None:
        assert resolve_document_type("text/plain", "file.pdf") is DocumentType.TEXT

    @pytest.mark.parametrize(
        "mime,filename",
        [("image/png", "photo.png"), (None, None), ("application/zip", "archive.zip")],
    )
    def test_unsupported(self, mime, filename) -> None:
        with pytest.raises(UnsupportedDocumentError):
            resolve_document_type(mime, filename)


class TestDocumentTextExtractor:
    def test_plain_text_decoded_with_replacement(self) -> None:
        extractor = DocumentTextExtractor()
        assert extractor.extract(b"Hello \xff world", "text/plain") == "Hello \ufffd world"

    def test_pdf_text_layer(self) -> None:
        text = DocumentTextExtractor().extract(_pdf_bytes("Yoga at 9am"), "application/pdf")
        assert "Yoga at 9am" in text

    def test_docx_paragraphs(self) -> None:
        data = _docx_bytes("Spin class", "", "Pilates class")
        text = DocumentTextExtractor().extract(data, _DOCX_MIME)
        assert text == "Spin class\n\nPilates class"

    def test_corrupt_pdf_is_unsupported(self) -> None:
        with pytest.raises(UnsupportedDocumentError):
            DocumentTextExtractor().extract(b"not a pdf", "application/pdf")

    def test_corrupt_docx_is_unsupported(self) -> None:
        with pytest.raises(UnsupportedDocumentError):
            DocumentTextExtractor().extract(b"not a zip", _DOCX_MIME)

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(UnsupportedDocumentError):
            DocumentTextExtractor().extract(b"\x89PNG", "image/png", "photo.png")
