"""Plain-text extraction from uploaded PDF, DOCX and TXT documents.

The document type is resolved from the declared MIME type first and from the
filename extension second, because browsers and CLI tools often send
``application/octet-stream``.  Extraction is synchronous and CPU-bound;
the ingest pipeline runs it in a worker thread.
"""

from __future__ import annotations

import io
from enum import Enum
from pathlib import PurePath

import docx
import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from yucabot.utils.errors import UnsupportedDocumentError

logger = structlog.get_logger(logger_name=__name__)


class DocumentType(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    TEXT = "text"


_MIME_TYPES: dict[str, DocumentType] = {
    "application/pdf": DocumentType.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": DocumentType.DOCX,
    "text/plain": DocumentType.TEXT,
}

_EXTENSIONS: dict[str, DocumentType] = {
    ".pdf": DocumentType.PDF,
    ".docx": DocumentType.DOCX,
    ".txt": DocumentType.TEXT,
}


def resolve_document_type(mime_type: str | None, filename: str | None) -> DocumentType:
    """Return the document type for a MIME type / filename pair.

    Raises
    ------
    UnsupportedDocumentError
        If neither the MIME type nor the extension is recognised.
    """
    if mime_type:
        base = mime_type.split(";", 1)[0].strip().lower()
        if base in _MIME_TYPES:
            return _MIME_TYPES[base]
    if filename:
        suffix = PurePath(filename).suffix.lower()
        if suffix in _EXTENSIONS:
            return _EXTENSIONS[suffix]
    raise UnsupportedDocumentError(
        message=f"Unsupported file type '{mime_type or 'unknown'}'. Use PDF, DOCX, or TXT."
    )


class DocumentTextExtractor:
    """Extracts raw text from document bytes.

    The returned text is not normalized; that happens in the pipeline so the
    same rules apply to uploaded files and to raw text ingestion.
    """

    def extract(self, data: bytes, mime_type: str | None, filename: str | None = None) -> str:
        doc_type = resolve_document_type(mime_type, filename)
        if doc_type is DocumentType.PDF:
            text = self._extract_pdf(data)
        elif doc_type is DocumentType.DOCX:
            text = self._extract_docx(data)
        else:
            text = data.decode("utf-8", errors="replace")
        logger.debug(
            "document_text_extracted",
            doc_type=doc_type.value,
            filename=filename,
            bytes=len(data),
            chars=len(text),
        )
        return text

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        """Concatenate the text layer of every page."""
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:  # noqa: BLE001
            raise UnsupportedDocumentError(message=f"Could not read PDF: {exc}") from exc

        try:
            pages = [doc[page_num].get_text("text") for page_num in range(len(doc))]
        finally:
            doc.close()
        return "\n\n".join(text for text in pages if text.strip())

    @staticmethod
    def _extract_docx(data: bytes) -> str:
        """Join non-empty paragraphs; formatting is dropped."""
        try:
            document = docx.Document(io.BytesIO(data))
        except Exception as exc:  # noqa: BLE001
            raise UnsupportedDocumentError(message=f"Could not read DOCX: {exc}") from exc
        return "\n\n".join(para.text for para in document.paragraphs if para.text.strip())
