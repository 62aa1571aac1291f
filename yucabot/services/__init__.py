"""Business-logic services: embedding, answer synthesis and text extraction."""

from yucabot.services.answer_service import (
    FALLBACK_MESSAGE,
    NOT_FOUND_SENTINEL,
    AnswerSynthesizer,
)
from yucabot.services.embedding_service import EmbeddingService
from yucabot.services.text_extractor import DocumentTextExtractor, resolve_document_type

__all__ = [
    "FALLBACK_MESSAGE",
    "NOT_FOUND_SENTINEL",
    "AnswerSynthesizer",
    "DocumentTextExtractor",
    "EmbeddingService",
    "resolve_document_type",
]
