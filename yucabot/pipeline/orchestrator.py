"""Ingest and query pipelines.

These are the two request lifecycles the HTTP layer and the CLI drive:

    INGEST:  bytes + MIME -> extract -> normalize -> embed -> cap -> insert
    QUERY:   question -> normalize -> embed -> search -> context -> synthesize

Each pipeline owns its request from start to finish and runs it under one
end-to-end deadline.  The services it calls are injected, so tests can swap
the vector store for an in-memory fake and the providers for mocks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog

from yucabot.interfaces.vector_store_provider import IVectorStoreProvider
from yucabot.models.rag import IngestionResult, QueryMatch, QueryResult, SourceReference
from yucabot.services.answer_service import AnswerSynthesizer
from yucabot.services.embedding_service import EmbeddingService
from yucabot.services.text_extractor import DocumentTextExtractor
from yucabot.utils.errors import DocumentTooLargeError, EmptyInputError, RequestTimeoutError
from yucabot.utils.logging import get_logger
from yucabot.utils.text_normalizer import normalize_text

logger: structlog.BoundLogger = get_logger(__name__)

_T = TypeVar("_T")


async def _with_deadline(operation: Awaitable[_T], seconds: float, name: str) -> _T:
    try:
        return await asyncio.wait_for(operation, timeout=seconds)
    except asyncio.TimeoutError as exc:
        logger.error("pipeline_deadline_exceeded", pipeline=name, timeout_s=seconds)
        raise RequestTimeoutError(
            message=f"{name} did not finish within {seconds:g}s"
        ) from exc


def build_context(matches: list[QueryMatch], top_k: int, max_chars: int) -> str:
    """Join the contents of the first *top_k* matches with blank lines.

    Empty contents are skipped and the result is cut at *max_chars*.
    """
    parts = [m.content for m in matches[:top_k] if m.content and m.content.strip()]
    return "\n\n".join(parts)[:max_chars]


class IngestPipeline:
    """Stores documents as one embedded record each.

    Parameters
    ----------
    embedding_service:
        Produces store-ready vectors.
    vector_store:
        Destination for the records.
    extractor:
        Turns uploaded document bytes into text.
    max_stored_chars:
        Cap on the content written to the store.  The embedding input has its
        own, larger cap inside the embedding service.
    max_upload_bytes:
        Uploads larger than this are rejected before extraction.
    request_timeout_seconds:
        End-to-end deadline for one ingest.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: IVectorStoreProvider,
        extractor: DocumentTextExtractor | None = None,
        max_stored_chars: int = 5000,
        max_upload_bytes: int = 10 * 1024 * 1024,
        request_timeout_seconds: float = 90.0,
    ) -> None:
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._extractor = extractor or DocumentTextExtractor()
        self._max_stored_chars = max_stored_chars
        self._max_upload_bytes = max_upload_bytes
        self._timeout = request_timeout_seconds

    @property
    def max_upload_bytes(self) -> int:
        return self._max_upload_bytes

    def check_upload_size(self, size: int) -> None:
        """Raise :class:`DocumentTooLargeError` if *size* bytes exceeds the limit."""
        if size > self._max_upload_bytes:
            raise DocumentTooLargeError(
                message=f"File is {size} bytes; the limit is {self._max_upload_bytes} bytes"
            )

    async def ingest_text(self, text: str | None, source_name: str | None = None) -> IngestionResult:
        """Normalize, embed and store *text* as a single record.

        Raises
        ------
        EmptyInputError
            If *text* has no readable content.  Nothing is embedded or stored.
        """
        return await _with_deadline(
            self._ingest_text(text, source_name), self._timeout, "ingest"
        )

    async def ingest_document(
        self,
        data: bytes,
        mime_type: str | None,
        filename: str | None = None,
    ) -> IngestionResult:
        """Extract text from an uploaded document and store it.

        Raises
        ------
        DocumentTooLargeError
            If *data* exceeds the upload limit.
        UnsupportedDocumentError
            If the document is not PDF, DOCX or plain text.
        EmptyInputError
            If the document contains no readable text.
        """
        self.check_upload_size(len(data))

        async def _run() -> IngestionResult:
            raw = await asyncio.to_thread(self._extractor.extract, data, mime_type, filename)
            return await self._ingest_text(raw, filename)

        return await _with_deadline(_run(), self._timeout, "ingest")

    async def _ingest_text(self, text: str | None, source_name: str | None) -> IngestionResult:
        normalized = normalize_text(text)
        if not normalized:
            raise EmptyInputError(message="Document contains no readable text")

        vector, ctx = await self._embedding_service.embed_with_context(normalized)
        content = normalized[: self._max_stored_chars]
        await self._vector_store.insert(content, vector)

        logger.info(
            "document_ingested",
            source=source_name,
            normalized_chars=len(normalized),
            stored_chars=len(content),
            provider=ctx.provider,
        )
        return IngestionResult(
            success=True,
            stored_length=len(content),
            embedding_dimensions=len(vector),
            provider=ctx.provider,
            source_name=source_name,
        )


class QueryPipeline:
    """Answers questions from the stored documents.

    Parameters
    ----------
    embedding_service:
        Embeds the question.
    vector_store:
        Runs the similarity search.
    synthesizer:
        Turns context plus question into an answer.
    similarity_threshold, match_count:
        Passed to the store's match function.
    context_top_k, context_max_chars:
        How many matches feed the context, and its length cap.
    request_timeout_seconds:
        End-to-end deadline for one query.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: IVectorStoreProvider,
        synthesizer: AnswerSynthesizer,
        similarity_threshold: float = 0.75,
        match_count: int = 5,
        context_top_k: int = 3,
        context_max_chars: int = 4000,
        request_timeout_seconds: float = 90.0,
    ) -> None:
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._synthesizer = synthesizer
        self._similarity_threshold = similarity_threshold
        self._match_count = match_count
        self._context_top_k = context_top_k
        self._context_max_chars = context_max_chars
        self._timeout = request_timeout_seconds

    async def query(self, question: str | None) -> QueryResult:
        """Return an answer to *question* and the matches it drew on.

        Raises
        ------
        EmptyInputError
            If *question* is blank.
        """
        return await _with_deadline(self._query(question), self._timeout, "query")

    async def _query(self, question: str | None) -> QueryResult:
        normalized = normalize_text(question)
        if not normalized:
            raise EmptyInputError(message="Question is empty")

        vector = await self._embedding_service.embed(normalized)
        matches = await self._vector_store.search(
            vector, limit=self._match_count, threshold=self._similarity_threshold
        )
        context = build_context(matches, self._context_top_k, self._context_max_chars)
        answer = await self._synthesizer.synthesize(context, normalized)

        logger.info(
            "query_answered",
            matches=len(matches),
            context_chars=len(context),
            top_similarity=matches[0].similarity if matches else None,
        )
        return QueryResult(
            answer=answer,
            sources=[SourceReference(id=m.id, similarity=m.similarity) for m in matches],
        )
