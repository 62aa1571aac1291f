"""Pydantic data models shared across YucaBot."""

from yucabot.models.rag import (
    AttemptOutcome,
    DocumentRecord,
    EmbeddingRequestContext,
    IngestionResult,
    QueryMatch,
    QueryResult,
    SourceReference,
)

__all__ = [
    "AttemptOutcome",
    "DocumentRecord",
    "EmbeddingRequestContext",
    "IngestionResult",
    "QueryMatch",
    "QueryResult",
    "SourceReference",
]
