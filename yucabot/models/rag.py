"""Retrieval data models for the YucaBot knowledge base.

Defines Pydantic v2 models for stored documents, query matches, ingestion and
query results, and the per-request embedding bookkeeping.

Lifecycle overview:

    1. INGEST: one uploaded document becomes one :class:`DocumentRecord`
       (no chunking).  Records are written once and never updated.
    2. QUERY: a similarity search produces ephemeral :class:`QueryMatch`
       rows; only their ids and scores leave the service, as
       :class:`SourceReference` entries of a :class:`QueryResult`.
    3. BOOKKEEPING: :class:`EmbeddingRequestContext` tracks the text at each
       normalization stage plus one :class:`AttemptOutcome` per provider
       call.  It exists for logging and is never persisted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


# ---------------------------------------------------------------------------
# DocumentRecord: one row of the knowledge_base table.
# ---------------------------------------------------------------------------
class DocumentRecord(BaseModel):
    """A normalized document and its embedding, as written to the store."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Normalized, length-capped document text.")
    embedding: list[float] = Field(
        description="Embedding vector; its length always equals the configured dimension."
    )
    created_at: datetime = Field(default_factory=_utcnow)

    def to_row(self) -> dict[str, Any]:
        """Serialize to the column mapping expected by the store."""
        return {
            "content": self.content,
            "embedding": list(self.embedding),
            "created_at": self.created_at.isoformat(),
        }


# ---------------------------------------------------------------------------
# QueryMatch: a similarity-search hit.
# ---------------------------------------------------------------------------
class QueryMatch(BaseModel):
    """A stored record returned by a similarity search, with its score."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Store-assigned record identifier.")
    content: str = Field(default="", description="Stored document text.")
    similarity: float = Field(
        default=0.0,
        description="Similarity reported by the store's match function.",
    )


class SourceReference(BaseModel):
    """The public part of a match: identifier and score, never content."""

    model_config = ConfigDict(frozen=True)

    id: str
    similarity: float


# ---------------------------------------------------------------------------
# Pipeline results
# ---------------------------------------------------------------------------
class IngestionResult(BaseModel):
    """Outcome of ingesting one document."""

    model_config = ConfigDict(frozen=True)

    success: bool = True
    stored_length: int = Field(ge=0, description="Characters of content written to the store.")
    embedding_dimensions: int = Field(ge=1, description="Length of the stored embedding.")
    provider: str = Field(default="", description="Embedding provider that produced the vector.")
    source_name: str | None = Field(default=None, description="Original filename, if any.")


class QueryResult(BaseModel):
    """A synthesized answer plus the matches it was grounded on."""

    model_config = ConfigDict(frozen=True)

    answer: str
    sources: list[SourceReference] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Embedding bookkeeping
# ---------------------------------------------------------------------------
class AttemptOutcome(BaseModel):
    """Result of a single provider call made under a retry policy."""

    model_config = ConfigDict(frozen=True)

    provider: str = ""
    attempt: int = Field(ge=0, description="0-based attempt index within one provider.")
    success: bool
    error: str | None = None
    retryable: bool = False
    backoff_seconds: float = 0.0


class EmbeddingRequestContext(BaseModel):
    """Text at each stage of one embedding request, plus attempt history."""

    raw_text: str = ""
    normalized_text: str = ""
    truncated_text: str = ""
    provider: str = Field(default="", description="Provider that produced the final vector.")
    provider_attempts: list[AttemptOutcome] = Field(default_factory=list)

    def record(self, outcome: AttemptOutcome) -> None:
        self.provider_attempts.append(outcome)

    @property
    def attempt_count(self) -> int:
        return len(self.provider_attempts)
