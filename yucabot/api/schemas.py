"""Pydantic request/response schemas for the YucaBot API.

Field names are snake_case in Python; response bodies use the camelCase keys
the web client already consumes (``storedLength``, ``errorType``), declared
as serialization aliases.  Routes return models with ``by_alias`` applied by
FastAPI's ``response_model`` machinery.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QueryRequest(BaseModel):
    """A natural-language question about the stored documents."""

    # Blank questions are rejected by the pipeline (422 EmptyInputError);
    # wrong types and overlong text fail validation (422 ValidationError).
    query: str = Field(default="", max_length=4000)


class SourceResponse(BaseModel):
    """One similarity match behind an answer.  Content is never exposed."""

    id: str
    similarity: float


class QueryResponse(BaseModel):
    """Answer to a query plus the matches it was grounded on."""

    answer: str
    sources: list[SourceResponse] = Field(default_factory=list)


class IngestResponse(BaseModel):
    """Result of storing one uploaded document."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    stored_length: int = Field(serialization_alias="storedLength")
    embedding_dimensions: int = Field(serialization_alias="embeddingDimensions")


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str = Field(description="Human-readable error message.")
    error_type: str = Field(
        serialization_alias="errorType",
        description="Error classification, e.g. EmptyInputError.",
    )
