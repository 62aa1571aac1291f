"""FastAPI routes for document ingestion and question answering.

    Endpoint        Method  Description
    -----------------------------------------------------------------
    /api/ingest     POST    Upload a PDF, DOCX or TXT file and store it
    /api/query      POST    Ask a question; returns answer + sources
    /api/health     GET     Health check + provider configuration

Pipelines are built once in ``yucabot.main._build_all`` and read from
``app.state`` through ``Depends`` helpers.  Application errors are not
handled here; they propagate to ``ErrorHandlingMiddleware``.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, Request, UploadFile

from yucabot import __version__
from yucabot.api.schemas import (
    ErrorResponse,
    HealthResponse,
    IngestResponse,
    QueryRequest,
    QueryResponse,
    SourceResponse,
)
from yucabot.pipeline.orchestrator import IngestPipeline, QueryPipeline
from yucabot.utils.errors import EmptyInputError
from yucabot.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")


def _get_ingest_pipeline(request: Request) -> IngestPipeline:
    return request.app.state.ingest_pipeline


def _get_query_pipeline(request: Request) -> QueryPipeline:
    return request.app.state.query_pipeline


IngestPipelineDep = Annotated[IngestPipeline, Depends(_get_ingest_pipeline)]
QueryPipelineDep = Annotated[QueryPipeline, Depends(_get_query_pipeline)]

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    code: {"model": ErrorResponse} for code in (413, 415, 422, 500, 502, 503, 504)
}


@router.post(
    "/ingest",
    response_model=IngestResponse,
    response_model_by_alias=True,
    responses=_ERROR_RESPONSES,
    summary="Ingest a document into the knowledge base",
)
async def ingest_document(
    pipeline: IngestPipelineDep,
    file: Annotated[UploadFile | None, File()] = None,
    document: Annotated[UploadFile | None, File()] = None,
) -> IngestResponse:
    """Extract, embed and store one uploaded document.

    The multipart field may be named ``file`` or ``document``.
    """
    upload = file or document
    if upload is None:
        raise EmptyInputError(message="No file uploaded; send a multipart 'file' field")

    # Reject on the declared size before buffering; an undeclared size is
    # capped at one byte past the limit so the pipeline check still fires.
    if upload.size is not None:
        pipeline.check_upload_size(upload.size)
    data = await upload.read(pipeline.max_upload_bytes + 1)
    logger.info(
        "ingest_upload_received",
        filename=upload.filename,
        content_type=upload.content_type,
        bytes=len(data),
    )
    result = await pipeline.ingest_document(data, upload.content_type, upload.filename)
    return IngestResponse(
        success=result.success,
        stored_length=result.stored_length,
        embedding_dimensions=result.embedding_dimensions,
    )


@router.post(
    "/query",
    response_model=QueryResponse,
    responses=_ERROR_RESPONSES,
    summary="Ask a question about the ingested documents",
)
async def query_documents(body: QueryRequest, pipeline: QueryPipelineDep) -> QueryResponse:
    """Answer a question from the stored documents."""
    result = await pipeline.query(body.query)
    return QueryResponse(
        answer=result.answer,
        sources=[SourceResponse(id=s.id, similarity=s.similarity) for s in result.sources],
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider configuration.

    ``healthy`` needs an embedding provider and a configured store;
    generation candidates are optional because answers degrade to the
    extractive fallback without them.
    """
    providers: dict[str, Any] = dict(getattr(request.app.state, "provider_registry", {}))
    embedding_ok = bool(providers.get("embedding"))
    store_ok = bool(providers.get("vector_store"))

    if embedding_ok and store_ok:
        status = "healthy" if providers.get("llm") else "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(status=status, version=__version__, providers=providers)
