"""YucaBot FastAPI application entry point.

Builds every provider and service once at startup, stores them on
``app.state`` and serves the ingest / query API.  Run with::

    python -m yucabot.main
    uvicorn yucabot.main:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from yucabot import __version__
from yucabot.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    validation_error_handler,
)
from yucabot.api.routes import router as api_router
from yucabot.config.loader import load_config
from yucabot.config.settings import Settings
from yucabot.interfaces.embedding_provider import IEmbeddingProvider
from yucabot.interfaces.llm_provider import ILLMProvider
from yucabot.pipeline.orchestrator import IngestPipeline, QueryPipeline
from yucabot.providers.embedding.huggingface_embedding_provider import (
    HuggingFaceEmbeddingProvider,
)
from yucabot.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from yucabot.providers.llm.anthropic_provider import AnthropicLLMProvider
from yucabot.providers.llm.huggingface_provider import HuggingFaceLLMProvider
from yucabot.providers.llm.openai_provider import OpenAILLMProvider
from yucabot.providers.vector_store.supabase_provider import SupabaseVectorStore
from yucabot.services.answer_service import AnswerSynthesizer
from yucabot.services.embedding_service import EmbeddingService
from yucabot.services.text_extractor import DocumentTextExtractor
from yucabot.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_embedding_providers(
    app_settings: Settings, http_client: httpx.AsyncClient
) -> list[IEmbeddingProvider]:
    """Return the configured embedding providers in fallback order.

    Priority: Hugging Face (primary) -> OpenAI.  Providers reporting
    ``is_available() == False`` are left out; an empty list is allowed and
    surfaces as a ConfigurationError on the first embedding request.
    """
    providers: list[IEmbeddingProvider] = [
        HuggingFaceEmbeddingProvider(app_settings, http_client=http_client),
        OpenAIEmbeddingProvider(app_settings),
    ]
    return [p for p in providers if p.is_available()]


def _build_generation_candidates(
    app_settings: Settings,
    candidate_entries: list[dict[str, Any]],
    http_client: httpx.AsyncClient,
) -> list[ILLMProvider]:
    """Expand ``generation.candidates`` into LLM providers, skipping unavailable ones.

    A ``huggingface`` entry with no ``model`` expands to every model in
    ``huggingface_generation_models``.
    """
    candidates: list[ILLMProvider] = []
    for entry in candidate_entries:
        kind = str(entry.get("provider", "")).lower()
        if kind == "huggingface":
            models = [entry["model"]] if entry.get("model") else app_settings.huggingface_generation_models
            built: list[ILLMProvider] = [
                HuggingFaceLLMProvider(app_settings, model=model, http_client=http_client)
                for model in models
            ]
        elif kind == "openai":
            built = [OpenAILLMProvider(app_settings)]
        elif kind == "anthropic":
            built = [AnthropicLLMProvider(app_settings)]
        else:
            _logger.warning("unknown_generation_candidate", provider=kind)
            continue
        candidates.extend(c for c in built if c.is_available())
    return candidates


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    app_config = app_config if app_config is not None else load_config()

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=30.0)

    # -- Vector store (client is created lazily on first use) --
    vector_store = SupabaseVectorStore(app_settings)

    # -- Embedding (vectors are sized to the store column) --
    embedding_providers = _build_embedding_providers(app_settings, http_client)
    embedding_service = EmbeddingService(
        providers=embedding_providers,
        dimension=vector_store.get_dimension(),
        max_retries=app_settings.embedding_max_retries,
        backoff_base_seconds=app_settings.embedding_backoff_base_seconds,
    )

    # -- Answer synthesis --
    candidate_entries = app_config.get("generation", {}).get("candidates", [])
    candidates = _build_generation_candidates(app_settings, candidate_entries, http_client)
    synthesizer = AnswerSynthesizer(
        candidates=candidates,
        max_tokens=app_settings.generation_max_tokens,
        temperature=app_settings.generation_temperature,
        extractive_fallback_chars=app_settings.extractive_fallback_chars,
    )

    # -- Pipelines --
    ingest_pipeline = IngestPipeline(
        embedding_service=embedding_service,
        vector_store=vector_store,
        extractor=DocumentTextExtractor(),
        max_stored_chars=app_settings.max_stored_chars,
        max_upload_bytes=app_settings.max_upload_bytes,
        request_timeout_seconds=app_settings.request_timeout_seconds,
    )
    query_pipeline = QueryPipeline(
        embedding_service=embedding_service,
        vector_store=vector_store,
        synthesizer=synthesizer,
        similarity_threshold=app_settings.similarity_threshold,
        match_count=app_settings.match_count,
        context_top_k=app_settings.context_top_k,
        context_max_chars=app_settings.context_max_chars,
        request_timeout_seconds=app_settings.request_timeout_seconds,
    )

    provider_registry: dict[str, Any] = {
        "embedding": embedding_service.provider_names,
        "llm": synthesizer.candidate_names,
        "vector_store": vector_store.is_available(),
    }

    return {
        "http_client": http_client,
        "embedding_service": embedding_service,
        "vector_store": vector_store,
        "synthesizer": synthesizer,
        "ingest_pipeline": ingest_pipeline,
        "query_pipeline": query_pipeline,
        "provider_registry": provider_registry,
    }


def build_components(custom_settings: Settings | None = None) -> dict[str, Any]:
    """Build the component dict outside the web app (CLI / scripting)."""
    return _build_all(custom_settings or settings)


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(components: dict[str, Any] | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    components:
        Pre-built components to place on ``app.state`` instead of calling
        :func:`_build_all` at startup.  Tests pass pipelines wired to fakes.
    """

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        built = components if components is not None else _build_all(settings)
        for key, value in built.items():
            setattr(application.state, key, value)

        registry = built.get("provider_registry", {})
        _logger.info(
            "app_startup",
            version=__version__,
            environment=settings.app_env,
            embedding_providers=registry.get("embedding"),
            llm_candidates=registry.get("llm"),
            vector_store=registry.get("vector_store"),
        )

        yield

        # -- Shutdown: close shared httpx client --
        http_client: httpx.AsyncClient | None = built.get("http_client")
        if http_client is not None:
            await http_client.aclose()
        _logger.info("app_shutdown", message="HTTP client closed")

    application = FastAPI(
        title="YucaBot API",
        version=__version__,
        description=(
            "Upload studio documents (PDF, DOCX, TXT) into a vector knowledge base "
            "and ask questions answered only from those documents."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)
    application.add_exception_handler(RequestValidationError, validation_error_handler)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()


def main() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(
        "yucabot.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )


if __name__ == "__main__":
    main()
