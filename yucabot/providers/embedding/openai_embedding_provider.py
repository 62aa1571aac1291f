"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client to implement :class:`IEmbeddingProvider`.
Used as the secondary provider when the Hugging Face endpoint is unavailable.
Supports OpenAI-compatible hosts (TogetherAI, Fireworks) via ``base_url``.
"""

from __future__ import annotations

import openai
import structlog

from yucabot.config.settings import Settings
from yucabot.interfaces.embedding_provider import IEmbeddingProvider
from yucabot.utils.embedding_response import decode_embedding_response
from yucabot.utils.errors import ProviderError, TransientProviderError

logger = structlog.get_logger(logger_name=__name__)

# Failures the retry policy should see as transient.  APITimeoutError is a
# subclass of APIConnectionError.
_TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API.

    The SDK's own retry loop is disabled (``max_retries=0``) so that
    :class:`~yucabot.utils.retry.RetryPolicy` is the only thing retrying.
    """

    def __init__(self, settings: Settings, client: openai.AsyncOpenAI | None = None) -> None:
        self._api_key = settings.openai_api_key

        client_kwargs: dict = {
            "api_key": self._api_key,
            "timeout": settings.embedding_timeout_seconds,
            "max_retries": 0,
        }
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = client or openai.AsyncOpenAI(**client_kwargs)
        self._model = settings.openai_embedding_model or "text-embedding-3-large"
        self._max_input_chars = settings.embedding_max_input_chars
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string."""
        try:
            response = await self._client.embeddings.create(input=text, model=self._model)
        except _TRANSIENT_ERRORS as exc:
            raise TransientProviderError(
                message=f"{self._provider_label} transient error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise ProviderError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        raw = response.data[0].embedding if response.data else None
        decoded = decode_embedding_response(raw, provider_name=self.get_provider_name())
        logger.info(
            "openai_embedding",
            model=self._model,
            provider=self._provider_label,
            length=len(decoded.vector),
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return decoded.vector

    def get_max_input_chars(self) -> int:
        return self._max_input_chars

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)
