"""Hugging Face Inference API embedding provider adapter.

Calls the hosted feature-extraction pipeline over plain HTTPS with ``httpx``
and implements :class:`IEmbeddingProvider`.  The default model is
``mixedbread-ai/mxbai-embed-large-v1`` (1024 dimensions).

The Inference API is inconsistent about its response layout: depending on
the model and pipeline it returns a flat vector, a per-token matrix, a
single-item batch of either, or an object wrapping the vector.  All of those
are handled by :func:`~yucabot.utils.embedding_response.decode_embedding_response`.
"""

from __future__ import annotations

import httpx
import structlog

from yucabot.config.settings import Settings
from yucabot.interfaces.embedding_provider import IEmbeddingProvider
from yucabot.utils.embedding_response import decode_embedding_response
from yucabot.utils.errors import ProviderError, TransientProviderError

logger = structlog.get_logger(logger_name=__name__)

# Response bodies can be large HTML error pages; keep log lines readable.
_ERROR_BODY_LIMIT = 300


class HuggingFaceEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by the Hugging Face Inference API.

    Sends ``{"inputs": text, "options": {"wait_for_model": true}}`` so a cold
    model is loaded instead of rejected.  Timeouts, transport failures, HTTP
    429 and 5xx responses raise :class:`TransientProviderError`; any other
    non-2xx status raises :class:`ProviderError` immediately.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = settings.huggingface_api_key
        self._model = settings.huggingface_embedding_model
        self._url = f"{settings.huggingface_api_base.rstrip('/')}/{self._model}"
        self._timeout = settings.embedding_timeout_seconds
        self._max_input_chars = settings.embedding_max_input_chars
        self._client = http_client or httpx.AsyncClient(timeout=self._timeout)

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed_single(self, text: str) -> list[float]:
        """POST *text* to the feature-extraction endpoint and decode the vector."""
        payload = {"inputs": text, "options": {"wait_for_model": True}}
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._client.post(
                self._url, json=payload, headers=headers, timeout=self._timeout
            )
        except httpx.TimeoutException as exc:
            raise TransientProviderError(
                message=f"Hugging Face request timed out after {self._timeout:g}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.TransportError as exc:
            raise TransientProviderError(
                message=f"Hugging Face transport error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        status = response.status_code
        if status == 429 or status >= 500:
            raise TransientProviderError(
                message=f"Hugging Face error {status}: {response.text[:_ERROR_BODY_LIMIT]}",
                provider_name=self.get_provider_name(),
            )
        if status >= 400:
            raise ProviderError(
                message=f"Hugging Face error {status}: {response.text[:_ERROR_BODY_LIMIT]}",
                provider_name=self.get_provider_name(),
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderError(
                message="Hugging Face returned a non-JSON embedding response",
                provider_name=self.get_provider_name(),
            ) from exc

        decoded = decode_embedding_response(body, provider_name=self.get_provider_name())
        logger.info(
            "huggingface_embedding",
            model=self._model,
            shape=decoded.shape.value,
            length=len(decoded.vector),
        )
        return decoded.vector

    def get_max_input_chars(self) -> int:
        return self._max_input_chars

    def get_provider_name(self) -> str:
        return "huggingface_embedding"

    def is_available(self) -> bool:
        """Return ``True`` if a Hugging Face API key is configured."""
        return bool(self._api_key)
