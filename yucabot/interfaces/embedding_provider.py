"""Abstract base class for text-embedding service providers.

Defines the contract for turning one piece of text into an embedding vector.
Implementations wrap the Hugging Face Inference API or the OpenAI embeddings
endpoint.  Providers return the vector exactly as the backend produced it
(after decoding its response shape); retries, fallback between providers and
dimension reconciliation belong to
:class:`~yucabot.services.embedding_service.EmbeddingService`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   HuggingFaceEmbeddingProvider -- mxbai-embed-large-v1 via the Inference API (primary)
#   OpenAIEmbeddingProvider      -- text-embedding-3-large (secondary)
# Located in: yucabot/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by the retrieval pipeline."""

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string.

        Parameters
        ----------
        text:
            Normalized text, already truncated to :meth:`get_max_input_chars`.

        Returns
        -------
        list[float]
            The decoded vector.  Its length is whatever the backend produced
            and may differ from the configured store dimension.

        Raises
        ------
        yucabot.utils.errors.TransientProviderError
            On timeouts, transport failures, HTTP 429 or 5xx responses.
        yucabot.utils.errors.ProviderError
            On any other failure, including unrecognised response shapes.
        """

    @abstractmethod
    def get_max_input_chars(self) -> int:
        """Return the maximum number of characters sent per request."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"huggingface_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the credentials it needs.

        Startup uses this to drop unconfigured providers from the chain, so it
        must not make a network call.
        """
