"""Embedding provider implementations.

Two implementations of IEmbeddingProvider, in fallback order:
    1. HuggingFaceEmbeddingProvider -- mxbai-embed-large-v1 (1024 dims) via
       the hosted Inference API.  Primary.
    2. OpenAIEmbeddingProvider      -- text-embedding-3-large.  Used when the
       primary fails after its retries.

Vectors from either provider are reconciled to the store dimension by the
embedding service, so callers never see provider-specific lengths.
"""

from yucabot.providers.embedding.huggingface_embedding_provider import (
    HuggingFaceEmbeddingProvider,
)
from yucabot.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["HuggingFaceEmbeddingProvider", "OpenAIEmbeddingProvider"]
