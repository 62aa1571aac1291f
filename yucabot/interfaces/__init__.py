"""Public interface definitions for all external service providers.

Every external service the pipeline touches is accessed through the abstract
base classes defined here.  Concrete adapters live in ``yucabot/providers/``
and are wired together in :func:`yucabot.main._build_all`.

    Interface              ->  Concrete implementations
    ---------------------------------------------------------------
    IEmbeddingProvider     ->  HuggingFaceEmbeddingProvider,
                               OpenAIEmbeddingProvider
    ILLMProvider           ->  HuggingFaceLLMProvider, OpenAILLMProvider,
                               AnthropicLLMProvider
    IVectorStoreProvider   ->  SupabaseVectorStore
"""

from yucabot.interfaces.embedding_provider import IEmbeddingProvider
from yucabot.interfaces.llm_provider import ILLMProvider
from yucabot.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IEmbeddingProvider",
    "ILLMProvider",
    "IVectorStoreProvider",
]
