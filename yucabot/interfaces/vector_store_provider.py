"""Abstract base class for vector-store service providers.

Defines the contract for persisting document embeddings and running
similarity search over them.  The production implementation targets a
Supabase (PostgreSQL + pgvector) table plus a match RPC; tests substitute an
in-memory store.  Records are append-only: there is no update or delete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from yucabot.models.rag import QueryMatch


# Concrete implementation: SupabaseVectorStore (yucabot/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for vector-store services used by the retrieval pipeline.

    Every method that talks to the backend is async.  Implementations must
    reject vectors whose length differs from :meth:`get_dimension` before
    making any network call.
    """

    @abstractmethod
    async def insert(self, content: str, embedding: list[float]) -> bool:
        """Persist one document and its embedding.

        Returns
        -------
        bool
            ``True`` once the row has been written.

        Raises
        ------
        yucabot.utils.errors.DimensionMismatchError
            If ``len(embedding) != get_dimension()``.
        yucabot.utils.errors.StoreTransientError
            If transient failures persisted through every retry.
        yucabot.utils.errors.StorePermanentError
            If the store rejected the row (schema, constraint).
        """

    @abstractmethod
    async def search(
        self,
        query_embedding: list[float],
        limit: int = 5,
        threshold: float = 0.75,
    ) -> list[QueryMatch]:
        """Return up to *limit* stored records at or above *threshold*.

        Results are ordered by similarity, highest first.  No matches is an
        empty list, never an error.

        Raises
        ------
        yucabot.utils.errors.DimensionMismatchError
            If ``len(query_embedding) != get_dimension()``.
        yucabot.utils.errors.SearchNotConfiguredError
            If the backend lacks the similarity-search procedure.
        """

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the vector length the store accepts."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if connection settings are present."""
