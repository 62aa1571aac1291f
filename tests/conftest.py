"""Shared pytest fixtures for the YucaBot test suite."""

from __future__ import annotations

import hashlib
import struct
from typing import Any

import numpy as np
import pytest

from yucabot.interfaces.embedding_provider import IEmbeddingProvider
from yucabot.interfaces.llm_provider import ILLMProvider
from yucabot.interfaces.vector_store_provider import IVectorStoreProvider
from yucabot.models.rag import QueryMatch
from yucabot.utils.errors import DimensionMismatchError


# ---------------------------------------------------------------------------
# Deterministic embedding provider
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 8


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Deterministic unit-length vector derived from a SHA-256 of *text*."""
    raw = hashlib.sha256(text.encode("utf-8")).digest()
    while len(raw) < dim * 4:
        raw += hashlib.sha256(raw).digest()
    values = [float(v) for v in struct.unpack(f"<{dim}I", raw[: dim * 4])]
    magnitude = max(sum(v * v for v in values) ** 0.5, 1e-10)
    return [v / magnitude for v in values]


class MockEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider that returns scripted vectors or raises scripted errors.

    ``outcomes`` is consumed one item per call; an exception instance is
    raised, anything else is returned.  Once exhausted, a hash-based vector
    of ``dimension`` values is returned.
    """

    def __init__(
        self,
        name: str = "mock-embedding",
        dimension: int = _EMBEDDING_DIM,
        outcomes: list[Any] | None = None,
        max_input_chars: int = 8000,
    ) -> None:
        self._name = name
        self._dimension = dimension
        self._outcomes = list(outcomes or [])
        self._max_input_chars = max_input_chars
        self.calls: list[str] = []

    async def embed_single(self, text: str) -> list[float]:
        self.calls.append(text)
        if self._outcomes:
            outcome = self._outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        return _hash_to_vector(text, self._dimension)

    def get_max_input_chars(self) -> int:
        return self._max_input_chars

    def get_provider_name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return True


class MockLLMProvider(ILLMProvider):
    """LLM provider returning a fixed answer, or raising a fixed error."""

    def __init__(self, name: str, answer: str = "", error: Exception | None = None) -> None:
        self._name = name
        self._answer = answer
        self._error = error
        self.calls: list[tuple[str, str]] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 200,
    ) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self._error is not None:
            raise self._error
        return self._answer

    def get_provider_name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return True


class InMemoryVectorStore(IVectorStoreProvider):
    """Vector store backed by a list, scoring matches by cosine similarity."""

    def __init__(self, dimension: int = _EMBEDDING_DIM) -> None:
        self._dimension = dimension
        self.rows: list[dict[str, Any]] = []
        self.insert_calls = 0
        self.search_calls = 0

    async def insert(self, content: str, embedding: list[float]) -> bool:
        self.insert_calls += 1
        if len(embedding) != self._dimension:
            raise DimensionMismatchError(
                message=f"expected {self._dimension}, got {len(embedding)}",
                provider_name="memory",
            )
        self.rows.append(
            {"id": str(len(self.rows) + 1), "content": content, "embedding": list(embedding)}
        )
        return True

    async def search(
        self,
        query_embedding: list[float],
        limit: int = 5,
        threshold: float = 0.75,
    ) -> list[QueryMatch]:
        self.search_calls += 1
        if len(query_embedding) != self._dimension:
            raise DimensionMismatchError(provider_name="memory")
        query = np.asarray(query_embedding, dtype=np.float64)
        matches: list[QueryMatch] = []
        for row in self.rows:
            stored = np.asarray(row["embedding"], dtype=np.float64)
            denom = float(np.linalg.norm(query) * np.linalg.norm(stored))
            similarity = float(query @ stored) / denom if denom else 0.0
            if similarity > threshold:
                matches.append(
                    QueryMatch(id=row["id"], content=row["content"], similarity=similarity)
                )
        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:limit]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "memory"

    def is_available(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def embedding_provider_factory():
    """Return the :class:`MockEmbeddingProvider` class for scripted providers."""
    return MockEmbeddingProvider


@pytest.fixture
def llm_factory():
    """Return the :class:`MockLLMProvider` class for scripted candidates."""
    return MockLLMProvider


@pytest.fixture
def store_factory():
    """Return the :class:`InMemoryVectorStore` class for custom dimensions."""
    return InMemoryVectorStore


@pytest.fixture
def no_sleep():
    """An awaitable sleep that records requested delays without waiting."""
    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays  # type: ignore[attr-defined]
    return _sleep
