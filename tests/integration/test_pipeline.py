"""End-to-end pipeline scenarios with scripted providers and an in-memory store."""

from __future__ import annotations

import pytest

from yucabot.pipeline.orchestrator import IngestPipeline, QueryPipeline
from yucabot.services.answer_service import FALLBACK_MESSAGE, AnswerSynthesizer
from yucabot.services.embedding_service import EmbeddingService
from yucabot.utils.errors import EmptyInputError, ProviderError, TransientProviderError


class TestIngestScenarios:
    @pytest.mark.asyncio
    async def test_whitespace_collapsed_and_vector_fits_store(
        self, embedding_provider_factory, store_factory
    ) -> None:
        store = store_factory(dimension=4)
        provider = embedding_provider_factory(dimension=4)
        pipeline = IngestPipeline(EmbeddingService([provider], dimension=4), store)

        result = await pipeline.ingest_text("Hello   world\n")

        assert provider.calls == ["Hello world"]
        assert store.rows[0]["content"] == "Hello world"
        assert len(store.rows[0]["embedding"]) == 4
        assert result.stored_length == 11
        assert result.embedding_dimensions == 4

    @pytest.mark.asyncio
    async def test_empty_document_never_reaches_store(
        self, embedding_provider_factory, memory_store
    ) -> None:
        provider = embedding_provider_factory()
        pipeline = IngestPipeline(EmbeddingService([provider], dimension=8), memory_store)

        with pytest.raises(EmptyInputError):
            await pipeline.ingest_document(b"\x00\x00  \n", "text/plain", "empty.txt")

        assert provider.calls == []
        assert memory_store.insert_calls == 0

    @pytest.mark.asyncio
    async def test_short_vector_zero_padded(
        self, embedding_provider_factory, store_factory
    ) -> None:
        store = store_factory(dimension=5)
        provider = embedding_provider_factory(dimension=3, outcomes=[[0.1, 0.2, 0.3]])
        pipeline = IngestPipeline(EmbeddingService([provider], dimension=5), store)

        await pipeline.ingest_text("Spin class")

        assert store.rows[0]["embedding"] == [0.1, 0.2, 0.3, 0.0, 0.0]

    @pytest.mark.asyncio
    async def test_long_vector_truncated(
        self, embedding_provider_factory, store_factory
    ) -> None:
        store = store_factory(dimension=2)
        provider = embedding_provider_factory(dimension=4, outcomes=[[0.4, 0.3, 0.2, 0.1]])
        pipeline = IngestPipeline(EmbeddingService([provider], dimension=2), store)

        await pipeline.ingest_text("Spin class")

        assert store.rows[0]["embedding"] == [0.4, 0.3]

    @pytest.mark.asyncio
    async def test_falls_back_to_second_embedding_provider(
        self, embedding_provider_factory, memory_store, no_sleep
    ) -> None:
        primary = embedding_provider_factory(
            name="primary",
            outcomes=[TransientProviderError(message="503")] * 3,
        )
        secondary = embedding_provider_factory(name="secondary")
        service = EmbeddingService([primary, secondary], dimension=8, sleep=no_sleep)
        pipeline = IngestPipeline(service, memory_store)

        result = await pipeline.ingest_text("Yoga on Sundays")

        assert result.provider == "secondary"
        assert len(primary.calls) == 3
        assert no_sleep.delays == [0.5, 1.0]
        assert memory_store.insert_calls == 1


class TestQueryScenarios:
    @pytest.mark.asyncio
    async def test_no_matches_gives_fallback_without_sources(
        self, embedding_provider_factory, memory_store, llm_factory
    ) -> None:
        candidate = llm_factory("only", answer="should not be used")
        pipeline = QueryPipeline(
            EmbeddingService([embedding_provider_factory()], dimension=8),
            memory_store,
            AnswerSynthesizer([candidate]),
        )

        result = await pipeline.query("Do you have a sauna?")

        assert result.answer == FALLBACK_MESSAGE
        assert result.sources == []

    @pytest.mark.asyncio
    async def test_second_candidate_answers_after_first_fails(
        self, embedding_provider_factory, memory_store, llm_factory
    ) -> None:
        provider = embedding_provider_factory()
        service = EmbeddingService([provider], dimension=8)
        await IngestPipeline(service, memory_store).ingest_text("Opening hours")

        first = llm_factory("first", error=ProviderError(message="model loading"))
        second = llm_factory("second", answer="The studio opens at 7am.")
        pipeline = QueryPipeline(service, memory_store, AnswerSynthesizer([first, second]))

        result = await pipeline.query("Opening hours")

        assert result.answer == "The studio opens at 7am."
        assert len(first.calls) == 1
        assert len(second.calls) == 1
        assert [s.id for s in result.sources] == ["1"]

    @pytest.mark.asyncio
    async def test_every_candidate_failing_gives_extractive_answer(
        self, embedding_provider_factory, memory_store, llm_factory
    ) -> None:
        service = EmbeddingService([embedding_provider_factory()], dimension=8)
        await IngestPipeline(service, memory_store).ingest_text("Opening hours")

        candidates = [
            llm_factory("a", error=ProviderError(message="down")),
            llm_factory("b", answer="   "),
        ]
        pipeline = QueryPipeline(service, memory_store, AnswerSynthesizer(candidates))

        result = await pipeline.query("Opening hours")

        assert result.answer.startswith(FALLBACK_MESSAGE)
        assert result.answer.endswith("Opening hours")
