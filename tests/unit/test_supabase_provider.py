"""Unit tests for the Supabase vector-store adapter."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from supabase import PostgrestAPIError

from yucabot.config.settings import Settings
from yucabot.providers.vector_store.supabase_provider import SupabaseVectorStore
from yucabot.utils.errors import (
    ConfigurationError,
    DimensionMismatchError,
    SearchNotConfiguredError,
    StorePermanentError,
    StoreTransientError,
)


def _settings(**overrides) -> Settings:
    defaults = {
        "supabase_url": "https://project.supabase.co",
        "supabase_service_role_key": "service-role",
        "embedding_dimension": 4,
        "huggingface_api_key": "",
        "openai_api_key": "",
        "anthropic_api_key": "",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _pg_error(code: str, message: str = "db error") -> PostgrestAPIError:
    return PostgrestAPIError({"message": message, "code": code, "hint": None, "details": None})


def _client_with_insert(*outcomes) -> MagicMock:
    client = MagicMock()
    client.table.return_value.insert.return_value.execute = AsyncMock(side_effect=list(outcomes))
    return client


def _client_with_rpc(outcome) -> MagicMock:
    client = MagicMock()
    if isinstance(outcome, BaseException):
        client.rpc.return_value.execute = AsyncMock(side_effect=outcome)
    else:
        client.rpc.return_value.execute = AsyncMock(return_value=MagicMock(data=outcome))
    return client


class TestSupabaseInsert:
    @pytest.mark.asyncio
    async def test_insert_writes_row(self, no_sleep) -> None:
        client = _client_with_insert(MagicMock(data=[{"id": 1}]))
        store = SupabaseVectorStore(_settings(), client=client, sleep=no_sleep)

        assert await store.insert("hello", [0.1, 0.2, 0.3, 0.4]) is True

        client.table.assert_called_once_with("knowledge_base")
        row = client.table.return_value.insert.call_args.args[0]
        assert row["content"] == "hello"
        assert row["embedding"] == [0.1, 0.2, 0.3, 0.4]
        assert "created_at" in row

    @pytest.mark.asyncio
    async def test_dimension_checked_before_network(self, no_sleep) -> None:
        client = _client_with_insert()
        store = SupabaseVectorStore(_settings(), client=client, sleep=no_sleep)
        with pytest.raises(DimensionMismatchError):
            await store.insert("hello", [0.1, 0.2, 0.3])
        client.table.assert_not_called()

    @pytest.mark.asyncio
    async def test_transient_error_retried_with_linear_backoff(self, no_sleep) -> None:
        client = _client_with_insert(
            httpx.ConnectError("connection refused"),
            _pg_error("42501", "permission denied"),
            MagicMock(data=[{"id": 1}]),
        )
        store = SupabaseVectorStore(_settings(), client=client, sleep=no_sleep)

        assert await store.insert("hello", [0.0] * 4) is True
        assert no_sleep.delays == [0.25, 0.5]

    @pytest.mark.asyncio
    async def test_exhausted_transient_errors_raise_transient(self, no_sleep) -> None:
        client = _client_with_insert(
            httpx.ReadTimeout("t1"), httpx.ReadTimeout("t2"), httpx.ReadTimeout("t3")
        )
        store = SupabaseVectorStore(_settings(), client=client, sleep=no_sleep)

        with pytest.raises(StoreTransientError):
            await store.insert("hello", [0.0] * 4)
        assert client.table.return_value.insert.return_value.execute.await_count == 3

    @pytest.mark.asyncio
    async def test_schema_error_is_permanent_and_not_retried(self, no_sleep) -> None:
        client = _client_with_insert(_pg_error("42703", 'column "embedding" does not exist'))
        store = SupabaseVectorStore(_settings(), client=client, sleep=no_sleep)

        with pytest.raises(StorePermanentError, match="does not exist"):
            await store.insert("hello", [0.0] * 4)
        assert no_sleep.delays == []


class TestSupabaseSearch:
    @pytest.mark.asyncio
    async def test_rpc_params_and_ordering(self) -> None:
        client = _client_with_rpc(
            [
                {"id": 1, "content": "low", "similarity": 0.8},
                {"id": 2, "content": "high", "similarity": 0.95},
            ]
        )
        store = SupabaseVectorStore(_settings(), client=client)

        matches = await store.search([0.1] * 4, limit=5, threshold=0.75)

        client.rpc.assert_called_once_with(
            "match_documents",
            {"query_embedding": [0.1] * 4, "match_threshold": 0.75, "match_count": 5},
        )
        assert [m.id for m in matches] == ["2", "1"]
        assert matches[0].content == "high"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [None, []])
    async def test_empty_result_is_empty_list(self, data) -> None:
        store = SupabaseVectorStore(_settings(), client=_client_with_rpc(data))
        assert await store.search([0.1] * 4) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["42883", "PGRST202"])
    async def test_missing_function_raises_with_hint(self, code: str) -> None:
        store = SupabaseVectorStore(_settings(), client=_client_with_rpc(_pg_error(code)))
        with pytest.raises(SearchNotConfiguredError) as exc_info:
            await store.search([0.1] * 4)
        assert "create or replace function match_documents" in exc_info.value.hint
        assert "vector(4)" in exc_info.value.hint

    @pytest.mark.asyncio
    async def test_other_rpc_error_is_permanent(self) -> None:
        store = SupabaseVectorStore(_settings(), client=_client_with_rpc(_pg_error("22000")))
        with pytest.raises(StorePermanentError):
            await store.search([0.1] * 4)

    @pytest.mark.asyncio
    async def test_search_dimension_mismatch(self) -> None:
        client = _client_with_rpc([])
        store = SupabaseVectorStore(_settings(), client=client)
        with pytest.raises(DimensionMismatchError):
            await store.search([0.1] * 5)
        client.rpc.assert_not_called()


class TestSupabaseClientLifecycle:
    @pytest.mark.asyncio
    async def test_missing_settings_raise_configuration_error_on_use(self) -> None:
        store = SupabaseVectorStore(_settings(supabase_url="", supabase_service_role_key=""))
        assert store.is_available() is False
        with pytest.raises(ConfigurationError):
            await store.search([0.1] * 4)

    @pytest.mark.asyncio
    async def test_client_created_once_under_concurrency(self) -> None:
        client = _client_with_rpc([])
        factory = AsyncMock(return_value=client)
        store = SupabaseVectorStore(_settings())

        with patch(
            "yucabot.providers.vector_store.supabase_provider.acreate_client", factory
        ):
            await asyncio.gather(*(store.search([0.1] * 4) for _ in range(5)))

        factory.assert_awaited_once()
        url, key = factory.await_args.args
        assert url == "https://project.supabase.co"
        assert key == "service-role"
        options = factory.await_args.kwargs["options"]
        assert options.headers["X-Client-Info"] == "yucabot-api-server"
        assert options.persist_session is False
        assert options.auto_refresh_token is False

    @pytest.mark.asyncio
    async def test_client_creation_failure_is_configuration_error(self) -> None:
        factory = AsyncMock(side_effect=RuntimeError("Invalid URL"))
        store = SupabaseVectorStore(_settings())

        with patch(
            "yucabot.providers.vector_store.supabase_provider.acreate_client", factory
        ):
            with pytest.raises(ConfigurationError, match="Invalid URL"):
                await store.insert("hello", [0.1] * 4)

    @pytest.mark.asyncio
    async def test_malformed_url_is_configuration_error(self) -> None:
        store = SupabaseVectorStore(_settings(supabase_url="not-a-url"))
        with pytest.raises(ConfigurationError):
            await store.search([0.1] * 4)

    @pytest.mark.asyncio
    async def test_failed_creation_is_retried_on_next_call(self) -> None:
        client = _client_with_rpc([])
        factory = AsyncMock(side_effect=[RuntimeError("network"), client])
        store = SupabaseVectorStore(_settings())

        with patch(
            "yucabot.providers.vector_store.supabase_provider.acreate_client", factory
        ):
            with pytest.raises(ConfigurationError):
                await store.search([0.1] * 4)
            assert await store.search([0.1] * 4) == []
