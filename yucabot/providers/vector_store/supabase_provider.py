"""Supabase (PostgreSQL + pgvector) vector-store provider adapter.

Implements :class:`IVectorStoreProvider` on top of the async ``supabase``
client.  Documents are rows in one table (``knowledge_base`` by default)
with ``content``, ``embedding`` and ``created_at`` columns; similarity search
goes through a SQL function exposed over RPC (``match_documents``).

The client is created lazily on first use and shared for the life of the
process.  Creation is guarded by an :class:`asyncio.Lock` so concurrent first
requests build a single client.  Missing connection settings therefore only
fail the requests that actually need the store.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import structlog
from supabase import AsyncClient, PostgrestAPIError, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from yucabot.config.settings import Settings
from yucabot.interfaces.vector_store_provider import IVectorStoreProvider
from yucabot.models.rag import DocumentRecord, QueryMatch
from yucabot.utils.errors import (
    ConfigurationError,
    DimensionMismatchError,
    SearchNotConfiguredError,
    StorePermanentError,
    StoreTransientError,
)
from yucabot.utils.retry import RetryPolicy, linear_backoff

logger = structlog.get_logger(logger_name=__name__)

_CLIENT_INFO = "yucabot-api-server"

# PostgreSQL 42501 (insufficient_privilege) shows up transiently right after
# a service-role key rotation; the second attempt normally succeeds.
_TRANSIENT_PG_CODES = frozenset({"42501"})

# 42883 = undefined_function (PostgreSQL), PGRST202 = function not found in
# the PostgREST schema cache.
_MISSING_FUNCTION_CODES = frozenset({"42883", "PGRST202"})

_INSERT_MAX_ATTEMPTS = 3
_INSERT_BACKOFF_STEP_SECONDS = 0.25

_MATCH_FUNCTION_SQL = """\
create or replace function {function}(
  query_embedding vector({dimension}),
  match_threshold float,
  match_count int
)
returns table (id bigint, content text, similarity float)
language sql stable
as $$
  select id, content, 1 - (embedding <=> query_embedding) as similarity
  from {table}
  where 1 - (embedding <=> query_embedding) > match_threshold
  order by embedding <=> query_embedding
  limit match_count;
$$;"""


def _is_transient_store_error(exc: BaseException) -> bool:
    """Return ``True`` for timeouts, connection resets/refusals and code 42501."""
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)):
        return True
    if isinstance(exc, PostgrestAPIError):
        return str(exc.code) in _TRANSIENT_PG_CODES
    return False


def _store_message(exc: BaseException) -> str:
    if isinstance(exc, PostgrestAPIError) and exc.message:
        return str(exc.message)
    return str(exc) or type(exc).__name__


class SupabaseVectorStore(IVectorStoreProvider):
    """Vector store backed by a Supabase table and a match RPC.

    Parameters
    ----------
    settings:
        Supplies the connection URL and service-role key, table and function
        names, and the embedding dimension every vector must match.
    client:
        Pre-built async client.  When omitted the client is created on first
        use from *settings*.
    sleep:
        Awaitable used between insert retries; tests pass a recorder.
    """

    def __init__(
        self,
        settings: Settings,
        client: AsyncClient | Any | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._url = settings.supabase_url
        self._key = settings.supabase_service_role_key
        self._table = settings.supabase_table
        self._match_function = settings.supabase_match_function
        self._dimension = settings.embedding_dimension
        self._client = client
        self._client_lock = asyncio.Lock()
        self._insert_policy = RetryPolicy(
            max_retries=_INSERT_MAX_ATTEMPTS - 1,
            backoff=linear_backoff(_INSERT_BACKOFF_STEP_SECONDS),
            retry_on=_is_transient_store_error,
            sleep=sleep,
        )

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def insert(self, content: str, embedding: list[float]) -> bool:
        """Write one row, retrying transient failures up to three attempts."""
        self._check_dimension(embedding)
        client = await self._get_client()
        row = DocumentRecord(content=content, embedding=embedding).to_row()

        async def _write() -> Any:
            return await client.table(self._table).insert(row).execute()

        try:
            await self._insert_policy.run(
                _write,
                operation_name="store_insert",
                provider_name=self.get_provider_name(),
            )
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            message = _store_message(exc)
            logger.error(
                "store_insert_failed",
                table=self._table,
                error=message,
                transient=_is_transient_store_error(exc),
            )
            if _is_transient_store_error(exc):
                raise StoreTransientError(
                    message=f"Insert failed after {_INSERT_MAX_ATTEMPTS} attempts: {message}",
                    provider_name=self.get_provider_name(),
                ) from exc
            raise StorePermanentError(
                message=message,
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("store_insert", table=self._table, content_length=len(content))
        return True

    async def search(
        self,
        query_embedding: list[float],
        limit: int = 5,
        threshold: float = 0.75,
    ) -> list[QueryMatch]:
        """Run the match RPC and return results ordered by similarity."""
        self._check_dimension(query_embedding)
        client = await self._get_client()
        params = {
            "query_embedding": list(query_embedding),
            "match_threshold": threshold,
            "match_count": limit,
        }
        try:
            response = await client.rpc(self._match_function, params).execute()
        except PostgrestAPIError as exc:
            if str(exc.code) in _MISSING_FUNCTION_CODES:
                raise SearchNotConfiguredError(
                    message=(
                        f"Similarity function '{self._match_function}' is missing "
                        "from the database"
                    ),
                    provider_name=self.get_provider_name(),
                    hint=self.match_function_sql(),
                ) from exc
            raise StorePermanentError(
                message=_store_message(exc),
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise StoreTransientError(
                message=f"Similarity search failed: {_store_message(exc)}",
                provider_name=self.get_provider_name(),
            ) from exc

        rows = response.data or []
        matches = [
            QueryMatch(
                id=str(row.get("id")),
                content=row.get("content") or "",
                similarity=float(row.get("similarity") or 0.0),
            )
            for row in rows
            if isinstance(row, dict)
        ]
        matches.sort(key=lambda m: m.similarity, reverse=True)
        logger.info("store_search", function=self._match_function, matches=len(matches))
        return matches[:limit]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "supabase"

    def is_available(self) -> bool:
        """Return ``True`` if URL and service-role key are configured."""
        return self._client is not None or bool(self._url and self._key)

    def match_function_sql(self) -> str:
        """Return SQL that creates the similarity function this store calls."""
        return _MATCH_FUNCTION_SQL.format(
            function=self._match_function,
            table=self._table,
            dimension=self._dimension,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_dimension(self, embedding: list[float]) -> None:
        if len(embedding) != self._dimension:
            raise DimensionMismatchError(
                message=(
                    f"Embedding has {len(embedding)} values, store expects {self._dimension}"
                ),
                provider_name=self.get_provider_name(),
            )

    async def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        async with self._client_lock:
            if self._client is None:
                if not self._url or not self._key:
                    raise ConfigurationError(
                        message="SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set",
                        provider_name=self.get_provider_name(),
                    )
                try:
                    self._client = await acreate_client(
                        self._url,
                        self._key,
                        options=AsyncClientOptions(
                            auto_refresh_token=False,
                            persist_session=False,
                            headers={"X-Client-Info": _CLIENT_INFO},
                        ),
                    )
                except Exception as exc:  # noqa: BLE001
                    # supabase raises SupabaseException for a malformed URL or key.
                    raise ConfigurationError(
                        message=f"Could not create the Supabase client: {exc}",
                        provider_name=self.get_provider_name(),
                    ) from exc
                logger.info("supabase_client_created", table=self._table)
        return self._client
