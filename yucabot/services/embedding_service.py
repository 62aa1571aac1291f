"""Embedding service: one text in, one store-ready vector out.

Owns everything between raw text and a vector the store will accept:

  1. NORMALIZE  -- collapse whitespace, strip NULs; empty input is rejected
                   before any network call.
  2. TRUNCATE   -- hard cut to the provider's input limit.  This limit is
                   separate from (and larger than) the stored-content cap.
  3. CALL       -- one provider at a time, each under a
                   :class:`~yucabot.utils.retry.RetryPolicy` that retries only
                   :class:`TransientProviderError`.
  4. FALL BACK  -- when a provider still fails, the next one is tried.
  5. RECONCILE  -- pad with zeros or truncate to the configured dimension.

Providers are chosen once at startup (see ``yucabot.main``); callers never
branch on which one answered.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog

from yucabot.interfaces.embedding_provider import IEmbeddingProvider
from yucabot.models.rag import EmbeddingRequestContext
from yucabot.utils.errors import (
    ConfigurationError,
    EmptyInputError,
    ProviderError,
    TransientProviderError,
)
from yucabot.utils.logging import get_logger
from yucabot.utils.retry import RetryPolicy, exponential_backoff
from yucabot.utils.text_normalizer import normalize_text, truncate_for_embedding
from yucabot.utils.vectors import reconcile_dimension

logger: structlog.BoundLogger = get_logger(__name__)


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, TransientProviderError)


class EmbeddingService:
    """Turns text into a fixed-length embedding using an ordered provider list.

    Parameters
    ----------
    providers:
        Embedding providers in fallback order.  May be empty, in which case
        every call raises :class:`ConfigurationError`.
    dimension:
        Length of every vector this service returns.
    max_retries:
        Retries per provider after the first attempt.
    backoff_base_seconds:
        Base of the exponential backoff, ``base * 2**attempt``.
    sleep:
        Optional awaitable used between retries (tests pass a recorder).
    """

    def __init__(
        self,
        providers: list[IEmbeddingProvider],
        dimension: int,
        max_retries: int = 2,
        backoff_base_seconds: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._providers = list(providers)
        self._dimension = dimension
        policy_kwargs = {
            "max_retries": max_retries,
            "backoff": exponential_backoff(backoff_base_seconds),
            "retry_on": _is_transient,
        }
        if sleep is not None:
            policy_kwargs["sleep"] = sleep
        self._retry_policy = RetryPolicy(**policy_kwargs)

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def provider_names(self) -> list[str]:
        return [p.get_provider_name() for p in self._providers]

    async def embed(self, text: str | None) -> list[float]:
        """Return the embedding of *text* with exactly :attr:`dimension` values.

        Raises
        ------
        EmptyInputError
            If *text* normalizes to an empty string.
        ConfigurationError
            If no embedding provider is configured.
        ProviderError
            If every provider failed after its retries.
        """
        vector, _ = await self.embed_with_context(text)
        return vector

    async def embed_with_context(
        self, text: str | None
    ) -> tuple[list[float], EmbeddingRequestContext]:
        """Like :meth:`embed`, also returning the per-request bookkeeping."""
        ctx = EmbeddingRequestContext(raw_text=text if isinstance(text, str) else "")
        ctx.normalized_text = normalize_text(text)
        if not ctx.normalized_text:
            raise EmptyInputError(message="No text to embed")
        if not self._providers:
            raise ConfigurationError(
                message="No embedding provider configured; set HUGGINGFACE_API_KEY or OPENAI_API_KEY"
            )

        last_error: ProviderError | None = None
        for position, provider in enumerate(self._providers):
            name = provider.get_provider_name()
            ctx.truncated_text = truncate_for_embedding(
                ctx.normalized_text, provider.get_max_input_chars()
            )
            try:
                raw_vector = await self._retry_policy.run(
                    lambda p=provider, t=ctx.truncated_text: p.embed_single(t),
                    operation_name="embed",
                    provider_name=name,
                    on_attempt=ctx.record,
                )
            except ProviderError as exc:
                last_error = exc
                logger.warning(
                    "embedding_provider_failed",
                    provider=name,
                    error=str(exc),
                    attempts=ctx.attempt_count,
                )
                continue
            except Exception as exc:  # noqa: BLE001
                # Unmapped client errors (bad URL, undecodable body) still fall back.
                last_error = ProviderError(
                    message=f"Unexpected {type(exc).__name__}: {exc}",
                    provider_name=name,
                )
                logger.warning(
                    "embedding_provider_failed",
                    provider=name,
                    error=str(last_error),
                    error_type=type(exc).__name__,
                    attempts=ctx.attempt_count,
                )
                continue

            vector = reconcile_dimension(raw_vector, self._dimension)
            ctx.provider = name
            if position > 0:
                # Vectors from a secondary model live in a different embedding
                # space than rows written by the primary one.
                logger.warning(
                    "embedding_fallback_used",
                    provider=name,
                    primary=self._providers[0].get_provider_name(),
                )
            logger.info(
                "embedding_generated",
                provider=name,
                native_length=len(raw_vector),
                dimension=self._dimension,
                input_chars=len(ctx.truncated_text),
                attempts=ctx.attempt_count,
            )
            return vector, ctx

        raise ProviderError(
            message=f"All embedding providers failed; last error: {last_error}",
            provider_name=last_error.provider_name if last_error else None,
        )
