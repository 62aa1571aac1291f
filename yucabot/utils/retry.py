"""Reusable async retry policy with pluggable backoff.

Both the embedding service and the vector store retry transient failures,
with different limits and backoff curves:

- embeddings: 2 retries, exponential ``0.5s * 2**attempt``
- store inserts: 3 attempts, linear ``0.25s * (attempt + 1)``

:class:`RetryPolicy` captures the attempt limit, the backoff curve, the
retryable-error predicate and the sleep function.  Tests pass a recording
``sleep`` so no real time elapses.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

import structlog

from yucabot.models.rag import AttemptOutcome
from yucabot.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


def exponential_backoff(base: float, multiplier: float = 2.0) -> Callable[[int], float]:
    """Return ``attempt -> base * multiplier**attempt`` (attempt is 0-based)."""
    return lambda attempt: base * (multiplier**attempt)


def linear_backoff(step: float) -> Callable[[int], float]:
    """Return ``attempt -> step * (attempt + 1)`` (attempt is 0-based)."""
    return lambda attempt: step * (attempt + 1)


def _never(_exc: BaseException) -> bool:
    return False


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to retry, how long to wait, and which errors qualify.

    ``max_retries`` counts retries after the first try, so the operation runs
    at most ``max_retries + 1`` times.
    """

    max_retries: int = 2
    backoff: Callable[[int], float] = field(default_factory=lambda: exponential_backoff(0.5))
    retry_on: Callable[[BaseException], bool] = _never
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def run(
        self,
        operation: Callable[[], Awaitable[_T]],
        *,
        operation_name: str = "operation",
        provider_name: str = "",
        on_attempt: Callable[[AttemptOutcome], None] | None = None,
    ) -> _T:
        """Await ``operation()`` until it succeeds or the policy gives up.

        Non-retryable errors and the error from the final attempt propagate
        unchanged.  ``on_attempt`` receives one :class:`AttemptOutcome` per
        try.
        """
        attempt = 0
        while True:
            try:
                result = await operation()
            except Exception as exc:
                retryable = self.retry_on(exc)
                exhausted = attempt >= self.max_retries
                delay = 0.0 if (exhausted or not retryable) else self.backoff(attempt)
                if on_attempt is not None:
                    on_attempt(
                        AttemptOutcome(
                            provider=provider_name,
                            attempt=attempt,
                            success=False,
                            error=str(exc),
                            retryable=retryable,
                            backoff_seconds=delay,
                        )
                    )
                if not retryable or exhausted:
                    raise
                _logger.warning(
                    "retrying_operation",
                    operation=operation_name,
                    provider=provider_name or None,
                    attempt=attempt + 1,
                    max_attempts=self.max_retries + 1,
                    backoff_s=delay,
                    error=str(exc),
                )
                await self.sleep(delay)
                attempt += 1
                continue

            if on_attempt is not None:
                on_attempt(
                    AttemptOutcome(provider=provider_name, attempt=attempt, success=True)
                )
            if attempt > 0:
                _logger.info(
                    "operation_recovered",
                    operation=operation_name,
                    provider=provider_name or None,
                    attempts=attempt + 1,
                )
            return result
