"""Utility modules for YucaBot.

Available utility modules (re-exported here for convenience):

- **errors** -- Exception hierarchy rooted at YucaBotError; the HTTP layer
  maps each subclass to a status code.
- **logging** -- structlog setup (console or JSON renderer, secret
  redaction) and the per-request logging context.
- **text_normalizer** -- Whitespace/NUL normalization and the hard
  truncation applied before embedding.
- **vectors** -- numpy mean-pooling and dimension reconciliation.
- **embedding_response** -- Tagged decoder for the response shapes
  embedding APIs return.
- **retry** -- Async retry policy with exponential or linear backoff.
"""

# -- Embedding response decoding --------------------------------------------
from yucabot.utils.embedding_response import (
    DecodedEmbedding,
    EmbeddingShape,
    decode_embedding_response,
)

# -- Domain exception hierarchy --------------------------------------------
from yucabot.utils.errors import (
    ConfigurationError,
    DimensionMismatchError,
    DocumentTooLargeError,
    EmbeddingShapeError,
    EmptyInputError,
    ProviderError,
    RequestTimeoutError,
    SearchNotConfiguredError,
    StoreError,
    StorePermanentError,
    StoreTransientError,
    TransientProviderError,
    UnsupportedDocumentError,
    YucaBotError,
)

# -- Structured logging ----------------------------------------------------
from yucabot.utils.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

# -- Retry -----------------------------------------------------------------
from yucabot.utils.retry import RetryPolicy, exponential_backoff, linear_backoff

# -- Text normalization ----------------------------------------------------
from yucabot.utils.text_normalizer import normalize_text, truncate_for_embedding

# -- Vector math -----------------------------------------------------------
from yucabot.utils.vectors import mean_pool, reconcile_dimension

__all__ = [
    "ConfigurationError",
    "DecodedEmbedding",
    "DimensionMismatchError",
    "DocumentTooLargeError",
    "EmbeddingShape",
    "EmbeddingShapeError",
    "EmptyInputError",
    "ProviderError",
    "RequestTimeoutError",
    "RetryPolicy",
    "SearchNotConfiguredError",
    "StoreError",
    "StorePermanentError",
    "StoreTransientError",
    "TransientProviderError",
    "UnsupportedDocumentError",
    "YucaBotError",
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
    "decode_embedding_response",
    "exponential_backoff",
    "get_logger",
    "linear_backoff",
    "mean_pool",
    "normalize_text",
    "reconcile_dimension",
    "truncate_for_embedding",
]
