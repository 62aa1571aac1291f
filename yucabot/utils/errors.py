"""Custom exception hierarchy for YucaBot.

All application exceptions inherit from :class:`YucaBotError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "huggingface", "openai", "supabase") caused the
failure.

The hierarchy is organized by pipeline stage:

    YucaBotError  (base -- catch-all for any YucaBot error)
    +-- ConfigurationError        (missing credential / URL)
    +-- EmptyInputError           (content normalizes to nothing)
    +-- UnsupportedDocumentError  (upload is not PDF / DOCX / TXT)
    +-- DocumentTooLargeError     (upload exceeds the size limit)
    +-- ProviderError             (embedding or generation call failed)
    |   +-- TransientProviderError  (timeout, transport, 429, 5xx -- retried)
    |   +-- EmbeddingShapeError     (unrecognised embedding payload)
    +-- DimensionMismatchError    (vector length != configured dimension)
    +-- SearchNotConfiguredError  (similarity RPC missing on the store)
    +-- StoreError                (vector-store failure)
    |   +-- StoreTransientError     (retried, then surfaced)
    |   +-- StorePermanentError     (surfaced immediately)
    +-- RequestTimeoutError       (end-to-end pipeline deadline expired)

Transient conditions are retried inside the component that owns the call;
everything else propagates to the caller typed, and the API layer maps each
class to an HTTP status (see :mod:`yucabot.api.middleware`).
"""


class YucaBotError(Exception):
    """Base exception for all YucaBot errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for log
    output, e.g. ``[huggingface] Hugging Face error 503``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------

class ConfigurationError(YucaBotError):
    """Raised when a required credential or URL is missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmptyInputError(YucaBotError):
    """Raised when user-supplied content normalizes to an empty string."""

    def __init__(
        self,
        message: str = "Input contains no readable text",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UnsupportedDocumentError(YucaBotError):
    """Raised when an uploaded document is not PDF, DOCX or plain text."""

    def __init__(
        self,
        message: str = "Unsupported file type. Use PDF, DOCX, or TXT.",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DocumentTooLargeError(YucaBotError):
    """Raised when an uploaded document exceeds the configured size limit."""

    def __init__(
        self,
        message: str = "File exceeds the upload size limit",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External provider errors
# ---------------------------------------------------------------------------

class ProviderError(YucaBotError):
    """Raised when an embedding or generation call fails after retries."""

    def __init__(
        self,
        message: str = "Provider call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class TransientProviderError(ProviderError):
    """A provider failure worth retrying (timeout, transport error, 429, 5xx)."""

    def __init__(
        self,
        message: str = "Transient provider failure",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingShapeError(ProviderError):
    """Raised when an embedding response matches none of the known shapes."""

    def __init__(
        self,
        message: str = "Unexpected embedding response format",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Vector-store errors
# ---------------------------------------------------------------------------

class DimensionMismatchError(YucaBotError):
    """Raised when a vector's length differs from the configured dimension.

    The embedding service always reconciles vectors before they reach the
    store, so seeing this error means a caller bypassed that step.
    """

    def __init__(
        self,
        message: str = "Embedding dimension mismatch",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SearchNotConfiguredError(YucaBotError):
    """Raised when the store lacks the similarity-search procedure."""

    def __init__(
        self,
        message: str = "Similarity search is not configured on the vector store",
        provider_name: str | None = None,
        hint: str = "",
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._hint = hint

    @property
    def hint(self) -> str:
        return self._hint


class StoreError(YucaBotError):
    """Base class for vector-store read/write failures."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreTransientError(StoreError):
    """A store failure that is retried automatically (timeouts, resets)."""

    def __init__(
        self,
        message: str = "Transient vector store failure",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StorePermanentError(StoreError):
    """A store failure that is never retried (schema or constraint errors)."""

    def __init__(
        self,
        message: str = "Vector store rejected the request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration errors
# ---------------------------------------------------------------------------

class RequestTimeoutError(YucaBotError):
    """Raised when a pipeline run exceeds its end-to-end deadline."""

    def __init__(
        self,
        message: str = "Request exceeded its deadline",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
