"""Decoder for the embedding payload shapes returned by providers.

Feature-extraction endpoints are inconsistent about what they return for a
single input string.  The decoder recognises these shapes, tried in this
order:

``FLAT``
    ``[0.1, 0.2, ...]`` -- one vector.
``MATRIX``
    ``[[...], [...], ...]`` -- one row per token; mean-pooled.
``BATCHED``
    ``[[[...], [...]]]`` -- a single-item batch wrapping a token matrix;
    unwrapped, then mean-pooled.
``WRAPPED``
    ``{"embedding": ...}``, ``{"data": ...}`` or ``{"embeddings": ...}``
    where the inner value is any of the shapes above, or an OpenAI-style
    ``[{"embedding": [...]}, ...]`` list (first item wins).

Anything else raises :class:`~yucabot.utils.errors.EmbeddingShapeError`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from yucabot.utils.errors import EmbeddingShapeError
from yucabot.utils.vectors import mean_pool

_WRAPPER_KEYS = ("embedding", "data", "embeddings")


class EmbeddingShape(str, Enum):
    FLAT = "flat"
    MATRIX = "matrix"
    BATCHED = "batched"
    WRAPPED = "wrapped"


@dataclass(frozen=True)
class DecodedEmbedding:
    """A flat vector plus the shape it was decoded from."""

    shape: EmbeddingShape
    vector: list[float]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _finite(value: int | float) -> float:
    try:
        result = float(value)
    except OverflowError:
        return 0.0
    return result if math.isfinite(result) else 0.0


def _as_flat(payload: Any) -> list[float] | None:
    if not isinstance(payload, list) or not payload:
        return None
    if not all(_is_number(value) for value in payload):
        return None
    return [_finite(value) for value in payload]


def _as_matrix(payload: Any) -> list[list[float]] | None:
    if not isinstance(payload, list) or not payload:
        return None
    rows: list[list[float]] = []
    for row in payload:
        flat = _as_flat(row)
        if flat is None:
            return None
        rows.append(flat)
    return rows


def _decode_unwrapped(payload: Any, provider_name: str | None) -> DecodedEmbedding | None:
    flat = _as_flat(payload)
    if flat is not None:
        return DecodedEmbedding(EmbeddingShape.FLAT, flat)

    matrix = _as_matrix(payload)
    if matrix is not None:
        return DecodedEmbedding(EmbeddingShape.MATRIX, _pool(matrix, provider_name))

    if isinstance(payload, list) and len(payload) == 1:
        inner = _as_matrix(payload[0])
        if inner is not None:
            return DecodedEmbedding(EmbeddingShape.BATCHED, _pool(inner, provider_name))

    return None


def _pool(matrix: list[list[float]], provider_name: str | None) -> list[float]:
    try:
        return mean_pool(matrix)
    except ValueError as exc:
        raise EmbeddingShapeError(
            message=f"Embedding matrix could not be pooled: {exc}",
            provider_name=provider_name,
        ) from exc


def decode_embedding_response(payload: Any, provider_name: str | None = None) -> DecodedEmbedding:
    """Normalize a provider payload to a single flat vector.

    Raises
    ------
    EmbeddingShapeError
        If the payload matches none of the known shapes.
    """
    decoded = _decode_unwrapped(payload, provider_name)
    if decoded is not None:
        return decoded

    if isinstance(payload, dict):
        for key in _WRAPPER_KEYS:
            if key not in payload:
                continue
            inner = payload[key]
            # OpenAI-compatible APIs: {"data": [{"embedding": [...]}, ...]}
            if isinstance(inner, list) and inner and isinstance(inner[0], dict):
                inner = inner[0].get("embedding")
            decoded = _decode_unwrapped(inner, provider_name)
            if decoded is not None:
                return DecodedEmbedding(EmbeddingShape.WRAPPED, decoded.vector)

    raise EmbeddingShapeError(
        message=f"Unexpected embedding response format ({type(payload).__name__})",
        provider_name=provider_name,
    )
