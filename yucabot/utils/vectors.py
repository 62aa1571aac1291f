"""Vector math for embedding post-processing.

Two operations, both on plain ``list[float]`` at the boundaries and numpy
arrays inside:

- :func:`mean_pool` averages per-token rows into one vector.
- :func:`reconcile_dimension` forces a vector to the configured length by
  truncating or right-padding with zeros.  This is a deliberate lossy step:
  upstream models can drift in dimensionality, the ``vector(D)`` column in
  the store cannot.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def mean_pool(rows: Sequence[Sequence[float]]) -> list[float]:
    """Return the element-wise mean of equally sized row vectors.

    ``[[a1, a2], [b1, b2]]`` pools to ``[(a1 + b1) / 2, (a2 + b2) / 2]``.

    Raises
    ------
    ValueError
        If ``rows`` is empty or the rows differ in length.
    """
    if not rows:
        raise ValueError("Cannot mean-pool an empty matrix")
    width = len(rows[0])
    if width == 0 or any(len(row) != width for row in rows):
        raise ValueError("Cannot mean-pool a ragged or empty-row matrix")

    matrix = np.asarray(rows, dtype=np.float64)
    return matrix.mean(axis=0).tolist()


def reconcile_dimension(vector: Sequence[float], dimension: int) -> list[float]:
    """Truncate or zero-pad ``vector`` to exactly ``dimension`` values.

    The first ``min(len(vector), dimension)`` values are preserved; any
    non-finite value (NaN, inf) becomes ``0.0``.
    """
    if dimension <= 0:
        raise ValueError(f"Target dimension must be positive, got {dimension}")

    result = np.zeros(dimension, dtype=np.float64)
    keep = min(len(vector), dimension)
    if keep:
        head = np.asarray(vector[:keep], dtype=np.float64)
        result[:keep] = np.where(np.isfinite(head), head, 0.0)
    return result.tolist()
