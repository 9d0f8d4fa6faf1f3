"""Distance and similarity measures between two embedding vectors."""

import math
from typing import Sequence

from shared.errors import DimensionMismatchError


def _check_dimensions(a: Sequence[float], b: Sequence[float]) -> None:
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Compute the cosine similarity of two equal-length vectors.

    Args:
        a (Sequence[float]): First vector.
        b (Sequence[float]): Second vector.

    Returns:
        float: Normalised dot product in [-1, 1], or exactly 0.0 when either
            vector has zero magnitude.

    Raises:
        DimensionMismatchError: If the vectors have different lengths.
    """
    _check_dimensions(a, b)

    dot_product = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot_product += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot_product / (math.sqrt(norm_a) * math.sqrt(norm_b))


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Compute the Euclidean distance between two equal-length vectors.

    Raises:
        DimensionMismatchError: If the vectors have different lengths.
    """
    _check_dimensions(a, b)
    return math.sqrt(sum((x - y) * (x - y) for x, y in zip(a, b)))
