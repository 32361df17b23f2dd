"""Vector similarity scoring."""

from __future__ import annotations

import math
from typing import Sequence

from knowsynth.errors import DimensionMismatchError


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the cosine similarity of two equal-length vectors.

    Returns ``0.0`` when either vector has zero magnitude.
    """

    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


__all__ = ["cosine_similarity"]
