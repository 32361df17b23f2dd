from __future__ import annotations

import math

import pytest

from knowsynth.embeddings import cosine_similarity
from knowsynth.errors import DimensionMismatchError


def test_identical_vectors_score_one():
    assert cosine_similarity([0.3, -1.2, 4.0], [0.3, -1.2, 4.0]) == pytest.approx(1.0)


def test_opposite_and_orthogonal_vectors():
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 2.0]) == pytest.approx(0.0)


def test_similarity_is_symmetric_and_bounded():
    a = [1.0, 2.0, 3.0]
    b = [4.0, -5.0, 6.0]
    score = cosine_similarity(a, b)
    assert score == pytest.approx(cosine_similarity(b, a))
    assert -1.0 <= score <= 1.0
    expected = (4 - 10 + 18) / (math.sqrt(14) * math.sqrt(77))
    assert score == pytest.approx(expected)


def test_zero_magnitude_scores_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
    assert cosine_similarity([], []) == 0.0


def test_mismatched_lengths_raise():
    with pytest.raises(DimensionMismatchError) as excinfo:
        cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])
    assert excinfo.value.left == 2
    assert excinfo.value.right == 3
    assert isinstance(excinfo.value, ValueError)
