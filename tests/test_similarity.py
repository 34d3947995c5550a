# tests/test_similarity.py
import random

import numpy as np
import pytest

from utils.similarity import batch_cosine_similarity, sample_without_replacement


def test_batch_cosine_similarity_self_is_one():
    v = np.array([0.3, -1.2, 4.5, 0.01])
    scores = batch_cosine_similarity(v, np.vstack([v, 2.5 * v]))
    assert scores.tolist() == pytest.approx([1.0, 1.0])


def test_batch_cosine_similarity_zero_norm_row():
    scores = batch_cosine_similarity(
        np.array([1.0, 2.0, 3.0]), np.array([[0.0, 0.0, 0.0], [1.0, 2.0, 3.0]])
    )
    assert scores[0] == 0.0


def test_batch_cosine_similarity_scores_rows():
    matrix = np.array([[1.0, 0.0], [0.0, 1.0], [0.0, 0.0], [-2.0, 0.0]])
    scores = batch_cosine_similarity(np.array([1.0, 0.0]), matrix)
    np.testing.assert_allclose(scores, [1.0, 0.0, 0.0, -1.0])


def test_batch_cosine_similarity_zero_query():
    scores = batch_cosine_similarity(np.zeros(2), np.ones((3, 2)))
    assert scores.tolist() == [0.0, 0.0, 0.0]


def test_batch_cosine_similarity_dimension_mismatch():
    scores = batch_cosine_similarity(np.ones(3), np.ones((2, 2)))
    assert scores.tolist() == [0.0, 0.0]


def test_sample_without_replacement_distinct():
    pool = list(range(10))
    picked = sample_without_replacement(pool, 5, random.Random(3))
    assert len(picked) == 5
    assert len(set(picked)) == 5
    assert set(picked) <= set(pool)


def test_sample_without_replacement_caps_at_pool_size():
    picked = sample_without_replacement(["a", "b"], 5, random.Random(0))
    assert sorted(picked) == ["a", "b"]


def test_sample_without_replacement_seeded_is_repeatable():
    pool = list(range(30))
    first = sample_without_replacement(pool, 4, random.Random(42))
    second = sample_without_replacement(pool, 4, random.Random(42))
    assert first == second


def test_sample_without_replacement_non_positive_size():
    assert sample_without_replacement([1, 2, 3], 0, random.Random(0)) == []
