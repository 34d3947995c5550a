import random
from collections.abc import Sequence
from typing import TypeVar

import numpy as np
import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def batch_cosine_similarity(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row of ``matrix``.

    Rows (or a query) with zero norm score exactly 0.0.
    """
    q = np.asarray(query, dtype=np.float64).flatten()
    m = np.asarray(matrix, dtype=np.float64)
    if m.ndim != 2 or m.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)
    if m.shape[1] != q.shape[0]:
        logger.warning(
            "Batch cosine similarity: dimension mismatch %s vs %s. Returning zeros.",
            q.shape,
            m.shape,
        )
        return np.zeros(m.shape[0], dtype=np.float64)

    q_norm = np.linalg.norm(q)
    row_norms = np.linalg.norm(m, axis=1)
    if q_norm == 0.0:
        return np.zeros(m.shape[0], dtype=np.float64)

    denom = row_norms * q_norm
    dots = m @ q
    scores = np.zeros(m.shape[0], dtype=np.float64)
    nonzero = denom != 0.0
    scores[nonzero] = dots[nonzero] / denom[nonzero]
    return np.clip(scores, -1.0, 1.0)


def sample_without_replacement(
    pool: Sequence[T], sample_size: int, rng: random.Random
) -> list[T]:
    """Draw distinct pool entries uniformly at random, in draw order.

    Rejection sampling: pick a random pool index, skip it if already used.
    """
    target = min(len(pool), sample_size)
    if target <= 0:
        return []
    used: set[int] = set()
    selected: list[T] = []
    while len(selected) < target:
        idx = rng.randrange(len(pool))
        if idx in used:
            continue
        used.add(idx)
        selected.append(pool[idx])
    return selected
