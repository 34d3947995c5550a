# retrieval/search_engine.py
"""Cosine-similarity search with randomized sampling from the top pool."""

from __future__ import annotations

import random
from dataclasses import dataclass

import numpy as np
import structlog

from config import settings
from models import ReferenceItem
from utils.similarity import batch_cosine_similarity, sample_without_replacement

from .vector_store import QuantizedVectorStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScoredCandidate:
    index: int
    similarity: float


class StyleSearchEngine:
    """Scores the corpus against a query vector and samples from the best matches."""

    def __init__(
        self,
        store: QuantizedVectorStore,
        pool_cap_filtered: int | None = None,
        pool_cap_unfiltered: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.pool_cap_filtered = pool_cap_filtered or settings.POOL_CAP_FILTERED
        self.pool_cap_unfiltered = pool_cap_unfiltered or settings.POOL_CAP_UNFILTERED
        self._rng = rng or random.Random()

    def rank(
        self, query_vector: np.ndarray, category: str | None = None
    ) -> list[ScoredCandidate]:
        """Candidates matching ``category`` ordered by descending similarity."""
        if not self.store.loaded or len(self.store) == 0:
            return []
        matrix = self.store.matrix()
        query = np.asarray(query_vector).ravel()
        if query.shape[0] != matrix.shape[1]:
            logger.warning(
                "Query dimension %d does not match corpus dimension %d. No results.",
                query.shape[0],
                matrix.shape[1],
            )
            return []

        indices = list(range(len(self.store.items)))
        if category:
            wanted = category.upper()
            indices = [
                i
                for i in indices
                if (self.store.items[i].page_type or "").upper() == wanted
            ]
        if not indices:
            return []

        scores = batch_cosine_similarity(query, matrix[indices])
        candidates = [
            ScoredCandidate(index=i, similarity=float(s))
            for i, s in zip(indices, scores)
        ]
        candidates.sort(key=lambda c: c.similarity, reverse=True)
        return candidates

    def pool_cap(self, category: str | None) -> int:
        return self.pool_cap_filtered if category else self.pool_cap_unfiltered

    def search(
        self,
        query_vector: np.ndarray,
        category: str | None = None,
        sample_size: int = 3,
        rng: random.Random | None = None,
    ) -> list[ReferenceItem]:
        """Random sample of size ``min(pool, sample_size)`` from the top-scoring pool.

        Results are in draw order, not similarity order.
        """
        if sample_size <= 0:
            return []
        candidates = self.rank(query_vector, category)
        if not candidates:
            return []

        pool = candidates[: min(len(candidates), self.pool_cap(category))]
        picked = sample_without_replacement(pool, sample_size, rng or self._rng)
        logger.debug(
            "Style search sampled %d of pool %d (category=%s).",
            len(picked),
            len(pool),
            category,
        )
        return [self.store.items[c.index] for c in picked]
