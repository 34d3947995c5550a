# retrieval/retriever.py
"""Text-to-references lookup: query embedding followed by style search."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

import structlog

from config import settings
from models import ReferenceItem

from .search_engine import StyleSearchEngine
from .vector_store import QuantizedVectorStore

if TYPE_CHECKING:  # pragma: no cover - for type hints only
    from core.gemini_client import GeminiService

logger = structlog.get_logger(__name__)


class StyleRetriever:
    """Find style references for a free-text query. Never raises."""

    def __init__(
        self,
        store: QuantizedVectorStore,
        embedder: GeminiService,
        engine: StyleSearchEngine | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.engine = engine or StyleSearchEngine(store)
        self.search_count = 0

    @property
    def rag_loaded(self) -> bool:
        return self.store.loaded

    async def search(
        self,
        query_text: str,
        page_type: str | None = None,
        top_k: int = 3,
        rng: random.Random | None = None,
    ) -> list[ReferenceItem]:
        if not self.store.loaded:
            return []
        if not settings.GOOGLE_API_KEY:
            logger.debug("Style search skipped: no API key configured.")
            return []

        self.search_count += 1
        try:
            query_vector = await self.embedder.async_get_embedding(query_text)
            if query_vector is None:
                return []
            return self.engine.search(query_vector, page_type, top_k, rng=rng)
        except Exception as e:
            logger.warning("Style search error: %s", e, exc_info=True)
            return []
