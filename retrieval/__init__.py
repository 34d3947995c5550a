"""Style corpus storage and similarity search."""

from .retriever import StyleRetriever
from .search_engine import ScoredCandidate, StyleSearchEngine
from .vector_store import (
    CorpusLoadError,
    QuantizedVectorStore,
    decode_quantized_embedding,
)

__all__ = [
    "CorpusLoadError",
    "QuantizedVectorStore",
    "ScoredCandidate",
    "StyleRetriever",
    "StyleSearchEngine",
    "decode_quantized_embedding",
]
