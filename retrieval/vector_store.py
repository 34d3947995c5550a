# retrieval/vector_store.py
"""Read-only store for the style corpus and its 8-bit quantized embeddings."""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import os
from collections.abc import Sequence
from typing import Any

import numpy as np
import structlog
from pydantic import ValidationError

from config import RAG_EMBEDDINGS_PATH, RAG_META_PATH, settings
from models import QuantizedEmbedding, ReferenceItem

logger = structlog.get_logger(__name__)


class CorpusLoadError(ValueError):
    """Raised when the corpus files are missing or inconsistent."""


def decode_quantized_embedding(entry: QuantizedEmbedding) -> np.ndarray:
    """Reconstruct a float vector: ``byte / 255 * (max - min) + min``."""
    raw = base64.b64decode(entry.data)
    codes = np.frombuffer(raw, dtype=np.uint8).astype(np.float32)
    value_range = np.float32(entry.max - entry.min)
    return (codes / np.float32(255.0)) * value_range + np.float32(entry.min)


class QuantizedVectorStore:
    """Holds reference items and their embeddings, index-aligned."""

    def __init__(self, expected_dim: int | None = None) -> None:
        self.expected_dim = expected_dim or settings.EXPECTED_EMBEDDING_DIM
        self.items: list[ReferenceItem] = []
        self.embeddings: list[QuantizedEmbedding] = []
        self._matrix: np.ndarray | None = None
        self.loaded = False

    def __len__(self) -> int:
        return len(self.items) if self.loaded else 0

    def load(
        self,
        metadata: Sequence[dict[str, Any]],
        embeddings: Sequence[dict[str, Any]],
    ) -> None:
        """Validate and install a corpus. Raises CorpusLoadError on mismatch."""
        if len(metadata) != len(embeddings):
            raise CorpusLoadError(
                f"Corpus size mismatch: {len(metadata)} items vs {len(embeddings)} embeddings"
            )
        try:
            items = [
                ReferenceItem(**{**meta, "index": i}) for i, meta in enumerate(metadata)
            ]
            entries = [QuantizedEmbedding(**entry) for entry in embeddings]
        except (TypeError, ValidationError) as e:
            raise CorpusLoadError(f"Malformed corpus entry: {e}") from e

        dims = set()
        for i, entry in enumerate(entries):
            try:
                dims.add(len(base64.b64decode(entry.data, validate=True)))
            except (binascii.Error, ValueError) as e:
                raise CorpusLoadError(f"Embedding {i} is not valid base64: {e}") from e
        if len(dims) > 1:
            raise CorpusLoadError(f"Embeddings have mixed dimensionality: {sorted(dims)}")
        if dims and self.expected_dim not in dims:
            raise CorpusLoadError(
                f"Embedding dimension {dims.pop()} does not match the query dimension {self.expected_dim}"
            )

        self.items = items
        self.embeddings = entries
        self._matrix = None
        self.loaded = True
        logger.info(
            "Style corpus loaded.",
            items=len(items),
            dimension=next(iter(dims), 0),
        )

    def load_from_files(
        self, meta_path: str = RAG_META_PATH, embeddings_path: str = RAG_EMBEDDINGS_PATH
    ) -> bool:
        """Load the corpus from JSON files. Leaves the store unloaded on any error."""
        if not os.path.exists(meta_path) or not os.path.exists(embeddings_path):
            logger.warning(
                "Style corpus files not found. Style search disabled.",
                meta_path=meta_path,
                embeddings_path=embeddings_path,
            )
            return False
        try:
            with open(meta_path, encoding="utf-8") as f:
                metadata = json.load(f)
            with open(embeddings_path, encoding="utf-8") as f:
                embeddings = json.load(f)
            if not isinstance(metadata, list) or not isinstance(embeddings, list):
                raise CorpusLoadError("Corpus files must each contain a JSON list.")
            self.load(metadata, embeddings)
            return True
        except json.JSONDecodeError:
            logger.error(
                "Error decoding style corpus JSON. Style search disabled.",
                exc_info=True,
            )
        except (OSError, CorpusLoadError) as e:
            logger.error("Style corpus load failed: %s. Style search disabled.", e)
        self.unload()
        return False

    async def load_from_files_async(
        self, meta_path: str = RAG_META_PATH, embeddings_path: str = RAG_EMBEDDINGS_PATH
    ) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self.load_from_files, meta_path, embeddings_path
        )

    def unload(self) -> None:
        self.items = []
        self.embeddings = []
        self._matrix = None
        self.loaded = False

    def decode(self, index: int) -> np.ndarray:
        return decode_quantized_embedding(self.embeddings[index])

    def matrix(self) -> np.ndarray:
        """All decoded vectors stacked row-wise, built once per load."""
        if self._matrix is None:
            if not self.embeddings:
                self._matrix = np.zeros((0, 0), dtype=np.float32)
            else:
                self._matrix = np.vstack(
                    [decode_quantized_embedding(e) for e in self.embeddings]
                )
        return self._matrix
