# tests/test_vector_store.py
import json

import numpy as np
import pytest

from config import settings
from models import QuantizedEmbedding
from retrieval import CorpusLoadError, QuantizedVectorStore, decode_quantized_embedding
from corpus_helpers import encode_entry


def test_decode_quantized_embedding_values():
    entry = QuantizedEmbedding(**encode_entry([0, 255, 51], -1.0, 1.0))
    decoded = decode_quantized_embedding(entry)
    assert decoded.dtype == np.float32
    np.testing.assert_allclose(decoded, [-1.0, 1.0, -0.6], atol=1e-6)


def test_decode_quantized_embedding_is_deterministic():
    entry = QuantizedEmbedding(**encode_entry([7, 99, 200, 13], -0.25, 0.75))
    assert np.array_equal(
        decode_quantized_embedding(entry), decode_quantized_embedding(entry)
    )


def test_load_rejects_count_mismatch():
    store = QuantizedVectorStore()
    with pytest.raises(CorpusLoadError):
        store.load([{"page_type": "BODY"}], [])
    assert not store.loaded


def test_load_rejects_mixed_dimensions():
    store = QuantizedVectorStore()
    with pytest.raises(CorpusLoadError):
        store.load(
            [{"page_type": "BODY"}, {"page_type": "BODY"}],
            [encode_entry([1, 2, 3]), encode_entry([1, 2])],
        )


def test_load_assigns_aligned_indices():
    store = QuantizedVectorStore(expected_dim=2)
    store.load(
        [{"page_type": "COVER"}, {"page_type": "BODY", "file_url": "u"}],
        [encode_entry([1, 2]), encode_entry([3, 4])],
    )
    assert store.loaded
    assert len(store) == 2
    assert [item.index for item in store.items] == [0, 1]
    assert store.matrix().shape == (2, 2)


def test_load_rejects_dimension_other_than_query_dimension():
    store = QuantizedVectorStore(expected_dim=768)
    with pytest.raises(CorpusLoadError):
        store.load([{"page_type": "BODY"}], [encode_entry([1] * 8)])
    assert not store.loaded


def test_default_expected_dimension_follows_settings():
    assert QuantizedVectorStore().expected_dim == settings.EXPECTED_EMBEDDING_DIM


def test_load_from_files_dimension_mismatch_stays_unloaded(tmp_path):
    meta = tmp_path / "meta.json"
    emb = tmp_path / "emb.json"
    meta.write_text(json.dumps([{"page_type": "BODY"}]), encoding="utf-8")
    emb.write_text(json.dumps([encode_entry([10, 20, 30])]), encoding="utf-8")
    store = QuantizedVectorStore(expected_dim=4)
    assert not store.load_from_files(str(meta), str(emb))
    assert len(store) == 0


def test_load_from_files_missing(tmp_path):
    store = QuantizedVectorStore()
    assert not store.load_from_files(
        str(tmp_path / "meta.json"), str(tmp_path / "emb.json")
    )
    assert not store.loaded
    assert len(store) == 0


def test_load_from_files_bad_json(tmp_path):
    meta = tmp_path / "meta.json"
    emb = tmp_path / "emb.json"
    meta.write_text("[not json", encoding="utf-8")
    emb.write_text("[]", encoding="utf-8")
    store = QuantizedVectorStore()
    assert not store.load_from_files(str(meta), str(emb))
    assert not store.loaded


def test_load_from_files_success(tmp_path):
    meta = tmp_path / "meta.json"
    emb = tmp_path / "emb.json"
    meta.write_text(json.dumps([{"page_type": "BODY"}]), encoding="utf-8")
    emb.write_text(json.dumps([encode_entry([10, 20, 30])]), encoding="utf-8")
    store = QuantizedVectorStore(expected_dim=3)
    assert store.load_from_files(str(meta), str(emb))
    assert store.decode(0).shape == (3,)


@pytest.mark.asyncio
async def test_load_from_files_async(tmp_path):
    store = QuantizedVectorStore()
    assert not await store.load_from_files_async(
        str(tmp_path / "a.json"), str(tmp_path / "b.json")
    )
