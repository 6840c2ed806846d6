import asyncio
import math
import pytest
from unbind.embeddings.embeddings import HashingEmbedding, embed_texts, get_embedding_model
from unbind.utils.config import AppConfig


def test_hashing_embedding_is_deterministic_and_normalized():
    emb = HashingEmbedding(dim=32)
    a = emb.embed_query("Notice period of thirty days")
    assert a == emb.embed_query("notice PERIOD of thirty days")
    assert len(a) == 32
    assert math.isclose(sum(v * v for v in a), 1.0, rel_tol=1e-9)
    assert emb.embed_query("   ") == [0.0] * 32


def test_embed_texts_keeps_order():
    emb = HashingEmbedding()
    texts = ["rent", "deposit", "rent"]
    vectors = asyncio.run(embed_texts(emb, texts))
    assert len(vectors) == 3
    assert vectors[0] == vectors[2]
    assert vectors[0] != vectors[1]


def test_backend_selection():
    assert isinstance(get_embedding_model(AppConfig(embed_backend="hashing")), HashingEmbedding)
    with pytest.raises(ValueError):
        get_embedding_model(AppConfig(embed_backend="nope"))
