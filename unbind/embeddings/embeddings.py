from __future__ import annotations
from functools import lru_cache
from typing import List
import hashlib
import math
from langchain_core.embeddings import Embeddings
from unbind.utils.config import AppConfig
from unbind.utils.logger import logger


class HashingEmbedding(Embeddings):
    """Very lightweight embedding (bag-of-hashed tokens).

    Produces deterministic vectors without model downloads; used for offline runs
    and tests via ``EMBED_BACKEND=hashing``. Not semantic beyond token overlap.
    """

    def __init__(self, dim: int = 384):
        self.dim = dim

    def _vectorize(self, text: str) -> List[float]:
        vec = [0.0] * self.dim
        tokens = [t for t in text.lower().split() if t]
        if not tokens:
            return vec
        for tok in tokens:
            h = int(hashlib.sha1(tok.encode()).hexdigest(), 16)
            vec[h % self.dim] += 1.0
        norm = math.sqrt(sum(v * v for v in vec)) or 1.0
        return [v / norm for v in vec]

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return [self._vectorize(t) for t in texts]

    def embed_query(self, text: str) -> List[float]:
        return self._vectorize(text)


@lru_cache(maxsize=4)
def _load_embedding(backend: str, model_name: str) -> Embeddings:  # pragma: no cover (cache wrapper)
    if backend == "hashing":
        return HashingEmbedding()
    if backend == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        logger.info("Loading HuggingFace embedding model %s", model_name)
        return HuggingFaceEmbeddings(model_name=model_name)
    raise ValueError(f"Unknown embedding backend: {backend}")


def get_embedding_model(config: AppConfig) -> Embeddings:
    return _load_embedding(config.embed_backend, config.embed_model)


async def embed_texts(embedder: Embeddings, texts: List[str]) -> List[List[float]]:
    """Embed a batch in one call; vectors come back in input order."""
    vectors = await embedder.aembed_documents(texts)
    return [list(v) for v in vectors]
