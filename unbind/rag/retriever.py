from __future__ import annotations
from typing import List, Sequence
import numpy as np
from langchain_core.embeddings import Embeddings
from unbind.embeddings.embeddings import embed_texts
from unbind.utils.exception import FailurePolicy
from unbind.utils.logger import logger
from unbind.utils.types import ScoredChunk

FAILURE_POLICY = FailurePolicy.TOLERANT
DEFAULT_TOP_K = 6


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity; a zero-norm vector scores 0 instead of NaN."""
    va = np.asarray(a, dtype=np.float64).ravel()
    vb = np.asarray(b, dtype=np.float64).ravel()
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb)) or 1.0
    return float(np.clip(np.dot(va, vb) / denom, -1.0, 1.0))


def rank_chunks(chunks: Sequence[str], chunk_vectors: Sequence[Sequence[float]], query_vector: Sequence[float]) -> List[ScoredChunk]:
    scored = [
        ScoredChunk(index=i, content=chunk, score=cosine_similarity(vec, query_vector))
        for i, (chunk, vec) in enumerate(zip(chunks, chunk_vectors))
    ]
    # stable sort keeps document order among ties
    return sorted(scored, key=lambda s: -s.score)


async def retrieve_top_k(embedder: Embeddings, chunks: List[str], query: str, k: int = DEFAULT_TOP_K) -> List[str]:
    """Return the ``k`` chunks most similar to ``query``, best first.

    Any embedding failure, or a vector count that does not match the input,
    returns ``chunks`` unchanged. An empty selection also falls back to ``chunks``.
    """
    if not chunks:
        return []
    inputs = list(chunks) + [query]
    try:
        vectors = await embed_texts(embedder, inputs)
        if len(vectors) != len(inputs):
            logger.warning("Embedding count mismatch (%s vectors for %s inputs); using all chunks", len(vectors), len(inputs))
            return list(chunks)
        scored = rank_chunks(chunks, vectors[:-1], vectors[-1])
    except Exception as e:
        logger.warning("Embedding retrieval failed, using all chunks unranked: %r", e)
        return list(chunks)
    selected = [s.content for s in scored[: max(k, 0)]]
    if not selected:
        return list(chunks)
    logger.debug("Selected %s of %s chunks (top score %.3f)", len(selected), len(chunks), scored[0].score)
    return selected
