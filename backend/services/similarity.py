"""Cosine similarity ranking of stored chunks against a query vector."""
import logging
from typing import List, Sequence
import numpy as np

from config import EMBEDDING_DIMENSION, TOP_K
from models.chunk import Chunk, ScoredChunk
from services.errors import EmbeddingDimensionError

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two equal-length vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        EmbeddingDimensionError: If the vectors differ in length
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise EmbeddingDimensionError(f"Cannot compare vectors of length {va.size} and {vb.size}")

    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0.0:
        return 0.0

    # Clip float error so identical vectors never exceed 1.0
    return float(np.clip(np.dot(va, vb) / norm, -1.0, 1.0))


def rank(
    query_vector: Sequence[float],
    candidates: List[Chunk],
    top_k: int = TOP_K,
    dimension: int = EMBEDDING_DIMENSION
) -> List[ScoredChunk]:
    """
    Score candidates against the query and keep the top_k best.

    Ties keep input order. Candidates without an embedding, or whose
    embedding has the wrong dimension, are skipped.

    Args:
        query_vector: Embedding of the user query
        candidates: Chunks with stored embeddings
        top_k: Maximum number of results
        dimension: Required embedding dimension

    Returns:
        ScoredChunks sorted by similarity, highest first

    Raises:
        EmbeddingDimensionError: If the query vector has the wrong dimension
    """
    if len(query_vector) != dimension:
        raise EmbeddingDimensionError(
            f"Query embedding has {len(query_vector)} dimensions, expected {dimension}"
        )

    scored = []
    skipped = 0
    for chunk in candidates:
        if not chunk.embedding or len(chunk.embedding) != dimension:
            skipped += 1
            continue
        scored.append(ScoredChunk(chunk=chunk, similarity=cosine_similarity(query_vector, chunk.embedding)))

    if skipped:
        logger.warning(f"Skipped {skipped} chunks with missing or mismatched embeddings")

    # sorted() is stable, so equal scores keep their input order
    scored = sorted(scored, key=lambda s: s.similarity, reverse=True)[:top_k]

    logger.debug(f"Top similarities: {[round(s.similarity, 4) for s in scored]}")
    return scored
