"""Retrieval engine: query embedding, ranking and the relevance gate."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from config import RELEVANCE_THRESHOLD, TOP_K
from models.chunk import ChunkStatus, ScoredChunk
from services.chunk_store import ChunkStore
from services.embedding_model import EmbeddingModel
from services.similarity import rank

logger = logging.getLogger(__name__)


def is_relevant(top_similarity: float, threshold: float = RELEVANCE_THRESHOLD) -> bool:
    """Whether the best match is good enough to ground an answer (inclusive)."""
    return top_similarity >= threshold


@dataclass
class Grounded:
    """Retrieved context is relevant; answer from the documents."""
    chunks: List[ScoredChunk]
    top_similarity: float

    @property
    def texts(self) -> List[str]:
        return [c.chunk.text for c in self.chunks]

    @property
    def sources(self) -> List[str]:
        """Unique source file names in ranking order."""
        return list(dict.fromkeys(c.chunk.file_name for c in self.chunks))


@dataclass
class Fallback:
    """No usable context; answer from general knowledge."""
    top_similarity: float = 0.0
    chunks: List[ScoredChunk] = field(default_factory=list)


RetrievalOutcome = Union[Grounded, Fallback]


class RetrievalEngine:
    """Embed a query, rank the active chunks and decide Grounded vs Fallback."""

    def __init__(
        self,
        chunk_store: ChunkStore,
        embedding_model: EmbeddingModel,
        top_k: int = TOP_K,
        threshold: float = RELEVANCE_THRESHOLD
    ):
        self.chunk_store = chunk_store
        self.embedding_model = embedding_model
        self.top_k = top_k
        self.threshold = threshold
        logger.info(f"Initialized RetrievalEngine (top_k={top_k}, threshold={threshold})")

    def retrieve(
        self,
        query: str,
        selected_file: Optional[str] = None,
        deadline: Optional[float] = None
    ) -> RetrievalOutcome:
        """
        Retrieve context for a query.

        1. Embed the user query
        2. Load active chunks, optionally restricted to one file
        3. Rank by cosine similarity and keep the top K
        4. Gate on the top score

        Args:
            query: User question
            selected_file: Only search chunks of this file name
            deadline: Optional time.monotonic() deadline for provider retries

        Returns:
            Grounded with the ranked chunks, or Fallback
        """
        if not query or not query.strip():
            logger.warning("Empty query string provided, falling back")
            return Fallback()

        logger.info(f"Extracting context for query (file: {selected_file or 'all'})")

        query_embedding = self.embedding_model.embed_text(query, deadline=deadline)

        candidates = self.chunk_store.find(status=ChunkStatus.ACTIVE, file_name=selected_file)
        logger.info(f"Found {len(candidates)} candidate chunks")

        if not candidates:
            return Fallback()

        scored = rank(query_embedding, candidates, top_k=self.top_k, dimension=self.embedding_model.dimension)
        if not scored:
            return Fallback()

        top_similarity = scored[0].similarity
        logger.info(
            f"Context relevance: {top_similarity * 100:.2f}% (threshold: {self.threshold * 100:.0f}%)"
        )

        if not is_relevant(top_similarity, self.threshold):
            return Fallback(top_similarity=top_similarity, chunks=scored)

        return Grounded(chunks=scored, top_similarity=top_similarity)
