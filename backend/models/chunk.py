"""Chunk data models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List


class ChunkStatus:
    """Lifecycle states of a stored chunk. Only ACTIVE -> ARCHIVED is allowed."""
    ACTIVE = "Active"
    ARCHIVED = "Archived"


@dataclass
class Chunk:
    """Represents a document chunk for retrieval."""
    chunk_id: str  # Format: "{document_id}_{chunk_index}"
    document_id: str
    file_name: str
    text: str
    embedding: Optional[List[float]] = None
    status: str = ChunkStatus.ACTIVE
    chunk_index: int = 0
    total_chunks: int = 1
    version: str = "v1.0"
    category: str = "Uncategorized"
    tags: List[str] = field(default_factory=list)
    uploaded_at: Optional[datetime] = None


@dataclass
class ScoredChunk:
    """Chunk with cosine similarity from retrieval."""
    chunk: Chunk
    similarity: float  # -1.0 to 1.0
