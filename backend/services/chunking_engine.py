"""Chunking engine splitting extracted document text into word windows."""
import logging
import re
import time
from datetime import datetime, timezone
from typing import List, Optional

from config import CHUNK_SIZE
from models.chunk import Chunk, ChunkStatus

logger = logging.getLogger(__name__)


class ChunkingEngine:
    """Segments document text into fixed-size, non-overlapping word windows."""

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        """
        Initialize ChunkingEngine.

        Args:
            chunk_size: Words per chunk
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def split(self, text: str) -> List[str]:
        """Split text on whitespace into windows of chunk_size words."""
        words = [w for w in re.split(r"\s+", text) if w]
        windows = [
            " ".join(words[i:i + self.chunk_size])
            for i in range(0, len(words), self.chunk_size)
        ]
        return windows or [text]

    def chunk_document(
        self,
        text: str,
        file_name: str,
        document_id: Optional[str] = None,
        version: str = "v1.0",
        category: str = "Uncategorized",
        tags: Optional[List[str]] = None
    ) -> List[Chunk]:
        """
        Build Active chunks for one document.

        Args:
            text: Already-extracted document text
            file_name: Source file name, used as the chunk source
            document_id: Shared ID for all chunks, generated when omitted

        Returns:
            Chunks without embeddings, in document order

        Raises:
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("No text extracted")

        document_id = document_id or str(int(time.time() * 1000))
        uploaded_at = datetime.now(timezone.utc)
        windows = self.split(text)

        chunks = [
            Chunk(
                chunk_id=f"{document_id}_{idx}",
                document_id=document_id,
                file_name=file_name,
                text=window,
                status=ChunkStatus.ACTIVE,
                chunk_index=idx,
                total_chunks=len(windows),
                version=version,
                category=category,
                tags=list(tags or []),
                uploaded_at=uploaded_at,
            )
            for idx, window in enumerate(windows)
        ]

        logger.info(f"Chunked {file_name} into {len(chunks)} chunks (document {document_id})")
        return chunks
