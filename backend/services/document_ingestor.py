"""Ingest already-extracted document text into the chunk store."""
import logging
import os
from typing import List, Optional, Tuple

from models.chunk import Chunk
from services.chunk_store import ChunkStore
from services.chunking_engine import ChunkingEngine

logger = logging.getLogger(__name__)


class DocumentIngestor:
    """Chunk, embed and store one document under a single document ID."""

    def __init__(self, chunking_engine: ChunkingEngine, chunk_store: ChunkStore):
        self.chunking_engine = chunking_engine
        self.chunk_store = chunk_store

    def ingest(
        self,
        text: str,
        file_name: str,
        version: str = "v1.0",
        category: str = "Uncategorized",
        tags: Optional[List[str]] = None
    ) -> List[Chunk]:
        """
        Store a document's text as Active chunks.

        Returns:
            The stored chunks, embeddings included

        Raises:
            ValueError: If text is empty
            RuntimeError: If embedding or storage fails
        """
        chunks = self.chunking_engine.chunk_document(
            text, file_name, version=version, category=category, tags=tags
        )
        self.chunk_store.add_chunks(chunks)
        logger.info(f"Document {file_name} stored successfully ({len(chunks)} chunks)")
        return chunks


def load_text_files(directory: str) -> List[Tuple[str, str]]:
    """
    Read every .txt file in a directory.

    Returns:
        (file_name, text) pairs sorted by file name; unreadable files are skipped
    """
    if not os.path.isdir(directory):
        logger.error(f"Documents directory not found: {directory}")
        return []

    files = sorted(f for f in os.listdir(directory) if f.endswith(".txt"))
    logger.info(f"Found {len(files)} text files in {directory}")

    documents = []
    for file_name in files:
        try:
            with open(os.path.join(directory, file_name), encoding="utf-8") as fh:
                documents.append((file_name, fh.read()))
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error loading {file_name}: {str(e)}")
    return documents
