"""Chunk store backed by a Supabase table."""
import logging
from typing import Any, Dict, List, Optional
from supabase import create_client, Client

from config import SUPABASE_URL, SUPABASE_KEY
from models.chunk import Chunk, ChunkStatus
from models.document import DocumentSummary
from services.embedding_model import EmbeddingModel
from services.supabase_utils import parse_timestamp, parse_vector

logger = logging.getLogger(__name__)

# Supabase caps a single select at 1000 rows
PAGE_SIZE = 1000

SUMMARY_COLUMNS = "document_id,file_name,status,total_chunks,version,category,tags,uploaded_at"


class ChunkStore:
    """Persist document chunks with their embeddings and lifecycle status."""

    def __init__(
        self,
        embedding_model: EmbeddingModel,
        supabase_url: str = SUPABASE_URL,
        supabase_key: str = SUPABASE_KEY,
        table_name: str = "document_chunks"
    ):
        """
        Initialize the chunk store with a Supabase client.

        Args:
            embedding_model: EmbeddingModel used to embed chunks on insert
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            table_name: Name of the table to store chunks

        Raises:
            ValueError: If Supabase credentials are missing
        """
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY environment variables are required")

        self.embedding_model = embedding_model
        self.table_name = table_name
        self.client: Client = create_client(supabase_url, supabase_key)

        logger.info(f"Initialized ChunkStore with table: {table_name}")

    def find(self, status: str = ChunkStatus.ACTIVE, file_name: Optional[str] = None) -> List[Chunk]:
        """
        Load chunks with the given status, optionally for a single file.

        Args:
            status: Chunk status to match (Active unless explicitly overridden)
            file_name: Restrict to chunks of this file

        Returns:
            Matching chunks including embeddings

        Raises:
            RuntimeError: If database operation fails
        """
        rows: List[Dict[str, Any]] = []
        try:
            start = 0
            while True:
                query = self.client.table(self.table_name).select("*").eq("status", status)
                if file_name:
                    query = query.eq("file_name", file_name)
                response = query.order("chunk_id").range(start, start + PAGE_SIZE - 1).execute()

                page = response.data or []
                rows.extend(page)
                if len(page) < PAGE_SIZE:
                    break
                start += PAGE_SIZE
        except Exception as e:
            error_msg = f"Failed to load chunks: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg) from e

        return [self._to_chunk(row) for row in rows]

    def add_chunks(self, chunks: List[Chunk]) -> None:
        """
        Embed and insert chunks.

        Chunks that already carry an embedding are stored as-is.

        Raises:
            ValueError: If chunks list is empty or a chunk has no text
            RuntimeError: If database operation fails
        """
        if not chunks:
            raise ValueError("Chunks list cannot be empty")

        empty = [c.chunk_id for c in chunks if not c.text or not c.text.strip()]
        if empty:
            raise ValueError(f"Chunks have no text: {', '.join(empty)}")

        logger.info(f"Adding {len(chunks)} chunks to chunk store...")

        pending = [c for c in chunks if c.embedding is None]
        if pending:
            embeddings = self.embedding_model.embed_batch([c.text for c in pending])
            if len(embeddings) != len(pending):
                raise RuntimeError(
                    f"Expected {len(pending)} embeddings, got {len(embeddings)}"
                )
            for chunk, embedding in zip(pending, embeddings):
                chunk.embedding = embedding

        records = [self._to_record(chunk) for chunk in chunks]

        try:
            self.client.table(self.table_name).upsert(records).execute()
        except Exception as e:
            error_msg = f"Failed to add chunks to chunk store: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg) from e

        logger.info(f"Successfully added {len(chunks)} chunks to chunk store")

    def archive_document(self, document_id: str) -> int:
        """
        Mark every active chunk of a document as archived.

        Returns:
            Number of chunks that changed status
        """
        try:
            response = (
                self.client.table(self.table_name)
                .update({"status": ChunkStatus.ARCHIVED})
                .eq("document_id", document_id)
                .eq("status", ChunkStatus.ACTIVE)
                .execute()
            )
        except Exception as e:
            error_msg = f"Failed to archive document {document_id}: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg) from e

        archived = len(response.data or [])
        logger.info(f"Archived {archived} chunks of document {document_id}")
        return archived

    def list_documents(self) -> List[DocumentSummary]:
        """One entry per document, read from its first chunk, newest upload first."""
        rows: List[Dict[str, Any]] = []
        try:
            start = 0
            while True:
                response = (
                    self.client.table(self.table_name)
                    .select(SUMMARY_COLUMNS)
                    .eq("chunk_index", 0)
                    .order("document_id")
                    .range(start, start + PAGE_SIZE - 1)
                    .execute()
                )
                page = response.data or []
                rows.extend(page)
                if len(page) < PAGE_SIZE:
                    break
                start += PAGE_SIZE
        except Exception as e:
            error_msg = f"Failed to list documents: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg) from e

        documents: Dict[str, DocumentSummary] = {}
        for row in rows:
            if row["document_id"] in documents:
                continue
            documents[row["document_id"]] = DocumentSummary(
                document_id=row["document_id"],
                file_name=row["file_name"],
                status=row["status"],
                total_chunks=row.get("total_chunks", 1),
                version=row.get("version") or "v1.0",
                category=row.get("category") or "Uncategorized",
                tags=row.get("tags") or [],
                uploaded_at=parse_timestamp(row.get("uploaded_at")),
            )

        return sorted(
            documents.values(),
            key=lambda d: d.uploaded_at.timestamp() if d.uploaded_at else 0.0,
            reverse=True
        )

    def count(self) -> int:
        """Get the total number of chunks in the store."""
        try:
            response = self.client.table(self.table_name).select("chunk_id", count="exact").execute()
            return response.count if response.count is not None else 0
        except Exception as e:
            error_msg = f"Failed to count chunks in chunk store: {str(e)}"
            logger.error(error_msg)
            raise RuntimeError(error_msg) from e

    @staticmethod
    def _to_record(chunk: Chunk) -> Dict[str, Any]:
        return {
            "chunk_id": chunk.chunk_id,
            "document_id": chunk.document_id,
            "file_name": chunk.file_name,
            "text": chunk.text,
            "embedding": chunk.embedding,
            "status": chunk.status,
            "chunk_index": chunk.chunk_index,
            "total_chunks": chunk.total_chunks,
            "version": chunk.version,
            "category": chunk.category,
            "tags": chunk.tags,
            "uploaded_at": chunk.uploaded_at.isoformat() if chunk.uploaded_at else None,
        }

    @staticmethod
    def _to_chunk(row: Dict[str, Any]) -> Chunk:
        return Chunk(
            chunk_id=row["chunk_id"],
            document_id=row["document_id"],
            file_name=row["file_name"],
            text=row["text"],
            embedding=parse_vector(row.get("embedding")),
            status=row.get("status", ChunkStatus.ACTIVE),
            chunk_index=row.get("chunk_index", 0),
            total_chunks=row.get("total_chunks", 1),
            version=row.get("version") or "v1.0",
            category=row.get("category") or "Uncategorized",
            tags=row.get("tags") or [],
            uploaded_at=parse_timestamp(row.get("uploaded_at")),
        )
