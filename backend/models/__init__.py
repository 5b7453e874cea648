"""Data models for DocuChat RAG backend."""
from .document import DocumentSummary
from .chunk import Chunk, ChunkStatus, ScoredChunk
from .chat import ChatRecord
from .api import (
    ChatRequest,
    ChatResponse,
    HistoryItem,
    HistoryResponse,
    IngestRequest,
    IngestResponse,
    DocumentInfo,
    DocumentListResponse,
    ArchiveResponse,
)

__all__ = [
    "DocumentSummary",
    "Chunk",
    "ChunkStatus",
    "ScoredChunk",
    "ChatRecord",
    "ChatRequest",
    "ChatResponse",
    "HistoryItem",
    "HistoryResponse",
    "IngestRequest",
    "IngestResponse",
    "DocumentInfo",
    "DocumentListResponse",
    "ArchiveResponse",
]
