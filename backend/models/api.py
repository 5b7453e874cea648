"""API request/response models."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Body of POST /chat."""
    model_config = ConfigDict(populate_by_name=True)

    query: str
    selected_file: Optional[str] = Field(default=None, alias="selectedFile")
    user_email: str = Field(default="anonymous", alias="userEmail")


class ChatResponse(BaseModel):
    """Answer returned by POST /chat."""
    model_config = ConfigDict(populate_by_name=True)

    answer: str
    agent: str
    sources: List[str]
    similarity: str  # formatted percentage, e.g. "52.0%"
    multi_question: bool = Field(..., alias="multiQuestion")


class HistoryItem(BaseModel):
    """One chat record as shown in the history view."""
    id: Optional[str] = None
    question: str
    answer: str
    agent: str
    sources: List[str] = []
    timestamp: Optional[datetime] = None


class HistoryResponse(BaseModel):
    success: bool
    history: List[HistoryItem]


class IngestRequest(BaseModel):
    """Already-extracted document text to chunk, embed and store."""
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., min_length=1, alias="fileName")
    text: str
    version: str = "v1.0"
    category: str = "Uncategorized"
    tags: List[str] = []


class IngestResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    document_id: str = Field(..., alias="documentId")
    file_name: str = Field(..., alias="fileName")
    chunks: int
    status: str


class DocumentInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(..., alias="documentId")
    file_name: str = Field(..., alias="fileName")
    status: str
    total_chunks: int = Field(..., alias="totalChunks")
    version: str
    category: str
    tags: List[str] = []
    uploaded: Optional[datetime] = None


class DocumentListResponse(BaseModel):
    documents: List[DocumentInfo]


class ArchiveResponse(BaseModel):
    success: bool
    message: str
