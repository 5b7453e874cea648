"""Main entry point for DocuChat RAG API."""
import logging
import time
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from config import PORT, CORS_ORIGINS, LOG_LEVEL, LOG_FORMAT, HISTORY_PAGE_SIZE
from logger import setup_logging
from models.api import (
    ArchiveResponse,
    ChatRequest,
    ChatResponse,
    DocumentInfo,
    DocumentListResponse,
    HistoryItem,
    HistoryResponse,
    IngestRequest,
    IngestResponse,
)
from models.chunk import ChunkStatus
from services.agent_classifier import AgentClassifier
from services.chat_history import ChatHistoryStore
from services.chat_pipeline import ChatPipeline
from services.chunk_store import ChunkStore
from services.chunking_engine import ChunkingEngine
from services.document_ingestor import DocumentIngestor
from services.embedding_model import EmbeddingModel
from services.errors import LLMClientError, RequestTimeoutError
from services.llm_client import LLMClient
from services.response_generator import ResponseGenerator
from services.retrieval_engine import RetrievalEngine
from services.web_search import WebSearchClient

# Initialize logging
setup_logging(LOG_LEVEL, LOG_FORMAT)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="DocuChat RAG API",
    description="Retrieval-augmented chat over uploaded documents",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Build the service graph once and keep it on app.state."""
    logger.info("Initializing DocuChat services...")

    try:
        embedding_model = EmbeddingModel()
        chunk_store = ChunkStore(embedding_model)
        llm_client = LLMClient()
        chat_history = ChatHistoryStore()

        app.state.chunk_store = chunk_store
        app.state.chat_history = chat_history
        app.state.ingestor = DocumentIngestor(ChunkingEngine(), chunk_store)
        app.state.pipeline = ChatPipeline(
            retrieval_engine=RetrievalEngine(chunk_store, embedding_model),
            agent_classifier=AgentClassifier(llm_client),
            response_generator=ResponseGenerator(llm_client),
            chat_history=chat_history,
            web_search=WebSearchClient(),
        )
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


def _service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail="Service not configured")
    return service


def get_pipeline(request: Request) -> ChatPipeline:
    return _service(request, "pipeline")


def get_chat_history(request: Request) -> ChatHistoryStore:
    return _service(request, "chat_history")


def get_chunk_store(request: Request) -> ChunkStore:
    return _service(request, "chunk_store")


def get_ingestor(request: Request) -> DocumentIngestor:
    return _service(request, "ingestor")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "DocuChat RAG API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "docuchat-rag",
        "version": "1.0.0"
    }


# Sync handlers run in the threadpool, so retry backoff only blocks its own request
@app.post("/chat", response_model=ChatResponse)
def chat_endpoint(request: ChatRequest, pipeline: ChatPipeline = Depends(get_pipeline)) -> ChatResponse:
    """
    Answer a question from the uploaded documents.

    Falls back to general knowledge when no stored chunk is relevant enough.

    Raises:
        HTTPException: 400 for an empty query, 503 when the model stays
            unavailable, 504 when the request deadline passes, 500 otherwise
    """
    start_time = time.time()

    if not request.query or not request.query.strip():
        raise HTTPException(status_code=400, detail="Query is required")

    logger.info(f"Chat request from {request.user_email}: {request.query[:100]}")

    try:
        result = pipeline.answer(
            request.query,
            selected_file=request.selected_file,
            user_email=request.user_email,
        )
    except LLMClientError as e:
        logger.error(f"LLM client error: {e.error.message}")
        raise HTTPException(
            status_code=503,
            detail={
                "error": {
                    "code": e.error.code,
                    "message": e.error.message,
                    "details": e.error.details
                }
            }
        )
    except RequestTimeoutError as e:
        logger.error(f"Chat request timed out: {e}")
        raise HTTPException(status_code=504, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error processing query: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e) or "Failed to process query")

    latency_ms = int((time.time() - start_time) * 1000)
    logger.info(
        f"Chat request completed in {latency_ms}ms",
        extra={"agent": result.agent, "similarity": result.similarity, "sources": result.sources}
    )

    return ChatResponse(
        answer=result.answer,
        agent=result.agent,
        sources=result.sources,
        similarity=result.similarity_label,
        multi_question=result.multi_question,
    )


@app.get("/chat/history", response_model=HistoryResponse)
def chat_history_endpoint(
    user_email: str = Query(default="anonymous", alias="userEmail"),
    chat_history: ChatHistoryStore = Depends(get_chat_history)
) -> HistoryResponse:
    """Most recent chat records for a user, newest first."""
    try:
        records = chat_history.find_recent(user_email, limit=HISTORY_PAGE_SIZE)
    except Exception as e:
        logger.error(f"Failed to fetch chat history: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    logger.info(f"Found {len(records)} chat messages for {user_email}")
    return HistoryResponse(
        success=True,
        history=[
            HistoryItem(
                id=r.record_id,
                question=r.question,
                answer=r.answer,
                agent=r.agent,
                sources=r.sources,
                timestamp=r.timestamp,
            )
            for r in records
        ],
    )


@app.post("/documents", response_model=IngestResponse)
def ingest_document(
    request: IngestRequest,
    ingestor: DocumentIngestor = Depends(get_ingestor)
) -> IngestResponse:
    """Chunk, embed and store already-extracted document text."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="No text extracted")

    try:
        chunks = ingestor.ingest(
            request.text,
            request.file_name,
            version=request.version,
            category=request.category,
            tags=request.tags,
        )
    except Exception as e:
        logger.error(f"Upload failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return IngestResponse(
        success=True,
        document_id=chunks[0].document_id,
        file_name=request.file_name,
        chunks=len(chunks),
        status=ChunkStatus.ACTIVE,
    )


@app.get("/documents", response_model=DocumentListResponse)
def list_documents(chunk_store: ChunkStore = Depends(get_chunk_store)) -> DocumentListResponse:
    """Uploaded documents, newest first."""
    try:
        documents = chunk_store.list_documents()
    except Exception as e:
        logger.error(f"Failed to fetch documents: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    return DocumentListResponse(
        documents=[
            DocumentInfo(
                document_id=d.document_id,
                file_name=d.file_name,
                status=d.status,
                total_chunks=d.total_chunks,
                version=d.version,
                category=d.category,
                tags=d.tags,
                uploaded=d.uploaded_at,
            )
            for d in documents
        ]
    )


@app.delete("/documents/{document_id}", response_model=ArchiveResponse)
def archive_document(document_id: str, chunk_store: ChunkStore = Depends(get_chunk_store)) -> ArchiveResponse:
    """Archive a document so its chunks are no longer retrieved."""
    try:
        archived = chunk_store.archive_document(document_id)
    except Exception as e:
        logger.error(f"Archive failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    if archived == 0:
        raise HTTPException(status_code=404, detail="Document not found")

    return ArchiveResponse(success=True, message="Document archived successfully")


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting DocuChat RAG API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
