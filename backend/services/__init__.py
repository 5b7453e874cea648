"""Services for DocuChat RAG backend."""
from .errors import LLMError, LLMClientError, EmbeddingServiceUnavailable, EmbeddingDimensionError, RequestTimeoutError
from .retry import with_retry, is_overloaded
from .embedding_model import EmbeddingModel
from .chunk_store import ChunkStore
from .chunking_engine import ChunkingEngine
from .document_ingestor import DocumentIngestor
from .similarity import cosine_similarity, rank
from .retrieval_engine import RetrievalEngine, Grounded, Fallback, is_relevant
from .question_detector import has_multiple_questions
from .llm_client import LLMClient, LLMResponse
from .agent_classifier import AgentClassifier
from .response_generator import ResponseGenerator, clean_response
from .chat_history import ChatHistoryStore
from .web_search import WebSearchClient, SearchResult
from .chat_pipeline import ChatPipeline, ChatResult

__all__ = [
    'LLMError', 'LLMClientError', 'EmbeddingServiceUnavailable', 'EmbeddingDimensionError', 'RequestTimeoutError',
    'with_retry', 'is_overloaded', 'EmbeddingModel', 'ChunkStore', 'ChunkingEngine', 'DocumentIngestor',
    'cosine_similarity', 'rank', 'RetrievalEngine', 'Grounded', 'Fallback', 'is_relevant',
    'has_multiple_questions', 'LLMClient', 'LLMResponse', 'AgentClassifier', 'ResponseGenerator',
    'clean_response', 'ChatHistoryStore', 'WebSearchClient', 'SearchResult', 'ChatPipeline', 'ChatResult',
]
