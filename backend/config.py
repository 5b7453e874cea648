"""Configuration management for DocuChat RAG backend."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Optional web search (Google Custom Search)
GOOGLE_SEARCH_API_KEY = os.getenv("GOOGLE_SEARCH_API_KEY")
GOOGLE_SEARCH_ENGINE_ID = os.getenv("GOOGLE_SEARCH_ENGINE_ID")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")  # "json" or "text"
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "55"))

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")

# Model Configuration
EMBEDDING_MODEL = "sentence-transformers/all-mpnet-base-v2"
EMBEDDING_DIMENSION = 768
MAX_EMBED_CHARS = 10000  # characters, overlong input is truncated before embedding
GENERATION_MODEL = "llama-3.3-70b-versatile"

# Chunking Configuration
CHUNK_SIZE = 500  # words

# Retrieval Configuration
TOP_K = 8
RELEVANCE_THRESHOLD = 0.35

# Chat history
HISTORY_TURNS = 3
HISTORY_PAGE_SIZE = 50

# Retry Configuration
CLASSIFIER_MAX_ATTEMPTS = 2
GENERATION_MAX_ATTEMPTS = 3
EMBEDDING_MAX_ATTEMPTS = 3
RETRY_INITIAL_DELAY_MS = 1000

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
