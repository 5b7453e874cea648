"""Embedding model integration with Hugging Face Inference API."""
import time
import logging
from typing import List, Optional
import httpx
from config import (
    HUGGINGFACE_API_KEY,
    EMBEDDING_MODEL,
    EMBEDDING_DIMENSION,
    MAX_EMBED_CHARS,
    EMBEDDING_MAX_ATTEMPTS,
    RETRY_INITIAL_DELAY_MS,
)
from services.errors import EmbeddingDimensionError, EmbeddingServiceUnavailable
from services.retry import is_overloaded, with_retry

logger = logging.getLogger(__name__)


def _is_transient(error: BaseException) -> bool:
    return is_overloaded(error) or isinstance(error, httpx.TimeoutException)


class EmbeddingModel:
    """Wrapper for Hugging Face Inference API embedding model."""

    def __init__(
        self,
        api_key: str = HUGGINGFACE_API_KEY,
        model_name: str = EMBEDDING_MODEL,
        dimension: int = EMBEDDING_DIMENSION,
        max_chars: int = MAX_EMBED_CHARS,
        max_retries: int = EMBEDDING_MAX_ATTEMPTS,
        initial_delay_ms: int = RETRY_INITIAL_DELAY_MS,
        timeout: float = 120.0
    ):
        """
        Initialize the embedding model client.

        Args:
            api_key: Hugging Face API key
            model_name: Model identifier (default: sentence-transformers/all-mpnet-base-v2)
            dimension: Expected vector length, other lengths are rejected
            max_chars: Input texts longer than this are truncated before the call
            max_retries: Maximum number of attempts for 503 errors and timeouts
            initial_delay_ms: Initial delay for exponential backoff
            timeout: Request timeout in seconds
        """
        if not api_key:
            raise ValueError("HUGGINGFACE_API_KEY environment variable is required")

        self.api_key = api_key
        self.model_name = model_name
        self.dimension = dimension
        self.max_chars = max_chars
        self.max_retries = max_retries
        self.initial_delay_ms = initial_delay_ms
        self.timeout = timeout
        self.api_url = f"https://api-inference.huggingface.co/models/{model_name}"

        logger.info(f"Initialized EmbeddingModel with model: {model_name} ({dimension} dims)")

    def embed_text(self, text: str, deadline: Optional[float] = None) -> List[float]:
        """
        Generate embedding for a single text string.

        Args:
            text: Text to embed
            deadline: Optional time.monotonic() deadline for retries

        Returns:
            Embedding vector as list of floats

        Raises:
            ValueError: If text is empty
            EmbeddingDimensionError: If the provider returns a vector of the wrong size
            RuntimeError: If API request fails after all retries
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        return self._embed([text], deadline)[0]

    def embed_batch(self, texts: List[str], deadline: Optional[float] = None) -> List[List[float]]:
        """
        Generate embeddings for multiple texts in a single API call.

        Raises:
            ValueError: If texts list is empty or contains only empty strings
        """
        if not texts:
            raise ValueError("Texts list cannot be empty")

        valid_texts = [t for t in texts if t and t.strip()]
        if len(valid_texts) < len(texts):
            logger.warning(f"Filtered out {len(texts) - len(valid_texts)} empty texts from batch")

        if not valid_texts:
            raise ValueError("All texts in batch are empty")

        return self._embed(valid_texts, deadline)

    def truncate(self, text: str) -> str:
        """Cut text to the provider's input limit."""
        if len(text) <= self.max_chars:
            return text
        logger.debug(f"Truncating embedding input from {len(text)} to {self.max_chars} chars")
        return text[:self.max_chars]

    def _embed(self, texts: List[str], deadline: Optional[float]) -> List[List[float]]:
        payload_texts = [self.truncate(t) for t in texts]

        embeddings = with_retry(
            lambda: self._request(payload_texts),
            max_attempts=self.max_retries,
            initial_delay_ms=self.initial_delay_ms,
            should_retry=_is_transient,
            deadline=deadline,
        )

        for vector in embeddings:
            if len(vector) != self.dimension:
                raise EmbeddingDimensionError(
                    f"Expected {self.dimension}-dimensional embedding, got {len(vector)}"
                )
        return embeddings

    def _request(self, texts: List[str]) -> List[List[float]]:
        """
        Single call to the HF API.

        HF free tier models "sleep" and answer 503 while loading; that is
        raised as EmbeddingServiceUnavailable so the retry wrapper backs off.
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        payload = {
            "inputs": texts,
            "options": {
                "wait_for_model": True
            }
        }

        start_time = time.time()
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.api_url, headers=headers, json=payload)
        except httpx.TimeoutException:
            logger.error(f"Embedding request timeout after {self.timeout}s")
            raise
        except httpx.RequestError as e:
            raise RuntimeError(f"Network error: {str(e)}") from e

        elapsed = time.time() - start_time

        if response.status_code == 503:
            raise EmbeddingServiceUnavailable(f"Embedding model unavailable (503): {response.text}")

        if response.status_code == 429:
            logger.error("Rate limit exceeded for Hugging Face API")
            raise RuntimeError("Rate limit exceeded. Please try again later.")

        if response.status_code == 401:
            logger.error("Authentication failed for Hugging Face API")
            raise RuntimeError("Invalid API key")

        if response.status_code != 200:
            error_msg = f"API request failed with status {response.status_code}: {response.text}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

        embeddings = response.json()
        logger.debug(f"Generated embeddings for {len(texts)} texts in {elapsed:.2f}s")
        return embeddings

    def warmup(self) -> bool:
        """
        Warm up the model with a dummy query to avoid cold start delays.

        Returns:
            True if warmup successful, False otherwise
        """
        try:
            logger.info("Warming up embedding model...")
            start_time = time.time()
            self.embed_text("warmup query")
            logger.info(f"Model warmup completed in {time.time() - start_time:.1f}s")
            return True
        except Exception as e:
            logger.error(f"Model warmup failed: {str(e)}")
            return False
