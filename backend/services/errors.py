"""Exception types shared across DocuChat services."""
from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)


class EmbeddingServiceUnavailable(RuntimeError):
    """Embedding provider answered 503 (model loading or overloaded)."""


class EmbeddingDimensionError(ValueError):
    """Vector does not have the configured embedding dimension."""


class RequestTimeoutError(TimeoutError):
    """The request deadline passed before a retried operation could succeed."""
