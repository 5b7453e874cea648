"""LLM Client for Groq API integration."""
import time
from dataclasses import dataclass
from typing import Optional, Dict, Any
from groq import Groq
from groq import RateLimitError, AuthenticationError, APIError, APIStatusError, APITimeoutError
import logging

from config import GROQ_API_KEY, GENERATION_MODEL
from services.errors import LLMError, LLMClientError
from services.retry import OVERLOADED

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


def _looks_overloaded(error: Exception) -> bool:
    if getattr(error, "status_code", None) == 503:
        return True
    return "overloaded" in str(error).lower()


class LLMClient:
    """Client for interfacing with Groq API for text generation."""

    def __init__(self, api_key: Optional[str] = None, default_model: str = GENERATION_MODEL):
        """
        Initialize LLM client with Groq API key.

        Args:
            api_key: Groq API key (defaults to GROQ_API_KEY from environment)
            default_model: Model used when generate() is called without one
        """
        self.api_key = api_key or GROQ_API_KEY
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided or set in environment")

        self.default_model = default_model
        self.client = Groq(api_key=self.api_key)
        logger.info("LLMClient initialized successfully")

    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = 1024,
        temperature: float = 0.7
    ) -> LLMResponse:
        """
        Generate response using Groq API.

        Args:
            prompt: Complete prompt with context and query
            model: Model name, defaults to the client's default model
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            LLMClientError: Structured error with code, message, and details.
                A code of "OVERLOADED" marks a transient, retryable failure.
        """
        model = model or self.default_model
        start_time = time.time()

        try:
            logger.debug(f"Generating response with model: {model}")

            response = self.client.chat.completions.create(
                model=model,
                messages=[
                    {
                        "role": "user",
                        "content": prompt
                    }
                ],
                max_tokens=max_tokens,
                temperature=temperature
            )

            latency_ms = int((time.time() - start_time) * 1000)

            text = response.choices[0].message.content or ""
            tokens_input = response.usage.prompt_tokens
            tokens_output = response.usage.completion_tokens

            logger.info(
                f"Generated response: model={model}, "
                f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
                f"latency={latency_ms}ms"
            )

            return LLMResponse(
                text=text,
                tokens_input=tokens_input,
                tokens_output=tokens_output,
                latency_ms=latency_ms,
                model_used=model
            )

        except RateLimitError as e:
            raise self._error(
                "RATE_LIMIT_ERROR",
                "Rate limit exceeded. Please try again in a few moments.",
                model, start_time, e, retry_after=60
            )
        except AuthenticationError as e:
            raise self._error(
                "AUTHENTICATION_ERROR",
                "Authentication failed. Please check your API key.",
                model, start_time, e
            )
        except APITimeoutError as e:
            raise self._error(
                "TIMEOUT_ERROR", "Request timed out. Please try again.",
                model, start_time, e
            )
        except (APIStatusError, APIError) as e:
            if _looks_overloaded(e):
                raise self._error(
                    OVERLOADED, "The model is overloaded. Please try again later.",
                    model, start_time, e
                )
            raise self._error("API_ERROR", f"Groq API error: {str(e)}", model, start_time, e)
        except Exception as e:
            raise self._error(
                "UNKNOWN_ERROR", f"Unexpected error during generation: {str(e)}",
                model, start_time, e, error_type=type(e).__name__
            )

    @staticmethod
    def _error(
        code: str,
        message: str,
        model: str,
        start_time: float,
        original: Exception,
        **extra: Any
    ) -> LLMClientError:
        """Build and log a structured LLMClientError for a failed call."""
        latency_ms = int((time.time() - start_time) * 1000)
        details: Dict[str, Any] = {
            "model": model,
            "latency_ms": latency_ms,
            "original_error": str(original),
            **extra
        }
        error = LLMError(code=code, message=message, details=details)

        # Overload is expected and retried by the caller, keep it out of the error log
        log = logger.warning if code == OVERLOADED else logger.error
        log(
            f"{code}: model={model}, latency={latency_ms}ms, error={original}",
            exc_info=code != OVERLOADED,
            extra={"error_code": code, "error_details": details}
        )
        return LLMClientError(error)
