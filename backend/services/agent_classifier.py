"""
Agent classifier for DocuChat.

Routes a question and its retrieved context to one of three answering
personas (technical, customer, common) by asking the LLM for a single label.
"""

import logging
import re
from typing import List, Optional

from config import CLASSIFIER_MAX_ATTEMPTS, RETRY_INITIAL_DELAY_MS
from services.llm_client import LLMClient
from services.retry import with_retry

logger = logging.getLogger(__name__)

CLASSIFIER_PROMPT = """You are a routing agent. Analyze the query and determine the appropriate agent.

Agent types:
- technical: Engineering, technical specs, procedures, safety protocols, technical documentation, equipment, machinery
- customer: Customer support, product inquiries, service requests, complaints, returns, general assistance
- common: General queries, FAQs, simple questions, policies, schedules, general knowledge questions

Rules:
- Return ONLY one word: technical, customer, or common
- No explanation, no punctuation
- If multiple topics, choose the most prominent

Query: {query}

Context:
{context}

Agent:"""


class AgentClassifier:
    """Single-label LLM classification that never fails the request."""

    TECHNICAL = "technical"
    CUSTOMER = "customer"
    COMMON = "common"

    VALID_AGENTS = {TECHNICAL, CUSTOMER, COMMON}

    def __init__(
        self,
        llm_client: LLMClient,
        max_attempts: int = CLASSIFIER_MAX_ATTEMPTS,
        initial_delay_ms: int = RETRY_INITIAL_DELAY_MS
    ):
        self.llm_client = llm_client
        self.max_attempts = max_attempts
        self.initial_delay_ms = initial_delay_ms

    @staticmethod
    def build_prompt(query: str, context_chunks: List[str]) -> str:
        return CLASSIFIER_PROMPT.format(query=query, context="\n".join(context_chunks))

    @classmethod
    def normalize(cls, raw_output: str) -> str:
        """Reduce model output to a valid agent label, defaulting to common."""
        label = re.sub(r"[^a-z]", "", (raw_output or "").strip().lower())
        return label if label in cls.VALID_AGENTS else cls.COMMON

    def classify(self, query: str, context_chunks: List[str], deadline: Optional[float] = None) -> str:
        """
        Classify query and context as technical, customer or common.

        Provider overload is retried; any remaining failure resolves to
        common.

        Args:
            query: User question
            context_chunks: Retrieved chunk texts
            deadline: Optional time.monotonic() deadline for retries

        Returns:
            One of "technical", "customer", "common"
        """
        prompt = self.build_prompt(query, context_chunks)

        try:
            response = with_retry(
                lambda: self.llm_client.generate(prompt, max_tokens=10, temperature=0.0),
                max_attempts=self.max_attempts,
                initial_delay_ms=self.initial_delay_ms,
                deadline=deadline,
            )
        except Exception as e:
            logger.error(f"Error classifying agent, defaulting to {self.COMMON}: {e}")
            return self.COMMON

        agent = self.normalize(response.text)
        logger.info(f"Classified agent type: {agent} (raw: {response.text!r})")
        return agent
