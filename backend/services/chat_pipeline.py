"""End-to-end handling of one chat query."""
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from config import HISTORY_TURNS, REQUEST_TIMEOUT_SECONDS
from models.chat import ChatRecord
from services.agent_classifier import AgentClassifier
from services.chat_history import ChatHistoryStore
from services.question_detector import has_multiple_questions
from services.response_generator import ResponseGenerator
from services.retrieval_engine import Grounded, RetrievalEngine
from services.web_search import WebSearchClient

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    """Outcome of one chat query."""
    answer: str
    agent: str
    sources: List[str]
    similarity: float
    multi_question: bool

    @property
    def similarity_label(self) -> str:
        """Top similarity as a percentage with one decimal, e.g. "52.0%"."""
        return f"{self.similarity * 100:.1f}%"


class ChatPipeline:
    """
    Orchestrates retrieval, routing, generation and history for a query.

    All collaborators are injected so the pipeline holds no global state and
    can be exercised with test doubles.
    """

    def __init__(
        self,
        retrieval_engine: RetrievalEngine,
        agent_classifier: AgentClassifier,
        response_generator: ResponseGenerator,
        chat_history: ChatHistoryStore,
        web_search: Optional[WebSearchClient] = None,
        request_timeout: float = REQUEST_TIMEOUT_SECONDS,
        history_turns: int = HISTORY_TURNS
    ):
        self.retrieval_engine = retrieval_engine
        self.agent_classifier = agent_classifier
        self.response_generator = response_generator
        self.chat_history = chat_history
        self.web_search = web_search
        self.request_timeout = request_timeout
        self.history_turns = history_turns

    def answer(
        self,
        query: str,
        selected_file: Optional[str] = None,
        user_email: str = "anonymous"
    ) -> ChatResult:
        """
        Answer a query from the documents or, failing that, general knowledge.

        Steps:
        1. Detect multi-part questions
        2. Retrieve and gate context (Grounded or Fallback)
        3. Load recent history for the user
        4. Grounded: classify the agent. Fallback: common agent plus optional web search
        5. Generate and clean the answer
        6. Save the chat record (failures are logged, never raised)

        Args:
            query: User question
            selected_file: Restrict retrieval to this file name
            user_email: Owner of the chat history

        Returns:
            ChatResult for the response body

        Raises:
            ValueError: If query is empty
            LLMClientError: If answer generation fails after retries
            RequestTimeoutError: If the request deadline passes while retrying
        """
        if not query or not query.strip():
            raise ValueError("Query is required")

        deadline = time.monotonic() + self.request_timeout

        is_multi_question = has_multiple_questions(query)
        logger.info(f"Multi-question detection: {is_multi_question}")

        outcome = self.retrieval_engine.retrieve(query, selected_file=selected_file, deadline=deadline)
        history_text = self._load_history(user_email)

        web_context = None
        if isinstance(outcome, Grounded):
            logger.info("Documents found, classifying agent")
            agent = self.agent_classifier.classify(query, outcome.texts, deadline=deadline)
            sources = outcome.sources
        else:
            logger.info("No relevant documents found, using common agent with general knowledge")
            agent = AgentClassifier.COMMON
            sources = []
            if self.web_search is not None:
                results = self.web_search.search(query)
                if results:
                    web_context = WebSearchClient.format_context(results)

        answer = self.response_generator.generate(
            query,
            outcome,
            agent,
            history_text,
            is_multi_question,
            web_context=web_context,
            deadline=deadline,
        )

        result = ChatResult(
            answer=answer,
            agent=agent,
            sources=sources,
            similarity=outcome.top_similarity,
            multi_question=is_multi_question,
        )
        self._save(result, query, selected_file, user_email)
        return result

    def _load_history(self, user_email: str) -> str:
        try:
            records = self.chat_history.find_recent(user_email, limit=self.history_turns)
        except Exception as e:
            logger.error(f"Error loading chat history for {user_email}: {e}")
            return ""
        return ChatHistoryStore.format_context(records, max_turns=self.history_turns)

    def _save(self, result: ChatResult, query: str, selected_file: Optional[str], user_email: str) -> None:
        record = ChatRecord(
            question=query,
            answer=result.answer,
            agent=result.agent,
            sources=result.sources,
            similarity=result.similarity,
            multi_question=result.multi_question,
            user_email=user_email,
            selected_file=selected_file or "all",
        )
        try:
            self.chat_history.append(record)
        except Exception as e:
            # The answer is already produced; a failed write must not fail the request
            logger.error(f"Error saving chat history: {e}", exc_info=True)
