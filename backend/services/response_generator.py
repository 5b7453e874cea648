"""Prompt construction and answer generation for both retrieval outcomes."""
import logging
import re
from typing import List, Optional

from config import GENERATION_MAX_ATTEMPTS, RETRY_INITIAL_DELAY_MS
from services.llm_client import LLMClient
from services.retrieval_engine import Grounded, RetrievalOutcome
from services.retry import with_retry

logger = logging.getLogger(__name__)

ROLE_DESCRIPTIONS = {
    "technical": (
        "You are a technical specialist who provides detailed, accurate information about "
        "engineering processes, technical specifications, and procedures."
    ),
    "customer": (
        "You are a customer support agent who provides friendly, helpful assistance with "
        "product inquiries and service requests."
    ),
    "common": "You are a knowledgeable assistant who provides clear, accurate answers to questions.",
}

_BOLD = re.compile(r"\*\*")
_ITALIC = re.compile(r"\*")
_BULLET = re.compile(r"^[•\-*]\s+", re.MULTILINE)
_HEADING = re.compile(r"^#{1,6}\s+", re.MULTILINE)


def clean_response(text: str) -> str:
    """Strip markdown emphasis, bullet markers and headings from model output."""
    text = _BOLD.sub("", text)
    text = _ITALIC.sub("", text)
    text = _BULLET.sub("", text)
    return _HEADING.sub("", text)


def _history_section(history_text: str) -> str:
    return f"Previous Conversation:\n{history_text}\n\n" if history_text else ""


def build_grounded_prompt(
    query: str,
    context_chunks: List[str],
    agent_type: str,
    history_text: str,
    top_similarity: float,
    is_multi_question: bool
) -> str:
    """Prompt that answers from the retrieved document context only."""
    role = ROLE_DESCRIPTIONS.get(agent_type, ROLE_DESCRIPTIONS["common"])

    instructions = [
        "- Answer using ONLY the provided document context below",
        f"- The context has {top_similarity * 100:.1f}% relevance to the question",
    ]
    if is_multi_question:
        instructions += [
            "- This query contains MULTIPLE QUESTIONS - address each question separately and clearly",
            "- Address the questions in the order they were asked",
        ]
    instructions += [
        "- If the context doesn't fully answer the question, provide what information is available "
        "and clearly note what details are not in the current documents. Never invent facts",
        "- Be accurate, clear, and professional",
        "- Write in natural, conversational language",
        "- Do NOT use markdown formatting, bold, italics, bullet points, or special symbols",
        "- Reference specific information from the context when applicable",
    ]

    context_text = "\n\n".join(context_chunks)
    return f"""{role}

CRITICAL INSTRUCTIONS:
{chr(10).join(instructions)}

{_history_section(history_text)}Current Question:
{query}

Document Context:
{context_text}

Your Answer:"""


def build_fallback_prompt(
    query: str,
    history_text: str,
    is_multi_question: bool,
    web_context: Optional[str] = None
) -> str:
    """Prompt for answering without usable documents, optionally with web snippets."""
    multi = ""
    if is_multi_question:
        multi = "\nThis query contains MULTIPLE QUESTIONS. Address each question clearly and thoroughly.\n"

    if web_context:
        opening = "You are a helpful assistant with access to web information."
        web_section = f"Here is relevant information from the web:\n\n{web_context}\n\n"
        first_instruction = "- Synthesize this information into a clear, natural answer"
    else:
        opening = "You are a knowledgeable assistant with broad general knowledge."
        web_section = ""
        first_instruction = "- Provide a comprehensive, accurate answer based on your general knowledge"

    instructions = [first_instruction]
    if is_multi_question:
        instructions.append("- Address all parts of the multi-part question in a logical, organized way")
    instructions += [
        "- Answer naturally and confidently as if you know this information well",
        "- Do NOT mention documents, context, searching the web, or missing information",
        "- Be informative, clear, and helpful",
        "- Write in plain conversational language",
        "- Do NOT use markdown, bullet points, bold, italics, or special formatting",
    ]

    return f"""{opening}

The user asked: "{query}"
{multi}
{web_section}{_history_section(history_text)}INSTRUCTIONS:
{chr(10).join(instructions)}

Your answer:"""


class ResponseGenerator:
    """Build the branch-specific prompt, call the LLM with retry, clean the answer."""

    def __init__(
        self,
        llm_client: LLMClient,
        max_attempts: int = GENERATION_MAX_ATTEMPTS,
        initial_delay_ms: int = RETRY_INITIAL_DELAY_MS
    ):
        self.llm_client = llm_client
        self.max_attempts = max_attempts
        self.initial_delay_ms = initial_delay_ms

    def generate(
        self,
        query: str,
        outcome: RetrievalOutcome,
        agent_type: str,
        history_text: str,
        is_multi_question: bool,
        web_context: Optional[str] = None,
        deadline: Optional[float] = None
    ) -> str:
        """
        Generate the final answer text.

        Args:
            query: User question
            outcome: Grounded (answer from its chunks) or Fallback
            agent_type: Persona from the agent classifier
            history_text: Formatted recent Q/A pairs, may be empty
            is_multi_question: Whether to ask for per-question answers
            web_context: Formatted web search snippets, fallback branch only
            deadline: Optional time.monotonic() deadline for retries

        Returns:
            Answer with markdown removed

        Raises:
            LLMClientError: If generation fails after retries
            RequestTimeoutError: If the deadline passes while retrying
        """
        if isinstance(outcome, Grounded) and outcome.chunks:
            prompt = build_grounded_prompt(
                query, outcome.texts, agent_type, history_text, outcome.top_similarity, is_multi_question
            )
            logger.info(f"Generating document-based response with {agent_type} agent")
        else:
            prompt = build_fallback_prompt(query, history_text, is_multi_question, web_context)
            logger.info(
                f"Generating general-knowledge response (web context: {'yes' if web_context else 'no'})"
            )

        response = with_retry(
            lambda: self.llm_client.generate(prompt),
            max_attempts=self.max_attempts,
            initial_delay_ms=self.initial_delay_ms,
            deadline=deadline,
        )

        return clean_response(response.text.strip())
