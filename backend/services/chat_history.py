"""Chat history storage using Supabase PostgreSQL."""
import logging
from typing import List, Optional
from supabase import create_client, Client

from config import SUPABASE_URL, SUPABASE_KEY, HISTORY_TURNS
from models.chat import ChatRecord
from services.supabase_utils import parse_timestamp

logger = logging.getLogger(__name__)


class ChatHistoryStore:
    """Append-only store of answered questions, per user."""

    def __init__(
        self,
        supabase_url: str = SUPABASE_URL,
        supabase_key: str = SUPABASE_KEY,
        table_name: str = "chat_history"
    ):
        """Initialize the chat history store with a Supabase client."""
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

        self.table_name = table_name
        self.client: Client = create_client(supabase_url, supabase_key)
        logger.info(f"ChatHistoryStore initialized with table: {table_name}")

    def append(self, record: ChatRecord) -> Optional[str]:
        """
        Insert a chat record.

        Args:
            record: Completed question/answer pair

        Returns:
            ID of the inserted row, if the database returned one

        Raises:
            Exception: Whatever the Supabase client raises; callers decide
                whether a failed write matters
        """
        response = self.client.table(self.table_name).insert({
            "question": record.question,
            "answer": record.answer,
            "agent": record.agent,
            "sources": record.sources,
            "similarity": record.similarity,
            "multi_question": record.multi_question,
            "selected_file": record.selected_file,
            "user_email": record.user_email,
            "timestamp": record.timestamp.isoformat() if record.timestamp else None,
        }).execute()

        record_id = None
        if response.data:
            record_id = str(response.data[0].get("id"))
        logger.info(f"Chat history saved for {record.user_email} (id: {record_id})")
        return record_id

    def find_recent(self, user_email: str, limit: int = HISTORY_TURNS) -> List[ChatRecord]:
        """
        Get a user's most recent chat records, newest first.

        Args:
            user_email: Owner of the records
            limit: Maximum number of records

        Returns:
            List of ChatRecord ordered by timestamp descending
        """
        response = (
            self.client.table(self.table_name)
            .select("*")
            .eq("user_email", user_email)
            .order("timestamp", desc=True)
            .limit(limit)
            .execute()
        )

        return [
            ChatRecord(
                question=row["question"],
                answer=row["answer"],
                agent=row.get("agent", "common"),
                sources=row.get("sources") or [],
                similarity=row.get("similarity") or 0.0,
                multi_question=bool(row.get("multi_question")),
                user_email=row.get("user_email", user_email),
                selected_file=row.get("selected_file") or "all",
                timestamp=parse_timestamp(row.get("timestamp")),
                record_id=str(row["id"]) if row.get("id") is not None else None,
            )
            for row in response.data or []
        ]

    @staticmethod
    def format_context(records: List[ChatRecord], max_turns: int = HISTORY_TURNS) -> str:
        """
        Format recent records as prompt history, oldest first.

        Args:
            records: Records newest first, as returned by find_recent
            max_turns: Maximum number of Q/A pairs to include
        """
        turns = list(reversed(records[:max_turns]))
        return "\n\n".join(f"Q: {r.question}\nA: {r.answer}" for r in turns)
