"""Chat history data models."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


@dataclass
class ChatRecord:
    """A single answered query, appended to chat history once per request."""
    question: str
    answer: str
    agent: str
    sources: List[str]
    similarity: float
    multi_question: bool
    user_email: str = "anonymous"
    selected_file: str = "all"
    timestamp: Optional[datetime] = field(default_factory=lambda: datetime.now(timezone.utc))
    record_id: Optional[str] = None
