"""Document data models."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class DocumentSummary:
    """One uploaded document, aggregated from its stored chunks."""
    document_id: str
    file_name: str
    status: str
    total_chunks: int
    version: str = "v1.0"
    category: str = "Uncategorized"
    tags: List[str] = field(default_factory=list)
    uploaded_at: Optional[datetime] = None
