"""Tests for ChunkingEngine."""
import sys
sys.path.insert(0, 'backend')

import pytest
from models.chunk import ChunkStatus
from services.chunking_engine import ChunkingEngine


def test_split_into_word_windows():
    engine = ChunkingEngine(chunk_size=3)

    windows = engine.split("one two three four five six seven")

    assert windows == ["one two three", "four five six", "seven"]


def test_split_normalizes_whitespace():
    engine = ChunkingEngine(chunk_size=2)

    assert engine.split("  alpha\n\nbeta\tgamma  ") == ["alpha beta", "gamma"]


def test_invalid_chunk_size():
    with pytest.raises(ValueError, match="chunk_size must be positive"):
        ChunkingEngine(chunk_size=0)


def test_chunk_document_metadata():
    """All chunks share the document ID and carry their position."""
    engine = ChunkingEngine(chunk_size=2)

    chunks = engine.chunk_document(
        "a b c d e", "HR.txt", document_id="1700", version="v2.0", category="HR", tags=["policy"]
    )

    assert [c.chunk_id for c in chunks] == ["1700_0", "1700_1", "1700_2"]
    assert [c.text for c in chunks] == ["a b", "c d", "e"]
    assert all(c.document_id == "1700" for c in chunks)
    assert all(c.file_name == "HR.txt" for c in chunks)
    assert all(c.status == ChunkStatus.ACTIVE for c in chunks)
    assert all(c.total_chunks == 3 for c in chunks)
    assert all(c.embedding is None for c in chunks)
    assert chunks[2].chunk_index == 2
    assert chunks[0].version == "v2.0"
    assert chunks[0].category == "HR"
    assert chunks[0].tags == ["policy"]
    assert chunks[0].uploaded_at == chunks[2].uploaded_at


def test_chunk_document_generates_document_id():
    chunks = ChunkingEngine().chunk_document("some text", "notes.txt")

    assert chunks[0].document_id.isdigit()
    assert chunks[0].chunk_id == f"{chunks[0].document_id}_0"


def test_chunk_document_empty_text():
    with pytest.raises(ValueError, match="No text extracted"):
        ChunkingEngine().chunk_document("   \n ", "empty.txt")
