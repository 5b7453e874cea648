"""Unit tests for ChatHistoryStore."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from datetime import datetime, timezone
from unittest.mock import Mock, patch, MagicMock
from models.chat import ChatRecord
from services.chat_history import ChatHistoryStore


def _record(question="q", answer="a", **overrides):
    fields = dict(
        question=question, answer=answer, agent="common", sources=[], similarity=0.0,
        multi_question=False, user_email="ana@example.com"
    )
    fields.update(overrides)
    return ChatRecord(**fields)


@pytest.fixture
def mock_client():
    with patch('services.chat_history.create_client') as mock_create_client:
        client = MagicMock()
        mock_create_client.return_value = client
        yield client


@pytest.fixture
def store(mock_client):
    return ChatHistoryStore(supabase_url="https://test.supabase.co", supabase_key="test_key")


class TestChatHistoryStore:

    def test_initialization_without_credentials(self):
        with pytest.raises(ValueError, match="SUPABASE_URL and SUPABASE_KEY"):
            ChatHistoryStore(supabase_url=None, supabase_key=None)

    def test_append_inserts_record(self, store, mock_client):
        """Test every field of the record is written."""
        table = mock_client.table.return_value
        table.insert.return_value.execute.return_value = Mock(data=[{"id": 12}])

        record = _record(
            question="How many vacation days?",
            answer="20 days.",
            agent="technical",
            sources=["HR.pdf"],
            similarity=0.52,
            selected_file="HR.pdf",
            timestamp=datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc),
        )
        record_id = store.append(record)

        assert record_id == "12"
        mock_client.table.assert_called_with("chat_history")
        row = table.insert.call_args.args[0]
        assert row == {
            "question": "How many vacation days?",
            "answer": "20 days.",
            "agent": "technical",
            "sources": ["HR.pdf"],
            "similarity": 0.52,
            "multi_question": False,
            "selected_file": "HR.pdf",
            "user_email": "ana@example.com",
            "timestamp": "2026-03-01T09:30:00+00:00",
        }

    def test_append_propagates_errors(self, store, mock_client):
        """Test write failures reach the caller, which decides to ignore them."""
        mock_client.table.return_value.insert.return_value.execute.side_effect = Exception("insert failed")

        with pytest.raises(Exception, match="insert failed"):
            store.append(_record())

    def test_find_recent(self, store, mock_client):
        """Test recent records are filtered per user, newest first."""
        query = mock_client.table.return_value.select.return_value.eq.return_value
        query.order.return_value.limit.return_value.execute.return_value = Mock(data=[
            {
                "id": 2,
                "question": "second",
                "answer": "b",
                "agent": "customer",
                "sources": ["FAQ.pdf"],
                "similarity": 0.7,
                "multi_question": True,
                "user_email": "ana@example.com",
                "selected_file": "FAQ.pdf",
                "timestamp": "2026-03-01T09:31:00.5Z",
            },
            {
                "id": 1,
                "question": "first",
                "answer": "a",
                "timestamp": "2026-03-01T09:30:00+00:00",
            },
        ])

        records = store.find_recent("ana@example.com", limit=3)

        mock_client.table.return_value.select.return_value.eq.assert_called_once_with(
            "user_email", "ana@example.com"
        )
        query.order.assert_called_once_with("timestamp", desc=True)
        query.order.return_value.limit.assert_called_once_with(3)
        assert [r.question for r in records] == ["second", "first"]
        assert records[0].record_id == "2"
        assert records[0].multi_question is True
        assert records[0].timestamp == datetime(2026, 3, 1, 9, 31, 0, 500000, tzinfo=timezone.utc)
        assert records[1].agent == "common"
        assert records[1].sources == []
        assert records[1].selected_file == "all"

    def test_find_recent_tolerates_missing_timestamp(self, store, mock_client):
        """Test a row without a timestamp still loads."""
        query = mock_client.table.return_value.select.return_value.eq.return_value
        query.order.return_value.limit.return_value.execute.return_value = Mock(data=[
            {"id": 1, "question": "q1", "answer": "a1"},
            {"id": 2, "question": "q2", "answer": "a2", "timestamp": None},
        ])

        records = store.find_recent("ana@example.com")

        assert [r.timestamp for r in records] == [None, None]

    def test_format_context_oldest_first(self):
        """Test history text reads in conversation order."""
        newest_first = [_record("q3", "a3"), _record("q2", "a2"), _record("q1", "a1")]

        text = ChatHistoryStore.format_context(newest_first, max_turns=3)

        assert text == "Q: q1\nA: a1\n\nQ: q2\nA: a2\n\nQ: q3\nA: a3"

    def test_format_context_limits_turns(self):
        newest_first = [_record("q3", "a3"), _record("q2", "a2"), _record("q1", "a1")]

        text = ChatHistoryStore.format_context(newest_first, max_turns=2)

        assert text == "Q: q2\nA: a2\n\nQ: q3\nA: a3"

    def test_format_context_empty(self):
        assert ChatHistoryStore.format_context([]) == ""
