"""Unit tests for multi-question detection."""
import sys
sys.path.insert(0, 'backend')

import pytest
from services.question_detector import has_multiple_questions


class TestHasMultipleQuestions:
    """Test suite for has_multiple_questions."""

    def test_two_question_marks(self):
        assert has_multiple_questions("What is X? How about Y?") is True

    def test_connective_followed_by_question_word(self):
        assert has_multiple_questions("What is X and how is Y") is True

    @pytest.mark.parametrize("connective", ["and", "also", "plus", "additionally"])
    def test_each_connective(self, connective):
        assert has_multiple_questions(f"Describe the policy {connective} when does it apply") is True

    def test_connective_case_insensitive(self):
        assert has_multiple_questions("Leave policy AND WHERE do I apply") is True

    def test_single_request(self):
        assert has_multiple_questions("Tell me about X") is False

    def test_single_question(self):
        assert has_multiple_questions("What is the vacation policy?") is False

    def test_comma_separated_questions(self):
        assert has_multiple_questions("Explain the leave policy, who approves it") is True

    def test_semicolon_separated_questions(self):
        assert has_multiple_questions("describe onboarding; when does payroll run") is True

    def test_comma_with_one_question_segment(self):
        assert has_multiple_questions("For new hires, what is the probation period") is False

    def test_question_words_need_word_boundaries(self):
        # "somewhat" and "showhow" are not question words
        assert has_multiple_questions("somewhat unclear, showhow works") is False

    def test_deterministic(self):
        query = "What is X, and where is Y?"
        assert has_multiple_questions(query) == has_multiple_questions(query)

    def test_empty_query(self):
        assert has_multiple_questions("") is False
