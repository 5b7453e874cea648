"""Unit tests for AgentClassifier."""
import sys
sys.path.insert(0, 'backend')

import pytest
from unittest.mock import Mock
from services.agent_classifier import AgentClassifier
from services.errors import LLMClientError, LLMError
from services.llm_client import LLMResponse
from services.retry import OVERLOADED


def llm_response(text):
    return LLMResponse(text=text, tokens_input=50, tokens_output=1, latency_ms=10, model_used="test-model")


def llm_error(code):
    return LLMClientError(LLMError(code=code, message=code.lower(), details={}))


class TestAgentClassifier:
    """Test suite for AgentClassifier class."""

    @pytest.fixture
    def llm_client(self):
        return Mock()

    @pytest.fixture
    def classifier(self, llm_client):
        return AgentClassifier(llm_client, max_attempts=2, initial_delay_ms=0)

    @pytest.mark.parametrize("raw,expected", [
        ("technical", "technical"),
        ("Customer", "customer"),
        ("  common.\n", "common"),
        ("**technical**", "technical"),
    ])
    def test_valid_labels(self, classifier, llm_client, raw, expected):
        llm_client.generate.return_value = llm_response(raw)
        assert classifier.classify("How do I calibrate the pump?", ["Pump manual"]) == expected

    def test_unsure_output_defaults_to_common(self, classifier, llm_client):
        llm_client.generate.return_value = llm_response("I am not sure")
        assert classifier.classify("question", ["context"]) == AgentClassifier.COMMON

    def test_empty_output_defaults_to_common(self, classifier, llm_client):
        llm_client.generate.return_value = llm_response("")
        assert classifier.classify("question", ["context"]) == AgentClassifier.COMMON

    def test_prompt_contains_query_and_context(self, classifier, llm_client):
        llm_client.generate.return_value = llm_response("common")

        classifier.classify("Where is the office?", ["First chunk", "Second chunk"])

        prompt = llm_client.generate.call_args[0][0]
        assert "Query: Where is the office?" in prompt
        assert "First chunk\nSecond chunk" in prompt
        assert "technical, customer, or common" in prompt

    def test_retries_on_overload(self, classifier, llm_client):
        llm_client.generate.side_effect = [llm_error(OVERLOADED), llm_response("customer")]

        assert classifier.classify("I want a refund", ["Returns policy"]) == "customer"
        assert llm_client.generate.call_count == 2

    def test_exhausted_retries_default_to_common(self, classifier, llm_client):
        llm_client.generate.side_effect = llm_error(OVERLOADED)

        assert classifier.classify("question", ["context"]) == AgentClassifier.COMMON
        assert llm_client.generate.call_count == 2

    def test_non_transient_error_defaults_to_common_without_retry(self, classifier, llm_client):
        llm_client.generate.side_effect = llm_error("AUTHENTICATION_ERROR")

        assert classifier.classify("question", ["context"]) == AgentClassifier.COMMON
        llm_client.generate.assert_called_once()

    def test_normalize(self):
        assert AgentClassifier.normalize("Technical!") == "technical"
        assert AgentClassifier.normalize("tech") == "common"
        assert AgentClassifier.normalize(None) == "common"
