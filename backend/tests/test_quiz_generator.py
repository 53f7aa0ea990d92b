"""
Unit tests for quiz generation.
"""
import asyncio
import json
from unittest.mock import Mock

import pytest

from core.config import QUIZ_CONTEXT_MAX_CHARS
from core.exceptions import MissingApiKey, ProviderError, ProviderErrorKind, QuizParseError
from services.quiz.quiz_generator import QuizGenerator

QUIZ_RESPONSE = json.dumps({
    "question": "What happened?",
    "options": ["A. One", "B. Two", "C. Three", "D. Four"],
    "correct": "C",
    "explanation": "Because.",
})


@pytest.fixture
def client():
    mock = Mock()
    mock.generate.return_value = QUIZ_RESPONSE
    return mock


class TestQuizGenerator:
    """Test prompt building and provider calls."""

    def test_generate_question(self, client):
        generator = QuizGenerator(provider="openai", api_key="key", client=client)
        quiz = generator.generate_question("Some context")

        assert quiz.question == "What happened?"
        assert quiz.correct_option.endswith("Three")
        prompt, provider, api_key = client.generate.call_args.args
        assert "Some context" in prompt
        assert provider == "openai"
        assert api_key == "key"

    def test_context_is_truncated(self, client):
        generator = QuizGenerator(api_key="key", client=client)
        context = "x" * (QUIZ_CONTEXT_MAX_CHARS + 500)

        prompt = generator.build_prompt(context)

        assert "x" * QUIZ_CONTEXT_MAX_CHARS in prompt
        assert "x" * (QUIZ_CONTEXT_MAX_CHARS + 1) not in prompt

    def test_missing_key(self, client):
        generator = QuizGenerator(api_key=None, client=client)

        assert generator.is_enabled is False
        with pytest.raises(MissingApiKey):
            generator.generate_question("context")
        client.generate.assert_not_called()

    def test_provider_errors_propagate(self, client):
        client.generate.side_effect = ProviderError(ProviderErrorKind.RATE_LIMIT, "slow down")
        generator = QuizGenerator(api_key="key", client=client)

        with pytest.raises(ProviderError):
            generator.generate_question("context")

    def test_bad_response(self, client):
        client.generate.return_value = "I cannot help with that."
        generator = QuizGenerator(api_key="key", client=client)

        with pytest.raises(QuizParseError):
            generator.generate_question("context")

    def test_async_wrapper(self, client):
        generator = QuizGenerator(api_key="key", client=client)

        quiz = asyncio.run(generator.agenerate_question("context"))

        assert quiz.question == "What happened?"
