"""
Comprehension question generation over the configured LLM provider.
"""
import asyncio
import logging
from typing import Optional

from core.config import AI_PROVIDER, QUIZ_CONTEXT_MAX_CHARS
from core.exceptions import MissingApiKey
from core.llm_client import LLMClient, llm_client
from core.prompt_manager import prompt_manager
from models.quiz_models import QuizResult
from services.quiz.quiz_parser import parse_quiz_response

logger = logging.getLogger(__name__)


class QuizGenerator:
    """Builds the quiz prompt, calls the provider and parses the answer."""

    def __init__(
        self,
        provider: str = AI_PROVIDER,
        api_key: Optional[str] = None,
        client: Optional[LLMClient] = None,
    ):
        self.provider = provider
        self.api_key = api_key
        self.client = client or llm_client
        self.prompt_template = prompt_manager.get_prompt("quiz_generation")

    @property
    def is_enabled(self) -> bool:
        return bool(self.api_key)

    def build_prompt(self, context: str) -> str:
        return self.prompt_template.format(context=context[:QUIZ_CONTEXT_MAX_CHARS])

    def generate_question(self, context: str) -> QuizResult:
        """
        Generate one multiple choice question for a context window.

        Raises:
            MissingApiKey: no API key configured
            ProviderError: provider call failed
            QuizParseError: response was not a valid quiz
        """
        if not self.api_key:
            raise MissingApiKey("API key not set")

        response = self.client.generate(self.build_prompt(context), self.provider, self.api_key)
        return parse_quiz_response(response)

    async def agenerate_question(self, context: str) -> QuizResult:
        """generate_question on a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.generate_question, context)
