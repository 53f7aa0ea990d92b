"""
Questions about selected text: preset Explain / How? / Why? prompts or a
custom instruction, answered by the configured LLM provider.
"""
import asyncio
import logging
from typing import Optional

from core.config import AI_PROVIDER, SELECTION_MAX_CHARS, SELECTION_PROMPT_TYPES
from core.exceptions import MissingApiKey
from core.llm_client import LLMClient, llm_client
from core.prompt_manager import prompt_manager

logger = logging.getLogger(__name__)


class SelectionPrompt:
    """Builds a prompt around a text selection and returns the provider's answer."""

    def __init__(
        self,
        provider: str = AI_PROVIDER,
        api_key: Optional[str] = None,
        client: Optional[LLMClient] = None,
    ):
        self.provider = provider
        self.api_key = api_key
        self.client = client or llm_client

    def build_prompt(self, prompt_type: str, text: str, custom_prompt: Optional[str] = None) -> str:
        """
        Fill the template for a prompt type.

        Raises:
            ValueError: unknown prompt type, empty selection or empty custom instruction
        """
        if prompt_type not in SELECTION_PROMPT_TYPES:
            raise ValueError(f"Unknown prompt type: {prompt_type}")

        text = (text or "").strip()
        if not text:
            raise ValueError("Selected text is empty")
        text = text[:SELECTION_MAX_CHARS]

        template = prompt_manager.get_prompt(f"selection_{prompt_type}")
        if prompt_type == "custom":
            instruction = (custom_prompt or "").strip()
            if not instruction:
                raise ValueError("Custom prompt is empty")
            return template.format(instruction=instruction, text=text).strip()
        return template.format(text=text).strip()

    def ask(self, prompt_type: str, text: str, custom_prompt: Optional[str] = None) -> str:
        """
        Ask the provider about a selection.

        Raises:
            MissingApiKey: no API key configured
            ValueError: invalid prompt input
            ProviderError: provider call failed
        """
        if not self.api_key:
            raise MissingApiKey("API key not configured")

        prompt = self.build_prompt(prompt_type, text, custom_prompt)
        logger.info(f"Selection prompt '{prompt_type}' ({len(text)} chars)")
        return self.client.generate(prompt, self.provider, self.api_key).strip()

    async def aask(self, prompt_type: str, text: str, custom_prompt: Optional[str] = None) -> str:
        """ask on a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.ask, prompt_type, text, custom_prompt)
