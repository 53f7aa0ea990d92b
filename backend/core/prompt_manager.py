"""
Centralized prompt file management with fallback templates.
"""
import logging
from typing import Dict

logger = logging.getLogger(__name__)


class PromptManager:
    """Manages prompt file loading with consistent fallback behavior."""

    def __init__(self, prompts_dir=None):
        from core.config import PROMPTS_DIR
        self.prompts_dir = prompts_dir or PROMPTS_DIR
        self.loaded_prompts: Dict[str, str] = {}

        # Fallback templates
        self.fallback_templates = {
            "quiz_generation": self._get_quiz_generation_fallback(),
            "selection_explain": 'Explain the following in simple terms:\n\n"{text}"',
            "selection_how": 'How does this work or how is this done?\n\n"{text}"',
            "selection_why": 'Why is this the case? What is the reasoning behind this?\n\n"{text}"',
            "selection_custom": '{instruction}\n\nContext:\n"{text}"',
        }

    def get_prompt(self, prompt_name: str) -> str:
        """
        Load prompt by name with fallback.

        Args:
            prompt_name: Name of prompt file (without .txt extension)

        Returns:
            Prompt template string
        """
        # Return cached if already loaded
        if prompt_name in self.loaded_prompts:
            return self.loaded_prompts[prompt_name]

        # Try to load from file
        prompt_file = self.prompts_dir / f"{prompt_name}.txt"

        if prompt_file.exists():
            try:
                template = prompt_file.read_text(encoding="utf-8")

                # Validate not empty
                if not template.strip():
                    raise ValueError(f"Prompt file is empty: {prompt_file}")

                # Cache and return
                self.loaded_prompts[prompt_name] = template
                return template

            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load prompt file {prompt_file}: {e}")
                # Fall through to fallback

        # Use fallback template
        if prompt_name in self.fallback_templates:
            logger.info(f"Using fallback template for: {prompt_name}")
            template = self.fallback_templates[prompt_name]
            self.loaded_prompts[prompt_name] = template
            return template

        # No fallback available
        raise FileNotFoundError(
            f"Prompt file not found and no fallback available: {prompt_name}.txt. "
            f"Expected at: {prompt_file}"
        )

    def _get_quiz_generation_fallback(self) -> str:
        """Fallback template for comprehension quiz generation."""
        return """Based on the following text, generate a multiple choice question with 4 options (A, B, C, D) to test reading comprehension. The question should test understanding of key concepts, not trivial details.

Return ONLY a valid JSON object in this exact format (no markdown, no code blocks, just the JSON):
{{"question": "Your question here?", "options": ["A. First option", "B. Second option", "C. Third option", "D. Fourth option"], "correct": "A", "explanation": "Brief explanation of why this is correct"}}

Text:
{context}"""


# Global prompt manager instance
prompt_manager = PromptManager()
