"""
Configuration validation for Readable backend.
Validates prompt files, provider selection and reading settings on startup.
"""
from typing import Any, Dict, List

from core.exceptions import ReadableError


class ConfigurationError(ReadableError):
    """Raised when configuration is invalid."""
    pass


class ConfigValidator:
    """Validates system configuration before serving sessions."""

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> Dict[str, Any]:
        """
        Run all validation checks.

        Returns:
            {
                "valid": bool,
                "errors": List[str],
                "warnings": List[str]
            }
        """
        self.errors = []
        self.warnings = []

        self._validate_prompt_files()
        self._validate_provider()
        self._validate_config_values()

        return {
            "valid": len(self.errors) == 0,
            "errors": self.errors,
            "warnings": self.warnings
        }

    def raise_if_invalid(self) -> Dict[str, Any]:
        result = self.validate_all()
        if not result["valid"]:
            raise ConfigurationError("; ".join(result["errors"]))
        return result

    def _validate_prompt_files(self):
        """Check that prompt files exist; built-in fallbacks make this a warning."""
        from core.config import PROMPTS_DIR, SELECTION_PROMPT_TYPES

        required_prompts = ["quiz_generation.txt"] + [
            f"selection_{prompt_type}.txt" for prompt_type in SELECTION_PROMPT_TYPES
        ]

        if not PROMPTS_DIR.exists():
            self.warnings.append(
                f"Prompts directory not found: {PROMPTS_DIR}. Using built-in templates."
            )
            return

        for prompt_file in required_prompts:
            path = PROMPTS_DIR / prompt_file
            if not path.exists():
                self.warnings.append(
                    f"Prompt file missing: {prompt_file}. Using built-in template."
                )
            elif path.stat().st_size == 0:
                self.errors.append(f"Prompt file is empty: {prompt_file}")

    def _validate_provider(self):
        """Check the provider id and whether quizzes can be generated."""
        from core.config import AI_PROVIDER, SUPPORTED_PROVIDERS, get_provider_api_key

        if AI_PROVIDER not in SUPPORTED_PROVIDERS:
            self.errors.append(
                f"AI_PROVIDER ({AI_PROVIDER}) must be one of: {', '.join(SUPPORTED_PROVIDERS)}"
            )
            return

        if not get_provider_api_key(AI_PROVIDER):
            self.warnings.append(
                f"No API key configured for {AI_PROVIDER}. "
                "Quizzes are disabled unless a session supplies its own key."
            )

    def _validate_config_values(self):
        """Validate configuration value ranges and types."""
        from core.config import (
            CHUNK_SIZE_WORDS,
            MIN_CHUNK_SIZE_WORDS,
            MAX_CHUNK_SIZE_WORDS,
            QUESTION_INTERVAL,
            GENERATION_DELAY_SECONDS,
            QUIZ_CONTEXT_MAX_CHARS,
            SELECTION_MAX_CHARS,
            LLM_TEMPERATURE,
        )

        if not (MIN_CHUNK_SIZE_WORDS <= CHUNK_SIZE_WORDS <= MAX_CHUNK_SIZE_WORDS):
            self.errors.append(
                f"CHUNK_SIZE_WORDS ({CHUNK_SIZE_WORDS}) must be between "
                f"{MIN_CHUNK_SIZE_WORDS} and {MAX_CHUNK_SIZE_WORDS}"
            )

        if QUESTION_INTERVAL < 1:
            self.errors.append(f"QUESTION_INTERVAL ({QUESTION_INTERVAL}) must be >= 1")

        if GENERATION_DELAY_SECONDS < 0:
            self.errors.append(
                f"GENERATION_DELAY_SECONDS ({GENERATION_DELAY_SECONDS}) must be >= 0"
            )

        if QUIZ_CONTEXT_MAX_CHARS < 1:
            self.errors.append(f"QUIZ_CONTEXT_MAX_CHARS ({QUIZ_CONTEXT_MAX_CHARS}) must be >= 1")

        if SELECTION_MAX_CHARS < 1:
            self.errors.append(f"SELECTION_MAX_CHARS ({SELECTION_MAX_CHARS}) must be >= 1")

        # Temperature validation
        if not (0.0 <= LLM_TEMPERATURE <= 1.0):
            self.warnings.append(
                f"LLM_TEMPERATURE ({LLM_TEMPERATURE}) outside normal range [0.0, 1.0]"
            )


# Global validator instance
config_validator = ConfigValidator()
