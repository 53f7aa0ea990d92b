"""
Unit tests for prompt loading and startup configuration checks.
"""
from unittest.mock import patch

import pytest

from core.config_validator import ConfigValidator, ConfigurationError
from core.prompt_manager import PromptManager


class TestPromptManager:
    """Test prompt file loading with fallbacks."""

    def test_loads_prompt_file(self, tmp_path):
        (tmp_path / "quiz_generation.txt").write_text("Quiz about: {context}", encoding="utf-8")
        manager = PromptManager(prompts_dir=tmp_path)

        assert manager.get_prompt("quiz_generation") == "Quiz about: {context}"

    def test_falls_back_when_missing(self, tmp_path):
        manager = PromptManager(prompts_dir=tmp_path)
        template = manager.get_prompt("quiz_generation")

        prompt = template.format(context="Rivers flow downhill.")
        assert "Rivers flow downhill." in prompt
        assert '{"question"' in prompt

    def test_falls_back_when_empty(self, tmp_path):
        (tmp_path / "quiz_generation.txt").write_text("   ", encoding="utf-8")
        manager = PromptManager(prompts_dir=tmp_path)

        assert "{context}" in manager.get_prompt("quiz_generation")

    def test_unknown_prompt(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PromptManager(prompts_dir=tmp_path).get_prompt("does_not_exist")


class TestConfigValidator:
    """Test startup validation."""

    def test_defaults_are_valid(self):
        result = ConfigValidator().validate_all()

        assert result["valid"] is True
        assert result["errors"] == []

    @patch("core.config.QUESTION_INTERVAL", 0)
    @patch("core.config.CHUNK_SIZE_WORDS", 5000)
    def test_out_of_range_values(self):
        result = ConfigValidator().validate_all()

        assert result["valid"] is False
        assert any("QUESTION_INTERVAL" in error for error in result["errors"])
        assert any("CHUNK_SIZE_WORDS" in error for error in result["errors"])

    @patch("core.config.AI_PROVIDER", "mystery")
    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            ConfigValidator().raise_if_invalid()

    @patch("core.config.get_provider_api_key", return_value=None)
    def test_missing_key_is_a_warning(self, _get_key):
        result = ConfigValidator().validate_all()

        assert result["valid"] is True
        assert any("No API key" in warning for warning in result["warnings"])
