"""
Multi-provider LLM client wrapper (Gemini, OpenAI, Claude).
"""
import logging
import httpx
from typing import Any, Dict, Optional
from core.config import (
    GEMINI_BASE_URL,
    GEMINI_MODEL,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
    ANTHROPIC_BASE_URL,
    CLAUDE_MODEL,
    ANTHROPIC_VERSION,
    LLM_TEMPERATURE,
    LLM_MAX_TOKENS,
    LLM_TIMEOUT_SECONDS,
)
from core.exceptions import MissingApiKey, ProviderError, ProviderErrorKind

logger = logging.getLogger(__name__)

PROVIDER_NAMES = {
    "gemini": "Gemini",
    "openai": "OpenAI",
    "claude": "Claude",
}


def classify_status(status_code: int) -> ProviderErrorKind:
    """Map an HTTP status code to a provider error kind."""
    if status_code in (401, 403):
        return ProviderErrorKind.AUTH
    if status_code == 429:
        return ProviderErrorKind.RATE_LIMIT
    if status_code == 404:
        return ProviderErrorKind.NOT_FOUND
    if status_code == 400:
        return ProviderErrorKind.BAD_REQUEST
    return ProviderErrorKind.UNKNOWN


class LLMClient:
    """Client for the supported hosted LLM providers."""

    def __init__(
        self,
        timeout: float = LLM_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.client = httpx.Client(timeout=timeout, transport=transport)

    def generate(
        self,
        prompt: str,
        provider: str,
        api_key: Optional[str],
        temperature: float = LLM_TEMPERATURE,
        max_tokens: int = LLM_MAX_TOKENS,
    ) -> str:
        """
        Generate text for a prompt with the given provider.

        Unknown provider ids fall back to Gemini.

        Raises:
            MissingApiKey: no key supplied
            ProviderError: classified HTTP/transport/format failure
        """
        if not api_key:
            raise MissingApiKey("API key is required")

        if provider == "openai":
            return self._call_openai(prompt, api_key, temperature, max_tokens)
        if provider == "claude":
            return self._call_claude(prompt, api_key, max_tokens)
        return self._call_gemini(prompt, api_key, temperature, max_tokens)

    def _call_gemini(self, prompt: str, api_key: str, temperature: float, max_tokens: int) -> str:
        url = f"{GEMINI_BASE_URL}/models/{GEMINI_MODEL}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        data = self._post("gemini", url, payload, params={"key": api_key})

        candidates = data.get("candidates") or []
        content = candidates[0].get("content") if candidates else None
        if content:
            return "".join(part.get("text", "") for part in content.get("parts", []))
        raise ProviderError(ProviderErrorKind.UNKNOWN, "Unexpected Gemini response format")

    def _call_openai(self, prompt: str, api_key: str, temperature: float, max_tokens: int) -> str:
        payload = {
            "model": OPENAI_MODEL,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {"Authorization": f"Bearer {api_key}"}
        data = self._post("openai", f"{OPENAI_BASE_URL}/chat/completions", payload, headers=headers)

        choices = data.get("choices") or []
        message = choices[0].get("message") if choices else None
        if message:
            return message.get("content") or ""
        raise ProviderError(ProviderErrorKind.UNKNOWN, "Unexpected OpenAI response format")

    def _call_claude(self, prompt: str, api_key: str, max_tokens: int) -> str:
        payload = {
            "model": CLAUDE_MODEL,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        data = self._post("claude", f"{ANTHROPIC_BASE_URL}/messages", payload, headers=headers)

        content = data.get("content") or []
        if content and content[0].get("text"):
            return content[0]["text"]
        raise ProviderError(ProviderErrorKind.UNKNOWN, "Unexpected Claude response format")

    def _post(
        self,
        provider: str,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded body, classifying failures."""
        name = PROVIDER_NAMES.get(provider, provider)
        try:
            response = self.client.post(url, json=payload, headers=headers, params=params)
        except httpx.HTTPError as e:
            raise ProviderError(ProviderErrorKind.UNKNOWN, f"{name} API error: {e}") from e

        if response.is_error:
            logger.error(f"{name} API error {response.status_code}: {response.text[:500]}")
            raise ProviderError(
                classify_status(response.status_code),
                self._error_message(name, response.status_code),
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(ProviderErrorKind.UNKNOWN, f"Unexpected {name} response format") from e
        if not isinstance(data, dict):
            raise ProviderError(ProviderErrorKind.UNKNOWN, f"Unexpected {name} response format")
        return data

    @staticmethod
    def _error_message(name: str, status_code: int) -> str:
        kind = classify_status(status_code)
        if kind is ProviderErrorKind.AUTH:
            return f"Invalid API key. Please check your {name} API key."
        if kind is ProviderErrorKind.RATE_LIMIT:
            return "Rate limit exceeded. Please try again later."
        if kind is ProviderErrorKind.NOT_FOUND:
            return f"Model not found. Try a different {name} model."
        if kind is ProviderErrorKind.BAD_REQUEST:
            return f"Bad request. Please check your {name} API configuration."
        return f"{name} API error: {status_code}"


# Global LLM client instance
llm_client = LLMClient()
