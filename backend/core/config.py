"""
Configuration management for Readable backend.
Loads configuration from environment variables and .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
# Look for .env file in the backend directory or project root
BACKEND_DIR = Path(__file__).parent.parent
PROJECT_ROOT = BACKEND_DIR.parent
ENV_FILE = PROJECT_ROOT / ".env"

# Load .env file if it exists
if ENV_FILE.exists():
    load_dotenv(ENV_FILE)
else:
    # Also try loading from backend directory
    backend_env = BACKEND_DIR / ".env"
    if backend_env.exists():
        load_dotenv(backend_env)

PROMPTS_DIR = BACKEND_DIR / "prompts"

# Reading settings
CHUNK_SIZE_WORDS = int(os.getenv("CHUNK_SIZE_WORDS", "100"))
QUESTION_INTERVAL = int(os.getenv("QUESTION_INTERVAL", "3"))
MIN_CHUNK_SIZE_WORDS = 1
MAX_CHUNK_SIZE_WORDS = 1000

# Quiz scheduling
GENERATION_DELAY_SECONDS = float(os.getenv("GENERATION_DELAY_SECONDS", "2.0"))  # throttle between API calls
QUIZ_CONTEXT_MAX_CHARS = int(os.getenv("QUIZ_CONTEXT_MAX_CHARS", "2000"))

# Questions about selected text
SELECTION_PROMPT_TYPES = ["explain", "how", "why", "custom"]
SELECTION_MAX_CHARS = int(os.getenv("SELECTION_MAX_CHARS", "4000"))

# AI providers
SUPPORTED_PROVIDERS = ["gemini", "openai", "claude"]
AI_PROVIDER = os.getenv("AI_PROVIDER", "gemini").lower()

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", None)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", None)
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", None)

PROVIDER_API_KEYS = {
    "gemini": GEMINI_API_KEY,
    "openai": OPENAI_API_KEY,
    "claude": ANTHROPIC_API_KEY,
}

GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemma-3-27b-it")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
ANTHROPIC_BASE_URL = os.getenv("ANTHROPIC_BASE_URL", "https://api.anthropic.com/v1")
CLAUDE_MODEL = os.getenv("CLAUDE_MODEL", "claude-3-haiku-20240307")
ANTHROPIC_VERSION = "2023-06-01"

# LLM settings (can be overridden via env vars)
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "500"))
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

# Article fetching
FETCH_TIMEOUT_SECONDS = int(os.getenv("FETCH_TIMEOUT_SECONDS", "30"))
FETCH_USER_AGENT = os.getenv(
    "FETCH_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
)

# API configuration
API_V1_PREFIX = "/api/v1"
# CORS origins can be comma-separated list in env var
CORS_ORIGINS_STR = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001")
CORS_ORIGINS = [origin.strip() for origin in CORS_ORIGINS_STR.split(",")]


def get_provider_api_key(provider: str):
    """Look up the configured API key for a provider id."""
    return PROVIDER_API_KEYS.get(provider)
