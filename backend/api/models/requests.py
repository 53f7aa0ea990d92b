"""
Pydantic request models for API endpoints.
"""
from pydantic import BaseModel, Field
from typing import Literal, Optional

from core.config import (
    AI_PROVIDER,
    CHUNK_SIZE_WORDS,
    MAX_CHUNK_SIZE_WORDS,
    MIN_CHUNK_SIZE_WORDS,
    QUESTION_INTERVAL,
)


class SessionCreateRequest(BaseModel):
    """Request model for starting a reading session."""
    url: Optional[str] = Field(default=None, description="Page to fetch and read")
    html: Optional[str] = Field(default=None, description="Page HTML, if already fetched")
    chunk_size: int = Field(
        default=CHUNK_SIZE_WORDS,
        ge=MIN_CHUNK_SIZE_WORDS,
        le=MAX_CHUNK_SIZE_WORDS,
        description="Maximum words per reading slide",
    )
    question_interval: int = Field(default=QUESTION_INTERVAL, ge=1, description="Chunks between quizzes")
    provider: str = Field(default=AI_PROVIDER, description="AI provider: gemini, openai or claude")
    api_key: Optional[str] = Field(default=None, description="Provider API key; quizzes are off without one")


class NavigateRequest(BaseModel):
    """Request model for a slide change."""
    position: int = Field(..., ge=0, description="Slide position the reader arrived at")
    wait: bool = Field(default=False, description="Wait for quiz generation to resolve")


class AnswerRequest(BaseModel):
    """Request model for answering a quiz slide."""
    slide_id: str = Field(..., description="Quiz slide ID")
    answer: str = Field(..., min_length=1, max_length=1, description="Answer letter A-D")


class AskRequest(BaseModel):
    """Request model for a question about selected text."""
    text: str = Field(..., min_length=1, description="Text the reader selected")
    prompt_type: Literal["explain", "how", "why", "custom"] = Field(
        default="explain", description="Preset prompt, or custom with custom_prompt"
    )
    custom_prompt: Optional[str] = Field(default=None, description="Instruction for the custom prompt type")
