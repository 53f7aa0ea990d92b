"""
Pydantic response models for API endpoints.
"""
from pydantic import BaseModel, Field
from typing import List, Optional


class QuizResponse(BaseModel):
    """Multiple choice question on a quiz slide."""
    question: str
    options: List[str]
    explanation: str = ""


class SlideResponse(BaseModel):
    """One slide of the presentation."""
    slide_id: str
    position: int = Field(..., ge=0, description="Current index in the slide list")
    kind: str
    html: str
    text: str = ""
    chunk_index: Optional[int] = None
    quiz: Optional[QuizResponse] = None
    error: Optional[str] = None


class StatsResponse(BaseModel):
    """Reading progress and quiz score."""
    chunk_count: int
    total_words: int
    chunks_read: int
    words_read: int
    quiz_correct: int
    quiz_total: int
    score: float = Field(ge=0.0, le=1.0)


class SessionResponse(BaseModel):
    """Response model for session creation and retrieval."""
    session_id: str
    title: str
    excerpt: str = ""
    url: Optional[str] = None
    quizzes_enabled: bool
    slides: List[SlideResponse]
    stats: StatsResponse


class NavigateResponse(BaseModel):
    """Response model for a slide change."""
    session_id: str
    position: int
    inserted: Optional[SlideResponse] = None
    slide_count: int


class AnswerResponse(BaseModel):
    """Response model for a quiz answer."""
    slide_id: str
    correct: bool
    correct_answer: str
    explanation: str = ""
    counted: bool
    stats: StatsResponse


class AskResponse(BaseModel):
    """LLM answer about selected text."""
    session_id: str
    prompt_type: str
    answer: str
