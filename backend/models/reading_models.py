"""
Data models for the presentation slide list.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from models.quiz_models import QuizResult


class SlideKind(str, Enum):
    TITLE = "title"
    CONTENT = "content"
    QUIZ = "quiz"
    QUIZ_LOADING = "quiz_loading"
    QUIZ_ERROR = "quiz_error"


def _new_slide_id() -> str:
    return f"slide_{uuid.uuid4().hex[:12]}"


@dataclass
class Slide:
    """Presentation unit; its position in the deck changes, its id does not"""
    kind: SlideKind
    html: str
    text: str = ""
    chunk_index: Optional[int] = None  # content slides and quiz slides
    quiz: Optional[QuizResult] = None
    error: Optional[str] = None
    slide_id: str = field(default_factory=_new_slide_id)

    @property
    def is_quiz(self) -> bool:
        return self.kind in (SlideKind.QUIZ, SlideKind.QUIZ_LOADING, SlideKind.QUIZ_ERROR)


@dataclass(frozen=True)
class QuizAnswer:
    """Result of answering a quiz slide"""
    correct: bool
    correct_letter: str
    explanation: str = ""
    counted: bool = True  # False when the slide was already answered


@dataclass
class ReadingStats:
    chunk_count: int
    total_words: int
    chunks_read: int
    words_read: int
    quiz_correct: int
    quiz_total: int

    @property
    def score(self) -> float:
        if self.quiz_total == 0:
            return 0.0
        return self.quiz_correct / self.quiz_total
