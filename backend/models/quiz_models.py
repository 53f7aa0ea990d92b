"""
Data models for quiz generation and scheduling.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class QuizTask:
    """Pending generation work for one chunk"""
    chunk_index: int
    context: str


@dataclass(frozen=True)
class QuizResult:
    """Generated multiple choice question"""
    question: str
    options: Tuple[str, str, str, str]  # "A. ..." through "D. ..."
    correct: str  # letter A-D
    explanation: str = ""

    @property
    def correct_option(self) -> str:
        return self.options[ord(self.correct) - ord("A")]


class OutcomeStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class QuizOutcome:
    """Resolution state of quiz generation for one chunk index"""
    chunk_index: int
    status: OutcomeStatus
    result: Optional[QuizResult] = None
    error: Optional[str] = None

    @classmethod
    def ready(cls, chunk_index: int, result: QuizResult) -> "QuizOutcome":
        return cls(chunk_index=chunk_index, status=OutcomeStatus.READY, result=result)

    @classmethod
    def failed(cls, chunk_index: int, error: str) -> "QuizOutcome":
        return cls(chunk_index=chunk_index, status=OutcomeStatus.FAILED, error=error)
