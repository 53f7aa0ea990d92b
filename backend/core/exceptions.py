"""
Error taxonomy for extraction, segmentation and quiz generation.
"""
from enum import Enum


class ReadableError(Exception):
    """Base class for all Readable errors."""
    pass


class NoArticleFound(ReadableError):
    """Raised when no readable content survives extraction."""
    pass


class EmptyContent(ReadableError):
    """Raised when segmentation produces zero chunks."""
    pass


class ArticleFetchError(ReadableError):
    """Raised when a page cannot be downloaded."""
    pass


class QuizParseError(ReadableError):
    """Raised when the provider response is not a valid quiz object."""
    pass


class MissingApiKey(ReadableError):
    """Raised when quiz generation is attempted without an API key."""
    pass


class ProviderErrorKind(Enum):
    """Classification of provider failures."""
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    UNKNOWN = "unknown"


class ProviderError(ReadableError):
    """Raised when an LLM provider call fails."""

    def __init__(self, kind: ProviderErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
