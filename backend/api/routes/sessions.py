"""
Reading session API routes.
"""
import asyncio
import logging
from typing import Dict, Optional

from fastapi import APIRouter, HTTPException

from api.models.requests import AnswerRequest, AskRequest, NavigateRequest, SessionCreateRequest
from api.models.responses import (
    AnswerResponse,
    AskResponse,
    NavigateResponse,
    QuizResponse,
    SessionResponse,
    SlideResponse,
    StatsResponse,
)
from core.config import get_provider_api_key
from core.exceptions import (
    ArticleFetchError,
    EmptyContent,
    MissingApiKey,
    NoArticleFound,
    ProviderError,
)
from models.reading_models import Slide
from services.reading.session import ReadingSession, ReadingSettings

logger = logging.getLogger(__name__)

router = APIRouter()

# Simple session storage (in-memory, lost on restart)
sessions: Dict[str, ReadingSession] = {}


def _get_session(session_id: str) -> ReadingSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _slide_response(slide: Slide, position: int) -> SlideResponse:
    quiz = None
    if slide.quiz is not None:
        quiz = QuizResponse(
            question=slide.quiz.question,
            options=list(slide.quiz.options),
            explanation=slide.quiz.explanation,
        )
    return SlideResponse(
        slide_id=slide.slide_id,
        position=position,
        kind=slide.kind.value,
        html=slide.html,
        text=slide.text,
        chunk_index=slide.chunk_index,
        quiz=quiz,
        error=slide.error,
    )


def _stats_response(session: ReadingSession) -> StatsResponse:
    stats = session.stats()
    return StatsResponse(
        chunk_count=stats.chunk_count,
        total_words=stats.total_words,
        chunks_read=stats.chunks_read,
        words_read=stats.words_read,
        quiz_correct=stats.quiz_correct,
        quiz_total=stats.quiz_total,
        score=stats.score,
    )


def _session_response(session: ReadingSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        title=session.title,
        excerpt=session.excerpt,
        url=session.url,
        quizzes_enabled=session.quizzes_enabled,
        slides=[_slide_response(slide, i) for i, slide in enumerate(session.deck.slides)],
        stats=_stats_response(session),
    )


@router.post("", response_model=SessionResponse)
async def create_session(request: SessionCreateRequest):
    """
    Start a reading session from a URL or raw HTML.
    Quiz generation starts in the background when an API key is available.
    """
    if not request.url and not request.html:
        raise HTTPException(status_code=400, detail="Either url or html is required")

    settings = ReadingSettings(
        chunk_size=request.chunk_size,
        question_interval=request.question_interval,
        provider=request.provider,
        api_key=request.api_key or get_provider_api_key(request.provider),
    )
    session = ReadingSession(settings)

    try:
        # Parsing and network fetches run off the event loop
        if request.html:
            await asyncio.to_thread(session.start, request.html, request.url)
        else:
            await asyncio.to_thread(session.start_from_url, request.url)
    except (NoArticleFound, EmptyContent) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ArticleFetchError as e:
        raise HTTPException(status_code=502, detail=str(e))

    sessions[session.session_id] = session
    session.start_background()

    return _session_response(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    """Fetch the current slide list and progress."""
    return _session_response(_get_session(session_id))


@router.post("/{session_id}/navigate", response_model=NavigateResponse)
async def navigate(session_id: str, request: NavigateRequest):
    """
    Report a slide change.

    Any quiz slide due after this position is inserted before returning; when
    generation is still running it is a loading slide that gets replaced later
    unless `wait` is set.
    """
    session = _get_session(session_id)
    slide_count = len(session.deck)

    task = session.navigate(request.position)
    if request.wait:
        inserted = await task
    else:
        # One loop turn lets the insertion run
        await asyncio.sleep(0)
        if task.done():
            inserted = task.result()
        elif len(session.deck) > slide_count:
            inserted = session.deck.get(request.position + 1)
        else:
            inserted = None

    inserted_response: Optional[SlideResponse] = None
    if inserted is not None:
        position = session.deck.index_of(inserted.slide_id)
        if position is not None:
            inserted_response = _slide_response(inserted, position)

    return NavigateResponse(
        session_id=session_id,
        position=request.position,
        inserted=inserted_response,
        slide_count=len(session.deck),
    )


@router.post("/{session_id}/answers", response_model=AnswerResponse)
async def answer_quiz(session_id: str, request: AnswerRequest):
    """Answer a quiz slide; only the first answer per slide is scored."""
    session = _get_session(session_id)
    try:
        answer = session.answer_quiz(request.slide_id, request.answer)
    except KeyError:
        raise HTTPException(status_code=404, detail="Quiz slide not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AnswerResponse(
        slide_id=request.slide_id,
        correct=answer.correct,
        correct_answer=answer.correct_letter,
        explanation=answer.explanation,
        counted=answer.counted,
        stats=_stats_response(session),
    )


@router.post("/{session_id}/ask", response_model=AskResponse)
async def ask_about_selection(session_id: str, request: AskRequest):
    """Send selected text to the provider with a preset or custom prompt."""
    session = _get_session(session_id)
    try:
        answer = await session.ask_about_selection(
            request.text, request.prompt_type, request.custom_prompt
        )
    except (MissingApiKey, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProviderError as e:
        logger.error(f"Selection prompt failed for {session_id}: {e.message}")
        raise HTTPException(status_code=502, detail=e.message)

    return AskResponse(session_id=session_id, prompt_type=request.prompt_type, answer=answer)


@router.delete("/{session_id}")
async def close_session(session_id: str):
    """Close a session and stop its quiz generation."""
    session = _get_session(session_id)
    session.close()
    del sessions[session_id]
    return {"session_id": session_id, "status": "closed"}
