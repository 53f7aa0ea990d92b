"""
Reading session orchestration.

One ReadingSession owns everything for a single article: extracted chunks,
the slide deck, the quiz scheduler and reading progress.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from core.config import (
    AI_PROVIDER,
    CHUNK_SIZE_WORDS,
    GENERATION_DELAY_SECONDS,
    QUESTION_INTERVAL,
)
from core.exceptions import EmptyContent
from models.content_models import Block, Chunk
from models.reading_models import QuizAnswer, ReadingStats, Slide, SlideKind
from services.ingestion.article_extractor import article_extractor
from services.ingestion.thread_parser import extract_thread, is_twitter_thread
from services.processing.block_parser import parse_content
from services.processing.renderer import render_chunk, render_title_slide
from services.processing.segmenter import chunk_blocks
from services.quiz.quiz_generator import QuizGenerator
from services.quiz.scheduler import QuizScheduler
from services.reading.selection_prompt import SelectionPrompt
from services.reading.slide_deck import SlideDeck

logger = logging.getLogger(__name__)

ANSWER_LETTERS = ("A", "B", "C", "D")


@dataclass
class ReadingSettings:
    chunk_size: int = CHUNK_SIZE_WORDS
    question_interval: int = QUESTION_INTERVAL
    provider: str = AI_PROVIDER
    api_key: Optional[str] = None
    generation_delay: float = GENERATION_DELAY_SECONDS


class ReadingSession:
    """Context object for one article being read."""

    def __init__(
        self,
        settings: Optional[ReadingSettings] = None,
        generator: Optional[QuizGenerator] = None,
        selection: Optional[SelectionPrompt] = None,
    ):
        self.settings = settings or ReadingSettings()
        self.session_id = f"session_{uuid.uuid4().hex[:12]}"

        self.generator = generator or QuizGenerator(
            provider=self.settings.provider,
            api_key=self.settings.api_key,
        )
        self.selection = selection or SelectionPrompt(
            provider=self.settings.provider,
            api_key=self.settings.api_key,
        )
        self.deck = SlideDeck()
        self.scheduler = QuizScheduler(
            generate=self.generator.agenerate_question,
            presenter=self.deck,
            interval=self.settings.question_interval,
            generation_delay=self.settings.generation_delay,
        )

        self.title = ""
        self.excerpt = ""
        self.url: Optional[str] = None
        self.chunks: List[Chunk] = []
        self.chunks_read: Set[int] = set()
        self.answered: Dict[str, bool] = {}  # slide_id -> correct
        self.closed = False
        self._tasks: Set[asyncio.Task] = set()

    @property
    def quizzes_enabled(self) -> bool:
        return self.generator.is_enabled

    def start(self, html: str, url: Optional[str] = None) -> List[Slide]:
        """
        Extract, segment and lay out slides for a page.

        Raises:
            NoArticleFound: nothing readable on the page
            EmptyContent: content produced no chunks
        """
        self.url = url
        blocks: Optional[List[Block]] = None

        if url and is_twitter_thread(url):
            thread = extract_thread(html, url)
            if thread is not None:
                self.title = thread.title
                self.excerpt = thread.excerpt
                blocks = thread.blocks

        if blocks is None:
            article = article_extractor.extract(html)
            self.title = article.title
            self.excerpt = article.excerpt
            blocks = parse_content(article.content, base_url=url)

        self.chunks = chunk_blocks(blocks, self.settings.chunk_size)
        if not self.chunks:
            raise EmptyContent("No content to display")

        slides = [
            Slide(
                kind=SlideKind.TITLE,
                html=render_title_slide(
                    self.title,
                    self.excerpt,
                    len(self.chunks),
                    self.settings.question_interval,
                    self.quizzes_enabled,
                ),
                text=self.title,
            )
        ]
        for chunk in self.chunks:
            slides.append(
                Slide(kind=SlideKind.CONTENT, html=render_chunk(chunk), text=chunk.text, chunk_index=chunk.index)
            )
        self.deck.set_slides(slides)

        if self.quizzes_enabled:
            self.scheduler.plan_quizzes(self.chunks, self.settings.question_interval)

        logger.info(f"Session {self.session_id} started: '{self.title}' ({len(self.chunks)} chunks)")
        return self.deck.slides

    def start_from_url(self, url: str) -> List[Slide]:
        """Fetch a page and start reading it."""
        html = article_extractor.fetch_html(url)
        return self.start(html, url=url)

    def start_background(self) -> Optional[asyncio.Task]:
        """Spawn the quiz worker on the running event loop."""
        if not self.quizzes_enabled or not self.scheduler.queue:
            return None
        return self._spawn(self.scheduler.run_background())

    async def handle_slide_change(self, position: int) -> Optional[Slide]:
        """Record progress for the slide at position and let the scheduler react."""
        slide = self.deck.get(position)
        if slide is not None and slide.kind == SlideKind.CONTENT and slide.chunk_index is not None:
            self.chunks_read.add(slide.chunk_index)
        return await self.scheduler.on_navigate(position)

    def navigate(self, position: int) -> asyncio.Task:
        """handle_slide_change as a tracked task, for callers that must not wait on generation."""
        return self._spawn(self.handle_slide_change(position))

    def answer_quiz(self, slide_id: str, letter: str) -> QuizAnswer:
        """
        Score an answer to a quiz slide; only the first answer counts.

        Raises:
            KeyError: unknown slide or not an answerable quiz
            ValueError: letter is not A-D
        """
        position = self.deck.index_of(slide_id)
        slide = self.deck.get(position) if position is not None else None
        if slide is None or slide.kind != SlideKind.QUIZ or slide.quiz is None:
            raise KeyError(slide_id)

        letter = (letter or "").strip().upper()
        if letter not in ANSWER_LETTERS:
            raise ValueError(f"Answer must be one of A-D, got {letter!r}")

        quiz = slide.quiz
        correct = letter == quiz.correct
        counted = slide_id not in self.answered
        if counted:
            self.answered[slide_id] = correct
        return QuizAnswer(
            correct=correct,
            correct_letter=quiz.correct,
            explanation=quiz.explanation,
            counted=counted,
        )

    async def ask_about_selection(
        self, text: str, prompt_type: str, custom_prompt: Optional[str] = None
    ) -> str:
        """Answer a question about text the reader selected."""
        return await self.selection.aask(prompt_type, text, custom_prompt)

    def stats(self) -> ReadingStats:
        by_index = {chunk.index: chunk for chunk in self.chunks}
        return ReadingStats(
            chunk_count=len(self.chunks),
            total_words=sum(chunk.word_count for chunk in self.chunks),
            chunks_read=len(self.chunks_read),
            words_read=sum(by_index[i].word_count for i in self.chunks_read if i in by_index),
            quiz_correct=sum(1 for correct in self.answered.values() if correct),
            quiz_total=len(self.answered),
        )

    def close(self) -> None:
        """Stop quiz scheduling and drop reading state."""
        if self.closed:
            return
        self.closed = True
        self.scheduler.shutdown()
        self.chunks_read.clear()
        self.answered.clear()
        logger.info(f"Session {self.session_id} closed")

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
