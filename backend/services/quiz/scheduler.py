"""
Quiz scheduling service.

Plans where quiz slides go, pre-generates them with a single background
worker, and reconciles finished or in-flight generations with navigation.
Positions of not-yet-inserted quiz slides are tracked in a position map that
is shifted whenever a slide is inserted ahead of them.
"""
import asyncio
import logging
from collections import deque
from enum import Enum
from typing import Awaitable, Callable, Deque, Dict, List, Optional, Sequence

from core.config import GENERATION_DELAY_SECONDS, QUESTION_INTERVAL
from models.content_models import Chunk
from models.quiz_models import OutcomeStatus, QuizOutcome, QuizResult, QuizTask
from models.reading_models import Slide, SlideKind
from services.processing.renderer import render_quiz_card, render_quiz_error, render_quiz_loading
from services.reading.slide_deck import SlidePresenter

logger = logging.getLogger(__name__)

GenerateFn = Callable[[str], Awaitable[QuizResult]]
SleepFn = Callable[[float], Awaitable[None]]


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


def plan_quiz_indices(chunk_count: int, interval: int) -> List[int]:
    """Chunk indices followed by a quiz: interval, 2*interval+1, ..."""
    if interval < 1:
        raise ValueError(f"interval must be at least 1, got {interval}")
    return list(range(interval, chunk_count, interval + 1))


def build_context(chunks: Sequence[Chunk], index: int, interval: int) -> str:
    """Text of the chunks read since the previous quiz, up to and including index."""
    start = max(0, index - interval)
    return " ".join(chunk.text for chunk in chunks[start:index + 1])


def shift_positions(position_map: Dict[int, int], insertion_point: int) -> None:
    """Move every mapped slot at or after insertion_point down by one."""
    for chunk_index, slot in position_map.items():
        if slot >= insertion_point:
            position_map[chunk_index] = slot + 1


def outcome_slide(outcome: QuizOutcome) -> Slide:
    if outcome.status == OutcomeStatus.READY and outcome.result is not None:
        return Slide(
            kind=SlideKind.QUIZ,
            html=render_quiz_card(outcome.result, outcome.chunk_index),
            text=outcome.result.question,
            chunk_index=outcome.chunk_index,
            quiz=outcome.result,
        )
    return Slide(
        kind=SlideKind.QUIZ_ERROR,
        html=render_quiz_error(outcome.chunk_index, outcome.error),
        chunk_index=outcome.chunk_index,
        error=outcome.error,
    )


class QuizScheduler:
    """
    Single-flight quiz generation bound to one reading session.

    All generation goes through _request, which registers one future per
    chunk index; the worker and navigation share it, so an index is never
    requested twice. Slide insertion and position shifting run without an
    await in between.
    """

    def __init__(
        self,
        generate: GenerateFn,
        presenter: SlidePresenter,
        interval: int = QUESTION_INTERVAL,
        generation_delay: float = GENERATION_DELAY_SECONDS,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._generate = generate
        self.presenter = presenter
        self.interval = interval
        self.generation_delay = generation_delay
        self._sleep = sleep

        self.chunks: List[Chunk] = []
        self.queue: Deque[QuizTask] = deque()
        self.position_map: Dict[int, int] = {}
        self.outcomes: Dict[int, QuizOutcome] = {}
        self.statuses: Dict[int, OutcomeStatus] = {}
        self._requests: Dict[int, asyncio.Future] = {}

        self.state = SchedulerState.IDLE
        self.aborted = False

    def plan_quizzes(self, chunks: Sequence[Chunk], interval: Optional[int] = None) -> List[QuizTask]:
        """
        Queue a generation task for every quiz point and map its slide slot.

        Slot layout: title slide at 0, chunk i at i + 1, its quiz at i + 2.
        """
        if interval is not None:
            self.interval = interval
        indices = plan_quiz_indices(len(chunks), self.interval)

        self.chunks = list(chunks)
        tasks = [QuizTask(chunk_index=i, context=build_context(self.chunks, i, self.interval)) for i in indices]

        self.queue = deque(tasks)
        self.position_map = {i: i + 2 for i in indices}
        self.statuses = {i: OutcomeStatus.PENDING for i in indices}

        logger.info(f"Planned {len(tasks)} quizzes over {len(chunks)} chunks (interval={self.interval})")
        return tasks

    def status(self, chunk_index: int) -> Optional[OutcomeStatus]:
        return self.statuses.get(chunk_index)

    async def run_background(self) -> None:
        """Work through the queue one request at a time until empty or aborted."""
        if self.state == SchedulerState.RUNNING or self.aborted or not self.queue:
            return

        self.state = SchedulerState.RUNNING
        logger.info(f"Quiz worker started ({len(self.queue)} queued)")
        try:
            while self.queue and not self.aborted:
                task = self.queue.popleft()
                if task.chunk_index in self._requests:
                    continue

                await self._request(task, store=True)

                if self.queue and not self.aborted:
                    await self._sleep(self.generation_delay)
        finally:
            self.state = SchedulerState.IDLE
            logger.info("Quiz worker finished")

    async def on_navigate(self, position: int) -> Optional[Slide]:
        """
        React to the reader arriving at a slide position.

        When the next slot belongs to a planned quiz, a slide is inserted
        there: the finished quiz (or error card) if one is cached, otherwise a
        loading card that is replaced once generation resolves.

        Returns:
            The inserted (or replacing) slide, or None when nothing was due
        """
        if self.aborted:
            return None

        trigger = position + 1
        chunk_index = self._chunk_at_slot(trigger)
        if chunk_index is None:
            return None
        del self.position_map[chunk_index]

        outcome = self.outcomes.pop(chunk_index, None)
        if outcome is not None:
            slide = outcome_slide(outcome)
            self._insert(slide, trigger)
            return slide

        placeholder = Slide(
            kind=SlideKind.QUIZ_LOADING,
            html=render_quiz_loading(chunk_index),
            chunk_index=chunk_index,
        )
        self._insert(placeholder, trigger)

        pending = self._requests.get(chunk_index)
        if pending is not None:
            # Worker already asked; wait for that answer instead of asking again
            outcome = await asyncio.shield(pending)
            self.outcomes.pop(chunk_index, None)
        else:
            outcome = await self._request(self._take_task(chunk_index), store=False)

        if self.aborted:
            return None

        slide = outcome_slide(outcome)
        self.presenter.replace_slide(placeholder.slide_id, slide)
        return slide

    def shutdown(self) -> None:
        """Stop scheduling; in-flight requests finish but are never consumed."""
        self.aborted = True
        self.queue.clear()
        self.position_map.clear()
        self.outcomes.clear()
        self.statuses.clear()
        self._requests.clear()
        logger.info("Quiz scheduler shut down")

    def _chunk_at_slot(self, slot: int) -> Optional[int]:
        for chunk_index, mapped in self.position_map.items():
            if mapped == slot:
                return chunk_index
        return None

    def _insert(self, slide: Slide, position: int) -> None:
        self.presenter.insert_slide(slide, position)
        shift_positions(self.position_map, position)

    def _take_task(self, chunk_index: int) -> QuizTask:
        for task in self.queue:
            if task.chunk_index == chunk_index:
                self.queue.remove(task)
                return task

        logger.warning(f"No queued task for chunk {chunk_index}, rebuilding context")
        return QuizTask(chunk_index=chunk_index, context=build_context(self.chunks, chunk_index, self.interval))

    async def _request(self, task: QuizTask, store: bool) -> QuizOutcome:
        chunk_index = task.chunk_index
        future = asyncio.get_running_loop().create_future()
        self._requests[chunk_index] = future
        self.statuses[chunk_index] = OutcomeStatus.IN_PROGRESS

        try:
            result = await self._generate(task.context)
            outcome = QuizOutcome.ready(chunk_index, result)
        except asyncio.CancelledError:
            future.set_result(QuizOutcome.failed(chunk_index, "Quiz generation cancelled"))
            raise
        except Exception as e:
            logger.error(f"Quiz generation failed for chunk {chunk_index}: {e}")
            outcome = QuizOutcome.failed(chunk_index, str(e) or type(e).__name__)

        # Results arriving after shutdown are dropped
        if not self.aborted:
            self.statuses[chunk_index] = outcome.status
            if store:
                self.outcomes.setdefault(chunk_index, outcome)
        future.set_result(outcome)
        return outcome
