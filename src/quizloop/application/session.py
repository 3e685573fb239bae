"""
Quiz session: one run of a mode screen from start to completion or restart.

Owns the question queue, the option order of the question on screen, the
feedback phase and, for timed modes, the countdown. All ledger and streak
writes go through ProgressService.record_answer().
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from quizloop.domain.constants import (
    COUNTDOWN_TICK,
    FEEDBACK_DELAY,
    MATCHING_BOARD_SIZE,
    SPEED_MODE_DURATION,
)
from quizloop.domain.models import AnswerOutcome, QuestionId, QuestionRecord
from quizloop.domain.modes import QuizMode, get_mode

from .progress_service import ProgressService
from .scheduling import Scheduler, ThreadingScheduler, TimerHandle
from .selection import shuffle_options

logger = logging.getLogger(__name__)


def normalize_typed_answer(text: str) -> str:
    return " ".join(text.split()).casefold()


@dataclass
class SessionResult:
    mode_id: str
    score: int
    answered: int
    total: int
    accuracy: int  # percent of answered
    time_left: int | None = None


class QuizSession:
    """
    Drives one mode screen.

    Questions already answered in this session are excluded from later
    draws (restart()); once every bank question has been used the set is
    cleared and coverage starts over.

    In matching mode the queue is one board: `options` holds the shuffled
    answers of the questions still unmatched, and match() pairs one
    question with one answer. A correct pair leaves the board; a wrong pair
    is recorded as a miss and both stay. The board completes when empty.

    Timed modes schedule a one-second countdown tick and a feedback
    auto-advance. Every scheduled callback is bound to the session
    generation: restart() and close() bump the generation and cancel the
    handles, so a late callback can never touch a reset session.
    """

    def __init__(
        self,
        service: ProgressService,
        mode: QuizMode | str,
        scheduler: Scheduler | None = None,
        size: int | None = None,
        duration: int = SPEED_MODE_DURATION,
        feedback_delay: float = FEEDBACK_DELAY,
    ):
        self.service = service
        self.mode = get_mode(mode) if isinstance(mode, str) else mode
        self.scheduler = scheduler or ThreadingScheduler()
        self.size = size
        self.duration = duration
        self.feedback_delay = feedback_delay

        self._used: set[QuestionId] = set()
        self._generation = 0
        self._timers: list[TimerHandle] = []
        self._reset_state()
        self._load_queue()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _reset_state(self) -> None:
        self.questions: list[QuestionRecord] = []
        self.index = 0
        self.options: list[str] = []
        self.selected_answer: str | None = None
        self.showing_feedback = False
        self.hint_visible = False
        self.score = 0
        self.answered = 0
        self.started = not self.mode.timed
        self.is_complete = False
        self.time_left: int | None = self.duration if self.mode.timed else None
        self.last_outcome: AnswerOutcome | None = None
        self.matched: set[QuestionId] = set()

    def _load_queue(self) -> None:
        remaining = [q for q in self.service.bank if q.id not in self._used]
        if not remaining:
            self._used.clear()
        if self.size is not None:
            count = self.size
        elif self.mode.answer_style == "matching":
            count = MATCHING_BOARD_SIZE
        else:
            count = len(self.service.bank)
        self.questions = self.service.select(count, self.mode.selection, exclude=self._used)
        self._show(0)
        logger.debug(f"[{self.mode.id}] queued {len(self.questions)} questions")

    def _show(self, index: int) -> None:
        self.index = index
        self.selected_answer = None
        self.showing_feedback = False
        self.hint_visible = False
        if self.mode.answer_style == "matching":
            self.options = [q.correct_answer for q in self.questions]
            self.service.rng.shuffle(self.options)
            return
        current = self.current
        # Shuffled once per display; stays put through the feedback phase
        self.options = shuffle_options(current, self.service.rng) if current else []

    @property
    def current(self) -> QuestionRecord | None:
        if 0 <= self.index < len(self.questions):
            return self.questions[self.index]
        return None

    @property
    def is_empty(self) -> bool:
        """Nothing eligible (e.g. no weak spots). Render a 'nothing to do' state."""
        return not self.questions

    @property
    def unmatched(self) -> list[QuestionRecord]:
        return [q for q in self.questions if q.id not in self.matched]

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        """Schedule `callback` for the current generation. Caller holds the lock."""
        generation = self._generation
        handle: TimerHandle | None = None

        def fire() -> None:
            with self.service.lock:
                if handle in self._timers:
                    self._timers.remove(handle)
                if generation != self._generation:
                    return
                callback()

        handle = self.scheduler.call_later(delay, fire)
        self._timers.append(handle)

    def _cancel_timers(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()

    def start(self) -> None:
        """Start the clock in timed modes. No-op elsewhere or when already running."""
        with self.service.lock:
            if self.started or self.is_complete:
                return
            self.started = True
            self._schedule(COUNTDOWN_TICK, self._tick)

    def _tick(self) -> None:
        if self.is_complete or self.time_left is None:
            return
        self.time_left -= 1
        if self.time_left <= 0:
            self.time_left = 0
            logger.debug(f"[{self.mode.id}] time is up")
            self._finish()
            return
        self._schedule(COUNTDOWN_TICK, self._tick)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def answer(self, choice: str) -> AnswerOutcome | None:
        """
        Grade `choice` for the current question and record it.

        Returns None when no answer is accepted right now: feedback already
        showing, session complete, empty queue, or a timed mode not started.
        """
        with self.service.lock:
            question = self.current
            if question is None or self.showing_feedback or self.is_complete or not self.started:
                return None
            if self.mode.answer_style == "matching":
                return None

            if self.mode.answer_style == "typed":
                correct = normalize_typed_answer(choice) == normalize_typed_answer(
                    question.correct_answer
                )
            else:
                correct = question.is_correct(choice)

            self.selected_answer = choice
            return self._record(question, correct)

    def self_grade(self, knew_it: bool) -> AnswerOutcome | None:
        """Flashcard answer: the learner says whether they knew it."""
        with self.service.lock:
            question = self.current
            if question is None or self.showing_feedback or self.is_complete:
                return None
            if self.mode.answer_style == "matching":
                return None
            return self._record(question, knew_it)

    def match(self, question_id: QuestionId, answer: str) -> AnswerOutcome | None:
        """
        Pair a board question with an answer from `options` and record it.

        Returns None outside matching mode, once the board is complete, or
        when `question_id` is not an unmatched question on the board.
        """
        with self.service.lock:
            if self.mode.answer_style != "matching" or self.is_complete:
                return None
            question = next((q for q in self.unmatched if q.id == question_id), None)
            if question is None:
                return None

            correct = question.is_correct(answer)
            outcome = self.service.record_answer(question.id, correct)
            self.answered += 1
            self._used.add(question.id)
            self.last_outcome = outcome
            if correct:
                self.score += 1
                self.matched.add(question.id)
                self.options.remove(question.correct_answer)
                if not self.unmatched:
                    self._finish()
            return outcome

    def _record(self, question: QuestionRecord, correct: bool) -> AnswerOutcome:
        outcome = self.service.record_answer(question.id, correct)
        self.showing_feedback = True
        self.answered += 1
        if correct:
            self.score += 1
        self._used.add(question.id)
        self.last_outcome = outcome

        if self.mode.timed:
            index = self.index
            self._schedule(self.feedback_delay, lambda: self._auto_advance(index))
        return outcome

    def _auto_advance(self, index: int) -> None:
        if self.showing_feedback:
            self.advance(expected_index=index)

    def reveal_hint(self) -> str:
        with self.service.lock:
            question = self.current
            if question is None:
                return ""
            self.hint_visible = True
            return question.hint

    def advance(self, expected_index: int | None = None) -> None:
        """
        Move to the next question, or complete the session after the last one.

        With `expected_index`, only advance if that question is still on
        screen; a timer or another caller may already have moved on.
        """
        with self.service.lock:
            if self.is_complete or self.mode.answer_style == "matching":
                return
            if expected_index is not None and expected_index != self.index:
                return
            if self.index + 1 < len(self.questions):
                self._show(self.index + 1)
            else:
                self._finish()

    def _finish(self) -> None:
        self.is_complete = True
        self.showing_feedback = False
        self._cancel_timers()

    def restart(self, reset_streak: bool = False) -> None:
        """
        Begin a fresh run. Questions answered so far stay excluded until the
        whole bank has been covered.

        The current streak carries over unless `reset_streak` is set.
        Lifetime totals and the best streak are never touched.
        """
        with self.service.lock:
            self._generation += 1
            self._cancel_timers()
            if reset_streak:
                self.service.reset_streak()
            self._reset_state()
            self._load_queue()

    def close(self) -> None:
        """End the session; pending callbacks become no-ops."""
        with self.service.lock:
            self._generation += 1
            self._cancel_timers()
            self.is_complete = True

    def result(self) -> SessionResult:
        return SessionResult(
            mode_id=self.mode.id,
            score=self.score,
            answered=self.answered,
            total=len(self.questions),
            accuracy=self.service.calculator.session_accuracy(self.score, self.answered),
            time_left=self.time_left,
        )
