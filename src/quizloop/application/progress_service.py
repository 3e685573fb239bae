"""
Progress Service: application layer owner of the ledger and session stats.

Every mode screen goes through this one handle. It records answers, asks
the selection engine for material, and serves the dashboard metrics.
"""

import logging
import random
import threading
from collections.abc import Iterable, Sequence

from quizloop.domain.errors import PersistenceError, QuestionBankError, UnknownQuestionError
from quizloop.domain.ledger import PerformanceLedger
from quizloop.domain.models import AnswerOutcome, QuestionId, QuestionRecord, SessionStats
from quizloop.domain.ports import ProgressRepository

from .selection import SelectionWeights, select_questions
from .stats.metrics_calculator import MetricsCalculator, ProgressSummary

logger = logging.getLogger(__name__)


class ProgressService:
    """
    Single handle over the bank, the performance ledger and the session stats.

    Follows Dependency Inversion: depends on the ProgressRepository
    abstraction, not a concrete storage adapter.

    Lifecycle: construct, open() once (loads state), mutate through
    record_answer()/reset(), close() (final save). Usable as a context manager.
    """

    def __init__(
        self,
        bank: Sequence[QuestionRecord],
        repository: ProgressRepository,
        calculator: MetricsCalculator | None = None,
        weights: SelectionWeights | None = None,
        rng: random.Random | None = None,
    ):
        """
        Args:
            bank: The question bank, in display order. Never mutated.
            repository: The port used to load and save progress.
            calculator: Optional custom calculator; uses default if not provided.
            weights: Selection weighting curve; engine default if not provided.
            rng: Random source for selection and option shuffling.
        """
        self.bank: tuple[QuestionRecord, ...] = tuple(bank)
        self._by_id: dict[QuestionId, QuestionRecord] = {q.id: q for q in self.bank}
        if len({str(qid) for qid in self._by_id}) != len(self._by_id):
            # Progress is keyed by str(id)
            raise QuestionBankError('Question ids collide when written as text, e.g. 1 and "1"')
        self._repo = repository
        self._calc = calculator or MetricsCalculator()
        self.weights = weights
        self.rng = rng or random.Random()
        self.ledger = PerformanceLedger(known_ids=self._by_id)
        self.stats = SessionStats()
        # Timer threads and the UI thread share one mutation path
        self.lock = threading.RLock()
        self._opened = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls, bank: Sequence[QuestionRecord], repository: ProgressRepository, **kwargs
    ) -> "ProgressService":
        """Construct and open in one step."""
        return cls(bank, repository, **kwargs).open()

    def open(self) -> "ProgressService":
        """
        Load persisted state. A load failure starts from empty state.
        """
        try:
            ledger, stats = self._repo.load()
        except PersistenceError as e:
            logger.error(f"Could not load progress, starting fresh: {e}")
            ledger, stats = PerformanceLedger(), SessionStats()

        stale = [qid for qid in ledger if qid not in self._by_id]
        if stale:
            logger.info(f"Ignoring {len(stale)} ledger entries for questions not in the bank")

        ledger.bind(self._by_id)
        self.ledger = ledger
        self.stats = stats
        self._opened = True
        return self

    def close(self) -> None:
        if self._opened:
            self.save()
            self._opened = False

    def __enter__(self) -> "ProgressService":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def record_answer(self, question_id: QuestionId, was_correct: bool) -> AnswerOutcome:
        """
        Record one answer event in the ledger and the streak counters, then save.

        Raises:
            UnknownQuestionError: question_id is not in the bank.
        """
        question = self.get_question(question_id)
        with self.lock:
            entry = self.ledger.record_answer(question_id, was_correct)
            self.stats.record_outcome(was_correct)
            saved = self.save()

        logger.debug(
            f"Answer q={question_id} correct={was_correct} tier={entry.difficulty.value} "
            f"streak={self.stats.current_streak}"
        )
        return AnswerOutcome(
            question_id=question_id,
            was_correct=was_correct,
            entry=entry,
            current_streak=self.stats.current_streak,
            best_streak=self.stats.best_streak,
            saved=saved,
            correct_answer=question.correct_answer,
            explanation=question.explanation,
        )

    def reset(self) -> None:
        """Forget everything: ledger entries, streaks and lifetime totals."""
        with self.lock:
            self.ledger.reset()
            self.stats = SessionStats()
            self.save()
        logger.info("Progress reset")

    def reset_streak(self) -> None:
        """Zero the current streak only; best streak and totals are kept."""
        with self.lock:
            self.stats.reset_streak()
            self.save()

    def save(self) -> bool:
        """
        Best-effort persistence. Failures are logged; in-memory state stays
        authoritative for the rest of the process.
        """
        try:
            self._repo.save(self.ledger, self.stats)
        except (PersistenceError, OSError) as e:
            logger.warning(f"Progress not saved: {e}", exc_info=True)
            return False
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_question(self, question_id: QuestionId) -> QuestionRecord:
        try:
            return self._by_id[question_id]
        except KeyError:
            raise UnknownQuestionError(question_id) from None

    def select(
        self,
        count: int,
        mode: str = "all",
        exclude: Iterable[QuestionId] = (),
    ) -> list[QuestionRecord]:
        """
        Ask the selection engine for `count` questions from the bank minus `exclude`.
        """
        excluded = set(exclude)
        pool = [q for q in self.bank if q.id not in excluded]
        with self.lock:
            return select_questions(
                pool, self.ledger, count, mode, weights=self.weights, rng=self.rng
            )

    def summary(self) -> ProgressSummary:
        return self._calc.summarize(self.bank, self.ledger, self.stats)

    def studied_count(self) -> int:
        return self._calc.studied_count(self.bank, self.ledger)

    def mastered_count(self) -> int:
        return self._calc.mastered_count(self.bank, self.ledger)

    def needs_practice_count(self) -> int:
        return self._calc.needs_practice_count(self.bank, self.ledger)

    def accuracy(self) -> int:
        return self._calc.accuracy(self.stats)

    def weak_spots(self) -> list[QuestionRecord]:
        return self._calc.weak_spots(self.bank, self.ledger)

    @property
    def calculator(self) -> MetricsCalculator:
        return self._calc
