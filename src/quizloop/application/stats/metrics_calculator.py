"""
Metrics calculator for deriving progress views from the performance ledger.

This is a pure computation module with no I/O. Every query is recomputed
from the live ledger on each call; nothing is cached.
"""

from collections.abc import Sequence
from dataclasses import asdict, dataclass

from quizloop.domain.ledger import PerformanceLedger
from quizloop.domain.models import DifficultyTier, QuestionRecord, SessionStats


def _round_half_up_percent(numerator: int, denominator: int) -> int:
    # Integer form of floor(100 * n / d + 0.5); avoids float and banker's rounding
    return (200 * numerator + denominator) // (2 * denominator)


@dataclass
class ProgressSummary:
    """
    Dashboard numbers consumed by every screen.
    """

    total_questions: int
    studied: int
    mastered: int
    needs_practice: int
    accuracy: int  # percent, 0-100
    current_streak: int
    best_streak: int
    total_correct: int
    total_incorrect: int

    @property
    def weak_spot_available(self) -> bool:
        return self.needs_practice > 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["weak_spot_available"] = self.weak_spot_available
        return data


class MetricsCalculator:
    """
    Computes aggregate progress metrics from a bank and a ledger.

    Stateless and side-effect free. Only questions in the bank are counted,
    so stale ledger entries for removed questions never inflate the numbers.
    """

    def studied_count(self, bank: Sequence[QuestionRecord], ledger: PerformanceLedger) -> int:
        """Bank questions answered at least once."""
        return sum(1 for q in bank if ledger.has_entry(q.id))

    def mastered_count(self, bank: Sequence[QuestionRecord], ledger: PerformanceLedger) -> int:
        """Bank questions currently in the easy tier."""
        return self._count_tier(bank, ledger, DifficultyTier.EASY)

    def needs_practice_count(
        self, bank: Sequence[QuestionRecord], ledger: PerformanceLedger
    ) -> int:
        """
        Bank questions currently in the hard tier.

        Zero means the weak-spot mode has nothing to show and is disabled.
        """
        return self._count_tier(bank, ledger, DifficultyTier.HARD)

    def accuracy(self, stats: SessionStats) -> int:
        """
        Lifetime accuracy as a whole percent.

        0 when nothing has been answered yet.
        """
        return self.session_accuracy(stats.total_correct, stats.total_answered)

    def session_accuracy(self, score: int, total: int) -> int:
        """Percent score for a finished session; 0 for an empty one."""
        if total <= 0:
            return 0
        return _round_half_up_percent(score, total)

    def weak_spots(
        self, bank: Sequence[QuestionRecord], ledger: PerformanceLedger
    ) -> list[QuestionRecord]:
        """
        Hard-tier questions, widest miss gap first.

        Ties keep bank order.
        """
        hard = [
            q
            for q in bank
            if ledger.has_entry(q.id) and ledger.get_entry(q.id).difficulty == DifficultyTier.HARD
        ]
        return sorted(hard, key=lambda q: ledger.get_entry(q.id).gap, reverse=True)

    def summarize(
        self,
        bank: Sequence[QuestionRecord],
        ledger: PerformanceLedger,
        stats: SessionStats,
    ) -> ProgressSummary:
        """
        All dashboard numbers in one object.
        """
        return ProgressSummary(
            total_questions=len(bank),
            studied=self.studied_count(bank, ledger),
            mastered=self.mastered_count(bank, ledger),
            needs_practice=self.needs_practice_count(bank, ledger),
            accuracy=self.accuracy(stats),
            current_streak=stats.current_streak,
            best_streak=stats.best_streak,
            total_correct=stats.total_correct,
            total_incorrect=stats.total_incorrect,
        )

    def _count_tier(
        self,
        bank: Sequence[QuestionRecord],
        ledger: PerformanceLedger,
        tier: DifficultyTier,
    ) -> int:
        return sum(
            1 for q in bank if ledger.has_entry(q.id) and ledger.get_entry(q.id).difficulty == tier
        )
