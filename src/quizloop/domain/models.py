"""
Domain models for questions and learner performance.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, Union

from .constants import MASTERY_CORRECT_THRESHOLD

QuestionId = Union[int, str]

SelectionMode = Literal["all", "weakSpot"]
SELECTION_MODES: tuple[str, ...] = ("all", "weakSpot")


class DifficultyTier(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


def classify_difficulty(correct_count: int, incorrect_count: int) -> DifficultyTier:
    """
    Derive the tier from correctness counts.

    Hard wins over easy: more misses than hits is always hard.
    """
    if incorrect_count > correct_count:
        return DifficultyTier.HARD
    if correct_count >= MASTERY_CORRECT_THRESHOLD and incorrect_count == 0:
        return DifficultyTier.EASY
    return DifficultyTier.MEDIUM


@dataclass(frozen=True)
class QuestionRecord:
    """
    A single question from the bank. Never mutated.

    Attributes:
        id: Unique identifier, stable across sessions.
        question: Prompt text.
        correct_answer: The answer graded as correct.
        hint: Short nudge shown on request.
        explanation: Shown after the learner answers.
        options: Candidate answers, including the correct one (at least 2).
    """

    id: QuestionId
    question: str
    correct_answer: str
    hint: str = ""
    explanation: str = ""
    options: tuple[str, ...] = ()

    def is_correct(self, answer: str) -> bool:
        return answer.strip() == self.correct_answer.strip()


@dataclass(frozen=True)
class PerformanceEntry:
    """
    Answer history for one question.

    Attributes:
        question_id: The question this entry tracks (None for the unseen sentinel).
        correct_count: Times answered correctly.
        incorrect_count: Times answered incorrectly.
        last_seen: Epoch seconds of the most recent answer (0 = never).
    """

    question_id: QuestionId | None
    correct_count: int = 0
    incorrect_count: int = 0
    last_seen: float = 0.0

    @property
    def difficulty(self) -> DifficultyTier:
        return classify_difficulty(self.correct_count, self.incorrect_count)

    @property
    def attempts(self) -> int:
        return self.correct_count + self.incorrect_count

    @property
    def accuracy(self) -> float:
        if self.attempts == 0:
            return 0.0
        return self.correct_count / self.attempts

    @property
    def gap(self) -> int:
        """Misses minus hits; positive means the learner is losing on this one."""
        return self.incorrect_count - self.correct_count

    def with_answer(self, was_correct: bool, now: float) -> "PerformanceEntry":
        return PerformanceEntry(
            question_id=self.question_id,
            correct_count=self.correct_count + (1 if was_correct else 0),
            incorrect_count=self.incorrect_count + (0 if was_correct else 1),
            last_seen=now,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionId": self.question_id,
            "correctCount": self.correct_count,
            "incorrectCount": self.incorrect_count,
            "lastSeen": self.last_seen,
            "difficulty": self.difficulty.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PerformanceEntry":
        # "difficulty" is derived from the counts; a stored value is not read
        return cls(
            question_id=data["questionId"],
            correct_count=max(0, int(data.get("correctCount", 0))),
            incorrect_count=max(0, int(data.get("incorrectCount", 0))),
            last_seen=float(data.get("lastSeen", 0.0)),
        )


# Returned for questions that have never been answered. Never stored in a ledger.
UNSEEN = PerformanceEntry(question_id=None)


@dataclass
class SessionStats:
    """
    Streak and lifetime counters.

    current_streak is session-flavoured but persisted: it keeps counting
    across restarts until an incorrect answer breaks it. best_streak and
    the totals only ever grow (short of an explicit reset).
    """

    current_streak: int = 0
    best_streak: int = 0
    total_correct: int = 0
    total_incorrect: int = 0

    def record_outcome(self, was_correct: bool) -> None:
        if was_correct:
            self.total_correct += 1
            self.current_streak += 1
            if self.current_streak > self.best_streak:
                self.best_streak = self.current_streak
        else:
            self.total_incorrect += 1
            self.current_streak = 0

    def reset_streak(self) -> None:
        self.current_streak = 0

    @property
    def total_answered(self) -> int:
        return self.total_correct + self.total_incorrect

    def to_dict(self) -> dict[str, int]:
        return {
            "currentStreak": self.current_streak,
            "bestStreak": self.best_streak,
            "totalCorrect": self.total_correct,
            "totalIncorrect": self.total_incorrect,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionStats":
        stats = cls(
            current_streak=max(0, int(data.get("currentStreak", 0))),
            best_streak=max(0, int(data.get("bestStreak", 0))),
            total_correct=max(0, int(data.get("totalCorrect", 0))),
            total_incorrect=max(0, int(data.get("totalIncorrect", 0))),
        )
        stats.best_streak = max(stats.best_streak, stats.current_streak)
        return stats


@dataclass
class AnswerOutcome:
    """Result of one answer event, as reported back to a mode screen."""

    question_id: QuestionId
    was_correct: bool
    entry: PerformanceEntry
    current_streak: int
    best_streak: int
    saved: bool = True
    correct_answer: str = ""
    explanation: str = ""
