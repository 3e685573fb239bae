import pytest

from quizloop.domain.errors import UnknownQuestionError
from quizloop.domain.models import (
    UNSEEN,
    DifficultyTier,
    PerformanceEntry,
    QuestionRecord,
    SessionStats,
    classify_difficulty,
)


@pytest.mark.parametrize(
    "correct, incorrect, tier",
    [
        (0, 0, DifficultyTier.MEDIUM),
        (0, 2, DifficultyTier.HARD),
        (1, 2, DifficultyTier.HARD),
        (1, 1, DifficultyTier.MEDIUM),
        (2, 0, DifficultyTier.MEDIUM),
        (3, 0, DifficultyTier.EASY),
        (7, 0, DifficultyTier.EASY),
        (5, 1, DifficultyTier.MEDIUM),  # a single miss blocks mastery
    ],
)
def test_classify_difficulty(correct, incorrect, tier):
    assert classify_difficulty(correct, incorrect) == tier


def test_unseen_sentinel():
    assert UNSEEN.correct_count == 0
    assert UNSEEN.incorrect_count == 0
    assert UNSEEN.last_seen == 0.0
    assert UNSEEN.difficulty == DifficultyTier.MEDIUM
    assert UNSEEN.accuracy == 0.0


def test_with_answer_returns_new_entry():
    entry = PerformanceEntry(question_id=1)
    after = entry.with_answer(False, now=100.0).with_answer(False, now=200.0)

    assert entry.incorrect_count == 0  # frozen, untouched
    assert after.incorrect_count == 2
    assert after.correct_count == 0
    assert after.last_seen == 200.0
    assert after.difficulty == DifficultyTier.HARD
    assert after.gap == 2


def test_entry_serialization_uses_stored_counts_not_stored_tier():
    data = {
        "questionId": 4,
        "correctCount": 3,
        "incorrectCount": 0,
        "lastSeen": 1700000000000,
        "difficulty": "hard",  # stale
    }
    entry = PerformanceEntry.from_dict(data)

    assert entry.difficulty == DifficultyTier.EASY
    assert entry.to_dict()["difficulty"] == "easy"
    assert entry.to_dict()["questionId"] == 4


def test_entry_from_dict_clamps_negative_counts():
    entry = PerformanceEntry.from_dict({"questionId": "q", "correctCount": -2})
    assert entry.correct_count == 0
    assert entry.incorrect_count == 0


def test_question_is_correct_trims():
    q = QuestionRecord(id=1, question="?", correct_answer="Danube", options=("Danube", "Elbe"))
    assert q.is_correct("  Danube ")
    assert not q.is_correct("danube")
    assert not q.is_correct("Elbe")


def test_streak_law():
    stats = SessionStats(best_streak=2)
    for _ in range(5):
        stats.record_outcome(True)
    assert stats.current_streak == 5
    assert stats.best_streak == 5

    stats.record_outcome(False)
    assert stats.current_streak == 0
    assert stats.best_streak == 5

    for _ in range(3):
        stats.record_outcome(True)
    assert stats.current_streak == 3
    assert stats.best_streak == 5  # max(prior best, k)
    assert stats.total_correct == 8
    assert stats.total_incorrect == 1
    assert stats.total_answered == 9


def test_reset_streak_keeps_best_and_totals():
    stats = SessionStats()
    stats.record_outcome(True)
    stats.record_outcome(True)
    stats.reset_streak()

    assert stats.current_streak == 0
    assert stats.best_streak == 2
    assert stats.total_correct == 2


def test_session_stats_from_dict_repairs_best_streak():
    stats = SessionStats.from_dict({"currentStreak": 6, "bestStreak": 4, "totalCorrect": 6})
    assert stats.best_streak == 6
    assert stats.total_incorrect == 0


def test_unknown_question_error_is_a_key_error_with_readable_message():
    err = UnknownQuestionError(99)
    assert isinstance(err, KeyError)
    assert err.question_id == 99
    assert str(err) == "Unknown question id: 99"
