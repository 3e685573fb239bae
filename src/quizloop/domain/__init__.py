# Domain Package
from .errors import PersistenceError, QuestionBankError, QuizloopError, UnknownQuestionError
from .ledger import PerformanceLedger
from .models import (
    UNSEEN,
    AnswerOutcome,
    DifficultyTier,
    PerformanceEntry,
    QuestionRecord,
    SessionStats,
)
from .ports import ProgressRepository

__all__ = [
    "UNSEEN",
    "AnswerOutcome",
    "DifficultyTier",
    "PerformanceEntry",
    "PerformanceLedger",
    "PersistenceError",
    "ProgressRepository",
    "QuestionBankError",
    "QuestionRecord",
    "QuizloopError",
    "SessionStats",
    "UnknownQuestionError",
]
