"""
Performance ledger: question id -> answer history.

The ledger is the only writer of PerformanceEntry values. Entries appear on
the first answer to a question and disappear only through reset().
"""

import time
from collections.abc import Iterable, Iterator
from typing import Any

from .errors import UnknownQuestionError
from .models import UNSEEN, PerformanceEntry, QuestionId


class PerformanceLedger:
    """
    Mapping of question id to PerformanceEntry.

    Args:
        known_ids: Ids that may be recorded. When given, record_answer()
            raises UnknownQuestionError for anything else. When None the
            ledger accepts any id (used while deserializing).
        entries: Initial entries.
    """

    def __init__(
        self,
        known_ids: Iterable[QuestionId] | None = None,
        entries: Iterable[PerformanceEntry] = (),
    ):
        self._known: frozenset[QuestionId] | None = (
            frozenset(known_ids) if known_ids is not None else None
        )
        self._entries: dict[QuestionId, PerformanceEntry] = {}
        for entry in entries:
            self._entries[entry.question_id] = entry

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def record_answer(
        self, question_id: QuestionId, was_correct: bool, now: float | None = None
    ) -> PerformanceEntry:
        """
        Record one answer and return the updated entry.

        Creates the entry on first encounter, otherwise bumps the matching
        counter and refreshes last_seen. The tier follows from the counts.
        """
        if self._known is not None and question_id not in self._known:
            raise UnknownQuestionError(question_id)

        timestamp = time.time() if now is None else now
        current = self._entries.get(question_id) or PerformanceEntry(question_id=question_id)
        updated = current.with_answer(was_correct, timestamp)
        self._entries[question_id] = updated
        return updated

    def reset(self) -> None:
        """Forget every entry."""
        self._entries.clear()

    def bind(self, known_ids: Iterable[QuestionId]) -> None:
        """Restrict future record_answer() calls to the given ids."""
        self._known = frozenset(known_ids)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_entry(self, question_id: QuestionId) -> PerformanceEntry:
        """Return the entry, or the UNSEEN sentinel for unanswered questions."""
        return self._entries.get(question_id, UNSEEN)

    def has_entry(self, question_id: QuestionId) -> bool:
        return question_id in self._entries

    def entries(self) -> list[PerformanceEntry]:
        return list(self._entries.values())

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[QuestionId]:
        return iter(self._entries)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, dict[str, Any]]:
        # JSON object keys are strings; the entry keeps the id's own type
        return {str(qid): entry.to_dict() for qid, entry in self._entries.items()}

    @classmethod
    def from_dict(
        cls,
        data: dict[str, dict[str, Any]],
        known_ids: Iterable[QuestionId] | None = None,
    ) -> "PerformanceLedger":
        entries = []
        for key, raw in data.items():
            raw = dict(raw)
            raw.setdefault("questionId", key)
            entries.append(PerformanceEntry.from_dict(raw))
        return cls(known_ids=known_ids, entries=entries)
