"""In-memory ProgressRepository for tests and throwaway sessions."""

import copy

from quizloop.domain.errors import PersistenceError
from quizloop.domain.ledger import PerformanceLedger
from quizloop.domain.models import SessionStats
from quizloop.domain.ports import ProgressRepository


class InMemoryProgressRepository(ProgressRepository):
    """
    Keeps the last saved snapshot in process memory.

    Set `fail_saves` to simulate a storage outage.
    """

    def __init__(self, fail_saves: bool = False):
        self.fail_saves = fail_saves
        self.save_count = 0
        self._snapshot: tuple[dict, dict] | None = None

    def load(self) -> tuple[PerformanceLedger, SessionStats]:
        if self._snapshot is None:
            return PerformanceLedger(), SessionStats()
        ledger_data, stats_data = copy.deepcopy(self._snapshot)
        return PerformanceLedger.from_dict(ledger_data), SessionStats.from_dict(stats_data)

    def save(self, ledger: PerformanceLedger, stats: SessionStats) -> None:
        if self.fail_saves:
            raise PersistenceError("in-memory store is configured to fail")
        self._snapshot = (ledger.to_dict(), stats.to_dict())
        self.save_count += 1
