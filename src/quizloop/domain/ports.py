"""
Ports (interfaces) for progress persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .ledger import PerformanceLedger
from .models import SessionStats


class ProgressRepository(ABC):
    """
    Port for loading and saving learner progress.

    Implementations:
        - JsonProgressRepository: A JSON document on disk.
        - InMemoryProgressRepository: Process memory only (tests, demos).
    """

    @abstractmethod
    def load(self) -> tuple[PerformanceLedger, SessionStats]:
        """
        Load the ledger and the streak/total counters.

        Returns:
            Fresh empty state when nothing has been saved yet.

        Raises:
            PersistenceError: The stored state could not be read at all.
        """
        pass

    @abstractmethod
    def save(self, ledger: PerformanceLedger, stats: SessionStats) -> None:
        """
        Persist the full state.

        Raises:
            PersistenceError: The write failed. Callers treat this as non-fatal.
        """
        pass
