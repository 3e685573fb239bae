# Infrastructure Progress Adapters Package
from .json_progress import JsonProgressRepository
from .memory_progress import InMemoryProgressRepository

__all__ = ["JsonProgressRepository", "InMemoryProgressRepository"]
