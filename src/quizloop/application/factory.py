"""
Service Factory
Centralizes the wiring of config into a repository and a progress service.
"""

import logging
import random

from quizloop.application.bank import load_question_bank
from quizloop.application.config import AppConfig
from quizloop.application.progress_service import ProgressService
from quizloop.domain.ports import ProgressRepository
from quizloop.infrastructure.adapters.json_progress import JsonProgressRepository

logger = logging.getLogger(__name__)


def get_progress_repository(config: AppConfig) -> ProgressRepository:
    """
    Returns the ProgressRepository implementation for the configured progress file.
    """
    return JsonProgressRepository(config.progress_path)


def build_progress_service(
    config: AppConfig, repository: ProgressRepository | None = None
) -> ProgressService:
    """
    Load the bank and build an unopened ProgressService.

    A configured seed makes selection and option order reproducible.
    """
    bank = load_question_bank(config.bank_path)
    repo = repository or get_progress_repository(config)
    rng = random.Random(config.seed) if config.seed is not None else random.Random()
    logger.debug(
        f"Service: {len(bank)} questions from {config.bank_path or 'bundled bank'}, "
        f"progress at {config.progress_path}"
    )
    return ProgressService(bank, repo, weights=config.selection_weights(), rng=rng)
