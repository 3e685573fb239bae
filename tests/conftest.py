import logging
import random

import pytest
import yaml

from quizloop.application.config import AppConfig
from quizloop.application.progress_service import ProgressService
from quizloop.application.scheduling import ManualScheduler
from quizloop.domain.models import QuestionRecord
from quizloop.infrastructure.adapters.memory_progress import InMemoryProgressRepository

BANK_DATA = [
    {
        "id": 1,
        "question": "Which river flows through Budapest?",
        "correctAnswer": "Danube",
        "hint": "Also runs through Vienna.",
        "explanation": "The Danube divides Buda from Pest.",
        "multipleChoiceOptions": ["Danube", "Rhine", "Elbe", "Vistula"],
    },
    {
        "id": 2,
        "question": "In what year did the Berlin Wall fall?",
        "correctAnswer": "1989",
        "hint": "Late 1980s.",
        "explanation": "November 9, 1989.",
        "multipleChoiceOptions": ["1987", "1989", "1991", "1993"],
    },
    {
        "id": 3,
        "question": "Which city hosted the 1815 congress that redrew Europe?",
        "correctAnswer": "Vienna",
        "hint": "Habsburg capital.",
        "explanation": "The Congress of Vienna followed Napoleon's defeat.",
        "multipleChoiceOptions": ["Paris", "Vienna", "London", "Berlin"],
    },
    {
        "id": 4,
        "question": "Who was the first emperor of Rome?",
        "correctAnswer": "Augustus",
        "hint": "Adopted heir of Julius Caesar.",
        "explanation": "Octavian took the name Augustus in 27 BC.",
        "multipleChoiceOptions": ["Nero", "Augustus", "Trajan", "Caligula"],
    },
    {
        "id": 5,
        "question": "What was the capital of the Byzantine Empire?",
        "correctAnswer": "Constantinople",
        "hint": "Today's Istanbul.",
        "explanation": "Founded as New Rome by Constantine.",
        "multipleChoiceOptions": ["Athens", "Antioch", "Constantinople", "Alexandria"],
    },
]


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """setup_logging() detaches the package logger from root; undo it between tests."""
    yield
    pkg_logger = logging.getLogger("quizloop")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)


@pytest.fixture
def bank():
    return [
        QuestionRecord(
            id=raw["id"],
            question=raw["question"],
            correct_answer=raw["correctAnswer"],
            hint=raw["hint"],
            explanation=raw["explanation"],
            options=tuple(raw["multipleChoiceOptions"]),
        )
        for raw in BANK_DATA
    ]


@pytest.fixture
def repo():
    return InMemoryProgressRepository()


@pytest.fixture
def service(bank, repo):
    return ProgressService(bank, repo, rng=random.Random(42)).open()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def bank_file(tmp_path):
    path = tmp_path / "bank.yaml"
    path.write_text(yaml.safe_dump(BANK_DATA, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def app_config(tmp_path, bank_file):
    """Config isolated to tmp_path, pointing at the 5-question bank."""
    return AppConfig(
        data_dir=tmp_path / "data",
        log_dir=tmp_path / "logs",
        bank_path=bank_file,
        seed=7,
    )


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    return home
