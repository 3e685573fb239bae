import json
import logging
from unittest.mock import patch

import pytest

from quizloop.domain.errors import PersistenceError
from quizloop.domain.ledger import PerformanceLedger
from quizloop.domain.models import DifficultyTier, SessionStats
from quizloop.infrastructure.adapters.json_progress import JsonProgressRepository


@pytest.fixture
def progress_path(tmp_path):
    return tmp_path / "state" / "progress.json"


def _sample_state():
    ledger = PerformanceLedger()
    ledger.record_answer(1, False, now=100.0)
    ledger.record_answer(1, False, now=200.0)
    ledger.record_answer("b", True, now=300.0)
    stats = SessionStats()
    stats.record_outcome(True)
    stats.record_outcome(True)
    stats.record_outcome(False)
    return ledger, stats


def test_missing_file_is_a_first_run(progress_path):
    ledger, stats = JsonProgressRepository(progress_path).load()
    assert len(ledger) == 0
    assert stats == SessionStats()


def test_save_then_load(progress_path):
    repo = JsonProgressRepository(progress_path)
    ledger, stats = _sample_state()
    repo.save(ledger, stats)

    loaded_ledger, loaded_stats = repo.load()
    assert loaded_ledger.get_entry(1).difficulty == DifficultyTier.HARD
    assert loaded_ledger.get_entry(1).last_seen == 200.0
    assert loaded_ledger.get_entry("b").correct_count == 1
    assert loaded_stats.best_streak == 2
    assert loaded_stats.current_streak == 0
    assert loaded_stats.total_incorrect == 1


def test_document_shape(progress_path):
    repo = JsonProgressRepository(progress_path)
    repo.save(*_sample_state())

    doc = json.loads(progress_path.read_text())
    assert doc["schema"] == 1
    assert doc["question_stats"]["1"] == {
        "questionId": 1,
        "correctCount": 0,
        "incorrectCount": 2,
        "lastSeen": 200.0,
        "difficulty": "hard",
    }
    assert doc["game_stats"] == {
        "currentStreak": 0,
        "bestStreak": 2,
        "totalCorrect": 2,
        "totalIncorrect": 1,
    }


def test_save_leaves_no_temp_files(progress_path):
    repo = JsonProgressRepository(progress_path)
    repo.save(*_sample_state())
    repo.save(*_sample_state())
    assert [p.name for p in progress_path.parent.iterdir()] == ["progress.json"]


def test_corrupted_file_is_quarantined(progress_path, caplog):
    progress_path.parent.mkdir(parents=True)
    progress_path.write_text("{not json")

    with caplog.at_level(logging.WARNING):
        ledger, stats = JsonProgressRepository(progress_path).load()

    assert len(ledger) == 0
    assert stats == SessionStats()
    assert "corrupted" in caplog.text
    assert not progress_path.exists()
    assert (progress_path.parent / "progress.corrupt.json").read_text() == "{not json"


def test_non_object_document_is_corrupted(progress_path):
    progress_path.parent.mkdir(parents=True)
    progress_path.write_text("[1, 2, 3]")
    ledger, _ = JsonProgressRepository(progress_path).load()
    assert len(ledger) == 0


@pytest.mark.parametrize(
    "document",
    [
        {"schema": 1, "question_stats": [1, 2], "game_stats": {}},
        {"schema": 1, "question_stats": {}, "game_stats": [3]},
        {"schema": 1, "question_stats": {"1": [1, 2]}, "game_stats": {}},
    ],
)
def test_wrongly_shaped_sections_are_corrupted(progress_path, caplog, document):
    progress_path.parent.mkdir(parents=True)
    progress_path.write_text(json.dumps(document))

    with caplog.at_level(logging.WARNING):
        ledger, stats = JsonProgressRepository(progress_path).load()

    assert len(ledger) == 0
    assert stats == SessionStats()
    assert "corrupted" in caplog.text
    assert (progress_path.parent / "progress.corrupt.json").exists()


def test_schema_mismatch_reads_known_fields(progress_path, caplog):
    progress_path.parent.mkdir(parents=True)
    progress_path.write_text(
        json.dumps(
            {
                "schema": 99,
                "question_stats": {"3": {"questionId": 3, "correctCount": 3}},
                "game_stats": {"bestStreak": 4},
                "future_field": True,
            }
        )
    )
    with caplog.at_level(logging.WARNING):
        ledger, stats = JsonProgressRepository(progress_path).load()

    assert ledger.get_entry(3).difficulty == DifficultyTier.EASY
    assert stats.best_streak == 4
    assert "schema 99" in caplog.text


def test_unreadable_file_raises(progress_path):
    progress_path.parent.mkdir(parents=True)
    progress_path.write_text("{}")
    with patch("pathlib.Path.read_text", side_effect=PermissionError("denied")):
        with pytest.raises(PersistenceError, match="Could not read"):
            JsonProgressRepository(progress_path).load()


def test_save_failure_raises_persistence_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    repo = JsonProgressRepository(blocker / "progress.json")
    with pytest.raises(PersistenceError, match="Could not save"):
        repo.save(*_sample_state())
