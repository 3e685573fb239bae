from pathlib import Path

import pytest
from pydantic import ValidationError

from quizloop.application.config import AppConfig, resolve_config
from quizloop.domain.constants import DEFAULT_SESSION_SIZE, WEIGHT_UNSEEN


def test_defaults(mock_home, monkeypatch):
    monkeypatch.setattr("quizloop.application.config.CONFIG_FILES", [])
    config = resolve_config()
    assert config.session_size == DEFAULT_SESSION_SIZE
    assert config.bank_path is None
    assert config.progress_path == config.data_dir / "progress.json"
    assert config.selection_weights().unseen == WEIGHT_UNSEEN


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setattr("quizloop.application.config.CONFIG_FILES", [])
    monkeypatch.setenv("QUIZLOOP_SESSION_SIZE", "25")
    monkeypatch.setenv("QUIZLOOP_WEIGHT_GAP", "3.5")
    monkeypatch.setenv("QUIZLOOP_DATA_DIR", str(tmp_path / "d"))

    config = resolve_config()
    assert config.session_size == 25
    assert config.selection_weights().gap == 3.5
    assert config.data_dir == (tmp_path / "d").resolve()


def test_cli_overrides_win_over_env_and_none_is_dropped(monkeypatch):
    monkeypatch.setattr("quizloop.application.config.CONFIG_FILES", [])
    monkeypatch.setenv("QUIZLOOP_SESSION_SIZE", "25")
    config = resolve_config({"session_size": 3, "seed": None})
    assert config.session_size == 3
    assert config.seed is None


def test_toml_file_is_read(monkeypatch, tmp_path):
    toml = tmp_path / "config.toml"
    toml.write_text('session_size = 7\nbank_path = "~/bank.yaml"\n')
    monkeypatch.setattr("quizloop.application.config.CONFIG_FILES", [toml])

    config = resolve_config()
    assert config.session_size == 7
    assert config.bank_path == (Path.home() / "bank.yaml").resolve()


def test_explicit_progress_file(tmp_path):
    config = AppConfig(progress_file=tmp_path / "p.json")
    assert config.progress_path == (tmp_path / "p.json").resolve()


def test_invalid_weights_rejected():
    with pytest.raises(ValidationError):
        AppConfig(weight_unseen=0.5, weight_base=1.0)
    with pytest.raises(ValidationError):
        AppConfig(session_size=0)
