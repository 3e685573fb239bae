import pytest

from quizloop.domain.models import SELECTION_MODES
from quizloop.domain.modes import MODES, get_mode


def test_every_mode_uses_a_known_selection():
    for mode in MODES.values():
        assert mode.selection in SELECTION_MODES


def test_only_speed_mode_is_timed():
    assert [m.id for m in MODES.values() if m.timed] == ["speedMode"]


def test_weak_spot_mode():
    mode = get_mode("weakSpot")
    assert mode.selection == "weakSpot"
    assert mode.answer_style == "choice"


def test_answer_styles():
    assert get_mode("flashcards").answer_style == "self_grade"
    assert get_mode("typeAnswer").answer_style == "typed"
    assert get_mode("flappyBird").arcade


def test_matching_mode():
    mode = get_mode("matching")
    assert mode.answer_style == "matching"
    assert mode.selection == "all"
    assert not mode.timed


def test_unknown_mode():
    with pytest.raises(ValueError, match="Unknown quiz mode"):
        get_mode("crossword")
