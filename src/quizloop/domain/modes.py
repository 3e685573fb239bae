"""
Quiz mode registry.

Every mode screen draws material through the same selection engine; modes
differ only in how questions are answered and whether a clock is running.
"""

from dataclasses import dataclass
from typing import Literal

from .models import SelectionMode

AnswerStyle = Literal["choice", "self_grade", "typed", "matching"]


@dataclass(frozen=True)
class QuizMode:
    """
    Static description of a mode.

    Attributes:
        id: Stable identifier used by the CLI and the HTTP API.
        name: Display name.
        description: One-line summary for menus.
        selection: Which eligibility filter the selection engine applies.
        answer_style: "choice" (pick an option), "self_grade" (flashcards),
            "typed" (free-form text), or "matching" (pair a board of questions
            with a shuffled column of their answers).
        timed: Runs a countdown and auto-advances after feedback.
        arcade: Presented as a mini-game; the engine treats it like "choice".
    """

    id: str
    name: str
    description: str
    selection: SelectionMode = "all"
    answer_style: AnswerStyle = "choice"
    timed: bool = False
    arcade: bool = False


MODES: dict[str, QuizMode] = {
    m.id: m
    for m in (
        QuizMode(
            "multipleChoice",
            "Multiple Choice Quiz",
            "Traditional quiz with shuffled answer choices",
        ),
        QuizMode(
            "flashcards",
            "Flashcards",
            "Flip between question and answer, then grade yourself",
            answer_style="self_grade",
        ),
        QuizMode(
            "speedMode",
            "Speed Mode",
            "60-second challenge - answer as many as possible",
            timed=True,
        ),
        QuizMode(
            "typeAnswer",
            "Type Your Answer",
            "Free-form text input with flexible matching",
            answer_style="typed",
        ),
        QuizMode(
            "matching",
            "Matching Game",
            "Match questions with their correct answers",
            answer_style="matching",
        ),
        QuizMode(
            "weakSpot",
            "Weak Spot Drill",
            "Focused practice on questions you struggle with",
            selection="weakSpot",
        ),
        QuizMode(
            "jumpGame",
            "Jump Game",
            "Answer questions to jump over obstacles",
            arcade=True,
        ),
        QuizMode(
            "dinosaurGame",
            "Dinosaur Game",
            "Run and jump over cacti; answer questions to continue",
            arcade=True,
        ),
        QuizMode(
            "flappyBird",
            "Flappy Bird",
            "Navigate through pipes by answering correctly",
            arcade=True,
        ),
    )
}


def get_mode(mode_id: str) -> QuizMode:
    try:
        return MODES[mode_id]
    except KeyError:
        raise ValueError(
            f"Unknown quiz mode '{mode_id}'. Available: {', '.join(MODES)}"
        ) from None
