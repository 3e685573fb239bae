"""Question bank loading and validation."""

import logging
from importlib import resources
from pathlib import Path
from typing import Any

import yaml  # type: ignore
import yaml.error

from quizloop.domain.errors import QuestionBankError
from quizloop.domain.models import QuestionId, QuestionRecord

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("id", "question", "correctAnswer", "multipleChoiceOptions")
SAMPLE_BANK = "questions.yaml"


def parse_question(raw: Any, index: int) -> QuestionRecord:
    """
    Build a QuestionRecord from one mapping of the bank document.

    Raises:
        QuestionBankError: A field is missing or the options are unusable.
    """
    if not isinstance(raw, dict):
        raise QuestionBankError(f"Question #{index + 1} is not a mapping")

    missing = [k for k in REQUIRED_FIELDS if k not in raw]
    if missing:
        raise QuestionBankError(f"Question #{index + 1} missing fields: {', '.join(missing)}")

    qid = raw["id"]
    if isinstance(qid, bool) or not isinstance(qid, int | str):
        raise QuestionBankError(f"Question #{index + 1} has an invalid id: {qid!r}")

    options = raw["multipleChoiceOptions"]
    if not isinstance(options, list) or len(options) < 2:
        raise QuestionBankError(f"Question {qid!r} needs at least 2 answer options")

    options = tuple(str(o).strip() for o in options)
    correct = str(raw["correctAnswer"]).strip()
    if correct not in options:
        raise QuestionBankError(f"Question {qid!r}: correct answer is not among its options")

    return QuestionRecord(
        id=qid,
        question=str(raw["question"]).strip(),
        correct_answer=correct,
        hint=str(raw.get("hint", "") or "").strip(),
        explanation=str(raw.get("explanation", "") or "").strip(),
        options=options,
    )


def parse_question_bank(text: str, source: str = "<string>") -> list[QuestionRecord]:
    """
    Parse a YAML (or JSON, which is valid YAML) list of questions.

    Bank order is preserved. Ids must be unique, also as text: progress is
    keyed by str(id), so 1 and "1" cannot coexist.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.error.YAMLError as e:
        raise QuestionBankError(f"Invalid YAML in {source}: {e}") from e

    if isinstance(data, dict) and "questions" in data:
        data = data["questions"]
    if not isinstance(data, list):
        raise QuestionBankError(f"{source} must contain a list of questions")

    bank: list[QuestionRecord] = []
    seen: dict[str, QuestionId] = {}
    for i, raw in enumerate(data):
        question = parse_question(raw, i)
        key = str(question.id)
        if key in seen:
            if seen[key] == question.id:
                raise QuestionBankError(f"Duplicate question id {question.id!r} in {source}")
            raise QuestionBankError(
                f"Question ids {seen[key]!r} and {question.id!r} collide in {source}"
            )
        seen[key] = question.id
        bank.append(question)

    if not bank:
        raise QuestionBankError(f"No questions found in {source}")

    logger.debug(f"Loaded {len(bank)} questions from {source}")
    return bank


def load_question_bank(path: Path | None = None) -> list[QuestionRecord]:
    """
    Load the bank from `path`, or the bundled sample bank when path is None.
    """
    if path is None:
        text = resources.files("quizloop.data").joinpath(SAMPLE_BANK).read_text(encoding="utf-8")
        return parse_question_bank(text, source=SAMPLE_BANK)

    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise QuestionBankError(f"Question bank not found: {path}") from None
    except OSError as e:
        raise QuestionBankError(f"Could not read question bank {path}: {e}") from e
    return parse_question_bank(text, source=str(path))
