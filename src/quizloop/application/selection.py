"""
Question selection for study sessions.

Builds the ordered question list for a session by:
1. Filtering the pool to the questions the mode is allowed to show
2. Weighting each question by how much it needs practice
3. Drawing a weighted random permutation (soft preference, not a sort)
4. Truncating to the requested count
"""

import logging
import random
import time
from collections.abc import Iterable
from dataclasses import dataclass

from quizloop.domain.constants import (
    RECENCY_CAP_DAYS,
    SECONDS_PER_DAY,
    WEIGHT_BASE,
    WEIGHT_GAP,
    WEIGHT_RECENCY,
    WEIGHT_UNSEEN,
)
from quizloop.domain.ledger import PerformanceLedger
from quizloop.domain.models import (
    SELECTION_MODES,
    DifficultyTier,
    PerformanceEntry,
    QuestionRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionWeights:
    """
    Tunable weighting curve.

    A seen question weighs
        base + gap * max(0, incorrect - correct) + recency * min(days_since_seen, recency_cap_days)
    capped at `unseen`, which is what never-answered questions get.
    All weights must be positive so every eligible question can land anywhere.
    """

    unseen: float = WEIGHT_UNSEEN
    base: float = WEIGHT_BASE
    gap: float = WEIGHT_GAP
    recency: float = WEIGHT_RECENCY
    recency_cap_days: float = RECENCY_CAP_DAYS

    def __post_init__(self):
        if self.base <= 0 or self.unseen <= 0:
            raise ValueError("base and unseen weights must be positive")
        if self.unseen < self.base:
            raise ValueError("unseen weight must be the largest tier (>= base)")
        if self.gap < 0 or self.recency < 0 or self.recency_cap_days < 0:
            raise ValueError("gap, recency and recency_cap_days must be non-negative")


DEFAULT_WEIGHTS = SelectionWeights()


def question_weight(
    entry: PerformanceEntry,
    seen: bool,
    weights: SelectionWeights = DEFAULT_WEIGHTS,
    now: float | None = None,
) -> float:
    """
    Selection weight for one question.

    Unseen questions take the top tier so coverage comes before repetition.
    """
    if not seen:
        return weights.unseen

    now_epoch = time.time() if now is None else now
    days_since = max(0.0, (now_epoch - entry.last_seen) / SECONDS_PER_DAY)

    weight = (
        weights.base
        + weights.gap * max(0, entry.gap)
        + weights.recency * min(days_since, weights.recency_cap_days)
    )
    return min(weight, weights.unseen)


def _is_eligible(question: QuestionRecord, ledger: PerformanceLedger, mode: str) -> bool:
    if mode == "weakSpot":
        return (
            ledger.has_entry(question.id)
            and ledger.get_entry(question.id).difficulty == DifficultyTier.HARD
        )
    return True


def eligible_questions(
    pool: Iterable[QuestionRecord], ledger: PerformanceLedger, mode: str
) -> list[QuestionRecord]:
    """
    The pool restricted to what `mode` may show, de-duplicated by id.

    First occurrence of an id wins; pool order is otherwise preserved.
    """
    if mode not in SELECTION_MODES:
        raise ValueError(f"Unknown selection mode '{mode}'. Expected one of {SELECTION_MODES}")

    seen_ids: set = set()
    eligible: list[QuestionRecord] = []
    for question in pool:
        if question.id in seen_ids:
            continue
        seen_ids.add(question.id)
        if _is_eligible(question, ledger, mode):
            eligible.append(question)
    return eligible


def select_questions(
    pool: Iterable[QuestionRecord],
    ledger: PerformanceLedger,
    count: int,
    mode: str = "all",
    weights: SelectionWeights | None = None,
    rng: random.Random | None = None,
    now: float | None = None,
) -> list[QuestionRecord]:
    """
    Pick and order questions for a session.

    Args:
        pool: Candidate questions (the bank, or the bank minus this session's used ids).
        ledger: Answer history used for weighting and the weak-spot filter.
        count: Requested size. The result has min(count, eligible) items.
        mode: "all" or "weakSpot".
        weights: Weighting curve; defaults to DEFAULT_WEIGHTS.
        rng: Random source; defaults to the module-level generator.
        now: Clock override for recency (epoch seconds).

    Returns:
        Ordered questions, no duplicate ids. Empty when nothing is eligible;
        callers render a "nothing to do" state rather than substituting.
    """
    eligible = eligible_questions(pool, ledger, mode)
    if count <= 0 or not eligible:
        logger.debug(f"Selection empty: mode={mode} count={count} eligible={len(eligible)}")
        return []

    weights = weights or DEFAULT_WEIGHTS
    rng = rng or random
    now_epoch = time.time() if now is None else now

    # Efraimidis-Spirakis: key = u ** (1 / w); sorting keys descending yields a
    # weight-proportional sequential draw without replacement.
    keyed: list[tuple[float, QuestionRecord]] = []
    for question in eligible:
        weight = question_weight(
            ledger.get_entry(question.id), ledger.has_entry(question.id), weights, now_epoch
        )
        u = 1.0 - rng.random()  # (0, 1]
        keyed.append((u ** (1.0 / weight), question))

    keyed.sort(key=lambda pair: pair[0], reverse=True)
    selected = [question for _, question in keyed[:count]]

    logger.debug(
        f"Selected {len(selected)}/{len(eligible)} questions (mode={mode}, requested={count})"
    )
    return selected


def shuffle_options(question: QuestionRecord, rng: random.Random | None = None) -> list[str]:
    """
    Uniform permutation of the candidate answers.

    Call once per fresh display and keep the result while the question is on
    screen; reshuffling during feedback would move the marked answer.
    """
    options = list(question.options)
    (rng or random).shuffle(options)
    return options
