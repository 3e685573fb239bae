"""
JSON Progress Repository: infrastructure adapter for a progress file on disk.

Implements ProgressRepository with a single JSON document:

    {
      "schema": 1,
      "question_stats": {"<id>": {"questionId", "correctCount", "incorrectCount",
                                  "lastSeen", "difficulty"}},
      "game_stats": {"currentStreak", "bestStreak", "totalCorrect", "totalIncorrect"}
    }
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from quizloop.consts import PROGRESS_SCHEMA_VERSION
from quizloop.domain.errors import PersistenceError
from quizloop.domain.ledger import PerformanceLedger
from quizloop.domain.models import SessionStats
from quizloop.domain.ports import ProgressRepository

logger = logging.getLogger(__name__)


class JsonProgressRepository(ProgressRepository):
    """
    Stores progress as JSON at `path`.

    Writes go to a temp file in the same directory and are swapped in with
    os.replace, so a crash mid-write leaves the previous file intact.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> tuple[PerformanceLedger, SessionStats]:
        """
        Load stored progress.

        A missing file is a first run. A corrupted file is logged and treated
        as a first run; it is moved aside so the next save does not clobber it.
        """
        if not self.path.exists():
            logger.info(f"No progress file at {self.path}; starting fresh")
            return PerformanceLedger(), SessionStats()

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("top-level value is not an object")
            question_stats = data.get("question_stats") or {}
            game_stats = data.get("game_stats") or {}
            if not isinstance(question_stats, dict) or not isinstance(game_stats, dict):
                raise ValueError("question_stats and game_stats must be objects")
            ledger = PerformanceLedger.from_dict(question_stats)
            stats = SessionStats.from_dict(game_stats)
        except (ValueError, TypeError, KeyError) as e:
            backup = self._quarantine()
            logger.warning(
                f"Progress file {self.path} is corrupted ({e}); starting fresh. "
                f"Old contents kept at {backup}"
            )
            return PerformanceLedger(), SessionStats()

        schema = data.get("schema", PROGRESS_SCHEMA_VERSION)
        if schema != PROGRESS_SCHEMA_VERSION:
            logger.warning(
                f"Progress file schema {schema} differs from {PROGRESS_SCHEMA_VERSION}; "
                "reading known fields only"
            )

        logger.debug(f"Loaded {len(ledger)} ledger entries from {self.path}")
        return ledger, stats

    def save(self, ledger: PerformanceLedger, stats: SessionStats) -> None:
        payload = {
            "schema": PROGRESS_SCHEMA_VERSION,
            "question_stats": ledger.to_dict(),
            "game_stats": stats.to_dict(),
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Could not save progress to {self.path}: {e}") from e

    def _quarantine(self) -> Path | None:
        backup = self.path.with_name(f"{self.path.stem}.corrupt{self.path.suffix}")
        try:
            os.replace(self.path, backup)
        except OSError as e:
            logger.warning(f"Could not move corrupted progress file aside: {e}")
            return None
        return backup
