"""Centralized constants for quizloop.

All tunables and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Difficulty tiers ----------
MASTERY_CORRECT_THRESHOLD = 3  # correct answers (with no misses) to reach "easy"

# ---------- Selection weighting ----------
WEIGHT_UNSEEN = 10.0  # never-answered questions; the top tier
WEIGHT_BASE = 1.0
WEIGHT_GAP = 2.0  # per (incorrect - correct) when positive
WEIGHT_RECENCY = 0.5  # per day since last seen
RECENCY_CAP_DAYS = 14.0
SECONDS_PER_DAY = 86400.0

# ---------- Sessions ----------
DEFAULT_SESSION_SIZE = 10
SPEED_MODE_DURATION = 60  # seconds
FEEDBACK_DELAY = 1.0  # seconds before auto-advance in timed modes
COUNTDOWN_TICK = 1.0  # seconds
MATCHING_BOARD_SIZE = 6  # pairs on one matching board

# ---------- Persistence ----------
PROGRESS_FILE_NAME = "progress.json"
LOG_FILE_NAME = "quizloop.log"
LOG_MAX_BYTES = 5_000_000
LOG_BACKUP_COUNT = 3
