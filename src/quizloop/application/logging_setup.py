import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from ulid import ULID

from quizloop.application.config import AppConfig
from quizloop.consts import APP_NAME
from quizloop.domain.constants import LOG_BACKUP_COUNT, LOG_FILE_NAME, LOG_MAX_BYTES


class _RunIdFilter(logging.Filter):
    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self.run_id
        return True


def _level_for(verbose: int) -> int:
    # 0 = warnings only, 1 = info, 2+ = debug
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(config: AppConfig) -> tuple[logging.Logger, Path | None, str]:
    """
    Configure the package logger for one run.

    Console output goes to stderr at a level derived from config.verbose.
    The log file under config.log_dir always records DEBUG, tagged with a
    ULID run id so lines from concurrent runs can be told apart.

    Returns:
        (logger, log_path, run_id). log_path is None when the log directory
        cannot be created; console logging still works.
    """
    run_id = str(ULID())
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    run_filter = _RunIdFilter(run_id)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_level_for(config.verbose))
    console.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
    console.addFilter(run_filter)
    logger.addHandler(console)

    log_path: Path | None = config.log_dir / LOG_FILE_NAME
    try:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
        )
    except OSError as e:
        logger.warning(f"File logging disabled, cannot open {log_path}: {e}")
        log_path = None
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(run_id)s] %(levelname)s %(name)s: %(message)s")
        )
        file_handler.addFilter(run_filter)
        logger.addHandler(file_handler)

    logger.debug(f"Logging initialised (run {run_id})")
    return logger, log_path, run_id
