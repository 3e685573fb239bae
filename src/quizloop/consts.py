"""Package-wide identity constants."""

VERSION = "0.3.0"
APP_NAME = "quizloop"
PROGRESS_SCHEMA_VERSION = 1
