"""quizloop: adaptive quiz engine with a persisted performance ledger."""

from quizloop.consts import VERSION

__version__ = VERSION

__all__ = ["__version__"]
