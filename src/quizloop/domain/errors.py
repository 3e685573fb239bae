"""Exception taxonomy for quizloop."""


class QuizloopError(Exception):
    """Base class for all quizloop errors."""


class UnknownQuestionError(QuizloopError, KeyError):
    """An answer event referenced a question id that is not in the bank.

    This is a programming error. It is never swallowed.
    """

    def __init__(self, question_id):
        self.question_id = question_id
        super().__init__(f"Unknown question id: {question_id!r}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


class QuestionBankError(QuizloopError, ValueError):
    """The question bank file is missing or malformed."""


class PersistenceError(QuizloopError):
    """Loading or saving progress failed."""
