"""Exceptions raised by the quiz core."""


class QuizError(Exception):
    """Base class for quiz errors."""


class StorageUnavailable(QuizError):
    """Durable storage could not be read or written."""


class ContentUnavailable(QuizError):
    """Question content for a subject could not be fetched or parsed."""

    def __init__(self, subject_id: str, reason: str):
        self.subject_id = subject_id
        self.reason = reason
        super().__init__(f"Questions for {subject_id!r} unavailable: {reason}")


class EmptyQuestionSet(QuizError):
    """A quiz session was started without any questions."""


class InvalidSessionState(QuizError):
    """A session operation was called in a state that does not allow it."""


class InvalidAnswerIndex(QuizError, IndexError):
    def __init__(self, index: int, option_count: int):
        self.index = index
        self.option_count = option_count
        super().__init__(f"Answer {index} out of range for {option_count} options")


class InvalidNavigationIndex(QuizError, IndexError):
    def __init__(self, index: int, question_count: int):
        self.index = index
        self.question_count = question_count
        super().__init__(f"Question {index} out of range for {question_count} questions")
