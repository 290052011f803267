"""Errors raised by the quiz core.

All of them are recoverable by the caller and carry a message that can be
shown to the student as is.
"""


class QuizError(Exception):
    message = "Quiz error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class NotFoundError(QuizError, LookupError):
    message = "Not found"


class SessionNotFoundError(NotFoundError):
    message = "Quiz session not found"


class ScheduleNotFoundError(NotFoundError):
    message = "Quiz schedule not found"


class QuestionNotFoundError(NotFoundError):
    message = "Question not found"


class StudentNotFoundError(NotFoundError):
    message = "Student not found"


class AlreadyCompletedError(QuizError):
    message = "You already completed this quiz"


class SessionAlreadyCompletedError(AlreadyCompletedError):
    message = "This quiz session is already completed"


class InvalidQuestionIndexError(QuizError, ValueError):
    message = "Question index out of range"


class InvalidOptionError(QuizError, ValueError):
    message = "Answer must be one of A, B, C, D"


class InvalidScheduleError(QuizError, ValueError):
    message = "Invalid quiz schedule"


class NoActiveScheduleError(QuizError):
    message = "There is no quiz open right now"


class ConcurrentUpdateError(QuizError):
    message = "The quiz session kept changing, please try again"
