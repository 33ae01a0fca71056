from __future__ import annotations


class BracketError(Exception):
    """Base class for errors raised by the auto-complete and scoring core."""

    status_code = 500


class AIConfigurationError(BracketError):
    status_code = 503
    user_message = "AI service not configured. Please contact support."

    def __init__(self, message: str = "AI service not configured") -> None:
        super().__init__(message)


class UpstreamError(BracketError):
    """An external data source failed or returned something unusable."""


class ResponseParseError(UpstreamError):
    pass


class QuizNotFoundError(BracketError):
    status_code = 404


class QuizStateError(BracketError):
    status_code = 409


class DuplicateSubmissionError(BracketError):
    status_code = 409


class InvalidInputError(BracketError):
    """Caller-supplied data does not fit the quiz model."""

    status_code = 400
