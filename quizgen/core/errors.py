"""
Exceptions raised along the quiz generation pipeline.

Everything derives from ``QuizGenError`` so the HTTP layer can tell pipeline
failures apart from programming errors, although both end up as a 500.
"""

from typing import Any

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


class QuizGenError(Exception):
    pass


class ConfigurationError(QuizGenError):
    """Required configuration is missing. Never retried."""


class ExtractionError(QuizGenError):
    """The uploaded document could not be read."""


class ModelResponseError(QuizGenError):
    """The model answered, but the answer is unusable. Retried."""


class InvalidModelResponseError(ModelResponseError):
    def __init__(self, message: str, text: str | None = None) -> None:
        super().__init__(message)
        self.text = text


class QuizParseError(ModelResponseError):
    pass


class GenerationFailedError(QuizGenError):
    pass


class PersistenceError(QuizGenError):
    pass


def describe_error(error: Any) -> str:
    """Turns anything that was raised (or rejected with) into a user-facing message."""
    if isinstance(error, BaseException):
        return f"Error occurred: {error}"
    if isinstance(error, str):
        return f"Error occurred: {error}"
    if isinstance(error, dict) and "message" in error:
        return f"Error occurred: {error['message']}"
    if error is not None and hasattr(error, "message"):
        return f"Error occurred: {error.message}"
    return UNKNOWN_ERROR_MESSAGE
