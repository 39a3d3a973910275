from __future__ import annotations


class QuizLinkError(Exception):
    """Base class for errors surfaced to the caller.

    Each subclass carries the HTTP status and a stable ``error_code``; the
    message is safe to show to end users.
    """

    status_code: int = 500
    error_code: str = "internal_error"
    default_message: str = "request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(QuizLinkError):
    status_code = 404
    error_code = "not_found"
    default_message = "quiz not found"


class NotYetAvailable(QuizLinkError):
    status_code = 403
    error_code = "not_yet_available"
    default_message = "this quiz has not started yet"


class Expired(QuizLinkError):
    status_code = 403
    error_code = "expired"
    default_message = "this quiz has ended"


class InvalidRequest(QuizLinkError):
    status_code = 400
    error_code = "invalid_request"
    default_message = "invalid request"


class StorageFailure(QuizLinkError):
    status_code = 500
    error_code = "storage_failure"
    default_message = "storage unavailable"
