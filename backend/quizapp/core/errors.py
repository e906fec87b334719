# backend/quizapp/core/errors.py

"""
Error taxonomy for the quiz core.

Every error carries a machine-readable ``kind`` and an HTTP status so the
transport layer can translate it in one place.
"""


class QuizError(Exception):
    kind = "quiz_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"status": "error", "kind": self.kind, "message": self.message}


class ValidationError(QuizError):
    """Missing or malformed caller input."""

    kind = "validation_error"
    status_code = 400


class MissingDataError(ValidationError):
    kind = "missing_data"


class NotFoundError(QuizError):
    """Unknown or expired session, or a question that does not exist."""

    kind = "not_found"
    status_code = 404


class InvalidIndexError(QuizError):
    kind = "invalid_index"
    status_code = 400


class UpstreamGenerationError(QuizError):
    """
    A generator returned nothing, returned something malformed, or failed.

    ``reason`` is one of ``"empty"``, ``"malformed"`` or ``"failed"``.
    """

    kind = "upstream_generation_error"
    status_code = 502

    def __init__(self, message: str, reason: str = "failed"):
        super().__init__(message)
        self.reason = reason

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["reason"] = self.reason
        return data
