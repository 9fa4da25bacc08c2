"""
Error taxonomy for the ingestion pipeline.

Every error knows the HTTP status it surfaces as. A single exception handler
in `resumeflow.main` turns them into `{"error": ...}` JSON responses.

"Unsupported" is deliberately NOT an exception here: a document that
legitimately has no extractable text is a valid outcome
(see `resumeflow.models.resume.ExtractionOutcome`).
"""

from typing import Dict, Optional


class PipelineError(Exception):
    """Base class - carries status code, response headers and extra body fields."""

    status_code: int = 500

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.headers = headers or {}
        self.extra: dict = {}

    def to_body(self) -> dict:
        return {**self.extra, "error": self.message}


class AuthenticationError(PipelineError):
    """Missing or invalid bearer credential."""

    status_code = 401

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(PipelineError):
    """Caller does not own the target resource."""

    status_code = 403


class UploadValidationError(PipelineError):
    """Size, type or signature check failed."""

    status_code = 400

    def __init__(self, message: str, object_deleted: bool = False):
        super().__init__(message)
        self.object_deleted = object_deleted


class RateLimitError(PipelineError):
    status_code = 429

    def __init__(self, message: str, retry_after: int):
        super().__init__(message, headers={"Retry-After": str(retry_after)})
        self.retry_after = retry_after


class NotFoundError(PipelineError):
    status_code = 404


class TransientExternalError(PipelineError):
    """Storage, OCR or downstream call broke. Logged, never retried by us."""

    status_code = 500


class DocumentParseError(Exception):
    """Raised by an extractor when the bytes cannot be parsed.

    Internal only - the dispatcher turns it into an OCR attempt or an
    unsupported outcome, it never reaches the client.
    """
