# app/services/errors.py
from typing import Optional

from app.models.extract_models import ExtractionFailure, FailureReason


class ExtractionError(Exception):
    reason: FailureReason = FailureReason.internal_error
    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_failure(self) -> ExtractionFailure:
        return ExtractionFailure(reason=self.reason, message=self.message, details=self.details)


class MissingFile(ExtractionError):
    reason = FailureReason.no_file_provided
    status_code = 400

    def __init__(self, message: str = "No PDF file provided"):
        super().__init__(message)


class NoExtractableText(ExtractionError):
    """Upload was a readable file but no text literals were found in it."""
    reason = FailureReason.no_text_found
    status_code = 400

    def __init__(self, message: str = "No text could be extracted from PDF. "
                                      "The PDF might be image-based or encrypted."):
        super().__init__(message)


class InternalFailure(ExtractionError):
    reason = FailureReason.internal_error
    status_code = 500

    @classmethod
    def from_exception(cls, exc: BaseException) -> "InternalFailure":
        # details carries the message only, never the traceback
        return cls("Failed to extract text from PDF", details=str(exc) or "Unknown error")
