"""Ingestion error taxonomy.

Each error carries the HTTP status and ``ErrorResponse`` code it maps to, so
the route layer renders them without a lookup table. An empty extraction is
not an error and has no class here; it is a normal soft-failure response.
"""

from __future__ import annotations


class IngestionError(Exception):
    code: str = "ingestion_error"
    status_code: int = 500
    retryable: bool = False
    # Safe to show callers in production; server errors hide their detail.
    public_message: str = "An unexpected error occurred"

    def __init__(self, message: str, *, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class ValidationError(IngestionError):
    """Bad upload: missing file, wrong type, too large, or unknown menu type."""

    code = "validation_error"
    status_code = 400

    @property
    def public_message(self) -> str:  # type: ignore[override]
        return self.message


class UpstreamError(IngestionError):
    """Recognition service failed, was unreachable, or timed out."""

    code = "ocr_failed"
    status_code = 502
    retryable = True
    public_message = "OCR processing failed"


class PersistenceError(IngestionError):
    """The catalog write failed; nothing from the batch is assumed stored."""

    code = "persistence_failed"
    status_code = 500
    retryable = True
    public_message = "Failed to save menu items"


class RecognitionError(Exception):
    """Raised by recognizer clients; the orchestrator wraps it in UpstreamError."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PreprocessingError(Exception):
    """The upload could not be decoded as an image."""
