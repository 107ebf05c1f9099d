"""Error taxonomy for the resume pipeline.

Every error carries an HTTP status code and a user-facing message so the API
layer can translate it without guessing. ``RateLimited`` additionally carries
the number of seconds the caller should wait before retrying.
"""
from typing import Any, Dict, Optional


class PipelineError(Exception):
    status_code: int = 500
    code: str = "pipeline_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_detail(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message}


class ValidationError(PipelineError):
    """Missing or invalid input; raised before any stage runs."""
    status_code = 400
    code = "validation_error"


class NotFound(PipelineError):
    status_code = 404
    code = "not_found"


class RateLimited(PipelineError):
    status_code = 429
    code = "rate_limited"

    def __init__(self, message: str, retry_after: int = 60, quota: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.retry_after = retry_after
        self.quota = quota

    def to_detail(self) -> Dict[str, Any]:
        detail = super().to_detail()
        detail["retryAfter"] = self.retry_after
        if self.quota is not None:
            detail["quota"] = self.quota
        return detail


class ExtractionFailed(PipelineError):
    status_code = 422
    code = "extraction_failed"


class AnalysisFailed(PipelineError):
    status_code = 502
    code = "analysis_failed"


class PdfGenerationFailed(PipelineError):
    status_code = 500
    code = "pdf_generation_failed"


class UploadFailed(PipelineError):
    status_code = 502
    code = "upload_failed"


class FetchFailed(PipelineError):
    """Stored file could not be downloaded after all retry attempts."""
    status_code = 502
    code = "fetch_failed"
