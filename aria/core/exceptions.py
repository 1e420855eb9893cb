from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationError(AppException):
    """Missing or malformed required field. Never retried."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )

class NotFoundError(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

class UpstreamError(AppException):
    """An embedding or LLM provider call failed or returned non-2xx."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="UPSTREAM_ERROR",
            details=details
        )

class ParseError(AppException):
    """A provider response did not contain the expected JSON or text shape."""
    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=500,
            error_code="PARSE_ERROR"
        )
        self.raw = raw

class PartialIngestionError(AppException):
    """Some chunks were stored before a failure. The document is left as-is."""
    def __init__(self, message: str, document_id: str, chunks_created: int):
        super().__init__(
            message=message,
            status_code=500,
            error_code="PARTIAL_INGESTION",
            details={"documentId": document_id, "chunksCreated": chunks_created}
        )
        self.document_id = document_id
        self.chunks_created = chunks_created

class AIKillSwitchError(AppException):
    def __init__(self):
        super().__init__(
            message="AI services are currently offline for maintenance.",
            status_code=503,
            error_code="AI_KILL_SWITCH_ACTIVE"
        )
