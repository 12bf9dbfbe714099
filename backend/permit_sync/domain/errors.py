"""Domain Errors - Centralized Exception Hierarchy"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error - all errors extend this"""

    error_code: str = "DOMAIN_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a serializable dict"""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# Validation Errors
class ValidationError(DomainError):
    """Input validation failed"""
    error_code = "VALIDATION_ERROR"
    http_status = 400


class PeachRecordError(ValidationError):
    """PEACH record violates a precondition of the summarizer"""
    error_code = "PEACH_RECORD_ERROR"


class MissingTimestampError(PeachRecordError):
    """PIES event has neither start_datetime nor start_date"""
    error_code = "MISSING_TIMESTAMP"


class EmptyEventHistoryError(PeachRecordError):
    """PEACH record has no process events"""
    error_code = "EMPTY_EVENT_HISTORY"


# Not Found Errors
class NotFoundError(DomainError):
    """Resource not found"""
    error_code = "NOT_FOUND"
    http_status = 404


class PermitNotFoundError(NotFoundError):
    """Permit not found"""
    error_code = "PERMIT_NOT_FOUND"


class PeachRecordNotFoundError(NotFoundError):
    """PEACH has no record for the system/record id"""
    error_code = "PEACH_RECORD_NOT_FOUND"


class PeachSummaryNotFoundError(NotFoundError):
    """PEACH record has no displayable status"""
    error_code = "PEACH_SUMMARY_NOT_FOUND"


# External Service Errors
class ExternalServiceError(DomainError):
    """External service failure"""
    error_code = "EXTERNAL_SERVICE_ERROR"
    http_status = 502


class PeachApiError(ExternalServiceError):
    """PEACH API call failed"""
    error_code = "PEACH_API_ERROR"
