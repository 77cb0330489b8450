"""Domain-specific exceptions

Each exception carries a stable error code and the HTTP status it maps to, so
callers never have to infer either from the message text.
"""

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    code = "UNKNOWN_ERROR"
    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.default_message)
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "detail": str(self)}
        if self.details:
            payload["details"] = self.details
        return payload


class DataSourceError(DomainException):
    """Transaction, balance or preference store failed or is unavailable"""

    code = "DATA_SOURCE_UNAVAILABLE"
    status_code = 503
    default_message = "Financial data is temporarily unavailable."


class InsufficientDataError(DomainException):
    """Not enough transaction history to compute the requested metric"""

    code = "INSUFFICIENT_DATA"
    status_code = 422
    default_message = "We need more transaction data to provide this analysis."


class CalculationError(DomainException):
    """A metric could not be computed from otherwise valid data"""

    code = "CALCULATION_ERROR"
    status_code = 500
    default_message = "We encountered an issue calculating your metrics."


class ValidationError(DomainException):
    """Input is malformed or out of range"""

    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Some of the information provided isn't valid."


class NotificationDeliveryError(DomainException):
    """A notification channel rejected or failed to deliver a message"""

    code = "NOTIFICATION_DELIVERY_FAILED"
    status_code = 502
    default_message = "Notification could not be delivered."
