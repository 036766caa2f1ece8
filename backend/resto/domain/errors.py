"""Domain error taxonomy. Every error is recoverable at the transport boundary."""

from typing import Any, Dict, Optional


class OrderingError(Exception):
    """Base class for all order-domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OrderingError):
    """Malformed or missing input; carries the submitted form state back."""

    def __init__(self, message: str, submitted: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.submitted = submitted or {}


class InvalidTransition(ValidationError):
    """Requested status change is not allowed from the current status."""


class PaymentLocked(ValidationError):
    """Payment method cannot change once payment is confirmed."""


class NotFound(OrderingError):
    pass


class Forbidden(OrderingError):
    pass


class AlreadyConfirmed(OrderingError):
    pass


class MissingProof(OrderingError):
    pass


class InvalidTimeFormat(OrderingError):
    pass
