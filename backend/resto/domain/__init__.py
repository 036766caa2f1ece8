"""Order aggregate lifecycle: building, pricing, status, payment and queries."""

from resto.domain.errors import (
    AlreadyConfirmed,
    Forbidden,
    InvalidTimeFormat,
    InvalidTransition,
    MissingProof,
    NotFound,
    OrderingError,
    PaymentLocked,
    ValidationError,
)
from resto.domain.models import (
    Account,
    Order,
    OrderLine,
    OrderStatus,
    PaymentMethod,
    ReservationStatus,
    Role,
    TableReservation,
)

__all__ = [
    "Account",
    "AlreadyConfirmed",
    "Forbidden",
    "InvalidTimeFormat",
    "InvalidTransition",
    "MissingProof",
    "NotFound",
    "Order",
    "OrderLine",
    "OrderStatus",
    "OrderingError",
    "PaymentLocked",
    "PaymentMethod",
    "ReservationStatus",
    "Role",
    "TableReservation",
    "ValidationError",
]
