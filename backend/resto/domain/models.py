"""
Domain entities for the order aggregate.

An Order owns its OrderLines and at most one TableReservation; the three are
loaded, mutated and persisted together. Accounts are referenced by id only.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional

CENTS = Decimal("0.01")


def money(value) -> Decimal:
    """Coerce a number to a 2-decimal Decimal."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


class OrderStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ReservationStatus(str, Enum):
    PENDING = "Pending"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    GCASH = "GCash"
    CARD = "Card"
    BANK_TRANSFER = "Bank Transfer"


class Role(str, Enum):
    ADMIN = "Admin"
    CUSTOMER = "Customer"


@dataclass
class Account:
    id: Optional[int]
    display_name: str
    email: str
    role: Role = Role.CUSTOMER
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass
class OrderLine:
    item_name: str
    quantity: int
    unit_price: Decimal
    id: Optional[int] = None

    @property
    def line_total(self) -> Decimal:
        return money(self.unit_price * self.quantity)


@dataclass
class TableReservation:
    customer_name: str
    customer_email: str
    customer_phone: str
    table_id: str
    party_size: int
    reservation_date: date
    reservation_time: time
    special_requests: Optional[str] = None
    status: ReservationStatus = ReservationStatus.PENDING
    created_at: Optional[datetime] = None
    account_id: Optional[int] = None
    id: Optional[int] = None


@dataclass
class Order:
    order_no: str
    customer_name: str
    account_id: Optional[int]
    payment_method: PaymentMethod
    ordered_at: datetime
    status: OrderStatus = OrderStatus.PENDING
    lines: List[OrderLine] = field(default_factory=list)
    reservation: Optional[TableReservation] = None
    total_price: Decimal = Decimal("0.00")
    payment_confirmed: bool = False
    payment_confirmed_at: Optional[datetime] = None
    payment_confirmed_by: Optional[str] = None
    official_receipt_no: Optional[str] = None
    payment_reference: Optional[str] = None
    id: Optional[int] = None

    def recompute_total(self) -> Decimal:
        """Derive total_price from the lines. Call after any line change."""
        self.total_price = money(sum((line.line_total for line in self.lines), Decimal("0")))
        return self.total_price

    @property
    def is_terminal(self) -> bool:
        return self.status in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    @property
    def has_reservation(self) -> bool:
        return self.reservation is not None
