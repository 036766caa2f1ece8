"""
Order aggregate builder.

Turns an already-parsed submission into a fully priced ``Order`` with status
``Pending``. Nothing here touches storage; the caller persists the result in a
single transaction.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from resto.domain.availability import parse_slot_time
from resto.domain.catalog import PricingCatalog
from resto.domain.errors import InvalidTimeFormat, ValidationError
from resto.domain.models import (
    Account,
    Order,
    OrderLine,
    OrderStatus,
    PaymentMethod,
    ReservationStatus,
    TableReservation,
    money,
)

logger = logging.getLogger(__name__)

MIN_QUANTITY = 1
MAX_QUANTITY = 100
MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 20
DEFAULT_PARTY_SIZE = 2
DEFAULT_RESERVATION_TIME = time(18, 0)
MAX_TABLE_LABEL = 10
MAX_SPECIAL_REQUESTS = 500


@dataclass
class LineRequest:
    item_name: Optional[str]
    quantity: Optional[int] = 1
    # Trusted verbatim when given; otherwise the catalog decides.
    unit_price: Optional[Decimal] = None


@dataclass
class ReservationRequest:
    table_id: Optional[str]
    party_size: Optional[int] = None
    reservation_date: Optional[date] = None
    reservation_time: Optional[Union[time, str]] = None
    special_requests: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


@dataclass
class OrderRequest:
    customer_name: Optional[str]
    payment_method: Optional[Union[PaymentMethod, str]]
    lines: List[LineRequest] = field(default_factory=list)
    reservation: Optional[ReservationRequest] = None

    def as_form(self) -> Dict[str, Any]:
        """Form state echoed back on validation failure."""
        return asdict(self)


def parse_payment_method(value, submitted: Optional[Dict[str, Any]] = None) -> PaymentMethod:
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(value)
    except ValueError:
        raise ValidationError(f"Unrecognized payment method: {value!r}", submitted)


def retained_lines(line_requests: List[LineRequest], submitted: Dict[str, Any]) -> List[LineRequest]:
    """
    Drop blank rows: empty item names and non-positive quantities are ignored
    rather than rejected, so sparse form submissions go through.
    """
    kept = []
    for req in line_requests:
        name = (req.item_name or "").strip()
        if not name or req.quantity is None or req.quantity < MIN_QUANTITY:
            continue
        if req.quantity > MAX_QUANTITY:
            raise ValidationError(
                f"Quantity for {name!r} must be between {MIN_QUANTITY} and {MAX_QUANTITY}.",
                submitted,
            )
        if req.unit_price is not None and Decimal(str(req.unit_price)) < 0:
            raise ValidationError(f"Unit price for {name!r} cannot be negative.", submitted)
        kept.append(LineRequest(item_name=name, quantity=req.quantity, unit_price=req.unit_price))
    return kept


def price_line(req: LineRequest, catalog: PricingCatalog) -> OrderLine:
    """Snapshot the unit price. Unknown catalog names price at zero."""
    if req.unit_price is not None:
        unit_price = money(req.unit_price)
    else:
        unit_price = catalog.price_for(req.item_name)
        if unit_price is None:
            logger.info("Item %r not in catalog, pricing at 0.00", req.item_name)
            unit_price = money(0)
    return OrderLine(item_name=req.item_name, quantity=req.quantity, unit_price=unit_price)


def build_lines(
    line_requests: List[LineRequest],
    catalog: PricingCatalog,
    submitted: Dict[str, Any],
) -> List[OrderLine]:
    lines = [price_line(req, catalog) for req in retained_lines(line_requests, submitted)]
    if not lines:
        raise ValidationError("At least one item is required.", submitted)
    return lines


def build_reservation(
    req: ReservationRequest,
    customer_name: str,
    account: Optional[Account],
    now: datetime,
    submitted: Dict[str, Any],
) -> Optional[TableReservation]:
    """Create the reservation child, or None when no table was chosen."""
    table_id = (req.table_id or "").strip()
    if not table_id:
        return None
    if len(table_id) > MAX_TABLE_LABEL:
        raise ValidationError(f"Table label {table_id!r} is too long.", submitted)

    party_size = DEFAULT_PARTY_SIZE if req.party_size is None else req.party_size
    if not MIN_PARTY_SIZE <= party_size <= MAX_PARTY_SIZE:
        raise ValidationError(
            f"Party size must be between {MIN_PARTY_SIZE} and {MAX_PARTY_SIZE}.", submitted
        )

    slot_time = DEFAULT_RESERVATION_TIME
    if req.reservation_time is not None:
        try:
            slot_time = parse_slot_time(req.reservation_time)
        except InvalidTimeFormat as exc:
            raise ValidationError(exc.message, submitted)

    if req.special_requests and len(req.special_requests) > MAX_SPECIAL_REQUESTS:
        raise ValidationError("Special requests are too long.", submitted)

    return TableReservation(
        customer_name=req.customer_name or (account.display_name if account else customer_name),
        customer_email=req.customer_email or (account.email if account else ""),
        customer_phone=req.customer_phone or ((account.phone or "") if account else ""),
        table_id=table_id,
        party_size=party_size,
        reservation_date=req.reservation_date or now.date(),
        reservation_time=slot_time,
        special_requests=req.special_requests or None,
        status=ReservationStatus.PENDING,
        created_at=now,
        account_id=account.id if account else None,
    )


def build_order(
    request: OrderRequest,
    catalog: PricingCatalog,
    order_no: str,
    now: datetime,
    account: Optional[Account] = None,
) -> Order:
    """Assemble a new ``Pending`` order with lines, total and optional reservation."""
    submitted = request.as_form()

    customer_name = (request.customer_name or "").strip()
    if not customer_name:
        raise ValidationError("Customer name is required.", submitted)
    payment_method = parse_payment_method(request.payment_method, submitted)
    lines = build_lines(request.lines, catalog, submitted)

    reservation = None
    if request.reservation is not None:
        reservation = build_reservation(request.reservation, customer_name, account, now, submitted)

    order = Order(
        order_no=order_no,
        customer_name=customer_name,
        account_id=account.id if account else None,
        payment_method=payment_method,
        ordered_at=now,
        status=OrderStatus.PENDING,
        lines=lines,
        reservation=reservation,
    )
    order.recompute_total()
    return order
