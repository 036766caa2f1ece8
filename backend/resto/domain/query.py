"""
Filtered, sorted order views for the admin and customer dashboards.

Read-only: nothing here mutates an order. Filters combine with AND; text search
is case-insensitive over order number, customer name and line item names.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional

from resto.domain.models import Order, OrderStatus, money


class DateRange(str, Enum):
    TODAY = "today"
    LAST_7_DAYS = "last7days"
    LAST_30_DAYS = "last30days"
    ALL = "all"


class PaymentStatus(str, Enum):
    CONFIRMED = "confirmed"
    UNCONFIRMED = "unconfirmed"
    ANY = "any"


class ReservationPresence(str, Enum):
    WITH = "withReservation"
    WITHOUT = "withoutReservation"
    EITHER = "either"


@dataclass
class OrderFilters:
    search_text: Optional[str] = None
    status: Optional[OrderStatus] = None
    payment_status: PaymentStatus = PaymentStatus.ANY
    date_range: DateRange = DateRange.ALL
    reservation: ReservationPresence = ReservationPresence.EITHER


@dataclass
class DashboardSummary:
    total_orders: int
    total_revenue: Decimal
    pending_orders: int
    today_reservations: int


def _matches_text(order: Order, needle: str) -> bool:
    if needle in order.order_no.lower() or needle in order.customer_name.lower():
        return True
    return any(needle in line.item_name.lower() for line in order.lines)


def _in_date_range(order: Order, date_range: DateRange, now: datetime) -> bool:
    if date_range == DateRange.TODAY:
        return order.ordered_at.date() == now.date()
    if date_range == DateRange.LAST_7_DAYS:
        return order.ordered_at >= now - timedelta(days=7)
    if date_range == DateRange.LAST_30_DAYS:
        return order.ordered_at >= now - timedelta(days=30)
    return True


def matches(order: Order, filters: OrderFilters, now: datetime) -> bool:
    needle = (filters.search_text or "").strip().lower()
    if needle and not _matches_text(order, needle):
        return False
    if filters.status is not None and order.status != filters.status:
        return False
    if filters.payment_status == PaymentStatus.CONFIRMED and not order.payment_confirmed:
        return False
    if filters.payment_status == PaymentStatus.UNCONFIRMED and order.payment_confirmed:
        return False
    if filters.reservation == ReservationPresence.WITH and not order.has_reservation:
        return False
    if filters.reservation == ReservationPresence.WITHOUT and order.has_reservation:
        return False
    return _in_date_range(order, filters.date_range, now)


def sort_recent_first(orders: Iterable[Order]) -> List[Order]:
    """Most recent first; ties broken by descending id."""
    return sorted(orders, key=lambda o: (o.ordered_at, o.id or 0), reverse=True)


def filter_orders(orders: Iterable[Order], filters: Optional[OrderFilters], now: datetime) -> List[Order]:
    filters = filters or OrderFilters()
    return sort_recent_first(o for o in orders if matches(o, filters, now))


def summarize(orders: Iterable[Order], now: datetime) -> DashboardSummary:
    orders = list(orders)
    live = [o for o in orders if o.status != OrderStatus.CANCELLED]
    revenue = sum((o.total_price for o in live), Decimal("0"))
    today_reservations = sum(
        1 for o in live
        if o.reservation is not None and o.reservation.reservation_date == now.date()
    )
    return DashboardSummary(
        total_orders=len(orders),
        total_revenue=money(revenue),
        pending_orders=sum(1 for o in orders if o.status == OrderStatus.PENDING),
        today_reservations=today_reservations,
    )
