"""
Order and reservation status transitions.

    Pending -> Confirmed -> Completed
    Pending | Confirmed -> Cancelled

Completed and Cancelled are terminal for the customer path. The staff
override path (``override_status``) may set any value. Reservation status
only ever follows order cancellation here.
"""

import logging

from resto.domain.errors import InvalidTransition
from resto.domain.models import Order, OrderStatus, ReservationStatus

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


def _cascade_cancel(order: Order) -> None:
    if order.reservation is not None:
        order.reservation.status = ReservationStatus.CANCELLED


def cancel(order: Order) -> None:
    """Customer cancellation; only allowed from a non-terminal status."""
    if order.status in TERMINAL_STATUSES:
        raise InvalidTransition(
            f"Order {order.order_no} is already {order.status.value} and cannot be cancelled."
        )
    order.status = OrderStatus.CANCELLED
    _cascade_cancel(order)


def override_status(order: Order, new_status: OrderStatus) -> None:
    """Staff escape hatch: no transition table is enforced."""
    previous = order.status
    order.status = OrderStatus(new_status)
    if order.status == OrderStatus.CANCELLED:
        _cascade_cancel(order)
    logger.debug("Order %s status %s -> %s (override)", order.order_no, previous.value, order.status.value)


def advance_on_payment(order: Order) -> bool:
    """Pending -> Confirmed after payment. Any other status is left alone."""
    if order.status == OrderStatus.PENDING:
        order.status = OrderStatus.CONFIRMED
        return True
    return False
