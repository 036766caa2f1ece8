"""
Tests for order status transitions and payment confirmation.
"""

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from resto.domain import status
from resto.domain.errors import AlreadyConfirmed, InvalidTransition, MissingProof
from resto.domain.models import (
    Order,
    OrderLine,
    OrderStatus,
    PaymentMethod,
    ReservationStatus,
    TableReservation,
)
from resto.domain.numbering import OrderNumbering, format_order_number
from resto.domain.payment import confirm_payment

NOW = datetime(2025, 6, 1, 12, 0, 0)


def make_order(order_status=OrderStatus.PENDING, method=PaymentMethod.CASH, with_table=True):
    reservation = None
    if with_table:
        reservation = TableReservation(
            customer_name="Carlo",
            customer_email="carlo@example.com",
            customer_phone="",
            table_id="T1",
            party_size=2,
            reservation_date=date(2025, 6, 1),
            reservation_time=time(18, 0),
            created_at=NOW,
        )
    order = Order(
        order_no="ORD-1001",
        customer_name="Carlo",
        account_id=2,
        payment_method=method,
        ordered_at=NOW,
        status=order_status,
        lines=[OrderLine(item_name="Adobo", quantity=2, unit_price=Decimal("27.00"))],
        reservation=reservation,
    )
    order.recompute_total()
    return order


class TestOrderNumbering:

    def test_first_order_number(self):
        assert format_order_number(None) == "ORD-1001"
        assert format_order_number(0) == "ORD-1001"

    def test_follows_highest_id(self):
        assert format_order_number(41) == "ORD-1042"
        assert format_order_number(9000) == "ORD-10001"

    def test_reads_max_id_from_storage(self, storage):
        numbering = OrderNumbering(storage)
        assert numbering.next() == "ORD-1001"
        storage.add_order(make_order())
        storage.add_order(make_order())
        assert numbering.next() == "ORD-1003"

    def test_never_reissued_after_newest_order_deleted(self, storage):
        numbering = OrderNumbering(storage)
        storage.add_order(make_order())
        newest = storage.add_order(make_order())
        assert numbering.next() == "ORD-1003"

        storage.delete_order(newest.id)

        assert numbering.next() == "ORD-1004"

    def test_high_water_mark_covers_shrinking_store(self):
        class ShrinkingStore:
            ids = [5, 2, None]

            def max_order_id(self):
                return self.ids.pop(0)

        numbering = OrderNumbering(ShrinkingStore())
        assert [numbering.next() for _ in range(3)] == ["ORD-1006", "ORD-1007", "ORD-1008"]


class TestCancel:
    """Customer cancellation."""

    @pytest.mark.parametrize("start", [OrderStatus.PENDING, OrderStatus.CONFIRMED])
    def test_cancel_cascades_to_reservation(self, start):
        order = make_order(start)
        status.cancel(order)

        assert order.status == OrderStatus.CANCELLED
        assert order.reservation.status == ReservationStatus.CANCELLED

    def test_cancel_without_reservation(self):
        order = make_order(with_table=False)
        status.cancel(order)
        assert order.status == OrderStatus.CANCELLED

    @pytest.mark.parametrize("start", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_terminal_orders_rejected(self, start):
        order = make_order(start)
        with pytest.raises(InvalidTransition):
            status.cancel(order)
        assert order.status == start
        assert order.reservation.status == ReservationStatus.PENDING


class TestOverride:
    """Staff status override has no transition table."""

    def test_completed_back_to_pending(self):
        order = make_order(OrderStatus.COMPLETED)
        status.override_status(order, OrderStatus.PENDING)
        assert order.status == OrderStatus.PENDING

    def test_override_to_cancelled_cascades(self):
        order = make_order(OrderStatus.CONFIRMED)
        status.override_status(order, "Cancelled")
        assert order.reservation.status == ReservationStatus.CANCELLED

    def test_override_to_completed_leaves_reservation(self):
        order = make_order()
        status.override_status(order, OrderStatus.COMPLETED)
        assert order.reservation.status == ReservationStatus.PENDING


class TestConfirmPayment:
    """Payment confirmation is a one-shot transition."""

    def test_cash_records_receipt_and_confirms(self):
        order = make_order()
        confirm_payment(order, "OR-555", "Ana Admin", NOW)

        assert order.payment_confirmed is True
        assert order.official_receipt_no == "OR-555"
        assert order.payment_reference is None
        assert order.payment_confirmed_at == NOW
        assert order.payment_confirmed_by == "Ana Admin"
        assert order.status == OrderStatus.CONFIRMED

    @pytest.mark.parametrize("method", [PaymentMethod.GCASH, PaymentMethod.CARD, PaymentMethod.BANK_TRANSFER])
    def test_non_cash_records_reference(self, method):
        order = make_order(method=method)
        confirm_payment(order, "  REF-9  ", "Ana Admin", NOW)

        assert order.payment_reference == "REF-9"
        assert order.official_receipt_no is None

    @pytest.mark.parametrize("proof", ["", "   ", None])
    def test_cash_without_receipt_rejected(self, proof):
        order = make_order()
        with pytest.raises(MissingProof) as exc_info:
            confirm_payment(order, proof, "Ana Admin", NOW)

        assert "receipt" in exc_info.value.message
        assert order.payment_confirmed is False
        assert order.status == OrderStatus.PENDING

    def test_non_cash_without_reference_rejected(self):
        order = make_order(method=PaymentMethod.GCASH)
        with pytest.raises(MissingProof) as exc_info:
            confirm_payment(order, "", "Ana Admin", NOW)
        assert "GCash" in exc_info.value.message

    def test_second_confirmation_changes_nothing(self):
        order = make_order()
        confirm_payment(order, "OR-1", "Ana Admin", NOW)

        with pytest.raises(AlreadyConfirmed):
            confirm_payment(order, "OR-2", "Someone Else", datetime(2025, 6, 2))

        assert order.official_receipt_no == "OR-1"
        assert order.payment_confirmed_by == "Ana Admin"
        assert order.payment_confirmed_at == NOW

    @pytest.mark.parametrize("start", [OrderStatus.CONFIRMED, OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_status_only_advances_from_pending(self, start):
        order = make_order(start)
        confirm_payment(order, "OR-1", "Ana Admin", NOW)

        assert order.payment_confirmed is True
        assert order.status == start
