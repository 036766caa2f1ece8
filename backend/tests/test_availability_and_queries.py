"""
Tests for table availability and the filtered order views.
"""

from datetime import date, time, timedelta
from decimal import Decimal

import pytest

from resto.domain.availability import available_tables, parse_slot_time
from resto.domain.errors import InvalidTimeFormat
from resto.domain.models import OrderStatus
from resto.domain.query import (
    DateRange,
    OrderFilters,
    PaymentStatus,
    ReservationPresence,
    filter_orders,
)

SLOT_DATE = date(2025, 6, 1)


class TestAvailability:
    """Free tables for a (date, time) slot."""

    def test_reserved_table_is_held(self, service, customer, make_request):
        service.create_order(
            make_request(table_id="T1", reservation_date=SLOT_DATE, reservation_time="18:00"), customer,
        )
        assert service.available_tables(SLOT_DATE, "18:00") == {"T2", "T3"}

    def test_cancelling_releases_table(self, service, customer, make_request):
        order = service.create_order(
            make_request(table_id="T1", reservation_date=SLOT_DATE, reservation_time="18:00"), customer,
        )
        service.cancel_order(order.id, customer)
        assert service.available_tables(SLOT_DATE, "18:00") == {"T1", "T2", "T3"}

    def test_completed_order_releases_table(self, service, customer, make_request):
        order = service.create_order(make_request(table_id="T2", reservation_date=SLOT_DATE), customer)
        service.set_status(order.id, OrderStatus.COMPLETED)
        assert "T2" in service.available_tables(SLOT_DATE, time(18, 0))

    def test_exact_slot_match_only(self, service, customer, make_request):
        service.create_order(
            make_request(table_id="T1", reservation_date=SLOT_DATE, reservation_time="18:00"), customer,
        )
        assert "T1" in service.available_tables(SLOT_DATE, "18:30")
        assert "T1" in service.available_tables(SLOT_DATE + timedelta(days=1), "18:00")

    def test_seconds_form_accepted(self, service):
        assert service.available_tables(SLOT_DATE, "18:00:00") == {"T1", "T2", "T3"}

    @pytest.mark.parametrize("value", ["", "six pm", "25:00", "18h00"])
    def test_malformed_time(self, service, value):
        with pytest.raises(InvalidTimeFormat):
            service.available_tables(SLOT_DATE, value)

    def test_pure_function(self):
        assert available_tables(["A", "B"], [], SLOT_DATE, "12:00") == {"A", "B"}
        assert parse_slot_time(time(9, 15, 0, 500)) == time(9, 15)


class TestListOrders:
    """Filtering, scoping and ordering of order lists."""

    @pytest.fixture
    def placed(self, service, clock, customer, other_customer, make_request):
        """Four orders spread over six weeks, oldest first."""
        clock.now = clock.now - timedelta(days=40)
        old = service.create_order(make_request(lines=[("Sisig", 1)]), customer)
        clock.advance(days=30)
        with_table = service.create_order(make_request(table_id="T1", lines=[("Beef Tapa", 1)]), customer)
        clock.advance(days=9)
        paid = service.create_order(make_request(customer_name="Dina Diner", lines=[("Spaghetti", 2)]), other_customer)
        service.confirm_payment(paid.id, "OR-1", "Ana Admin")
        clock.advance(days=1)
        latest = service.create_order(make_request(lines=[("Adobo", 1)]), customer)
        return {"old": old, "with_table": with_table, "paid": paid, "latest": latest}

    def ids(self, orders):
        return [o.id for o in orders]

    def test_empty_filter_returns_all_most_recent_first(self, service, placed):
        orders = service.list_orders()
        assert self.ids(orders) == [placed[k].id for k in ("latest", "paid", "with_table", "old")]

    def test_same_timestamp_ties_broken_by_id(self, service, customer, make_request):
        first = service.create_order(make_request(), customer)
        second = service.create_order(make_request(), customer)
        assert self.ids(service.list_orders()) == [second.id, first.id]

    def test_scoped_to_account(self, service, placed, other_customer):
        assert self.ids(service.list_orders(other_customer.id)) == [placed["paid"].id]

    def test_pending_within_30_days(self, service, placed):
        filters = OrderFilters(status=OrderStatus.PENDING, date_range=DateRange.LAST_30_DAYS)
        assert self.ids(service.list_orders(filters=filters)) == [placed["latest"].id, placed["with_table"].id]

    def test_today_and_last_7_days(self, service, placed):
        today = service.list_orders(filters=OrderFilters(date_range=DateRange.TODAY))
        week = service.list_orders(filters=OrderFilters(date_range=DateRange.LAST_7_DAYS))

        assert self.ids(today) == [placed["latest"].id]
        assert self.ids(week) == [placed["latest"].id, placed["paid"].id]

    def test_search_is_case_insensitive(self, service, placed):
        by_item = service.list_orders(filters=OrderFilters(search_text="beef"))
        by_name = service.list_orders(filters=OrderFilters(search_text="DINA"))
        by_number = service.list_orders(filters=OrderFilters(search_text=placed["old"].order_no.lower()))

        assert self.ids(by_item) == [placed["with_table"].id]
        assert self.ids(by_name) == [placed["paid"].id]
        assert self.ids(by_number) == [placed["old"].id]

    def test_payment_status(self, service, placed):
        confirmed = service.list_orders(filters=OrderFilters(payment_status=PaymentStatus.CONFIRMED))
        unconfirmed = service.list_orders(filters=OrderFilters(payment_status=PaymentStatus.UNCONFIRMED))

        assert self.ids(confirmed) == [placed["paid"].id]
        assert placed["paid"].id not in self.ids(unconfirmed)
        assert len(unconfirmed) == 3

    def test_reservation_presence(self, service, placed):
        with_res = service.list_orders(filters=OrderFilters(reservation=ReservationPresence.WITH))
        without_res = service.list_orders(filters=OrderFilters(reservation=ReservationPresence.WITHOUT))

        assert self.ids(with_res) == [placed["with_table"].id]
        assert len(without_res) == 3

    def test_filters_combine(self, service, placed):
        filters = OrderFilters(search_text="carlo", status=OrderStatus.PENDING, reservation=ReservationPresence.WITHOUT)
        assert self.ids(service.list_orders(filters=filters)) == [placed["latest"].id, placed["old"].id]

    def test_filter_orders_is_read_only(self, service, placed, clock):
        before = service.list_orders()
        filter_orders(before, OrderFilters(status=OrderStatus.CANCELLED), clock())
        assert service.list_orders() == before


class TestDashboard:

    def test_summary(self, service, clock, customer, make_request):
        a = service.create_order(make_request(lines=[("Adobo", 2)], table_id="T1"), customer)
        service.create_order(make_request(lines=[("Sisig", 1)]), customer)
        cancelled = service.create_order(make_request(lines=[("Beef Tapa", 4)], table_id="T2"), customer)
        service.cancel_order(cancelled.id, customer)
        service.confirm_payment(a.id, "OR-7", "Ana Admin")

        summary = service.dashboard()

        assert summary.total_orders == 3
        assert summary.total_revenue == Decimal("82.00")
        assert summary.pending_orders == 1
        assert summary.today_reservations == 1

    def test_empty(self, service):
        summary = service.dashboard()
        assert summary.total_orders == 0
        assert summary.total_revenue == Decimal("0.00")
