"""
Order service: the operations the transport layer binds to.

Each mutating operation touches exactly one aggregate and goes through a single
storage call (``add_order``, ``update_order`` or ``delete_order``), which is
the transaction boundary. Domain checks run inside ``update_order``'s mutator,
so a rejected operation rolls back with nothing written.
"""

import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Set, Union

from resto.domain import accounts, status
from resto.domain.availability import available_tables, parse_slot_time
from resto.domain.builder import (
    OrderRequest,
    build_order,
    parse_payment_method,
    retained_lines,
    price_line,
)
from resto.domain.catalog import InMemoryCatalog, PricingCatalog
from resto.domain.errors import NotFound, PaymentLocked, ValidationError
from resto.domain.models import Account, Order, OrderLine, OrderStatus
from resto.domain.numbering import OrderNumbering
from resto.domain.payment import confirm_payment
from resto.domain.query import DashboardSummary, OrderFilters, filter_orders, summarize
from resto.storage.base import Storage
from resto.utils.time_utils import now_local_naive

logger = logging.getLogger(__name__)

DEFAULT_TABLES = tuple(f"T-{n:02d}" for n in range(1, 11))


class OrderService:
    """Facade over the order aggregate. Stateless apart from its collaborators."""

    def __init__(
        self,
        storage: Storage,
        catalog: Optional[PricingCatalog] = None,
        clock: Callable[[], datetime] = now_local_naive,
        tables: Optional[Iterable[str]] = None,
    ):
        self.storage = storage
        self.catalog = catalog or InMemoryCatalog()
        self.clock = clock
        self.tables = frozenset(tables if tables is not None else DEFAULT_TABLES)
        self.numbering = OrderNumbering(storage)

    # ---------- accounts ----------

    def register_account(self, display_name: str, email: str, phone: Optional[str] = None) -> Account:
        return accounts.register_account(self.storage, display_name, email, self.clock(), phone=phone)

    def lookup_account(self, account_id: int) -> Account:
        account = self.storage.get_account(account_id)
        if account is None:
            raise NotFound(f"Account {account_id} not found.")
        return account

    # ---------- create / read ----------

    def create_order(self, request: OrderRequest, account: Optional[Account] = None) -> Order:
        order = build_order(
            request,
            self.catalog,
            order_no=self.numbering.next(),
            now=self.clock(),
            account=account,
        )
        order = self.storage.add_order(order)
        logger.info(
            "Created order %s (id=%s) total=%s reservation=%s",
            order.order_no, order.id, order.total_price,
            order.reservation.table_id if order.reservation else None,
        )
        return order

    def get_order(self, order_id: int, account: Optional[Account] = None) -> Order:
        """Fetch one order; with ``account`` given, only its owner or an admin may see it."""
        order = self.storage.get_order(order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found.")
        if account is not None:
            accounts.ensure_can_manage(order, account)
        return order

    # ---------- mutations ----------

    def _update(self, order_id: int, mutate: Callable[[Order], None]) -> Order:
        updated = self.storage.update_order(order_id, mutate)
        if updated is None:
            raise NotFound(f"Order {order_id} not found.")
        return updated

    def _replace_lines(self, order: Order, request: OrderRequest, submitted) -> List[OrderLine]:
        """
        New line set for an edit. A line whose item already exists on the order
        keeps that line's id and snapshot price; anything else is priced now.
        """
        unused = list(order.lines)
        lines = []
        for req in retained_lines(request.lines, submitted):
            match = next((line for line in unused if line.item_name == req.item_name), None)
            if match is not None and req.unit_price is None:
                unused.remove(match)
                lines.append(OrderLine(
                    id=match.id, item_name=match.item_name, quantity=req.quantity, unit_price=match.unit_price,
                ))
            else:
                lines.append(price_line(req, self.catalog))
        if not lines:
            raise ValidationError("At least one item is required.", submitted)
        return lines

    def edit_order(self, order_id: int, request: OrderRequest, account: Account) -> Order:
        """Replace customer name, payment method and line set; total is recomputed."""
        submitted = request.as_form()

        def mutate(order: Order) -> None:
            accounts.ensure_can_manage(order, account)
            customer_name = (request.customer_name or "").strip()
            if not customer_name:
                raise ValidationError("Customer name is required.", submitted)
            payment_method = parse_payment_method(request.payment_method, submitted)
            if order.payment_confirmed and payment_method != order.payment_method:
                raise PaymentLocked(
                    f"Payment for {order.order_no} is confirmed; the payment method cannot change.",
                    submitted,
                )
            order.customer_name = customer_name
            order.payment_method = payment_method
            order.lines = self._replace_lines(order, request, submitted)
            order.recompute_total()

        order = self._update(order_id, mutate)
        logger.info("Edited order %s by account %s, total=%s", order.order_no, account.id, order.total_price)
        return order

    def delete_order(self, order_id: int) -> None:
        if not self.storage.delete_order(order_id):
            raise NotFound(f"Order {order_id} not found.")
        logger.info("Deleted order id=%s with its lines and reservation", order_id)

    def cancel_order(self, order_id: int, account: Account) -> Order:
        def mutate(order: Order) -> None:
            accounts.ensure_can_manage(order, account)
            status.cancel(order)

        order = self._update(order_id, mutate)
        logger.info("Order %s cancelled by account %s", order.order_no, account.id)
        return order

    def set_status(self, order_id: int, new_status: Union[OrderStatus, str]) -> Order:
        """Staff override: any status may be set."""
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown order status: {new_status!r}", {"status": new_status})

        order = self._update(order_id, lambda o: status.override_status(o, target))
        logger.info("Order %s status set to %s", order.order_no, order.status.value)
        return order

    def confirm_payment(self, order_id: int, proof: str, confirmed_by: Union[Account, str]) -> Order:
        staff = confirmed_by.display_name if isinstance(confirmed_by, Account) else confirmed_by
        now = self.clock()
        order = self._update(order_id, lambda o: confirm_payment(o, proof, staff, now))
        logger.info("Payment for %s confirmed by %s", order.order_no, staff)
        return order

    # ---------- queries ----------

    def list_orders(self, account_id: Optional[int] = None, filters: Optional[OrderFilters] = None) -> List[Order]:
        """``account_id`` None is the admin (all orders) scope."""
        return filter_orders(self.storage.list_orders(account_id), filters, self.clock())

    def dashboard(self, account_id: Optional[int] = None, filters: Optional[OrderFilters] = None) -> DashboardSummary:
        return summarize(self.list_orders(account_id, filters), self.clock())

    def available_tables(self, slot_date: date, slot_time: Union[time, str]) -> Set[str]:
        parsed = parse_slot_time(slot_time)
        return available_tables(self.tables, self.storage.orders_for_slot(slot_date, parsed), slot_date, parsed)

    def menu(self) -> Dict[str, Decimal]:
        return self.catalog.items()
