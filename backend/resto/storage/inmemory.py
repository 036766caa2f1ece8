"""
In-memory storage implementation.

Aggregates are kept in dicts and handed out as deep copies. Writes happen under
a lock and swap in a fully mutated copy, so readers never see half an update.
"""

import copy
import itertools
import threading
from datetime import date, time
from typing import Callable, Dict, List, Optional

from resto.domain.models import Account, Order, TableReservation
from .base import Storage


class InMemoryStorage(Storage):
    """In-memory storage using dictionaries."""

    def __init__(self):
        self._lock = threading.RLock()
        self._accounts: Dict[int, Account] = {}
        self._orders: Dict[int, Order] = {}
        self._account_ids = itertools.count(1)
        self._order_ids = itertools.count(1)
        self._last_order_id: Optional[int] = None
        self._line_ids = itertools.count(1)
        self._reservation_ids = itertools.count(1)

    def add_account(self, account: Account) -> Account:
        with self._lock:
            stored = copy.deepcopy(account)
            stored.id = next(self._account_ids)
            self._accounts[stored.id] = stored
            return copy.deepcopy(stored)

    def get_account(self, account_id: int) -> Optional[Account]:
        with self._lock:
            account = self._accounts.get(account_id)
            return copy.deepcopy(account) if account else None

    def get_account_by_email(self, email: str) -> Optional[Account]:
        with self._lock:
            for account in self._accounts.values():
                if account.email.lower() == email.lower():
                    return copy.deepcopy(account)
            return None

    def count_accounts(self) -> int:
        with self._lock:
            return len(self._accounts)

    def max_order_id(self) -> Optional[int]:
        with self._lock:
            return self._last_order_id

    def _assign_child_ids(self, order: Order) -> None:
        for line in order.lines:
            if line.id is None:
                line.id = next(self._line_ids)
        if order.reservation is not None and order.reservation.id is None:
            order.reservation.id = next(self._reservation_ids)

    def add_order(self, order: Order) -> Order:
        with self._lock:
            stored = copy.deepcopy(order)
            stored.id = next(self._order_ids)
            self._last_order_id = stored.id
            self._assign_child_ids(stored)
            self._orders[stored.id] = stored
            return copy.deepcopy(stored)

    def get_order(self, order_id: int) -> Optional[Order]:
        with self._lock:
            order = self._orders.get(order_id)
            return copy.deepcopy(order) if order else None

    def update_order(self, order_id: int, mutate: Callable[[Order], None]) -> Optional[Order]:
        with self._lock:
            current = self._orders.get(order_id)
            if current is None:
                return None
            working = copy.deepcopy(current)
            mutate(working)
            working.id = order_id
            self._assign_child_ids(working)
            self._orders[order_id] = working
            return copy.deepcopy(working)

    def delete_order(self, order_id: int) -> bool:
        with self._lock:
            return self._orders.pop(order_id, None) is not None

    def get_reservation(self, reservation_id: int) -> Optional[TableReservation]:
        with self._lock:
            for order in self._orders.values():
                if order.reservation is not None and order.reservation.id == reservation_id:
                    return copy.deepcopy(order.reservation)
            return None

    def list_orders(self, account_id: Optional[int] = None) -> List[Order]:
        with self._lock:
            return [
                copy.deepcopy(o)
                for o in self._orders.values()
                if account_id is None or o.account_id == account_id
            ]

    def orders_for_slot(self, slot_date: date, slot_time: time) -> List[Order]:
        with self._lock:
            return [
                copy.deepcopy(o)
                for o in self._orders.values()
                if o.reservation is not None
                and o.reservation.reservation_date == slot_date
                and o.reservation.reservation_time == slot_time
            ]

    def clear(self) -> None:
        with self._lock:
            self._accounts.clear()
            self._orders.clear()
