"""
Abstract Storage interface for the ordering backend.

Defines the persistent-store contract for the order aggregate (order, lines,
reservation) and for accounts. Every method that writes an aggregate does so
in one transaction: either the whole aggregate changes or nothing does.
"""

from abc import ABC, abstractmethod
from datetime import date, time
from typing import Callable, List, Optional

from resto.domain.models import Account, Order, TableReservation


class Storage(ABC):
    """Abstract base class for storage implementations."""

    # ---------- accounts ----------

    @abstractmethod
    def add_account(self, account: Account) -> Account:
        """Persist a new account and return it with its id assigned."""
        ...

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        ...

    @abstractmethod
    def get_account_by_email(self, email: str) -> Optional[Account]:
        ...

    @abstractmethod
    def count_accounts(self) -> int:
        ...

    # ---------- orders ----------

    @abstractmethod
    def max_order_id(self) -> Optional[int]:
        """Highest order id the store knows of, or None before the first order."""
        ...

    @abstractmethod
    def add_order(self, order: Order) -> Order:
        """
        Insert an order with its lines and reservation atomically.

        Returns a copy with ids assigned to the order, lines and reservation.
        """
        ...

    @abstractmethod
    def get_order(self, order_id: int) -> Optional[Order]:
        """Load the full aggregate, or None if not found."""
        ...

    @abstractmethod
    def update_order(self, order_id: int, mutate: Callable[[Order], None]) -> Optional[Order]:
        """
        Read-modify-write one aggregate in a single transaction.

        ``mutate`` receives a detached copy of the order. If it raises, the
        transaction is rolled back and the exception propagates. Returns the
        updated aggregate, or None if the order does not exist.
        """
        ...

    @abstractmethod
    def delete_order(self, order_id: int) -> bool:
        """
        Delete header, lines and reservation together.

        Returns True if the order existed.
        """
        ...

    @abstractmethod
    def get_reservation(self, reservation_id: int) -> Optional[TableReservation]:
        ...

    @abstractmethod
    def list_orders(self, account_id: Optional[int] = None) -> List[Order]:
        """All orders, or only those owned by ``account_id``. Unordered."""
        ...

    @abstractmethod
    def orders_for_slot(self, slot_date: date, slot_time: time) -> List[Order]:
        """Orders whose reservation is at exactly (slot_date, slot_time), any status."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Clear all state (orders, reservations and accounts)."""
        ...
