"""
SQLAlchemy storage implementation for the order aggregate.

Maps the domain dataclasses onto the relational models in resto.db.models.
Every write runs inside ``with session.begin()``; an exception anywhere in the
block rolls the whole aggregate back.
"""

import logging
import os
from datetime import date, time
from typing import Callable, List, Optional

from sqlalchemy import create_engine, delete, event, func, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from resto.db import init_db
from resto.db.models import AccountModel, Base, OrderLineModel, OrderModel, TableReservationModel
from resto.domain.errors import OrderingError
from resto.domain.models import (
    Account,
    Order,
    OrderLine,
    OrderStatus,
    PaymentMethod,
    ReservationStatus,
    Role,
    TableReservation,
    money,
)
from resto.storage.base import Storage

logger = logging.getLogger(__name__)


# ---------- row <-> domain mapping ----------

def _account_from_row(row: AccountModel) -> Account:
    return Account(
        id=row.id,
        display_name=row.display_name,
        email=row.email,
        phone=row.phone,
        role=Role(row.role),
        created_at=row.created_at,
    )


def _reservation_from_row(row: TableReservationModel) -> TableReservation:
    return TableReservation(
        id=row.id,
        customer_name=row.customer_name,
        customer_email=row.customer_email,
        customer_phone=row.customer_phone,
        table_id=row.table_number,
        party_size=row.number_of_guests,
        reservation_date=row.reservation_date,
        reservation_time=row.reservation_time,
        special_requests=row.special_requests,
        status=ReservationStatus(row.status),
        created_at=row.created_at,
        account_id=row.account_id,
    )


def _order_from_row(row: OrderModel) -> Order:
    return Order(
        id=row.id,
        order_no=row.order_no,
        customer_name=row.customer_name,
        account_id=row.account_id,
        payment_method=PaymentMethod(row.payment_method),
        ordered_at=row.ordered_at,
        status=OrderStatus(row.status),
        lines=[
            OrderLine(id=line.id, item_name=line.item_name, quantity=line.quantity, unit_price=money(line.unit_price))
            for line in row.lines
        ],
        reservation=_reservation_from_row(row.reservation) if row.reservation else None,
        total_price=money(row.total_price),
        payment_confirmed=bool(row.is_payment_confirmed),
        payment_confirmed_at=row.payment_confirmed_at,
        payment_confirmed_by=row.payment_confirmed_by,
        official_receipt_no=row.official_receipt_no,
        payment_reference=row.payment_reference,
    )


def _write_reservation(row: TableReservationModel, reservation: TableReservation) -> None:
    row.customer_name = reservation.customer_name
    row.customer_email = reservation.customer_email
    row.customer_phone = reservation.customer_phone
    row.table_number = reservation.table_id
    row.number_of_guests = reservation.party_size
    row.reservation_date = reservation.reservation_date
    row.reservation_time = reservation.reservation_time
    row.special_requests = reservation.special_requests
    row.status = ReservationStatus(reservation.status).value
    row.account_id = reservation.account_id
    if reservation.created_at is not None:
        row.created_at = reservation.created_at


def _write_header(row: OrderModel, order: Order) -> None:
    row.order_no = order.order_no
    row.customer_name = order.customer_name
    row.account_id = order.account_id
    row.status = OrderStatus(order.status).value
    row.ordered_at = order.ordered_at
    row.payment_method = PaymentMethod(order.payment_method).value
    row.total_price = money(order.total_price)
    row.is_payment_confirmed = order.payment_confirmed
    row.payment_confirmed_at = order.payment_confirmed_at
    row.payment_confirmed_by = order.payment_confirmed_by
    row.official_receipt_no = order.official_receipt_no
    row.payment_reference = order.payment_reference


def _sync_lines(row: OrderModel, lines: List[OrderLine]) -> None:
    """Update lines by id, add new ones, drop the rest (delete-orphan)."""
    existing = {line.id: line for line in row.lines}
    synced = []
    for line in lines:
        line_row = existing.get(line.id) if line.id is not None else None
        if line_row is None:
            line_row = OrderLineModel()
        line_row.item_name = line.item_name
        line_row.quantity = line.quantity
        line_row.unit_price = money(line.unit_price)
        synced.append(line_row)
    row.lines = synced


def _begin_immediate_on_sqlite(engine) -> None:
    """Take SQLite's write lock at BEGIN, so the read in update_order is inside it.

    pysqlite on its own defers BEGIN until the first DML statement.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class SQLAlchemyStorage(Storage):
    """SQLAlchemy-backed storage for orders, lines, reservations and accounts."""

    def __init__(self, database_url: str = "sqlite:///restaurant.db"):
        """
        Initialize SQLAlchemy storage.

        Args:
            database_url: SQLAlchemy database URL
        """
        self.database_url = database_url

        # pool_pre_ping=True: verify connections before use (detect stale connections)
        self.engine = create_engine(
            self.database_url,
            connect_args={"check_same_thread": False, "timeout": 30} if "sqlite" in database_url else {},
            echo=False,
            future=True,
            pool_pre_ping=True,
        )
        if self.engine.dialect.name == "sqlite":
            _begin_immediate_on_sqlite(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        use_alembic = os.getenv("USE_ALEMBIC", "false").lower() == "true"
        init_db(self.engine, use_alembic=use_alembic, base=Base)
        logger.info("SQLAlchemyStorage ready at %s", self.database_url)

    def _get_session(self) -> Session:
        """Get a new database session (caller must close)."""
        return self.SessionLocal()

    def _order_query(self):
        return select(OrderModel).options(
            selectinload(OrderModel.lines),
            selectinload(OrderModel.reservation),
        )

    # ---------- accounts ----------

    def add_account(self, account: Account) -> Account:
        session = self._get_session()
        try:
            with session.begin():
                row = AccountModel(
                    display_name=account.display_name,
                    email=account.email,
                    phone=account.phone,
                    role=Role(account.role).value,
                )
                if account.created_at is not None:
                    row.created_at = account.created_at
                session.add(row)
                session.flush()
                return _account_from_row(row)
        finally:
            session.close()

    def get_account(self, account_id: int) -> Optional[Account]:
        session = self._get_session()
        try:
            row = session.get(AccountModel, account_id)
            return _account_from_row(row) if row else None
        finally:
            session.close()

    def get_account_by_email(self, email: str) -> Optional[Account]:
        session = self._get_session()
        try:
            stmt = select(AccountModel).where(func.lower(AccountModel.email) == email.lower())
            row = session.execute(stmt).scalar_one_or_none()
            return _account_from_row(row) if row else None
        finally:
            session.close()

    def count_accounts(self) -> int:
        session = self._get_session()
        try:
            return session.execute(select(func.count(AccountModel.id))).scalar_one()
        finally:
            session.close()

    # ---------- orders ----------

    def max_order_id(self) -> Optional[int]:
        session = self._get_session()
        try:
            return session.execute(select(func.max(OrderModel.id))).scalar()
        finally:
            session.close()

    def add_order(self, order: Order) -> Order:
        session = self._get_session()
        try:
            with session.begin():
                row = OrderModel()
                _write_header(row, order)
                _sync_lines(row, order.lines)
                if order.reservation is not None:
                    reservation_row = TableReservationModel()
                    _write_reservation(reservation_row, order.reservation)
                    row.reservation = reservation_row
                session.add(row)
                session.flush()
                return _order_from_row(row)
        except Exception:
            logger.error("Order %s insert rolled back", order.order_no, exc_info=True)
            raise
        finally:
            session.close()

    def get_order(self, order_id: int) -> Optional[Order]:
        session = self._get_session()
        try:
            stmt = self._order_query().where(OrderModel.id == order_id)
            row = session.execute(stmt).scalar_one_or_none()
            return _order_from_row(row) if row else None
        finally:
            session.close()

    def update_order(self, order_id: int, mutate: Callable[[Order], None]) -> Optional[Order]:
        session = self._get_session()
        try:
            with session.begin():
                # Row lock on server databases; SQLite already holds its write lock from BEGIN IMMEDIATE
                stmt = self._order_query().where(OrderModel.id == order_id).with_for_update()
                row = session.execute(stmt).scalar_one_or_none()
                if row is None:
                    return None

                order = _order_from_row(row)
                mutate(order)

                _write_header(row, order)
                _sync_lines(row, order.lines)
                if order.reservation is not None:
                    if row.reservation is None:
                        row.reservation = TableReservationModel()
                    _write_reservation(row.reservation, order.reservation)
                session.flush()
                return _order_from_row(row)
        except OrderingError:
            raise
        except Exception:
            logger.error("Update of order %s rolled back", order_id, exc_info=True)
            raise
        finally:
            session.close()

    def delete_order(self, order_id: int) -> bool:
        session = self._get_session()
        try:
            with session.begin():
                stmt = self._order_query().where(OrderModel.id == order_id)
                row = session.execute(stmt).scalar_one_or_none()
                if row is None:
                    return False
                reservation_id = row.table_reservation_id
                session.delete(row)
                # The order's FK restricts reservation deletion, so drop the order first
                session.flush()
                if reservation_id is not None:
                    session.execute(
                        delete(TableReservationModel).where(TableReservationModel.id == reservation_id)
                    )
                return True
        except Exception:
            logger.error("Delete of order %s rolled back", order_id, exc_info=True)
            raise
        finally:
            session.close()

    def get_reservation(self, reservation_id: int) -> Optional[TableReservation]:
        session = self._get_session()
        try:
            row = session.get(TableReservationModel, reservation_id)
            return _reservation_from_row(row) if row else None
        finally:
            session.close()

    def list_orders(self, account_id: Optional[int] = None) -> List[Order]:
        session = self._get_session()
        try:
            stmt = self._order_query()
            if account_id is not None:
                stmt = stmt.where(OrderModel.account_id == account_id)
            return [_order_from_row(row) for row in session.execute(stmt).scalars().all()]
        finally:
            session.close()

    def orders_for_slot(self, slot_date: date, slot_time: time) -> List[Order]:
        session = self._get_session()
        try:
            stmt = (
                self._order_query()
                .join(OrderModel.reservation)
                .where(TableReservationModel.reservation_date == slot_date)
                .where(TableReservationModel.reservation_time == slot_time)
            )
            return [_order_from_row(row) for row in session.execute(stmt).scalars().all()]
        finally:
            session.close()

    def clear(self) -> None:
        session = self._get_session()
        try:
            with session.begin():
                session.execute(delete(OrderLineModel))
                session.execute(delete(OrderModel))
                session.execute(delete(TableReservationModel))
                session.execute(delete(AccountModel))
        finally:
            session.close()

    def close(self) -> None:
        """Close database connections."""
        self.engine.dispose()
