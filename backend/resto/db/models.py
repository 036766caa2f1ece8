"""
Relational schema for the order aggregate.

These models are used by the SQLAlchemy storage adapter and by Alembic for
migration generation. Money is NUMERIC(18, 2).
"""

from datetime import datetime
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Time,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class AccountModel(Base):
    """Ordering account (no credentials are stored here)."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    display_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    role = Column(String(20), nullable=False, default="Customer")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<AccountModel(id={self.id}, email={self.email}, role={self.role})>"


class TableReservationModel(Base):
    """Table booking attached to at most one order."""

    __tablename__ = "table_reservations"

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(100), nullable=False)
    customer_phone = Column(String(20), nullable=False)
    table_number = Column(String(10), nullable=False)
    number_of_guests = Column(Integer, nullable=False)
    reservation_date = Column(Date, nullable=False)
    reservation_time = Column(Time, nullable=False)
    special_requests = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="Pending")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=True)

    __table_args__ = (
        Index("idx_reservations_slot", "reservation_date", "reservation_time"),
    )

    order = relationship("OrderModel", back_populates="reservation", uselist=False)

    def __repr__(self):
        return f"<TableReservationModel(id={self.id}, table={self.table_number}, status={self.status})>"


class OrderModel(Base):
    """Order header."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    # Display label; not unique, concurrent creation may repeat it.
    order_no = Column(String(50), nullable=False, index=True)
    customer_name = Column(String(100), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="Pending")
    ordered_at = Column(DateTime, nullable=False, index=True)
    payment_method = Column(String(50), nullable=False)
    total_price = Column(Numeric(18, 2, asdecimal=True), nullable=False, default=0)
    is_payment_confirmed = Column(Boolean, nullable=False, default=False)
    payment_confirmed_at = Column(DateTime, nullable=True)
    payment_confirmed_by = Column(String(255), nullable=True)
    official_receipt_no = Column(String(255), nullable=True)
    payment_reference = Column(String(255), nullable=True)
    table_reservation_id = Column(
        Integer,
        ForeignKey("table_reservations.id", ondelete="RESTRICT"),
        nullable=True,
        unique=True,
    )

    __table_args__ = (
        Index("idx_orders_status", "status"),
        # Ids of deleted orders are never handed out again
        {"sqlite_autoincrement": True},
    )

    lines = relationship(
        "OrderLineModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLineModel.id",
    )
    reservation = relationship("TableReservationModel", back_populates="order")

    def __repr__(self):
        return f"<OrderModel(id={self.id}, order_no={self.order_no}, status={self.status})>"


class OrderLineModel(Base):
    """Line item; unit price is a snapshot taken when the line was created."""

    __tablename__ = "order_lines"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    item_name = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(18, 2, asdecimal=True), nullable=False)

    order = relationship("OrderModel", back_populates="lines")

    def __repr__(self):
        return f"<OrderLineModel(id={self.id}, item={self.item_name}, qty={self.quantity})>"
