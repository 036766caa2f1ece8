"""
Orders API router.

Binds the order service operations to HTTP. Domain errors are translated to
status codes by the exception handlers registered in resto.main.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from resto.db.dependencies import get_current_account, get_order_service, require_admin
from resto.domain.builder import LineRequest, OrderRequest, ReservationRequest
from resto.domain.models import Account, Order, OrderStatus, PaymentMethod
from resto.domain.query import DateRange, OrderFilters, PaymentStatus, ReservationPresence
from resto.domain.service import OrderService


router = APIRouter(prefix="/api/orders", tags=["orders"])


# ---------- Request/Response Models ----------

class LineIn(BaseModel):
    item_name: Optional[str] = None
    quantity: Optional[int] = 1
    unit_price: Optional[Decimal] = None


class ReservationIn(BaseModel):
    table_id: Optional[str] = None
    party_size: Optional[int] = None
    reservation_date: Optional[date] = None
    # Kept as text so a malformed value reaches the domain check
    reservation_time: Optional[str] = None
    special_requests: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


class OrderIn(BaseModel):
    customer_name: Optional[str] = None
    payment_method: Optional[str] = None
    lines: List[LineIn] = Field(default_factory=list)
    reservation: Optional[ReservationIn] = None

    def to_request(self) -> OrderRequest:
        return OrderRequest(
            customer_name=self.customer_name,
            payment_method=self.payment_method,
            lines=[LineRequest(**line.model_dump()) for line in self.lines],
            reservation=ReservationRequest(**self.reservation.model_dump()) if self.reservation else None,
        )


class StatusIn(BaseModel):
    status: OrderStatus


class PaymentIn(BaseModel):
    proof: Optional[str] = None


class LineOut(BaseModel):
    id: Optional[int]
    item_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class ReservationOut(BaseModel):
    id: Optional[int]
    table_id: str
    party_size: int
    reservation_date: date
    reservation_time: time
    customer_name: str
    customer_email: str
    customer_phone: str
    special_requests: Optional[str]
    status: str


class OrderOut(BaseModel):
    id: int
    order_no: str
    customer_name: str
    account_id: Optional[int]
    status: str
    ordered_at: datetime
    payment_method: PaymentMethod
    total_price: Decimal
    lines: List[LineOut]
    reservation: Optional[ReservationOut]
    payment_confirmed: bool
    payment_confirmed_at: Optional[datetime]
    payment_confirmed_by: Optional[str]
    official_receipt_no: Optional[str]
    payment_reference: Optional[str]


class DashboardOut(BaseModel):
    total_orders: int
    total_revenue: Decimal
    pending_orders: int
    today_reservations: int


def to_order_out(order: Order) -> OrderOut:
    reservation = order.reservation
    return OrderOut(
        id=order.id,
        order_no=order.order_no,
        customer_name=order.customer_name,
        account_id=order.account_id,
        status=order.status.value,
        ordered_at=order.ordered_at,
        payment_method=order.payment_method,
        total_price=order.total_price,
        lines=[
            LineOut(
                id=line.id,
                item_name=line.item_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_total=line.line_total,
            )
            for line in order.lines
        ],
        reservation=ReservationOut(
            id=reservation.id,
            table_id=reservation.table_id,
            party_size=reservation.party_size,
            reservation_date=reservation.reservation_date,
            reservation_time=reservation.reservation_time,
            customer_name=reservation.customer_name,
            customer_email=reservation.customer_email,
            customer_phone=reservation.customer_phone,
            special_requests=reservation.special_requests,
            status=reservation.status.value,
        ) if reservation else None,
        payment_confirmed=order.payment_confirmed,
        payment_confirmed_at=order.payment_confirmed_at,
        payment_confirmed_by=order.payment_confirmed_by,
        official_receipt_no=order.official_receipt_no,
        payment_reference=order.payment_reference,
    )


def order_filters(
    search: Optional[str] = Query(None, description="Matches order no, customer or item name"),
    status: Optional[OrderStatus] = Query(None),
    payment_status: PaymentStatus = Query(PaymentStatus.ANY),
    date_range: DateRange = Query(DateRange.ALL),
    reservation: ReservationPresence = Query(ReservationPresence.EITHER),
) -> OrderFilters:
    return OrderFilters(
        search_text=search,
        status=status,
        payment_status=payment_status,
        date_range=date_range,
        reservation=reservation,
    )


def _scope(account: Account, all_orders: bool) -> Optional[int]:
    """Admins may ask for every order; everyone else sees their own."""
    if all_orders and account.is_admin:
        return None
    return account.id


# ---------- Endpoints ----------

@router.post("", response_model=OrderOut, summary="Place an order (optionally with a table reservation)")
async def create_order(
    payload: OrderIn,
    account: Account = Depends(get_current_account),
    service: OrderService = Depends(get_order_service),
):
    return to_order_out(service.create_order(payload.to_request(), account))


@router.get("", response_model=List[OrderOut], summary="List orders, most recent first")
async def list_orders(
    all_orders: bool = Query(False, alias="all", description="Admin only: list every account's orders"),
    filters: OrderFilters = Depends(order_filters),
    account: Account = Depends(get_current_account),
    service: OrderService = Depends(get_order_service),
):
    return [to_order_out(o) for o in service.list_orders(_scope(account, all_orders), filters)]


@router.get("/dashboard", response_model=DashboardOut, summary="Order and reservation totals")
async def dashboard(
    filters: OrderFilters = Depends(order_filters),
    admin: Account = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
):
    summary = service.dashboard(None, filters)
    return DashboardOut(**vars(summary))


@router.get("/{order_id}", response_model=OrderOut, summary="Order receipt")
async def get_order(
    order_id: int,
    account: Account = Depends(get_current_account),
    service: OrderService = Depends(get_order_service),
):
    return to_order_out(service.get_order(order_id, account))


@router.put("/{order_id}", response_model=OrderOut, summary="Edit customer, payment method and items")
async def edit_order(
    order_id: int,
    payload: OrderIn,
    account: Account = Depends(get_current_account),
    service: OrderService = Depends(get_order_service),
):
    return to_order_out(service.edit_order(order_id, payload.to_request(), account))


@router.delete("/{order_id}", summary="Delete an order with its items and reservation (admin-only)")
async def delete_order(
    order_id: int,
    admin: Account = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
):
    service.delete_order(order_id)
    return {"status": "ok"}


@router.post("/{order_id}/cancel", response_model=OrderOut, summary="Cancel your own order")
async def cancel_order(
    order_id: int,
    account: Account = Depends(get_current_account),
    service: OrderService = Depends(get_order_service),
):
    return to_order_out(service.cancel_order(order_id, account))


@router.put("/{order_id}/status", response_model=OrderOut, summary="Override order status (admin-only)")
async def set_status(
    order_id: int,
    payload: StatusIn,
    admin: Account = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
):
    return to_order_out(service.set_status(order_id, payload.status))


@router.post("/{order_id}/payment", response_model=OrderOut, summary="Confirm payment (admin-only)")
async def confirm_payment(
    order_id: int,
    payload: PaymentIn,
    admin: Account = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
):
    return to_order_out(service.confirm_payment(order_id, payload.proof or "", admin))
