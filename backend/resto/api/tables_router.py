"""Table availability and menu lookups."""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from resto.db.dependencies import get_current_account, get_order_service
from resto.domain.errors import InvalidTimeFormat
from resto.domain.models import Account
from resto.domain.service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tables", "menu"])


class AvailabilityResponse(BaseModel):
    date: date
    time: str
    available: List[str]
    error: Optional[str] = None


@router.get("/tables/available", response_model=AvailabilityResponse, summary="Free tables for a slot")
async def available_tables(
    slot_date: date = Query(..., alias="date"),
    slot_time: str = Query(..., alias="time", description="HH:MM"),
    account: Account = Depends(get_current_account),
    service: OrderService = Depends(get_order_service),
):
    """A malformed time yields an empty list with an error message, not a failure."""
    try:
        available = service.available_tables(slot_date, slot_time)
    except InvalidTimeFormat as exc:
        logger.warning("Availability lookup with bad time %r", slot_time)
        return AvailabilityResponse(date=slot_date, time=slot_time, available=[], error=exc.message)
    return AvailabilityResponse(date=slot_date, time=slot_time, available=sorted(available))


@router.get("/menu", response_model=Dict[str, Decimal], summary="Menu items and unit prices")
async def menu(service: OrderService = Depends(get_order_service)):
    return service.menu()
