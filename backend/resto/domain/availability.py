"""
Table availability for a reservation slot.

A point-in-time read: no lock is taken, so two concurrent bookings can both
see a table as free and both commit. Slot collisions are advisory only.
"""

from datetime import date, datetime, time
from typing import Iterable, Set, Union

from resto.domain.errors import InvalidTimeFormat
from resto.domain.models import Order, OrderStatus

# Orders in these statuses no longer hold their table.
RELEASED_STATUSES = (OrderStatus.CANCELLED, OrderStatus.COMPLETED)

_TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def parse_slot_time(value: Union[time, str]) -> time:
    """Accept a ``time`` or an ``HH:MM`` / ``HH:MM:SS`` string."""
    if isinstance(value, time):
        return value.replace(microsecond=0)
    if isinstance(value, str):
        text = value.strip()
        for fmt in _TIME_FORMATS:
            try:
                return datetime.strptime(text, fmt).time()
            except ValueError:
                continue
    raise InvalidTimeFormat(f"Invalid reservation time: {value!r}")


def held_tables(orders: Iterable[Order], slot_date: date, slot_time: time) -> Set[str]:
    """Tables reserved at exactly (slot_date, slot_time) by orders still active."""
    held = set()
    for order in orders:
        reservation = order.reservation
        if reservation is None or order.status in RELEASED_STATUSES:
            continue
        if reservation.reservation_date == slot_date and reservation.reservation_time == slot_time:
            held.add(reservation.table_id)
    return held


def available_tables(
    all_tables: Iterable[str],
    orders: Iterable[Order],
    slot_date: date,
    slot_time: Union[time, str],
) -> Set[str]:
    """Return ``all_tables`` minus those held for the slot.

    Raises InvalidTimeFormat for a malformed time; callers present that as
    "no tables available".
    """
    parsed = parse_slot_time(slot_time)
    return set(all_tables) - held_tables(orders, slot_date, parsed)
