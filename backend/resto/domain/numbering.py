"""Human-readable order numbers (display labels, not keys)."""

from typing import Optional

ORDER_NO_BASE = 1001


def format_order_number(max_id: Optional[int]) -> str:
    """
    Build the next order number from the highest internal order id.

    ``ORD-1001`` when no order exists yet, then ``ORD-%04d`` of ``max_id + 1001``.
    """
    return "ORD-%04d" % ((max_id or 0) + ORDER_NO_BASE)


class OrderNumbering:
    """
    Issues order numbers that never go backwards within this process.

    The candidate comes from the store's highest order id. A high-water mark
    of the last issued value covers a store whose highest id dropped after a
    delete. Two concurrent callers may still get the same label; the
    system-assigned id stays unique.
    """

    def __init__(self, storage):
        self.storage = storage
        self._last_basis = -1

    def next(self) -> str:
        basis = max(self.storage.max_order_id() or 0, self._last_basis + 1)
        self._last_basis = basis
        return format_order_number(basis)
