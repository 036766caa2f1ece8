"""Payment confirmation: record proof of payment once, gated by method."""

from datetime import datetime

from resto.domain.errors import AlreadyConfirmed, MissingProof
from resto.domain.models import Order, PaymentMethod
from resto.domain.status import advance_on_payment


def confirm_payment(order: Order, proof: str, confirmed_by: str, now: datetime) -> Order:
    """
    Mark ``order`` as paid.

    Cash needs an official receipt number; every other method needs a payment
    reference. All checks run before the first write, so a rejected call
    leaves the order exactly as it was.

    Raises:
        AlreadyConfirmed: payment was confirmed before
        MissingProof: the method-appropriate proof is blank
    """
    if order.payment_confirmed:
        raise AlreadyConfirmed(f"Payment for {order.order_no} is already confirmed.")

    proof = (proof or "").strip()
    if not proof:
        if order.payment_method == PaymentMethod.CASH:
            raise MissingProof("An official receipt number is required for cash payments.")
        raise MissingProof(f"A payment reference is required for {order.payment_method.value} payments.")

    if order.payment_method == PaymentMethod.CASH:
        order.official_receipt_no = proof
    else:
        order.payment_reference = proof
    order.payment_confirmed = True
    order.payment_confirmed_at = now
    order.payment_confirmed_by = confirmed_by
    advance_on_payment(order)
    return order
